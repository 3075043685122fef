"""git 操作ユーティリティ。

方針:
- clone 先は `{work_dir}/{org}_{repo}` 固定
- `.git` がある場合だけ clone 済みとみなし pull するだけ（失敗しても古い clone のまま続行。再 clone はしない）
- clone 失敗は致命的（作業コピーが無いので続けようがない）
- user.name / user.email は毎回ローカル設定する
- ブランチ指定時は作成→失敗したら既存ブランチへ checkout→それも失敗なら警告のみ

注意:
- token を埋め込んだ URL はログやエラーメッセージに出さない
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from claude_cloud.errors import CloneError, GitError

GITHUB_URL = "https://github.com"


@dataclass
class GitIdentity:
    name: str
    email: str


@dataclass
class GitRepo:
    path: Path

    def run(self, args: list[str]) -> str:
        proc = subprocess.run(
            ["git", *args],
            cwd=self.path,
            text=True,
            capture_output=True,
            check=False,
        )
        if proc.returncode != 0:
            raise GitError(args, proc.stderr.strip())
        return proc.stdout.strip()

    def pull(self) -> None:
        self.run(["pull"])

    def set_identity(self, identity: GitIdentity) -> None:
        self.run(["config", "user.name", identity.name])
        self.run(["config", "user.email", identity.email])

    def current_branch(self) -> str:
        return self.run(["rev-parse", "--abbrev-ref", "HEAD"])

    def checkout(self, branch: str, create: bool = False) -> None:
        if create:
            self.run(["checkout", "-b", branch])
        else:
            self.run(["checkout", branch])


def repo_dirname(org: str, repo: str) -> str:
    return f"{org}_{repo}"


def clone_url(org: str, repo: str, token: str = "", base: str | None = None) -> str:
    base = (base or GITHUB_URL).rstrip("/")
    if token and "://" in base:
        scheme, rest = base.split("://", 1)
        base = f"{scheme}://{token}@{rest}"
    return f"{base}/{org}/{repo}.git"


def redact(text: str, token: str) -> str:
    if not token:
        return text
    return text.replace(token, "********")


def clone(url: str, dest: Path, *, token: str = "") -> GitRepo:
    proc = subprocess.run(
        ["git", "clone", url, str(dest)],
        text=True,
        capture_output=True,
        check=False,
    )
    if proc.returncode != 0:
        raise CloneError(["clone"], redact(proc.stderr.strip(), token))
    return GitRepo(dest)


@dataclass
class RepoPreparation:
    path: Path
    cloned: bool = False
    pull_failed: bool = False
    branch: str | None = None
    branch_reused: bool = False
    branch_failed: bool = False
    warnings: list[str] = field(default_factory=list)


def prepare_repository(
    *,
    org: str,
    repo: str,
    work_dir: Path,
    identity: GitIdentity,
    token: str = "",
    branch: str | None = None,
    base_url: str | None = None,
) -> RepoPreparation:
    """作業用 clone を用意して、そのパスと経過を返す。"""

    log = logging.getLogger(__name__)
    work_dir.mkdir(parents=True, exist_ok=True)
    path = work_dir / repo_dirname(org, repo)
    result = RepoPreparation(path=path)

    if (path / ".git").exists():
        repo_obj = GitRepo(path)
        try:
            repo_obj.pull()
            log.info("pulled %s/%s into %s", org, repo, path)
        except GitError as e:
            result.pull_failed = True
            result.warnings.append("Pull failed, continuing with the existing clone")
            log.warning("git pull failed for %s: %s", path, redact(e.stderr, token))
    else:
        url = clone_url(org, repo, token, base_url)
        log.info("cloning %s/%s into %s", org, repo, path)
        repo_obj = clone(url, path, token=token)
        result.cloned = True

    repo_obj.set_identity(identity)

    if branch:
        result.branch = branch
        try:
            repo_obj.checkout(branch, create=True)
        except GitError:
            try:
                repo_obj.checkout(branch)
                result.branch_reused = True
                result.warnings.append(f"Branch {branch} already exists, using it")
                log.warning("branch %s already exists in %s; reusing it", branch, path)
            except GitError as e:
                result.branch_failed = True
                result.warnings.append(f"Could not check out branch {branch}, staying on the current branch")
                log.warning("checkout of %s failed in %s: %s", branch, path, e.stderr)

    return result
