"""git_ops のテスト（ローカルのベアリポジトリを clone 元にする）。"""

from pathlib import Path

import pytest

from claude_cloud.errors import CloneError
from claude_cloud.git_ops import GitIdentity, GitRepo, clone, clone_url, prepare_repository, redact, repo_dirname

ALICE = GitIdentity("alice", "alice@example.com")


def test_repo_dirname() -> None:
    assert repo_dirname("acme", "widgets") == "acme_widgets"


def test_clone_url_embeds_token_only_when_given() -> None:
    assert clone_url("acme", "widgets") == "https://github.com/acme/widgets.git"
    assert clone_url("acme", "widgets", "tok") == "https://tok@github.com/acme/widgets.git"


def test_redact_hides_token() -> None:
    assert redact("fatal: https://tok@github.com/x", "tok") == "fatal: https://********@github.com/x"
    assert redact("nothing", "") == "nothing"


def test_prepare_creates_work_dir_and_clones(tmp_path: Path, remote_base: str) -> None:
    work_dir = tmp_path / "a" / "b" / "repos"

    prep = prepare_repository(org="acme", repo="widgets", work_dir=work_dir, identity=ALICE, base_url=remote_base)

    assert prep.cloned
    assert prep.path == work_dir / "acme_widgets"
    assert (prep.path / "README.md").exists()
    repo = GitRepo(prep.path)
    assert repo.run(["config", "user.name"]) == "alice"
    assert repo.run(["config", "user.email"]) == "alice@example.com"


def test_existing_clone_is_pulled_not_recloned(tmp_path: Path, remote_base: str) -> None:
    work_dir = tmp_path / "repos"
    first = prepare_repository(org="acme", repo="widgets", work_dir=work_dir, identity=ALICE, base_url=remote_base)
    marker = first.path / "local-only.txt"
    marker.write_text("keep me", encoding="utf-8")

    bob = GitIdentity("bob", "bob@example.com")
    second = prepare_repository(org="acme", repo="widgets", work_dir=work_dir, identity=bob, base_url=remote_base)

    assert not second.cloned
    assert not second.pull_failed
    assert marker.exists()
    # identity is reset on every run
    assert GitRepo(second.path).run(["config", "user.name"]) == "bob"


def test_pull_failure_keeps_stale_clone(tmp_path: Path, remote_base: str) -> None:
    work_dir = tmp_path / "repos"
    first = prepare_repository(org="acme", repo="widgets", work_dir=work_dir, identity=ALICE, base_url=remote_base)
    GitRepo(first.path).run(["remote", "remove", "origin"])
    marker = first.path / "local-only.txt"
    marker.write_text("keep me", encoding="utf-8")

    second = prepare_repository(org="acme", repo="widgets", work_dir=work_dir, identity=ALICE, base_url=remote_base)

    assert second.pull_failed
    assert not second.cloned
    assert second.warnings
    assert marker.exists()


def test_clone_failure_raises(tmp_path: Path, remote_base: str) -> None:
    with pytest.raises(CloneError):
        prepare_repository(
            org="acme", repo="missing", work_dir=tmp_path / "repos", identity=ALICE, base_url=remote_base
        )
    assert not (tmp_path / "repos" / "acme_missing").exists()


def test_branch_is_created_then_reused(tmp_path: Path, remote_base: str) -> None:
    work_dir = tmp_path / "repos"
    prep = prepare_repository(
        org="acme", repo="widgets", work_dir=work_dir, identity=ALICE, branch="figma-conversion-1", base_url=remote_base
    )
    assert not prep.branch_reused
    assert GitRepo(prep.path).current_branch() == "figma-conversion-1"

    GitRepo(prep.path).checkout("main")
    again = prepare_repository(
        org="acme", repo="widgets", work_dir=work_dir, identity=ALICE, branch="figma-conversion-1", base_url=remote_base
    )
    assert again.branch_reused
    assert not again.branch_failed
    assert GitRepo(again.path).current_branch() == "figma-conversion-1"


def test_clone_error_does_not_leak_token(tmp_path: Path, remote_base: str) -> None:
    with pytest.raises(CloneError) as excinfo:
        clone(f"{remote_base}/acme/missing-s3cr3t.git", tmp_path / "dest", token="s3cr3t")

    assert excinfo.value.stderr
    assert "s3cr3t" not in excinfo.value.stderr
    assert "s3cr3t" not in str(excinfo.value)


def test_unusable_branch_warns_and_stays_put(tmp_path: Path, remote_base: str) -> None:
    prep = prepare_repository(
        org="acme", repo="widgets", work_dir=tmp_path / "repos", identity=ALICE, branch="bad..name", base_url=remote_base
    )

    assert prep.branch_failed
    assert not prep.branch_reused
    assert any("bad..name" in w for w in prep.warnings)
    assert GitRepo(prep.path).current_branch() == "main"


def test_directory_without_git_is_cloned_into(tmp_path: Path, remote_base: str) -> None:
    work_dir = tmp_path / "repos"
    (work_dir / "acme_widgets").mkdir(parents=True)

    prep = prepare_repository(org="acme", repo="widgets", work_dir=work_dir, identity=ALICE, base_url=remote_base)

    assert prep.cloned
    assert not prep.pull_failed
    assert (prep.path / "README.md").exists()


def test_non_empty_directory_without_git_is_a_clone_error(tmp_path: Path, remote_base: str) -> None:
    work_dir = tmp_path / "repos"
    (work_dir / "acme_widgets").mkdir(parents=True)
    (work_dir / "acme_widgets" / "stray.txt").write_text("x", encoding="utf-8")

    with pytest.raises(CloneError):
        prepare_repository(org="acme", repo="widgets", work_dir=work_dir, identity=ALICE, base_url=remote_base)
