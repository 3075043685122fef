from __future__ import annotations

import shutil
import subprocess
import sys
from pathlib import Path

import pytest

import claude_cloud.git_ops as git_ops
import claude_cloud.runner as runner

# Claude CLI の代役。最後の引数（プロンプト）を stdout に流し、
# FAKE_CLAUDE_EXIT の終了コードで終わる。
FAKE_CLAUDE = r"""
import os, sys
prompt = sys.argv[-1]
sys.stdout.write("STDOUT-LINE\n")
sys.stdout.flush()
sys.stderr.write("STDERR-LINE\n")
sys.stderr.flush()
sys.stdout.write(prompt)
sys.stdout.write("\nINJECTED=" + os.environ.get("INJECTED", "") + "\n")
sys.stdout.write("ANTHROPIC_API_KEY=" + os.environ.get("ANTHROPIC_API_KEY", "") + "\n")
sys.stdout.flush()
sys.exit(int(os.environ.get("FAKE_CLAUDE_EXIT", "0")))
"""

_ID = ["-c", "user.name=seed", "-c", "user.email=seed@example.invalid"]


def _git(args: list[str], cwd: Path) -> None:
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True)


@pytest.fixture()
def fake_claude_command() -> list[str]:
    return [sys.executable, "-c", FAKE_CLAUDE]


@pytest.fixture()
def fake_claude(monkeypatch: pytest.MonkeyPatch, fake_claude_command: list[str]) -> list[str]:
    """runner の既定コマンドを代役に差し替える。"""
    monkeypatch.setattr(runner, "CLAUDE_COMMAND", fake_claude_command)
    return fake_claude_command


@pytest.fixture()
def remote_base(tmp_path: Path) -> str:
    """`{base}/acme/widgets.git` に1コミットあるベアリポジトリを作る。"""
    if shutil.which("git") is None:
        pytest.skip("git not available")

    seed = tmp_path / "seed"
    seed.mkdir()
    _git(["init", "-b", "main"], seed)
    (seed / "README.md").write_text("# widgets\n", encoding="utf-8")
    _git(["add", "-A"], seed)
    _git([*_ID, "commit", "-m", "init"], seed)

    remotes = tmp_path / "remotes"
    (remotes / "acme").mkdir(parents=True)
    _git(["clone", "--bare", str(seed), str(remotes / "acme" / "widgets.git")], tmp_path)
    return remotes.as_uri()


@pytest.fixture()
def github(monkeypatch: pytest.MonkeyPatch, remote_base: str) -> str:
    """clone 元を github.com からローカルのベアリポジトリに向ける。"""
    monkeypatch.setattr(git_ops, "GITHUB_URL", remote_base)
    return remote_base
