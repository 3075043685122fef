"""CLI 2本で共通の実行手順。

clone 準備の表示と Claude 実行結果の表示をここに寄せる。
exit code の判断（typer.Exit）は CLI 側で行う。
"""

from __future__ import annotations

import time
from pathlib import Path

from claude_cloud.errors import CloneError
from claude_cloud.git_ops import GitIdentity, RepoPreparation, prepare_repository
from claude_cloud.runner import CLAUDE_COMMAND, ExitOutcome, RunState, TaskRunner
from claude_cloud.ui import RichUi

CLAUDE_INSTALL_HINTS = {
    "cloud": [
        "Visit: https://docs.z.ai/devpack/tool/claude",
        "Or install via: npm install -g @z.ai/claude",
    ],
    "designer": [
        "npm install -g @anthropic-ai/claude-code",
    ],
}


def now_millis() -> int:
    return time.time_ns() // 1_000_000


def prepare_clone(
    ui: RichUi,
    *,
    org: str,
    repo: str,
    work_dir: Path,
    identity: GitIdentity,
    token: str = "",
    branch: str | None = None,
) -> RepoPreparation | None:
    """clone/pull して識別情報を設定する。clone 失敗時は None。"""
    step = ui.step("📥 Cloning/updating repository...")
    try:
        prep = prepare_repository(
            org=org,
            repo=repo,
            work_dir=work_dir,
            identity=identity,
            token=token,
            branch=branch,
        )
    except CloneError as e:
        step.fail("Failed to clone. Check the repository name and your GitHub Token in config.")
        if e.stderr:
            ui.info(e.stderr)
        return None

    for w in prep.warnings:
        step.warn(w)
    step.succeed(f"{'Cloned' if prep.cloned else 'Updated'} {org}/{repo} at {prep.path}")
    ui.info(f"⚙️  Git user configured: {identity.name} <{identity.email}>")
    if prep.branch and not prep.branch_failed:
        ui.info(f"🌿 Branch: {prep.branch}")
    return prep


def run_claude(
    ui: RichUi,
    *,
    prompt: str,
    cwd: Path,
    env: dict[str, str] | None,
    show_logs: bool,
    log_path: Path,
    temp_files: list[Path],
    hint_key: str,
) -> ExitOutcome:
    ui.header("🤖 Running Claude AI...")
    ui.info(f"This will execute: {' '.join(CLAUDE_COMMAND)}")

    outcome = TaskRunner().run(
        prompt,
        cwd=cwd,
        env=env,
        show_logs=show_logs,
        log_path=None if show_logs else log_path,
        temp_files=temp_files,
    )

    if outcome.state == RunState.SPAWN_ERROR:
        ui.error("\n❌ Error running Claude CLI:")
        ui.error(outcome.error)
        ui.warning("\n💡 Make sure Claude CLI is installed:")
        for line in CLAUDE_INSTALL_HINTS[hint_key]:
            ui.info(f"   {line}")
    elif outcome.ok:
        ui.success("\n✅ Claude completed successfully!")
        if outcome.log_path is not None:
            ui.info(f"📋 Logs saved to: {outcome.log_path}")
    else:
        ui.warning(f"\n⚠️  Claude exited with code {outcome.returncode}")
        if outcome.log_path is not None:
            ui.info(f"📋 Check logs at: {outcome.log_path}")
    return outcome
