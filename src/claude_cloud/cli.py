"""claude-cloud CLI エントリポイント。

GitHub リポジトリを clone して Claude CLI にコントリビュートさせる。
"""

from __future__ import annotations

import os
from pathlib import Path

import typer

from claude_cloud import __version__
from claude_cloud.config import CloudConfig, ConfigStore, cloud_store, resolve_work_dir
from claude_cloud.errors import ClaudeCloudError, ConfigMissingError
from claude_cloud.flows import now_millis, prepare_clone, run_claude
from claude_cloud.git_ops import GitIdentity, repo_dirname
from claude_cloud.logging_setup import setup_logging, state_dir
from claude_cloud.prompts import contribution_prompt
from claude_cloud.runner import RunState
from claude_cloud.task_input import CLOUD_ISSUE_ENV, CLOUD_SHOW_LOGS_ENV, env_flag, read_task_file, resolve_task
from claude_cloud.ui import RichUi, ask, ask_editor, mask
from claude_cloud import validators

APP_HELP = "Automated tool to contribute to any GitHub repository using Claude AI"
PROG = "claude-cloud"
CONFIG_ENV = "CLAUDE_CLOUD_CONFIG"
TASK_FILENAME = ".claude-task.md"
PROMPT_FILENAME = ".claude-prompt-temp.txt"

app = typer.Typer(add_completion=False, help=APP_HELP)
ui = RichUi()


def _version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "--config", envvar=CONFIG_ENV, help="設定ファイルのパス (既定: ~/.claude-cloud-config.json)"
    ),
    version: bool = typer.Option(False, "--version", callback=_version, is_eager=True, help="バージョン表示"),
) -> None:
    ctx.obj = cloud_store(config)


def _store(ctx: typer.Context) -> ConfigStore[CloudConfig]:
    if ctx.obj is None:
        ctx.obj = cloud_store()
    return ctx.obj


@app.command()
def setup(ctx: typer.Context) -> None:
    """Setup your GitHub credentials and preferences."""
    store = _store(ctx)
    ui.header("🔧 Setting up Claude Cloud...")

    cfg = CloudConfig(
        github_username=ask("Enter your GitHub username", validators.required("GitHub username")),
        github_email=ask("Enter your GitHub email", validators.email),
        github_token=ask(
            "Enter your GitHub Personal Access Token (optional, press Enter to skip)",
            hide_input=True,
        ),
        work_dir=ask(
            "Enter working directory for cloning repos",
            validators.required("Working directory"),
            default=str(Path.cwd() / "temp_repos"),
        ),
    )
    store.save(cfg)
    ui.success("✅ Configuration saved successfully!")
    ui.info(f"Configuration file: {store.path}")


@app.command()
def contribute(
    ctx: typer.Context,
    org: str | None = typer.Option(None, "--org", "-o", help="Organization or username"),
    repo: str | None = typer.Option(None, "--repo", "-r", help="Repository name"),
    issue: str | None = typer.Option(None, "--issue", "-i", help="Issue description"),
    issue_file: Path | None = typer.Option(None, "--issue-file", "-I", help="Read issue description from file"),
) -> None:
    """Contribute to a GitHub repository using Claude AI."""
    store = _store(ctx)
    try:
        cfg = store.require()
        task = resolve_task(
            flag=issue,
            file_text=read_task_file(issue_file),
            env_text=os.environ.get(CLOUD_ISSUE_ENV),
        )
    except ConfigMissingError:
        ui.error(f'❌ Configuration not found. Please run "{PROG} setup" first.')
        raise typer.Exit(code=1)
    except (ClaudeCloudError, OSError) as e:
        ui.error(f"❌ Error: {e}")
        raise typer.Exit(code=1)

    org = org or ask("Enter the GitHub organization or username", validators.required("Organization/username"))
    repo = repo or ask("Enter the repository name", validators.required("Repository name"))
    if task is None:
        task = ask_editor(
            "Describe the issue/task (will open your default editor):",
            validators.required("Issue description"),
        )

    ui.header(f"🚀 Starting contribution to {org}/{repo}...")
    work_dir = resolve_work_dir(cfg.work_dir, "temp_repos")
    setup_logging(root=work_dir)

    try:
        prep = prepare_clone(
            ui,
            org=org,
            repo=repo,
            work_dir=work_dir,
            identity=GitIdentity(cfg.github_username, cfg.github_email),
            token=cfg.github_token,
        )
    except ClaudeCloudError as e:
        ui.error(f"❌ Error: {e}")
        raise typer.Exit(code=1)
    if prep is None:
        raise typer.Exit(code=1)

    repo_path = prep.path
    prompt = contribution_prompt(
        org=org,
        repo=repo,
        task=task,
        username=cfg.github_username,
        email=cfg.github_email,
    )
    task_file = repo_path / TASK_FILENAME
    prompt_file = repo_path / PROMPT_FILENAME
    task_file.write_text(task, encoding="utf-8")
    prompt_file.write_text(prompt, encoding="utf-8")

    ui.block("📝 Task description:", task)

    env: dict[str, str] = {}
    if cfg.github_token:
        env["GH_TOKEN"] = cfg.github_token
        env["GITHUB_TOKEN"] = cfg.github_token

    outcome = run_claude(
        ui,
        prompt=prompt,
        cwd=repo_path,
        env=env,
        show_logs=env_flag(os.environ, CLOUD_SHOW_LOGS_ENV, default=True),
        log_path=state_dir(work_dir) / "runs" / f"{repo_dirname(org, repo)}-{now_millis()}.log",
        temp_files=[prompt_file, task_file],
        hint_key="cloud",
    )
    if outcome.state == RunState.SPAWN_ERROR:
        raise typer.Exit(code=1)
    if outcome.ok:
        ui.info(f"📁 Repository location: {repo_path}")


@app.command()
def config(ctx: typer.Context) -> None:
    """Show current configuration."""
    store = _store(ctx)
    try:
        cfg = store.load()
    except ClaudeCloudError as e:
        ui.error(f"❌ Error: {e}")
        raise typer.Exit(code=1)
    if cfg is None:
        ui.warning(f'No configuration found. Run "{PROG} setup" first.')
        return

    ui.table(
        "📋 Current Configuration:",
        {
            "GitHub Username": cfg.github_username or "Not set",
            "GitHub Email": cfg.github_email or "Not set",
            "GitHub Token": mask(cfg.github_token),
            "Working Directory": cfg.work_dir or "Not set",
        },
    )


if __name__ == "__main__":
    app()
