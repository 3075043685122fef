"""figma-designer CLI エントリポイント。

Figma MCP 経由で Claude CLI にデザイン作業（create）や
デザイン→コード変換（convert）をさせる。
"""

from __future__ import annotations

import os
from pathlib import Path

import typer

from claude_cloud import __version__
from claude_cloud.claude_settings import default_claude_dir, write_claude_settings
from claude_cloud.config import ConfigStore, DesignerConfig, designer_store, resolve_work_dir
from claude_cloud.errors import ClaudeCloudError, ConfigMissingError
from claude_cloud.flows import now_millis, prepare_clone, run_claude
from claude_cloud.git_ops import GitIdentity
from claude_cloud.logging_setup import setup_logging
from claude_cloud.prompts import conversion_prompt, default_branch_name, design_prompt
from claude_cloud.runner import RunState
from claude_cloud.task_input import (
    CONVERSION_TASK_ENV,
    DESIGN_TASK_ENV,
    DESIGNER_SHOW_LOGS_ENV,
    env_flag,
    read_task_file,
    resolve_task,
)
from claude_cloud.ui import RichUi, ask, ask_editor, mask
from claude_cloud import validators

APP_HELP = "CLI tool to automate Figma design tasks using Claude AI with MCP"
PROG = "figma-designer"
CONFIG_ENV = "FIGMA_DESIGNER_CONFIG"
CLAUDE_DIR_ENV = "CLAUDE_CONFIG_DIR"
LOG_FILENAME = "claude-logs.txt"

app = typer.Typer(add_completion=False, help=APP_HELP)
ui = RichUi()


class _Context:
    def __init__(self, store: ConfigStore[DesignerConfig], claude_dir: Path) -> None:
        self.store = store
        self.claude_dir = claude_dir


def _version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "--config", envvar=CONFIG_ENV, help="設定ファイルのパス (既定: ~/.figma-designer-config.json)"
    ),
    claude_dir: Path | None = typer.Option(
        None, "--claude-dir", envvar=CLAUDE_DIR_ENV, help="Claude CLI の設定ディレクトリ (既定: ~/.claude)"
    ),
    version: bool = typer.Option(False, "--version", callback=_version, is_eager=True, help="バージョン表示"),
) -> None:
    ctx.obj = _Context(designer_store(config), claude_dir or default_claude_dir())


def _ctx(ctx: typer.Context) -> _Context:
    if ctx.obj is None:
        ctx.obj = _Context(designer_store(), default_claude_dir())
    return ctx.obj


def _load(store: ConfigStore[DesignerConfig]) -> DesignerConfig:
    try:
        return store.require()
    except ConfigMissingError:
        ui.error(f'❌ Configuration not found. Please run "{PROG} setup" first.')
        raise typer.Exit(code=1)
    except ClaudeCloudError as e:
        ui.error(f"❌ Error: {e}")
        raise typer.Exit(code=1)


def _resolve_task(flag: str | None, task_file: Path | None, env_name: str) -> str | None:
    try:
        file_text = read_task_file(task_file)
    except (ClaudeCloudError, OSError) as e:
        ui.error(f"❌ Error: {e}")
        raise typer.Exit(code=1)
    return resolve_task(flag=flag, file_text=file_text, env_text=os.environ.get(env_name))


def _child_env(cfg: DesignerConfig) -> dict[str, str]:
    return {
        "ANTHROPIC_API_KEY": cfg.zai_api_key,
        "FIGMA_API_TOKEN": cfg.figma_api_token,
    }


def _new_task_dir(work_dir: Path, prefix: str) -> Path:
    work_dir.mkdir(parents=True, exist_ok=True)
    task_dir = work_dir / f"{prefix}_{now_millis()}"
    task_dir.mkdir()
    return task_dir


@app.command()
def setup(ctx: typer.Context) -> None:
    """Setup your Figma and Claude credentials."""
    c = _ctx(ctx)
    ui.header("🎨 Setting up Figma Designer...")

    cfg = DesignerConfig(
        figma_api_token=ask(
            "Enter your Figma API Token (from figma.com/dev)",
            validators.required("Figma API Token"),
        ),
        zai_api_key=ask("Enter your Z.AI API Key", validators.required("API Key"), hide_input=True),
        github_username=ask("Enter your GitHub username", validators.required("GitHub username")),
        github_email=ask("Enter your GitHub email", validators.email),
        github_token=ask(
            "Enter your GitHub Personal Access Token (for code conversion)",
            validators.required("GitHub Token"),
            hide_input=True,
        ),
        work_dir=ask(
            "Enter working directory for design tasks",
            validators.required("Working directory"),
            default=str(Path.cwd() / "figma_tasks"),
        ),
    )
    c.store.save(cfg)
    ui.success("✅ Configuration saved successfully!")

    paths = write_claude_settings(
        c.claude_dir,
        zai_api_key=cfg.zai_api_key,
        figma_api_token=cfg.figma_api_token,
    )
    ui.info(f"Created Claude configuration at {paths.settings}")
    ui.info(f"Created MCP configuration at {paths.mcp}")
    ui.success("✅ Figma MCP configured successfully!")
    ui.warning(f"💡 You can now run: {PROG} create")


@app.command()
def create(
    ctx: typer.Context,
    file: str | None = typer.Option(None, "--file", "-f", help="Figma file URL"),
    node: str | None = typer.Option(None, "--node", "-n", help="Specific Figma node ID (optional)"),
    task: str | None = typer.Option(None, "--task", "-t", help="Design task description"),
    task_file: Path | None = typer.Option(None, "--task-file", "-T", help="Read task description from file"),
) -> None:
    """Create a new Figma design task."""
    c = _ctx(ctx)
    cfg = _load(c.store)
    task = _resolve_task(task, task_file, DESIGN_TASK_ENV)

    file_url = file or ask("Enter the Figma file URL", validators.figma_url)
    if node is None:
        node = ask("Enter specific Figma node ID (optional, press Enter to skip)")
    if task is None:
        task = ask_editor(
            "Describe the design task (will open your default editor):",
            validators.required("Task description"),
        )

    ui.header("🎨 Starting Figma design task...")
    ui.info(f"📁 File: {file_url}")
    if node:
        ui.info(f"🎯 Node ID: {node}")

    work_dir = resolve_work_dir(cfg.work_dir, "figma_tasks")
    setup_logging(root=work_dir)
    task_dir = _new_task_dir(work_dir, "task")

    prompt = design_prompt(file_url=file_url, node_id=node, task=task)
    prompt_file = task_dir / "design-task.md"
    prompt_file.write_text(prompt, encoding="utf-8")

    ui.block("📝 Design task:", task)

    outcome = run_claude(
        ui,
        prompt=prompt,
        cwd=task_dir,
        env=_child_env(cfg),
        show_logs=env_flag(os.environ, DESIGNER_SHOW_LOGS_ENV, default=False),
        log_path=task_dir / LOG_FILENAME,
        temp_files=[prompt_file],
        hint_key="designer",
    )
    if outcome.state == RunState.SPAWN_ERROR:
        raise typer.Exit(code=1)
    if outcome.ok:
        ui.info(f"📁 Task location: {task_dir}")


@app.command()
def convert(
    ctx: typer.Context,
    org: str | None = typer.Option(None, "--org", "-o", help="Target GitHub organization or username"),
    repo: str | None = typer.Option(None, "--repo", "-r", help="Target repository name"),
    file: str | None = typer.Option(None, "--file", "-f", help="Figma file URL to convert"),
    node: str | None = typer.Option(None, "--node", "-n", help="Specific Figma node ID (optional)"),
    task: str | None = typer.Option(None, "--task", "-t", help="Conversion task description"),
    task_file: Path | None = typer.Option(None, "--task-file", "-T", help="Read task description from file"),
    branch: str | None = typer.Option(
        None, "--branch", "-b", help="Target branch name (default: figma-conversion-[timestamp])"
    ),
) -> None:
    """Convert Figma design to code in a target repository."""
    c = _ctx(ctx)
    cfg = _load(c.store)
    task = _resolve_task(task, task_file, CONVERSION_TASK_ENV)

    org = org or ask("Enter the target GitHub organization or username", validators.required("Organization/username"))
    repo = repo or ask("Enter the target repository name", validators.required("Repository name"))
    file_url = file or ask("Enter the Figma file URL to convert", validators.figma_url)
    if node is None:
        node = ask("Enter specific Figma node ID (optional, press Enter to skip)")
    if branch is None:
        branch = ask("Enter target branch name (optional, press Enter for auto-generated)")
    if task is None:
        task = ask_editor(
            "Describe the conversion task (will open your default editor):",
            validators.required("Task description"),
        )
    branch = branch or default_branch_name(now_millis())

    ui.header("🎨 Starting Figma to Code conversion...")
    ui.info(f"📁 Target Repository: {org}/{repo}")
    ui.info(f"📁 Figma File: {file_url}")
    if node:
        ui.info(f"🎯 Node ID: {node}")
    ui.info(f"🌿 Branch: {branch}")

    work_dir = resolve_work_dir(cfg.work_dir, "figma_tasks")
    setup_logging(root=work_dir)
    task_dir = _new_task_dir(work_dir, "conversion")

    try:
        prep = prepare_clone(
            ui,
            org=org,
            repo=repo,
            work_dir=work_dir,
            identity=GitIdentity(cfg.github_username, cfg.github_email),
            token=cfg.github_token,
            branch=branch,
        )
    except ClaudeCloudError as e:
        ui.error(f"❌ Error: {e}")
        raise typer.Exit(code=1)
    if prep is None:
        raise typer.Exit(code=1)

    repo_path = prep.path
    prompt = conversion_prompt(
        org=org,
        repo=repo,
        repo_path=str(repo_path),
        branch=branch,
        username=cfg.github_username,
        email=cfg.github_email,
        file_url=file_url,
        node_id=node,
        task=task,
    )
    prompt_file = task_dir / "conversion-task.md"
    prompt_file.write_text(prompt, encoding="utf-8")

    ui.block("📝 Conversion task:", task)

    outcome = run_claude(
        ui,
        prompt=prompt,
        cwd=repo_path,
        env=_child_env(cfg),
        show_logs=env_flag(os.environ, DESIGNER_SHOW_LOGS_ENV, default=False),
        log_path=task_dir / LOG_FILENAME,
        temp_files=[prompt_file],
        hint_key="designer",
    )
    if outcome.state == RunState.SPAWN_ERROR:
        raise typer.Exit(code=1)
    if outcome.ok:
        ui.info(f"📁 Repository location: {repo_path}")
        ui.info(f"🌿 Branch: {branch}")
        ui.warning("\n💡 Next steps:")
        ui.info("   1. Review the changes in the repository")
        ui.info(f"   2. Push the branch: git push -u origin {branch}")
        ui.info("   3. Create a pull request")


@app.command()
def config(ctx: typer.Context) -> None:
    """Show current configuration."""
    c = _ctx(ctx)
    try:
        cfg = c.store.load()
    except ClaudeCloudError as e:
        ui.error(f"❌ Error: {e}")
        raise typer.Exit(code=1)
    if cfg is None:
        ui.warning(f'No configuration found. Run "{PROG} setup" first.')
        return

    ui.table(
        "📋 Current Configuration:",
        {
            "Figma API Token": mask(cfg.figma_api_token),
            "Z.AI API Key": mask(cfg.zai_api_key),
            "GitHub Token": mask(cfg.github_token),
            "GitHub Username": cfg.github_username or "Not set",
            "GitHub Email": cfg.github_email or "Not set",
            "Working Directory": cfg.work_dir or "Not set",
        },
    )


if __name__ == "__main__":
    app()
