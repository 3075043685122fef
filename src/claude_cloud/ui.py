"""端末表示と対話入力。

表示は rich、入力は typer.prompt / typer.edit。
バリデーションに失敗したら理由を出して聞き直す（例外にはしない）。
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.markup import escape

from claude_cloud.validators import Validator, optional

MASK = "********"
RULE_WIDTH = 50

console = Console(soft_wrap=True)


class _Step:
    """spinner を模したシンプルなステップ表示。"""

    def __init__(self, title: str) -> None:
        console.print(f"{title}", style="blue")

    def succeed(self, message: str | None = None) -> None:
        console.print(f"  ✅ {message or 'OK'}", style="green")

    def warn(self, message: str) -> None:
        console.print(f"  ⚠️  {message}", style="yellow")

    def fail(self, message: str | None = None) -> None:
        console.print(f"  ❌ {message or 'FAILED'}", style="red")


class RichUi:
    def header(self, title: str) -> None:
        console.print(f"\n{title}", style="bold blue")

    def info(self, line: str) -> None:
        console.print(line, style="dim", markup=False, highlight=False)

    def success(self, line: str) -> None:
        console.print(line, style="green", markup=False, highlight=False)

    def warning(self, line: str) -> None:
        console.print(line, style="yellow", markup=False, highlight=False)

    def error(self, line: str) -> None:
        console.print(line, style="red", markup=False, highlight=False)

    def step(self, title: str) -> _Step:
        return _Step(title)

    def block(self, title: str, body: str) -> None:
        console.print(f"\n{title}", style="cyan")
        console.print("─" * RULE_WIDTH, style="dim")
        console.print(body, markup=False, highlight=False)
        console.print("─" * RULE_WIDTH, style="dim")

    def table(self, title: str, rows: dict[str, str]) -> None:
        console.print(f"\n{title}", style="blue")
        console.print("─" * RULE_WIDTH, style="dim")
        for k, v in rows.items():
            console.print(f"[cyan]{escape(k)}:[/cyan] {escape(v)}", highlight=False)
        console.print("─" * RULE_WIDTH, style="dim")


def mask(value: str, *, empty: str = "Not set") -> str:
    return MASK if value else empty


def ask(
    message: str,
    validate: Validator = optional,
    *,
    default: str | None = None,
    hide_input: bool = False,
) -> str:
    while True:
        value = typer.prompt(
            message,
            default=default if default is not None else "",
            show_default=bool(default),
            hide_input=hide_input,
        )
        value = str(value).strip()
        problem = validate(value)
        if problem is None:
            return value
        console.print(f">> {problem}", style="red")


def ask_editor(message: str, validate: Validator) -> str:
    """デフォルトエディタで長文を入力させる。"""
    while True:
        console.print(message, style="cyan")
        typer.prompt("Press Enter to launch your editor", default="", show_default=False)
        text = typer.edit("") or ""
        problem = validate(text)
        if problem is None:
            return text
        console.print(f">> {problem}", style="red")
