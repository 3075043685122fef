"""タスク本文の入力元を決める。

優先順位: CLI フラグ > ファイル > 環境変数 > 対話（エディタ）

resolve_task は純粋関数。ファイル読み込みと環境変数参照は呼び出し側で行う。
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from claude_cloud.errors import TaskInputError

CLOUD_ISSUE_ENV = "CLAUDE_CLOUD_ISSUE"
CLOUD_SHOW_LOGS_ENV = "CLAUDE_CLOUD_SHOW_LOGS"
DESIGN_TASK_ENV = "FIGMA_DESIGN_TASK"
CONVERSION_TASK_ENV = "FIGMA_CONVERSION_TASK"
DESIGNER_SHOW_LOGS_ENV = "FIGMA_DESIGNER_SHOW_LOGS"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _present(value: str | None) -> bool:
    return value is not None and value.strip() != ""


def resolve_task(
    *,
    flag: str | None = None,
    file_text: str | None = None,
    env_text: str | None = None,
) -> str | None:
    """最初に見つかった非空の値を返す。どれも無ければ None（= 対話で聞く）。"""
    for candidate in (flag, file_text, env_text):
        if _present(candidate):
            return candidate
    return None


def read_task_file(path: Path | None) -> str | None:
    if path is None:
        return None
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise TaskInputError(f"{path} is not valid UTF-8 text") from e


def env_flag(environ: Mapping[str, str], name: str, *, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    return default
