"""例外定義。

外部コマンドの失敗は RuntimeError 系で扱う（呼び出し側で捕まえて表示する）。
回復可能なもの（pull 失敗 / ブランチ既存）は例外にせず warning ログで済ませる。
"""

from __future__ import annotations

from pathlib import Path


class ClaudeCloudError(RuntimeError):
    pass


class ConfigError(ClaudeCloudError):
    """設定ファイルが壊れている。"""


class ConfigMissingError(ConfigError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"configuration not found: {path}")
        self.path = path


class GitError(ClaudeCloudError):
    def __init__(self, args: list[str], stderr: str) -> None:
        super().__init__(stderr or f"git {args[0] if args else ''} failed".strip())
        self.git_args = args
        self.stderr = stderr


class CloneError(GitError):
    pass


class TaskInputError(ClaudeCloudError):
    """タスク本文のファイルが読めない（UTF-8 でない等）。"""
