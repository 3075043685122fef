"""logging の初期化。

- 詳細ログ: `{work_dir}/.claude-cloud/logs/claude-cloud.log`
- Claude 自体の出力ログは runner 側で別ファイルに書く

目的:
- clone/pull/spawn の経過を後から追えるようにする

注意:
- 設定ロード後（work_dir が決まってから）にだけ呼ぶ。config 表示などでファイルを作らない
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_LEVEL_ENV = "CLAUDE_CLOUD_LOG_LEVEL"


def state_dir(work_dir: Path) -> Path:
    return work_dir / ".claude-cloud"


def setup_logging(*, root: Path, level: str | None = None) -> Path:
    """ログを設定し、実際に書き込んでいるファイルのパスを返す。

    プロセス内で最初に呼ばれた root が有効。2回目以降は何もしない。
    """
    log_dir = state_dir(root) / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "claude-cloud.log"

    # 既に設定済みなら二重設定しない（最初の root のファイルに書き続ける）
    configured = getattr(setup_logging, "_log_path", None)
    if configured is not None:
        return configured

    level = level or os.environ.get(LOG_LEVEL_ENV, "INFO")
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = RotatingFileHandler(
        log_path,
        maxBytes=2_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(fmt)

    pkg_logger = logging.getLogger("claude_cloud")
    pkg_logger.setLevel(numeric_level)
    pkg_logger.addHandler(handler)

    setup_logging._log_path = log_path  # type: ignore[attr-defined]
    return log_path
