"""ユーザーごとの設定ファイル（JSON）の読み書き。

- `claude-cloud`: `~/.claude-cloud-config.json`
- `figma-designer`: `~/.figma-designer-config.json`

方針:
- setup で丸ごと上書きする。部分更新はしない
- キーは旧版と同じ camelCase（既存ファイルをそのまま読める）
- パスの解決は CLI の入口で一度だけ行い、ConfigStore を引数で渡す

注意:
- 認証情報は平文で保存される。せめてファイル権限は 0600 にする
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Generic, TypeVar

from claude_cloud.errors import ConfigError, ConfigMissingError

CLOUD_CONFIG_FILENAME = ".claude-cloud-config.json"
DESIGNER_CONFIG_FILENAME = ".figma-designer-config.json"


@dataclass
class CloudConfig:
    github_username: str = ""
    github_email: str = ""
    work_dir: str = ""
    github_token: str = ""


@dataclass
class DesignerConfig:
    figma_api_token: str = ""
    zai_api_key: str = ""
    github_username: str = ""
    github_email: str = ""
    github_token: str = ""
    work_dir: str = ""


ConfigT = TypeVar("ConfigT", CloudConfig, DesignerConfig)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.capitalize() for p in rest)


def to_json_dict(record: CloudConfig | DesignerConfig) -> dict[str, str]:
    return {_camel(k): v for k, v in asdict(record).items()}


def from_json_dict(record_type: type[ConfigT], raw: dict) -> ConfigT:
    values: dict[str, str] = {}
    for f in fields(record_type):
        v = raw.get(_camel(f.name))
        values[f.name] = "" if v is None else str(v)
    return record_type(**values)


def default_config_path(filename: str) -> Path:
    return Path.home() / filename


@dataclass
class ConfigStore(Generic[ConfigT]):
    path: Path
    record_type: type[ConfigT]

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> ConfigT | None:
        if not self.exists():
            return None

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigError(f"invalid JSON in {self.path}: {e.msg}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"expected a JSON object in {self.path}")
        return from_json_dict(self.record_type, raw)

    def require(self) -> ConfigT:
        cfg = self.load()
        if cfg is None:
            raise ConfigMissingError(self.path)
        return cfg

    def save(self, record: ConfigT) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # 新規作成時から 0600（書き込み前に他ユーザーへ見えないように）
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(json.dumps(to_json_dict(record), indent=2) + "\n")
        try:
            # 既存ファイルは O_CREAT のモードが効かないので揃える
            os.chmod(self.path, 0o600)
        except OSError:
            # Windows 等では無視
            pass


def cloud_store(path: Path | None = None) -> ConfigStore[CloudConfig]:
    return ConfigStore(path or default_config_path(CLOUD_CONFIG_FILENAME), CloudConfig)


def designer_store(path: Path | None = None) -> ConfigStore[DesignerConfig]:
    return ConfigStore(path or default_config_path(DESIGNER_CONFIG_FILENAME), DesignerConfig)


def resolve_work_dir(configured: str, fallback_name: str) -> Path:
    """設定の workDir が空なら cwd 配下の既定ディレクトリ。"""
    if configured.strip():
        return Path(configured).expanduser()
    return Path.cwd() / fallback_name
