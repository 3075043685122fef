"""Claude CLI 側の設定ファイル生成（figma-designer setup 用）。

- `~/.claude/settings.json`: Z.AI 経由で Anthropic API を叩くための env / model
- `~/.claude/.mcp.json`: Figma の MCP サーバ定義

このツール自身は読まない。Claude CLI が読む。
既存の settings.json がある場合、ここで管理するキー以外は残す。
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

ZAI_ANTHROPIC_BASE_URL = "https://api.z.ai/api/anthropic"
FIGMA_MCP_URL = "https://mcp.figma.com/mcp"
API_TIMEOUT_MS = "3000000"
DEFAULT_MODEL = "opus"


@dataclass
class SettingsPaths:
    settings: Path
    mcp: Path


def default_claude_dir() -> Path:
    return Path.home() / ".claude"


def build_settings_env(*, zai_api_key: str, figma_api_token: str) -> dict[str, str]:
    return {
        "ANTHROPIC_API_KEY": zai_api_key,
        "ANTHROPIC_AUTH_TOKEN": zai_api_key,
        "ANTHROPIC_BASE_URL": ZAI_ANTHROPIC_BASE_URL,
        "API_TIMEOUT_MS": API_TIMEOUT_MS,
        "CLAUDE_CODE_DISABLE_NONESSENTIAL_TRAFFIC": "1",
        "FIGMA_API_TOKEN": figma_api_token,
    }


def build_mcp_config(*, figma_api_token: str) -> dict:
    return {
        "mcpServers": {
            "figma": {
                "type": "http",
                "url": FIGMA_MCP_URL,
                "env": {"FIGMA_API_TOKEN": figma_api_token},
            }
        }
    }


def _read_json_object(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        logging.getLogger(__name__).warning("%s is not valid JSON; overwriting", path)
        return {}
    return raw if isinstance(raw, dict) else {}


def write_claude_settings(
    claude_dir: Path,
    *,
    zai_api_key: str,
    figma_api_token: str,
) -> SettingsPaths:
    claude_dir.mkdir(parents=True, exist_ok=True)

    settings_path = claude_dir / "settings.json"
    settings = _read_json_object(settings_path)
    env = settings.get("env")
    env = dict(env) if isinstance(env, dict) else {}
    env.update(build_settings_env(zai_api_key=zai_api_key, figma_api_token=figma_api_token))
    settings["env"] = env
    settings["model"] = DEFAULT_MODEL
    settings_path.write_text(json.dumps(settings, indent=2) + "\n", encoding="utf-8")

    mcp_path = claude_dir / ".mcp.json"
    mcp_path.write_text(json.dumps(build_mcp_config(figma_api_token=figma_api_token), indent=2) + "\n", encoding="utf-8")

    return SettingsPaths(settings=settings_path, mcp=mcp_path)
