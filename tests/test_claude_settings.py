"""claude_settings のテスト。"""

import json
from pathlib import Path

from claude_cloud.claude_settings import FIGMA_MCP_URL, ZAI_ANTHROPIC_BASE_URL, write_claude_settings


def test_writes_settings_and_mcp(tmp_path: Path) -> None:
    claude_dir = tmp_path / ".claude"
    paths = write_claude_settings(claude_dir, zai_api_key="zai", figma_api_token="figd")

    settings = json.loads(paths.settings.read_text(encoding="utf-8"))
    assert settings["model"] == "opus"
    assert settings["env"]["ANTHROPIC_API_KEY"] == "zai"
    assert settings["env"]["ANTHROPIC_AUTH_TOKEN"] == "zai"
    assert settings["env"]["ANTHROPIC_BASE_URL"] == ZAI_ANTHROPIC_BASE_URL
    assert settings["env"]["FIGMA_API_TOKEN"] == "figd"

    mcp = json.loads(paths.mcp.read_text(encoding="utf-8"))
    figma = mcp["mcpServers"]["figma"]
    assert figma["type"] == "http"
    assert figma["url"] == FIGMA_MCP_URL
    assert figma["env"] == {"FIGMA_API_TOKEN": "figd"}


def test_keeps_unrelated_settings(tmp_path: Path) -> None:
    claude_dir = tmp_path / ".claude"
    claude_dir.mkdir()
    (claude_dir / "settings.json").write_text(
        json.dumps({"permissions": {"allow": ["Bash"]}, "env": {"MY_VAR": "1"}}),
        encoding="utf-8",
    )

    paths = write_claude_settings(claude_dir, zai_api_key="zai", figma_api_token="figd")

    settings = json.loads(paths.settings.read_text(encoding="utf-8"))
    assert settings["permissions"] == {"allow": ["Bash"]}
    assert settings["env"]["MY_VAR"] == "1"
    assert settings["env"]["ANTHROPIC_API_KEY"] == "zai"


def test_invalid_settings_are_replaced(tmp_path: Path) -> None:
    claude_dir = tmp_path / ".claude"
    claude_dir.mkdir()
    (claude_dir / "settings.json").write_text("{broken", encoding="utf-8")

    paths = write_claude_settings(claude_dir, zai_api_key="zai", figma_api_token="figd")
    assert json.loads(paths.settings.read_text(encoding="utf-8"))["model"] == "opus"
