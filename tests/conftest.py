"""Test fixtures for the Sitecore MCP bridge tests."""

import sys
from pathlib import Path

import pytest

from src.bridge import McpBridge
from src.config import Settings

FAKE_SERVER = str(Path(__file__).parent / "fixtures" / "fake_mcp_server.py")


@pytest.fixture
def fake_command() -> list:
    """Command that launches the fake MCP server."""
    return [sys.executable, FAKE_SERVER]


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Directory receiving the per-request config files."""
    directory = tmp_path / "configs"
    directory.mkdir()
    return directory


@pytest.fixture
def bridge(fake_command, config_dir) -> McpBridge:
    """Bridge wired to the fake MCP server."""
    return McpBridge(
        command=fake_command,
        timeout=10.0,
        kill_grace=1.0,
        config_dir=str(config_dir),
    )


@pytest.fixture
def test_settings(fake_command, config_dir) -> Settings:
    """Settings pointing the application at the fake MCP server."""
    return Settings(
        MCP_COMMAND=fake_command,
        MCP_CONFIG_DIR=str(config_dir),
        MCP_TIMEOUT_SECONDS=10.0,
        MCP_KILL_GRACE_SECONDS=1.0,
        ENVIRONMENT="test",
    )


@pytest.fixture
def leftover_configs(config_dir):
    """Config files still on disk in the config directory."""
    return lambda: sorted(config_dir.glob("mcp-config-*.json"))
