"""Shared pytest fixtures for mintfeed tests."""

import sys
from pathlib import Path

import pytest

# Add the package to the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep config, data, and ~/.env lookups inside the test's tmp dir."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("MINTFEED_DATA_DIR", str(tmp_path / "data"))
    for key in (
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
        "GEMINI_API_KEY",
        "YOUTUBE_API_KEY",
        "ZORA_SMART_WALLET_ADDRESS",
        "AUTH_TOKEN",
        "CT0",
    ):
        monkeypatch.delenv(key, raising=False)
    return tmp_path
