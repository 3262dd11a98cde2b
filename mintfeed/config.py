"""Configuration management for mintfeed."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .errors import ConfigError
from .models import MintfeedConfig

# Application name for XDG paths
APP_NAME = "mintfeed"

# Default configuration
DEFAULT_CONFIG: dict[str, Any] = {
    "llm": {
        "provider": "openai",
        "model": "gpt-4.1",
        "max_output_tokens": 150,
        "video_max_output_tokens": 100,
        "caption_max_chars": 250,
        "video_caption_max_chars": 200,
        "timeout_seconds": 60.0,
        "retry_max_attempts": 3,
        "retry_base_seconds": 1.0,
        "retry_max_seconds": 20.0,
        "retry_jitter": 0.3,
    },
    "twitter": {
        "handle": "tokenmetricsinc",
        "window_size": 20,  # one timeline call, large enough to hold most threads
        "image_mode": "reference",  # "reference" the remote URL or "download" it
        "auth_token_env": "AUTH_TOKEN",
        "ct0_env": "CT0",
        "timeout_seconds": 60,
        "retry_max_attempts": 4,
        "retry_base_seconds": 15.0,
        "retry_max_seconds": 120.0,
    },
    "youtube": {
        "channel_id": "UCH9MOLQ_KUpZ_cw8uLGUisA",
        "api_key_env": "YOUTUBE_API_KEY",
        "shorts_only": False,
        "timeout_seconds": 30.0,
    },
    "media": {
        "downloader": "yt-dlp",
        "image_timeout_seconds": 20.0,
        "image_strategies": ["orig", "large", "medium"],
        "timeout_seconds": 600,
        "format_strategies": [
            "232+233-9/231+233-9/230+233-9",
            "232+233/231+233/230+233",
            "best[height<=720]",
            "best[ext=mp4]",
            "best",
        ],
    },
    "minting": {
        "command": ["npx", "tsx", "mint-coin.ts"],
        "creator_address_env": "ZORA_SMART_WALLET_ADDRESS",
        "name_prefix": "tokenmetrics#",
        "symbol_prefix": "TM",
        "timeout_seconds": 300,
    },
    "ledger": {
        "image_capacity": 1000,
        "video_capacity": 100,
    },
    "paths": {
        # If not set, XDG defaults are used
        "data_dir": None,
    },
}


def get_xdg_config_home() -> Path:
    """Get XDG config home directory."""
    return Path(os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config")))


def get_xdg_data_home() -> Path:
    """Get XDG data home directory."""
    return Path(os.environ.get("XDG_DATA_HOME", os.path.expanduser("~/.local/share")))


def get_config_path() -> Path:
    """Get the path to the config file."""
    return get_xdg_config_home() / APP_NAME / "config.json"


def load_config() -> dict[str, Any]:
    """Load configuration, merging config.json over the defaults.

    Raises ``ConfigError`` when config.json is not a JSON object.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    return deep_merge(config, load_user_config())


def load_user_config() -> dict[str, Any]:
    """Return the raw contents of config.json, or an empty dict."""
    config_path = get_config_path()
    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            user_config = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{config_path} is not valid JSON: {e}") from e
    if not isinstance(user_config, dict):
        raise ConfigError(f"{config_path} must hold a JSON object")
    return user_config


def load_settings() -> MintfeedConfig:
    """Load and validate the effective configuration."""
    return validate_config(load_config())


def validate_config(config: dict[str, Any]) -> MintfeedConfig:
    try:
        return MintfeedConfig.from_dict(config)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first["loc"])
        raise ConfigError(f"invalid config value for {key}: {first['msg']}") from e


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to file."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(config, f, indent=2)


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def get_data_dir() -> Path:
    """
    Get the data directory for mintfeed.

    Priority:
    1. MINTFEED_DATA_DIR environment variable
    2. paths.data_dir in config.json
    3. XDG default: ~/.local/share/mintfeed/
    """
    env_dir = os.environ.get("MINTFEED_DATA_DIR")
    if env_dir:
        return Path(env_dir)

    config = load_config()
    config_dir = config.get("paths", {}).get("data_dir")
    if config_dir:
        return Path(config_dir)

    return get_xdg_data_home() / APP_NAME


LEDGER_FILES = {"twitter": "posted-tweets.json", "youtube": "posted-videos.json"}


def get_ledger_path(source: str, data_dir: Path | None = None) -> Path:
    """Get the dedup ledger path for a source platform."""
    if source not in LEDGER_FILES:
        raise ValueError(f"Unknown source: {source}")
    return (data_dir or get_data_dir()) / LEDGER_FILES[source]


def get_run_log_path() -> Path:
    """Get the NDJSON run log path."""
    return get_data_dir() / "posting.log"


def get_downloads_dir() -> Path:
    """Get the scratch directory for downloaded media."""
    return get_data_dir() / "downloads"


_MISSING = object()


def get_key(config: dict[str, Any], key: str) -> Any:
    """Return the value at dotted *key* (``llm.model``); KeyError if absent."""
    target: Any = config
    for part in key.split("."):
        if not isinstance(target, dict) or part not in target:
            raise KeyError(key)
        target = target[part]
    return target


def set_key(config: dict[str, Any], key: str, value: Any) -> None:
    """Set dotted *key*, creating intermediate sections."""
    *parents, leaf = key.split(".")
    target = config
    for part in parents:
        if not isinstance(target.get(part), dict):
            target[part] = {}
        target = target[part]
    target[leaf] = value


def unset_key(config: dict[str, Any], key: str) -> bool:
    """Remove dotted *key*; returns False when it was not set."""
    *parents, leaf = key.split(".")
    target = config
    for part in parents:
        target = target.get(part)
        if not isinstance(target, dict):
            return False
    return target.pop(leaf, _MISSING) is not _MISSING

