"""Configuration management for x-reader."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from .models.config import XReaderConfig

# Application name for XDG paths
APP_NAME = "x-reader"

# Default configuration
DEFAULT_CONFIG: dict[str, Any] = {
    "client": {
        "timeout_seconds": 30.0,
        "quote_depth": 1,  # max recursive depth for quoted tweets
    },
    "query_ids": {
        "ttl_hours": 24,
        "cache_path": None,  # override for the query ID cache file
        "bundle_batch_size": 6,  # concurrent bundle fetches during discovery
        "discovery_timeout_seconds": 20.0,
    },
    "auth": {
        "auth_token": None,
        "ct0": None,
        "auth_token_env": "AUTH_TOKEN",
        "ct0_env": "CT0",
    },
}


def get_xdg_config_home() -> Path:
    """Get XDG config home directory."""
    return Path(os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config")))


def get_config_dir() -> Path:
    """Get the x-reader config directory."""
    return get_xdg_config_home() / APP_NAME


def get_config_path() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def load_config() -> dict[str, Any]:
    """Load configuration, merging with defaults."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    config_path = get_config_path()

    if config_path.exists():
        with open(config_path) as f:
            user_config = json.load(f)
            config = deep_merge(config, user_config)

    return config


def load_settings() -> XReaderConfig:
    """Load configuration validated into the typed settings model."""
    return XReaderConfig.model_validate(load_config())


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to file."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(config, f, indent=2)
        f.write("\n")


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def get_query_ids_cache_path() -> Path:
    """
    Get the query ID cache file path.

    Priority:
    1. XREADER_QUERY_IDS_CACHE environment variable
    2. query_ids.cache_path in config.json
    3. XDG default: ~/.config/x-reader/query-ids-cache.json
    """
    env_path = os.environ.get("XREADER_QUERY_IDS_CACHE", "").strip()
    if env_path:
        return Path(env_path).expanduser().resolve()

    config_path = load_config().get("query_ids", {}).get("cache_path")
    if config_path:
        return Path(config_path).expanduser()

    return get_config_dir() / "query-ids-cache.json"
