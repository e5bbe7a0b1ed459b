"""Config commands."""

import json

import rich_click as click
from rich.syntax import Syntax

from ..config import get_config_path, load_config, save_config
from ._console import console

_SECRET_KEYS = ("auth_token", "ct0")


def _redacted(cfg: dict) -> dict:
    auth = dict(cfg.get("auth", {}))
    for key in _SECRET_KEYS:
        if auth.get(key):
            auth[key] = auth[key][:4] + "…"
    return {**cfg, "auth": auth}


@click.group()
def config():
    """Manage configuration."""
    pass


@config.command("show")
@click.option("--reveal", is_flag=True, help="Show stored credentials in full")
def config_show(reveal: bool):
    """Show current configuration."""
    cfg = load_config()
    json_str = json.dumps(cfg if reveal else _redacted(cfg), indent=2)
    console.print(Syntax(json_str, "json", theme="monokai"))


@config.command("path")
def config_path():
    """Show configuration file path."""
    console.print(str(get_config_path()))


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str):
    """Set a configuration value (e.g., client.timeout_seconds 10)."""
    cfg = load_config()

    parts = key.split(".")
    target = cfg
    for part in parts[:-1]:
        if not isinstance(target.get(part), dict):
            target[part] = {}
        target = target[part]

    # JSON if it parses, otherwise a plain string
    try:
        parsed_value = json.loads(value)
    except json.JSONDecodeError:
        parsed_value = value

    target[parts[-1]] = parsed_value
    save_config(cfg)
    console.print(f"Set {key} = {parsed_value}", markup=False)
