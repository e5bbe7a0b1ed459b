"""Credential setup command."""

import rich_click as click
from rich.panel import Panel

from ..config import get_config_path, load_config, save_config
from ._console import console, status_icon


@click.command()
def setup():
    """Store x.com session cookies in the x-reader config file."""
    console.print(
        Panel(
            "You need two cookies from x.com:\n"
            "1. Open x.com in your browser and log in\n"
            "2. Open DevTools → Application → Cookies → x.com\n"
            "3. Copy the values of auth_token and ct0",
            title="xreader setup",
        )
    )

    auth_token = click.prompt("auth_token", hide_input=True).strip()
    ct0 = click.prompt("ct0", hide_input=True).strip()
    if not auth_token or not ct0:
        raise click.ClickException("Both values are required.")

    cfg = load_config()
    cfg.setdefault("auth", {})
    cfg["auth"]["auth_token"] = auth_token
    cfg["auth"]["ct0"] = ct0
    save_config(cfg)

    console.print(f"{status_icon(True)} Config saved to {get_config_path()}")
    console.print('Test it: xreader search "hello"')
