"""Shared CLI utilities."""

import re

import rich_click as click
from pydantic import ValidationError

from ..auth import resolve_cookies
from ..config import get_config_path, load_settings
from ..fetcher import XReaderClient
from ._console import err_console

_STATUS_URL_RE = re.compile(r"(?:twitter\.com|x\.com)/\w+/status/(\d+)")


def extract_tweet_id(value: str) -> str:
    """Return the tweet ID from a status URL or a bare numeric ID.

    Raises ``ValueError`` for anything else.
    """
    match = _STATUS_URL_RE.search(value)
    if match:
        return match.group(1)
    stripped = value.strip()
    if stripped.isdigit():
        return stripped
    raise ValueError(f"Invalid tweet ID or URL: {value}")


def normalize_username(value: str) -> str:
    """Strip whitespace and a leading ``@``."""
    stripped = value.strip()
    return stripped[1:] if stripped.startswith("@") else stripped


def tweet_id_argument(value: str) -> str:
    try:
        return extract_tweet_id(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def checked_settings():
    """Load settings, turning an invalid config file into a CLI error."""
    try:
        return load_settings()
    except ValidationError as e:
        problems = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
        raise click.ClickException(f"Invalid config {get_config_path()}: {problems}") from e


def create_client(ctx: click.Context) -> XReaderClient:
    """Resolve credentials and build a client from the group options."""
    opts = ctx.find_root().obj or {}
    settings = checked_settings().client
    resolved = resolve_cookies(opts.get("auth_token"), opts.get("ct0"))
    for warning in resolved.warnings:
        err_console.print(f"[yellow]Warning:[/yellow] {warning}")

    if not resolved.cookies.complete:
        raise click.ClickException("Missing credentials. Run `xreader setup` or set AUTH_TOKEN and CT0 env vars.")

    timeout = opts.get("timeout")
    client = XReaderClient(
        resolved.cookies,
        timeout=timeout if timeout is not None else settings.timeout_seconds,
        quote_depth=settings.quote_depth,
    )
    ctx.call_on_close(client.close)
    return client


format_option = click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)


def lookup_user_id(client: XReaderClient, handle: str) -> tuple[str, str]:
    """Resolve a handle to ``(user_id, display)`` or raise ``ClickException``."""
    username = normalize_username(handle)
    err_console.print(f"Looking up @{username}...")
    result = client.get_user_by_username(username)
    if not result.success or not result.user_id:
        raise click.ClickException(result.error or f"User @{username} not found")
    return result.user_id, f"{result.name} (@{result.username})"
