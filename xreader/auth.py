"""Environment-file parsing and session cookie resolution."""

import json
import logging
import os
from pathlib import Path

from .config import get_xdg_config_home, load_settings
from .models.auth import Cookies, ResolvedCookies

log = logging.getLogger(__name__)

AUTH_TOKEN_ENV_NAMES = ("AUTH_TOKEN", "TWITTER_AUTH_TOKEN")
CT0_ENV_NAMES = ("CT0", "TWITTER_CT0")

NO_CREDENTIALS_WARNING = "No credentials found. Set AUTH_TOKEN and CT0 env vars, or run `xreader setup`."
BIRD_CONFIG_WARNING = "Using Bird CLI config. Run `xreader setup` to create an x-reader config."


def load_env_file(path: Path | None = None) -> dict[str, str]:
    """Parse a .env file, returning a dict of key-value pairs.

    Skips blank lines and comments.  Handles ``export KEY=value`` and
    quoted values.  If *path* is ``None`` the default ``~/.env`` is used.
    """
    if path is None:
        path = Path.home() / ".env"

    env: dict[str, str] = {}
    if not path.exists():
        return env

    with open(path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            if line.startswith("export "):
                line = line[7:]
            key, value = line.split("=", 1)
            env[key.strip()] = value.strip().strip("\"'")

    return env


def get_auth_env() -> dict[str, str]:
    """Return a copy of ``os.environ`` enriched with ``~/.env`` entries."""
    env = os.environ.copy()
    env.update(load_env_file())
    return env


def _first_env(env: dict[str, str], names: tuple[str, ...]) -> str:
    for name in names:
        value = env.get(name, "").strip()
        if value:
            return value
    return ""


def get_bird_config_path() -> Path:
    return get_xdg_config_home() / "bird" / "config.json"


def _cookies_from_env(auth_token_env: str, ct0_env: str) -> Cookies | None:
    env = get_auth_env()
    auth_token = _first_env(env, (auth_token_env, *AUTH_TOKEN_ENV_NAMES))
    ct0 = _first_env(env, (ct0_env, *CT0_ENV_NAMES))
    if auth_token and ct0:
        return Cookies(auth_token=auth_token, ct0=ct0, source="environment variables")
    return None


def _cookies_from_bird_config() -> Cookies | None:
    path = get_bird_config_path()
    if not path.exists():
        return None
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        log.warning("Could not read Bird config %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        return None
    auth_token = data.get("auth_token")
    ct0 = data.get("ct0")
    if isinstance(auth_token, str) and isinstance(ct0, str) and auth_token and ct0:
        return Cookies(auth_token=auth_token, ct0=ct0, source="bird config")
    return None


def resolve_cookies(auth_token: str | None = None, ct0: str | None = None) -> ResolvedCookies:
    """
    Resolve session cookies.

    Priority:
    1. Explicit arguments (CLI flags)
    2. Environment variables, including ``~/.env``
    3. ``auth`` section of the x-reader config file
    4. Bird CLI config file (with a migration warning)
    """
    if auth_token and ct0:
        return ResolvedCookies(cookies=Cookies(auth_token=auth_token, ct0=ct0, source="CLI flags"))

    settings = load_settings().auth

    cookies = _cookies_from_env(settings.auth_token_env, settings.ct0_env)
    if cookies is not None:
        return ResolvedCookies(cookies=cookies)

    if settings.auth_token and settings.ct0:
        return ResolvedCookies(cookies=Cookies(auth_token=settings.auth_token, ct0=settings.ct0, source="config file"))

    cookies = _cookies_from_bird_config()
    if cookies is not None:
        return ResolvedCookies(cookies=cookies, warnings=[BIRD_CONFIG_WARNING])

    return ResolvedCookies(cookies=Cookies(), warnings=[NO_CREDENTIALS_WARNING])
