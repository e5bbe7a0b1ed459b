"""x-reader - Read-only Twitter/X GraphQL client."""

try:
    from importlib.metadata import version

    __version__ = version("x-reader")
except Exception:
    __version__ = "0.0.0-dev"
