"""CLI entry point for xreader."""

import rich_click as click

from .. import __version__

# Import command modules without shadowing module names with command objects
from . import config_cmd as _config_mod
from . import query_ids_cmd as _query_ids_mod
from . import read as _read_mod
from . import setup_cmd as _setup_mod
from . import timelines as _timelines_mod
from . import users as _users_mod
from ._console import configure_logging


@click.group()
@click.version_option(version=__version__)
@click.option("--auth-token", help="x.com auth_token cookie")
@click.option("--ct0", help="x.com ct0 cookie")
@click.option("--timeout", type=float, help="Request timeout in seconds")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx: click.Context, auth_token: str | None, ct0: str | None, timeout: float | None, verbose: bool):
    """Read-only X/Twitter client."""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj.update(auth_token=auth_token, ct0=ct0, timeout=timeout)


# Register commands
cli.add_command(_timelines_mod.search)
cli.add_command(_timelines_mod.user_tweets)
cli.add_command(_timelines_mod.bookmarks)
cli.add_command(_read_mod.read)
cli.add_command(_read_mod.replies)
cli.add_command(_users_mod.user_lookup)
cli.add_command(_users_mod.followers)
cli.add_command(_users_mod.following)
cli.add_command(_query_ids_mod.query_ids)
cli.add_command(_setup_mod.setup)
cli.add_command(_config_mod.config)


if __name__ == "__main__":
    cli()
