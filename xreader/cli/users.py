"""User commands: user-lookup, followers and following."""

import json

import rich_click as click

from ..renderer import format_users
from ._console import console
from ._helpers import create_client, format_option, lookup_user_id, normalize_username


@click.command("user-lookup")
@click.argument("handle")
@format_option
@click.pass_context
def user_lookup(ctx: click.Context, handle: str, fmt: str):
    """Look up the user ID and display name for HANDLE."""
    username = normalize_username(handle)
    client = create_client(ctx)
    result = client.get_user_by_username(username)
    if not result.success:
        raise click.ClickException(result.error or f"User @{username} not found")

    if fmt == "json":
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        console.print(f"@{result.username} ({result.name})", markup=False)
        console.print(f"User ID: {result.user_id}", markup=False)


def _follow_list_command(name: str, method: str, noun: str):
    @click.command(name, help=f"List accounts {noun} HANDLE.")
    @click.argument("handle")
    @click.option("--count", "-n", type=click.IntRange(1, 20), default=20, help="Number of users (max 20)")
    @format_option
    @click.pass_context
    def command(ctx: click.Context, handle: str, count: int, fmt: str):
        client = create_client(ctx)
        user_id, _ = lookup_user_id(client, handle)
        result = getattr(client, method)(user_id, count)
        if not result.success:
            raise click.ClickException(result.error or f"Failed to fetch {name}")
        click.echo(format_users(result.users, json_output=fmt == "json"))

    return command


followers = _follow_list_command("followers", "get_followers", "following")
following = _follow_list_command("following", "get_following", "followed by")
