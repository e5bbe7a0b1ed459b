"""Tweet listing commands: search, user-tweets and bookmarks."""

import rich_click as click

from ..renderer import format_tweets
from ._console import err_console
from ._helpers import create_client, format_option, lookup_user_id, normalize_username


@click.command()
@click.argument("query")
@click.option("--count", "-n", type=click.IntRange(min=1), default=10, help="Number of tweets (default: 10)")
@format_option
@click.pass_context
def search(ctx: click.Context, query: str, count: int, fmt: str):
    """
    Search latest tweets.

    \b
    EXAMPLES:
      xreader search "rate hike"
      xreader search "from:nasa" -n 50 --format json
    """
    client = create_client(ctx)
    result = client.search_all(query, count)
    if not result.success:
        raise click.ClickException(f"Search failed: {result.error}")
    click.echo(format_tweets(result.tweets, json_output=fmt == "json"))


@click.command("user-tweets")
@click.argument("handle")
@click.option("--count", "-n", type=click.IntRange(min=1), default=20, help="Number of tweets (default: 20)")
@format_option
@click.pass_context
def user_tweets(ctx: click.Context, handle: str, count: int, fmt: str):
    """Get recent tweets from HANDLE."""
    client = create_client(ctx)
    user_id, display = lookup_user_id(client, handle)

    err_console.print(f"Fetching tweets from {display}...")
    result = client.get_user_tweets_all(user_id, count)
    if not result.success:
        raise click.ClickException(f"Failed: {result.error}")
    click.echo(
        format_tweets(
            result.tweets,
            json_output=fmt == "json",
            empty_message=f"No tweets found for @{normalize_username(handle)}.",
        )
    )


@click.command()
@click.option("--count", "-n", type=click.IntRange(min=1), default=20, help="Number of bookmarks (default: 20)")
@click.option("--all", "fetch_all", is_flag=True, help="Fetch all bookmarks")
@format_option
@click.pass_context
def bookmarks(ctx: click.Context, count: int, fetch_all: bool, fmt: str):
    """Get your bookmarked tweets."""
    client = create_client(ctx)
    result = client.get_bookmarks_all(None if fetch_all else count)
    if not result.success:
        raise click.ClickException(result.error or "Failed to fetch bookmarks")
    click.echo(format_tweets(result.tweets, json_output=fmt == "json", empty_message="No bookmarks found."))
