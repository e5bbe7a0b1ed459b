"""Single tweet commands: read and replies."""

import json

import rich_click as click

from ..renderer import format_tweet, format_tweets
from ._helpers import create_client, format_option, tweet_id_argument


@click.command()
@click.argument("tweet", metavar="TWEET_ID_OR_URL")
@format_option
@click.pass_context
def read(ctx: click.Context, tweet: str, fmt: str):
    """Read a single tweet by ID or status URL."""
    tweet_id = tweet_id_argument(tweet)
    client = create_client(ctx)
    result = client.get_tweet(tweet_id)
    if not result.success or result.tweet is None:
        raise click.ClickException(result.error or "Tweet not found")

    if fmt == "json":
        click.echo(json.dumps(result.tweet.model_dump(mode="json", exclude_none=True), indent=2))
    else:
        click.echo(format_tweet(result.tweet, separator=False))


@click.command()
@click.argument("tweet", metavar="TWEET_ID_OR_URL")
@format_option
@click.pass_context
def replies(ctx: click.Context, tweet: str, fmt: str):
    """Get direct replies to a tweet."""
    tweet_id = tweet_id_argument(tweet)
    client = create_client(ctx)
    result = client.get_replies(tweet_id)
    if not result.success:
        raise click.ClickException(result.error or "Failed to fetch replies")
    click.echo(format_tweets(result.tweets, json_output=fmt == "json", empty_message="No replies found."))
