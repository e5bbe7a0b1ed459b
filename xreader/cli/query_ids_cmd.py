"""Query ID cache command."""

import json

import rich_click as click

from ..query_ids import create_default_cache
from ._console import console, err_console, status_icon
from ._helpers import checked_settings


@click.command("query-ids")
@click.option("--refresh", is_flag=True, help="Force re-discovery from the x.com client bundles")
@click.option("--format", "-f", "fmt", type=click.Choice(["text", "json"]), default="text", help="Output format")
def query_ids(refresh: bool, fmt: str):
    """Show or refresh cached GraphQL query IDs."""
    checked_settings()
    cache = create_default_cache()

    if refresh:
        err_console.print("Refreshing query IDs from x.com JS bundles...")
        before = cache.snapshot()
        after = cache.refresh(force=True)
        if after is None or after is before:
            err_console.print("[yellow]Refresh failed; showing the previous cache (see --verbose)[/yellow]")
        else:
            err_console.print(f"{status_icon(True)} Discovered {len(after.ids)} query IDs")

    info = cache.snapshot_info()
    if info is None:
        err_console.print("[yellow]No cached query IDs. Run: xreader query-ids --refresh[/yellow]")
        return

    if fmt == "json":
        payload = {
            "cache_path": info.location,
            "fetched_at": info.snapshot.fetched_at.isoformat(),
            "is_fresh": info.is_fresh,
            "age_seconds": int(info.age.total_seconds()),
            "ids": info.snapshot.ids,
            "bundles": info.snapshot.discovery.bundles,
        }
        click.echo(json.dumps(payload, indent=2))
        return

    console.print(f"Path: {info.location}", markup=False)
    console.print(f"Fetched: {info.snapshot.fetched_at.isoformat()}")
    console.print(f"Fresh: {status_icon(info.is_fresh)}")
    console.print(f"Operations: {len(info.snapshot.ids)}")
    console.print("")
    for operation, query_id in sorted(info.snapshot.ids.items()):
        console.print(f"  {operation}: {query_id}", markup=False)
