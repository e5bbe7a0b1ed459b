"""Bundle discovery and query ID extraction from the X web client JavaScript."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import httpx

from ..errors import DiscoveryError
from ..models.query_ids import is_valid_query_id
from .constants import (
    BUNDLE_BATCH_SIZE,
    BUNDLE_URL_RE,
    DISCOVERY_HEADERS,
    DISCOVERY_OPERATIONS,
    DISCOVERY_PAGES,
    QUERY_ID_PATTERNS,
)

log = logging.getLogger(__name__)


@dataclass
class DiscoveredQueryId:
    query_id: str
    bundle: str


@dataclass
class DiscoveryResult:
    """Outcome of one discovery cycle."""

    ids: dict[str, DiscoveredQueryId]
    pages: list[str]
    bundle_urls: list[str] = field(default_factory=list)

    @property
    def bundles(self) -> list[str]:
        """Bundle names that yielded at least one ID, in bundle URL order."""
        used = {entry.bundle for entry in self.ids.values()}
        return [name for name in (bundle_name(url) for url in self.bundle_urls) if name in used]


def bundle_name(url: str) -> str:
    return url.rsplit("/", 1)[-1] or url


def extract_bundle_urls(html: str) -> list[str]:
    """Extract client bundle URLs from page HTML, unique and in page order."""
    return list(dict.fromkeys(match.group(0) for match in BUNDLE_URL_RE.finditer(html)))


def extract_operations(bundle_text: str, wanted: Iterable[str]) -> dict[str, str]:
    """Extract ``{operationName: queryId}`` for *wanted* operations from bundle text.

    Patterns are applied in order and the first valid match for an operation
    wins, so tightly-scoped patterns take precedence over the long-distance ones.
    """
    targets = set(wanted)
    found: dict[str, str] = {}
    if not targets:
        return found

    for pattern, op_group, qid_group in QUERY_ID_PATTERNS:
        for match in pattern.finditer(bundle_text):
            operation = match.group(op_group)
            query_id = match.group(qid_group)
            if operation not in targets or operation in found:
                continue
            if not is_valid_query_id(query_id):
                continue
            found[operation] = query_id
            if len(found) == len(targets):
                return found

    return found


def new_discovery_client(timeout: float | None = 20.0) -> httpx.Client:
    """Build an HTTP client with a generic browser request profile."""
    return httpx.Client(headers=DISCOVERY_HEADERS, timeout=timeout, follow_redirects=True)


def fetch_text(http: httpx.Client, url: str) -> str:
    resp = http.get(url)
    if not resp.is_success:
        raise httpx.HTTPStatusError(
            f"HTTP {resp.status_code} for {url}: {resp.text[:120]}",
            request=resp.request,
            response=resp,
        )
    return resp.text


def discover_bundle_urls(http: httpx.Client, pages: Iterable[str] = DISCOVERY_PAGES) -> list[str]:
    """Fetch discovery pages and collect client bundle URLs.

    A failing page is logged and skipped. Raises ``DiscoveryError`` when no
    bundle URL is found on any page.
    """
    found: list[str] = []
    for page in pages:
        try:
            html = fetch_text(http, page)
        except httpx.HTTPError as e:
            log.warning("Discovery page %s failed: %s", page, e)
            continue
        found.extend(extract_bundle_urls(html))

    urls = list(dict.fromkeys(found))
    if not urls:
        raise DiscoveryError("No client bundles discovered; x.com layout may have changed.")
    return urls


def _scan_bundle(http: httpx.Client, url: str, wanted: set[str]) -> dict[str, str]:
    try:
        text = fetch_text(http, url)
    except httpx.HTTPError as e:
        log.warning("Bundle %s failed: %s", bundle_name(url), e)
        return {}
    return extract_operations(text, wanted)


def scan_bundles(
    http: httpx.Client,
    urls: list[str],
    wanted: Iterable[str],
    batch_size: int = BUNDLE_BATCH_SIZE,
) -> dict[str, DiscoveredQueryId]:
    """Scan bundles in bounded concurrent batches until every wanted operation is found.

    Each batch is awaited as a whole before the next starts. Within a batch,
    results are merged in URL order so the outcome does not depend on which
    fetch finishes first.
    """
    targets = set(wanted)
    results: dict[str, DiscoveredQueryId] = {}
    batch_size = max(1, batch_size)

    with ThreadPoolExecutor(max_workers=batch_size) as pool:
        for start in range(0, len(urls), batch_size):
            remaining = targets - results.keys()
            if not remaining:
                break
            batch = urls[start : start + batch_size]
            futures = [pool.submit(_scan_bundle, http, url, remaining) for url in batch]
            for url, future in zip(batch, futures, strict=True):
                for operation, query_id in future.result().items():
                    if operation not in results:
                        results[operation] = DiscoveredQueryId(query_id=query_id, bundle=bundle_name(url))
            log.debug(
                "Scanned bundles %d-%d: %d/%d operations resolved",
                start + 1,
                start + len(batch),
                len(results),
                len(targets),
            )

    return results


def discover_query_ids(
    http: httpx.Client | None = None,
    operations: Iterable[str] = DISCOVERY_OPERATIONS,
    pages: Iterable[str] = DISCOVERY_PAGES,
    batch_size: int = BUNDLE_BATCH_SIZE,
    timeout: float | None = 20.0,
) -> DiscoveryResult:
    """Run a full discovery cycle: pages, then bundles, then ID extraction.

    Raises ``DiscoveryError`` when no bundles are found or nothing is extracted.
    """
    pages = list(pages)
    owns_client = http is None
    client = http or new_discovery_client(timeout)
    try:
        bundle_urls = discover_bundle_urls(client, pages)
        log.info("Discovered %d client bundles", len(bundle_urls))
        ids = scan_bundles(client, bundle_urls, operations, batch_size=batch_size)
    finally:
        if owns_client:
            client.close()

    if not ids:
        raise DiscoveryError(f"No query IDs found in {len(bundle_urls)} client bundles.")
    return DiscoveryResult(ids=ids, pages=pages, bundle_urls=bundle_urls)
