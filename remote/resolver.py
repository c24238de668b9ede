"""Resolves the file manifest of a peer, with or without a structured API."""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import quote, unquote

import httpx
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from common.constants import REMOTE_PROBE_CONCURRENCY, REMOTE_PROBE_TIMEOUT_SECONDS
from common.exceptions import InvalidPeerAddressError, NetworkFailureError, ParseFailureError
from common.logging_config import get_logger
from common.types import RemoteFileRecord
from remote.listing_parser import AnchorContext, parse_anchors
from remote.size_extractors import extract_size

logger = get_logger(__name__)


class RemoteFileSchema(BaseModel):
    """Shape of one entry returned by a peer's /api/files."""
    name: str
    size: int = Field(ge=0)
    modified: Optional[datetime] = None
    url: str


MANIFEST_ADAPTER = TypeAdapter(List[RemoteFileSchema])


@dataclass(frozen=True)
class ResolvedManifest:
    """
    A peer's manifest and how it was obtained.

    Only manifests from the structured API (has_api=True) are trusted
    enough to offer bulk archive download of the peer.
    """
    base_url: str
    files: List[RemoteFileRecord]
    has_api: bool


def normalize_base_url(target: str) -> str:
    """
    Normalize a peer address to a base URL without a trailing slash.

    >>> normalize_base_url("192.168.1.20:8000/")
    'http://192.168.1.20:8000'
    """
    target = target.strip()
    if "://" not in target:
        target = f"http://{target}"
    return target.rstrip("/")


def validate_base_url(base_url: str) -> httpx.URL:
    """
    Parse a normalized base URL, rejecting malformed addresses.

    Raises:
        InvalidPeerAddressError: If the URL is malformed or names no host
    """
    try:
        url = httpx.URL(base_url)
    except httpx.InvalidURL as e:
        raise InvalidPeerAddressError(f"Invalid peer address {base_url!r}: {e}") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidPeerAddressError(f"Invalid peer address {base_url!r}")
    return url


def is_file_link(href: Optional[str]) -> bool:
    """Return False for missing hrefs, parent links, directories and bare queries."""
    if not href:
        return False
    if href == "../" or href.endswith("/") or href.startswith("?"):
        return False
    return True


class RemoteListingResolver:
    """
    Builds a normalized manifest for an arbitrary peer.

    Tries the structured /api/files endpoint first. If that does not
    yield well-formed JSON, the peer's root page is mined for anchors,
    and sizes missing from the markup are probed with HEAD requests.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = REMOTE_PROBE_TIMEOUT_SECONDS,
        max_concurrent_probes: int = REMOTE_PROBE_CONCURRENCY,
    ):
        """
        Initialize resolver.

        Args:
            client: HTTP client to use; one is created (and owned) if omitted
            timeout: Per-request timeout in seconds
            max_concurrent_probes: Cap on simultaneous HEAD probes
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._probe_slots = asyncio.Semaphore(max_concurrent_probes)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "RemoteListingResolver":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def resolve(self, target: str) -> ResolvedManifest:
        """
        Resolve a peer's manifest.

        Args:
            target: Peer base URL or "host:port"

        Returns:
            ResolvedManifest

        Raises:
            InvalidPeerAddressError: If the target is not a usable address
            NetworkFailureError: If the peer's listing page cannot be fetched
        """
        base_url = normalize_base_url(target)
        validate_base_url(base_url)

        files = await self._probe_structured(base_url)
        if files is not None:
            logger.info(f"Structured API found at {base_url}: {len(files)} file(s)")
            return ResolvedManifest(base_url=base_url, files=files, has_api=True)

        logger.info(f"No structured API at {base_url}, parsing directory listing")
        html = await self._fetch_listing(base_url)
        files = await self._resolve_listing(base_url, html)
        logger.info(f"Directory listing at {base_url}: {len(files)} file(s)")
        return ResolvedManifest(base_url=base_url, files=files, has_api=False)

    async def _probe_structured(self, base_url: str) -> Optional[List[RemoteFileRecord]]:
        try:
            response = await self._client.get(f"{base_url}/api/files", headers={"Cache-Control": "no-cache"})
        except httpx.HTTPError as e:
            logger.debug(f"Structured probe failed for {base_url}: {e}")
            return None

        content_type = response.headers.get("content-type", "")
        if not response.is_success or "application/json" not in content_type:
            return None

        try:
            entries = MANIFEST_ADAPTER.validate_json(response.content)
        except ValidationError as e:
            logger.warning(f"Unexpected /api/files shape from {base_url}: {e.error_count()} error(s)")
            return None

        now = datetime.now(timezone.utc)
        return [
            RemoteFileRecord(
                name=entry.name,
                size=entry.size,
                modified_at=entry.modified or now,
                url=entry.url,
            )
            for entry in entries
        ]

    async def _fetch_listing(self, base_url: str) -> str:
        try:
            response = await self._client.get(base_url)
        except httpx.HTTPError as e:
            raise NetworkFailureError(f"Failed to fetch from remote server: {e}") from e
        if not response.is_success:
            raise NetworkFailureError(
                f"Failed to fetch from remote server: HTTP {response.status_code}"
            )
        return response.text

    async def _resolve_listing(self, base_url: str, html: str) -> List[RemoteFileRecord]:
        try:
            anchors = parse_anchors(html)
        except ParseFailureError as e:
            logger.warning(f"{e} [base_url={base_url}]")
            return []

        results = await asyncio.gather(
            *(self._resolve_anchor(base_url, anchor) for anchor in anchors),
            return_exceptions=True,
        )

        files = []
        for anchor, result in zip(anchors, results):
            if isinstance(result, Exception):
                logger.warning(f"Skipping link {anchor.href!r}: {result}")
            elif result is not None:
                files.append(result)

        if not files:
            logger.warning(f"No files parsed from listing at {base_url}")
        return files

    async def _resolve_anchor(self, base_url: str, anchor: AnchorContext) -> Optional[RemoteFileRecord]:
        if not is_file_link(anchor.href):
            return None

        name = unquote(anchor.href.split("?", 1)[0])
        encoded = quote(name, safe="")

        size = extract_size(anchor)
        if not size:
            size = await self._probe_content_length(f"{base_url}/{encoded}")

        return RemoteFileRecord(
            name=name,
            size=size,
            modified_at=datetime.now(timezone.utc),
            url=f"/{encoded}",
        )

    async def _probe_content_length(self, url: str) -> int:
        """
        Read a file's size from a HEAD response.

        Returns:
            Content-Length in bytes, or 0 if it cannot be determined
        """
        async with self._probe_slots:
            try:
                response = await self._client.head(url)
            except httpx.HTTPError as e:
                logger.debug(f"HEAD request failed for {url}: {e}")
                return 0

        content_length = response.headers.get("content-length", "")
        if response.is_success and content_length.isdigit():
            return int(content_length)
        return 0
