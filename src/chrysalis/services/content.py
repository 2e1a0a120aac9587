"""Content resolution for submitted URLs.

Each distinct trimmed URL maps to exactly one ``Content`` row. Page metadata
is fetched from the network only the first time a URL is seen; later
submissions of the same URL reuse the stored row unchanged. No database
transaction is held open while a page is being fetched.
"""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from chrysalis.core.errors import MetadataFetchError
from chrysalis.core.settings import settings
from chrysalis.models import Content
from chrysalis.models.content import CONTENT_TYPE_WEB

# Configure logger for this module
logger = logging.getLogger(__name__)

_METADATA_PREFIXES = ("og:", "twitter:")


@dataclass(frozen=True)
class PageMetadata:
    """Metadata scraped from a page's ``<head>``.

    ``tags`` maps lower-cased Open Graph and Twitter card keys (for example
    ``og:title`` or ``twitter:image``) to their first non-empty value.
    """

    url: str
    tags: dict[str, str] = field(default_factory=dict)
    document_title: str | None = None

    def first(self, *keys: str) -> str | None:
        """Return the first present value among ``keys``."""
        for key in keys:
            value = self.tags.get(key)
            if value:
                return value
        return None

    def as_payload(self) -> dict[str, Any]:
        """Return the raw payload persisted alongside the content row."""
        return {"url": self.url, "title": self.document_title, **self.tags}


def parse_page_metadata(html: str, url: str) -> PageMetadata:
    """Extract Open Graph and Twitter card tags from an HTML document."""
    soup = BeautifulSoup(html, "html.parser")

    tags: dict[str, str] = {}
    for meta in soup.find_all("meta"):
        key = meta.get("property") or meta.get("name")
        content = meta.get("content")
        if not key or not content:
            continue
        key = key.strip().lower()
        if key.startswith(_METADATA_PREFIXES) and content.strip():
            tags.setdefault(key, content.strip())

    document_title = None
    if soup.title and soup.title.string:
        document_title = soup.title.string.strip() or None

    return PageMetadata(url=url, tags=tags, document_title=document_title)


class MetadataFetcher:
    """Fetch a page over HTTP and scrape its social metadata.

    At most ``max_bytes`` of the body are read; the ``<head>`` of a page sits
    at the start, so the rest is never needed. Unless private hosts are
    allowed, every request, including each redirect hop, must target a
    public http(s) host.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float | None = None,
        user_agent: str | None = None,
        max_bytes: int | None = None,
        allow_private_hosts: bool | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout_seconds = (
            timeout_seconds
            if timeout_seconds is not None
            else settings.metadata_fetch_timeout_seconds
        )
        self.user_agent = user_agent or settings.metadata_user_agent
        self.max_bytes = max_bytes or settings.metadata_max_bytes
        self.allow_private_hosts = (
            allow_private_hosts
            if allow_private_hosts is not None
            else settings.metadata_allow_private_hosts
        )
        self._transport = transport

    async def fetch(self, url: str) -> PageMetadata:
        """Return the metadata of the page at ``url``.

        Raises:
            MetadataFetchError: On network failure, timeout, an unusable or
                non-public URL, or a non-success HTTP status.
        """
        logger.debug("Fetching page metadata for %s", url)
        self._check_target(url)
        try:
            async with httpx.AsyncClient(
                follow_redirects=True,
                timeout=httpx.Timeout(self.timeout_seconds),
                headers={"User-Agent": self.user_agent},
                transport=self._transport,
                event_hooks={"request": [self._check_request]},
            ) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    body = await self._read_head(response)
                    final_url = str(response.url)
                    encoding = response.encoding or "utf-8"
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Metadata fetch failed for %s: %s", url, exc)
            raise MetadataFetchError(
                "We were unable to fetch the submitted URL",
                url=url,
            ) from exc

        return parse_page_metadata(body.decode(encoding, errors="replace"), final_url)

    async def _read_head(self, response: httpx.Response) -> bytes:
        chunks: list[bytes] = []
        received = 0
        async for chunk in response.aiter_bytes():
            chunks.append(chunk)
            received += len(chunk)
            if received >= self.max_bytes:
                logger.debug("Stopped reading %s after %d bytes", response.url, received)
                break
        return b"".join(chunks)[: self.max_bytes]

    async def _check_request(self, request: httpx.Request) -> None:
        self._check_target(request.url)

    def _check_target(self, url: str | httpx.URL) -> None:
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as exc:
            raise MetadataFetchError(
                "We were unable to fetch the submitted URL", url=str(url)
            ) from exc

        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise MetadataFetchError("Only http and https URLs can be fetched", url=str(url))
        if self.allow_private_hosts:
            return
        if not is_public_host(parsed.host):
            logger.warning("Refusing to fetch non-public host %s", parsed.host)
            raise MetadataFetchError("URL points to a non-public host", url=str(url))


def is_public_host(host: str) -> bool:
    """Return False for localhost names and non-global IP literals.

    Hostnames are not resolved, so a public name whose DNS record points at
    a private address is not caught here.
    """
    host = host.lower().rstrip(".")
    if host == "localhost" or host.endswith(".localhost"):
        return False
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return True
    return address.is_global


def build_content(url: str, metadata: PageMetadata) -> Content:
    """Build an unsaved ``Content`` row from fetched metadata."""
    title = metadata.first("og:title", "twitter:title", "og:site_name") or url
    description = metadata.first("og:description", "twitter:description")
    image = metadata.first("og:image", "og:image:url", "twitter:image", "twitter:image:src")
    return Content(
        url=url,
        type=CONTENT_TYPE_WEB,
        title=title,
        description=description,
        teaser_image_url=urljoin(metadata.url, image) if image else None,
        og=metadata.as_payload(),
    )


class ContentResolver:
    """Resolve a URL to its canonical ``Content`` row, creating it if needed.

    Resolution is split so the caller can end its read transaction before
    the network wait: ``find`` looks the URL up, ``fetch`` reads the page
    with no database access, and ``store`` inserts the row in the caller's
    write transaction.
    """

    def __init__(self, fetcher: MetadataFetcher | None = None) -> None:
        self.fetcher = fetcher or MetadataFetcher()

    def find(self, db: Session, url: str) -> Content | None:
        """Return the stored content for an already trimmed URL."""
        return db.execute(select(Content).where(Content.url == url)).scalar_one_or_none()

    async def fetch(self, url: str) -> PageMetadata:
        """Fetch page metadata for a URL that ``find`` did not know.

        Raises:
            MetadataFetchError: If the page cannot be fetched.
        """
        return await self.fetcher.fetch(url)

    def store(self, db: Session, url: str, metadata: PageMetadata) -> Content:
        """Insert content for ``url`` and return the stored row.

        The insert runs inside a savepoint. If a concurrent request inserted
        the same URL after our lookup, the unique constraint rejects ours and
        the winning row is returned instead.
        """
        content = build_content(url, metadata)
        try:
            with db.begin_nested():
                db.add(content)
                db.flush()
        except IntegrityError:
            winner = self.find(db, url)
            if winner is None:
                raise
            logger.info("Content for %s was created concurrently; reusing %s", url, winner.id)
            return winner

        logger.info("Created content %s for %s", content.id, url)
        return content
