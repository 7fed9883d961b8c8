"""Article source plugins.

``article`` parses text supplied directly in the request. ``article_url``
downloads a page and extracts its main text with trafilatura first.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import socket
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import urlparse

import httpx
import trafilatura

from persona_briefing.core.urls import is_blocked_host, is_public_address
from persona_briefing.ingestion.profile_parser import parse_profile
from persona_briefing.plugins.base import ProfileSource, SourceResult
from persona_briefing.plugins.clients.firecrawl import ScrapeError

logger = logging.getLogger(__name__)

_MAX_ARTICLE_CHARS = 50_000
_MAX_HTML_BYTES = 2_000_000
_MAX_REDIRECTS = 5

# Maps a hostname to the IP addresses it resolves to
Resolver = Callable[[str], Awaitable[list[str]]]


class ArticleTextSource(ProfileSource):
    """Profile source for raw article text."""

    name = "article"

    async def fetch(self, identifier: str, **config: Any) -> SourceResult:
        profile = parse_profile(identifier)
        digest = hashlib.sha256(identifier.encode("utf-8")).hexdigest()[:12]
        return SourceResult(
            source_name=self.name,
            identifier=f"text:{digest}",
            profile=profile,
            stats={"text_length": len(identifier)},
        )


class ArticleUrlSource(ProfileSource):
    """Profile source that fetches an article page and extracts its text.

    Every hop, redirects included, must resolve to public addresses only,
    and the page body is read in chunks up to ``_MAX_HTML_BYTES``.
    """

    name = "article_url"

    def __init__(self, client: httpx.AsyncClient, resolver: Resolver | None = None) -> None:
        self._client = client
        self._resolve = resolver or _resolve_host

    async def fetch(self, identifier: str, **config: Any) -> SourceResult:
        url = identifier.strip()
        html = await self._download(url)

        markdown = _extract_article(html, url)
        if not markdown:
            raise ScrapeError(f"Article unavailable at {url}: no readable content found")

        profile = parse_profile(markdown[:_MAX_ARTICLE_CHARS])
        return SourceResult(
            source_name=self.name,
            identifier=url,
            profile=profile,
            stats={"html_length": len(html), "text_length": len(markdown)},
        )

    async def _download(self, url: str) -> str:
        for _ in range(_MAX_REDIRECTS + 1):
            await self._check_host(url)
            try:
                async with self._client.stream("GET", url, follow_redirects=False) as resp:
                    if resp.is_redirect:
                        url = str(resp.url.join(resp.headers.get("location", "")))
                        logger.debug("Article redirected to %s", url)
                        continue
                    resp.raise_for_status()
                    body = bytearray()
                    async for chunk in resp.aiter_bytes():
                        body.extend(chunk)
                        if len(body) > _MAX_HTML_BYTES:
                            raise ScrapeError(
                                f"Invalid article: page exceeds {_MAX_HTML_BYTES} bytes"
                            )
                    return _decode(bytes(body), resp.charset_encoding)
            except httpx.TimeoutException as exc:
                raise ScrapeError(f"Article fetch timeout for {url}") from exc
            except httpx.HTTPError as exc:
                raise ScrapeError(f"Article unavailable at {url}: {exc}") from exc
        raise ScrapeError(f"Article unavailable at {url}: too many redirects")

    async def _check_host(self, url: str) -> None:
        parsed = urlparse(url)
        host = parsed.hostname
        if parsed.scheme not in ("http", "https") or not host:
            raise ScrapeError(f"Invalid article URL: {url}")
        if is_blocked_host(host):
            raise ScrapeError(f"Invalid article URL: {host} is not a public address")
        try:
            addresses = await self._resolve(host)
        except OSError as exc:
            raise ScrapeError(f"Article unavailable at {url}: cannot resolve {host}") from exc
        if not addresses or not all(is_public_address(a) for a in addresses):
            raise ScrapeError(f"Invalid article URL: {host} is not a public address")


async def _resolve_host(host: str) -> list[str]:
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(host, None, type=socket.SOCK_STREAM)
    return [info[4][0] for info in infos]


def _decode(body: bytes, charset: str | None) -> str:
    try:
        return body.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


def _extract_article(html: str, url: str) -> str:
    """Extract main text with trafilatura and prefix the title as a heading."""
    content = trafilatura.extract(
        html,
        url=url,
        include_comments=False,
        include_tables=True,
        favor_recall=True,
    )
    if not content or not content.strip():
        return ""

    title = ""
    metadata = trafilatura.extract(
        html,
        url=url,
        output_format="json",
        include_comments=False,
    )
    if metadata:
        try:
            title = json.loads(metadata).get("title") or ""
        except (json.JSONDecodeError, TypeError):
            logger.debug("Unparseable trafilatura metadata for %s", url)

    title = title or _title_from_url(url)
    return f"# {title}\n\n{content.strip()}"


def _title_from_url(url: str) -> str:
    """Generate a fallback title from a URL path."""
    path = urlparse(url).path.strip("/")
    if not path:
        return urlparse(url).netloc or "Untitled"
    segment = path.split("/")[-1]
    segment = segment.replace("-", " ").replace("_", " ")
    return segment.title()
