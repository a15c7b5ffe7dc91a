"""
Ingestion from RSS sources
"""
import logging
from typing import Any, List

import feedparser
import httpx

from core.entities import RawItem, SourceKind
from ingestion.base import HttpSourceAdapter, SourceUnavailableError
from ingestion.text import strip_html

logger = logging.getLogger(__name__)


def _entry_text(entry: Any) -> str:
    for key in ("summary", "description"):
        value = entry.get(key)
        if value:
            return strip_html(value)

    for content in entry.get("content") or []:
        value = content.get("value")
        if value:
            return strip_html(value)

    return ""


def entry_to_item(entry: Any) -> RawItem:
    return RawItem(
        source=SourceKind.RSS,
        id=entry.get("id") or entry.get("link") or entry.get("published") or entry.get("title") or None,
        title=entry.get("title", ""),
        link=entry.get("link", ""),
        text=_entry_text(entry),
    )


class RSSAdapter(HttpSourceAdapter):
    kind = SourceKind.RSS

    def __init__(self, feed_urls: List[str], limit: int = 30, **http_options: Any):
        super().__init__(**http_options)
        self.feed_urls = feed_urls
        self.limit = limit

    async def fetch_items(self) -> List[RawItem]:
        items: List[RawItem] = []
        failures = 0

        async with self.client() as client:
            for url in self.feed_urls:
                try:
                    body = await self._download(client, url)
                except httpx.HTTPError as e:
                    failures += 1
                    logger.warning(f"RSS fetch failed for {url}: {e}")
                    continue

                feed = feedparser.parse(body)
                if feed.bozo and not feed.entries:
                    failures += 1
                    logger.warning(f"RSS feed {url} could not be parsed: {feed.get('bozo_exception')}")
                    continue

                for entry in feed.entries[:self.limit]:
                    items.append(entry_to_item(entry))
                logger.info(f"RSS {url} -> {len(feed.entries)}")

        if self.feed_urls and failures == len(self.feed_urls):
            raise SourceUnavailableError("every feed failed")

        return items

    async def _download(self, client: httpx.AsyncClient, url: str) -> bytes:
        async def _call() -> bytes:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.content

        return await self._retry(_call, f"rss-{url}")
