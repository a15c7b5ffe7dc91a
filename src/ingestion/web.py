"""
One-hop crawler: fetches pages linked from already gathered items
and turns their visible text into derived items.
"""
import logging
from typing import Any, Dict, Iterable, List

import httpx
from bs4 import BeautifulSoup

from core.entities import RawItem, SourceKind, SourceResult
from ingestion.base import HttpSourceAdapter
from ingestion.text import collapse_whitespace

logger = logging.getLogger(__name__)


def page_to_item(url: str, html: str, max_chars: int) -> RawItem:
    soup = BeautifulSoup(html, "html.parser")
    body = soup.body or soup
    text = collapse_whitespace(body.get_text(" "))[:max_chars]
    title = soup.title.get_text().strip() if soup.title else ""

    # No origin id: the synthetic id keeps pages apart from the posts linking to them
    return RawItem(
        source=SourceKind.WEB,
        id=None,
        title=title or url,
        link=url,
        text=text,
    )


class WebPageAdapter(HttpSourceAdapter):
    """
    Fetches a fixed list of URLs, exactly once each, without following links.
    """
    kind = SourceKind.WEB

    def __init__(self, urls: List[str], max_chars: int = 20000, **http_options: Any):
        super().__init__(**http_options)
        self.urls = urls
        self.max_chars = max_chars

    async def fetch_items(self) -> List[RawItem]:
        items: List[RawItem] = []

        async with self.client() as client:
            for url in self.urls:
                try:
                    html = await self._download(client, url)
                except httpx.HTTPError as e:
                    logger.warning(f"Crawl failed {url}: {e}")
                    continue

                items.append(page_to_item(url, html, self.max_chars))
                logger.debug(f"Crawled {url}")

        return items

    async def _download(self, client: httpx.AsyncClient, url: str) -> str:
        async def _call() -> str:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.text

        return await self._retry(_call, f"crawl-{url}")


def candidate_links(items: Iterable[RawItem], max_links: int) -> List[str]:
    """
    Unique non-empty http(s) links in first-seen order, capped at max_links.
    """
    links: List[str] = []
    seen = set()

    for item in items:
        link = (item.link or "").strip()
        if not link.startswith(("http://", "https://")) or link in seen:
            continue
        seen.add(link)
        links.append(link)
        if len(links) >= max_links:
            break

    return links


class LinkCrawler:
    def __init__(self, max_links: int = 20, max_chars: int = 20000, **http_options: Any):
        self.max_links = max_links
        self.max_chars = max_chars
        self.http_options: Dict[str, Any] = http_options

    async def crawl(self, items: Iterable[RawItem]) -> SourceResult:
        urls = candidate_links(items, self.max_links)
        logger.info(f"Crawling {len(urls)} linked pages")

        adapter = WebPageAdapter(urls, max_chars=self.max_chars, **self.http_options)
        return await adapter.collect()
