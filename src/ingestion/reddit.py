import logging
from typing import Any, Dict, List, Optional

import httpx

from core.entities import RawItem, SourceKind
from ingestion.base import HttpSourceAdapter, SourceSchemaError, SourceUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_SUBREDDITS = ["OpenAI", "ChatGPT", "SoraAi"]


def submission_to_item(data: Dict[str, Any]) -> RawItem:
    return RawItem(
        source=SourceKind.REDDIT,
        id=data.get("name") or data.get("id"),
        title=data.get("title") or "",
        link=f"https://reddit.com{data.get('permalink') or ''}",
        text=data.get("selftext") or "",
    )


class RedditAdapter(HttpSourceAdapter):
    """
    Newest posts of a few subreddits through the public JSON listing.
    """
    kind = SourceKind.REDDIT
    BASE_URL = "https://www.reddit.com"

    def __init__(
        self,
        subreddits: Optional[List[str]] = None,
        limit: int = 40,
        **http_options: Any,
    ):
        super().__init__(**http_options)
        self.subreddits = subreddits or list(DEFAULT_SUBREDDITS)
        self.limit = limit

    async def fetch_items(self) -> List[RawItem]:
        items: List[RawItem] = []
        failures = 0

        async with self.client() as client:
            for sub in self.subreddits:
                try:
                    children = await self._fetch_children(client, sub)
                except (httpx.HTTPError, ValueError) as e:
                    failures += 1
                    logger.warning(f"Reddit r/{sub} failed: {e}")
                    continue

                for child in children:
                    data = child.get("data") if isinstance(child, dict) else None
                    if not isinstance(data, dict):
                        logger.debug(f"Skipping malformed listing entry in r/{sub}")
                        continue
                    items.append(submission_to_item(data))
                logger.info(f"Reddit(public) r/{sub} -> {len(children)}")

        if self.subreddits and failures == len(self.subreddits):
            raise SourceUnavailableError("every subreddit request failed")

        return items

    async def _fetch_children(self, client: httpx.AsyncClient, sub: str) -> List[Dict[str, Any]]:
        async def _call() -> List[Dict[str, Any]]:
            resp = await client.get(
                f"{self.BASE_URL}/r/{sub}/new/.json",
                params={"raw_json": 1, "limit": self.limit},
            )
            resp.raise_for_status()
            payload = resp.json()
            listing = payload.get("data") if isinstance(payload, dict) else None
            children = listing.get("children") if isinstance(listing, dict) else None
            if not isinstance(children, list):
                raise SourceSchemaError("no children")
            return children

        return await self._retry(_call, f"reddit-{sub}")
