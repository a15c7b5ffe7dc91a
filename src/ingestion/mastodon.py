"""
Public hashtag timelines of Mastodon instances
"""
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from core.entities import RawItem, SourceKind
from ingestion.base import HttpSourceAdapter, SourceSchemaError, SourceUnavailableError
from ingestion.text import strip_html

logger = logging.getLogger(__name__)

DEFAULT_HASHTAGS = ["sora", "sora2"]


def status_to_item(status: Dict[str, Any]) -> RawItem:
    text = strip_html(status.get("content") or "")
    account = status.get("account") or {}
    return RawItem(
        source=SourceKind.MASTODON,
        id=str(status["id"]) if status.get("id") else None,
        title=f"{account.get('acct', '')}: {text[:80]}",
        link=status.get("url") or "",
        text=text,
    )


class MastodonAdapter(HttpSourceAdapter):
    kind = SourceKind.MASTODON

    def __init__(
        self,
        instances: List[str],
        hashtags: Optional[List[str]] = None,
        limit: int = 40,
        **http_options: Any,
    ):
        super().__init__(**http_options)
        self.instances = instances
        self.hashtags = hashtags or list(DEFAULT_HASHTAGS)
        self.limit = limit

    async def fetch_items(self) -> List[RawItem]:
        items: List[RawItem] = []
        targets = [(inst, tag) for inst in self.instances for tag in self.hashtags]
        failures = 0

        async with self.client() as client:
            for inst, tag in targets:
                url = f"https://{inst}/api/v1/timelines/tag/{quote(tag, safe='')}"
                try:
                    statuses = await self.get_json(
                        client,
                        url,
                        label=f"mastodon-{inst}-{tag}",
                        params={"limit": self.limit},
                    )
                    if not isinstance(statuses, list):
                        raise SourceSchemaError("timeline is not a list")
                except (httpx.HTTPError, ValueError) as e:
                    failures += 1
                    logger.warning(f"Mastodon {inst} #{tag} failed: {e}")
                    continue

                items.extend(status_to_item(s) for s in statuses if isinstance(s, dict))
                logger.info(f"Mastodon {inst} #{tag} -> {len(statuses)}")

        if targets and failures == len(targets):
            raise SourceUnavailableError("every Mastodon timeline failed")

        return items
