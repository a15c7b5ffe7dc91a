"""
Ingest news articles from the Bing News Search API
"""
from typing import Any, List

from core.entities import RawItem, SourceKind
from ingestion.base import HttpSourceAdapter, SourceSchemaError


class BingNewsAdapter(HttpSourceAdapter):
    kind = SourceKind.BING_NEWS
    BASE_URL = "https://api.bing.microsoft.com/v7.0/news/search"

    def __init__(self, api_key: str, phrases: List[str], limit: int = 25, **http_options: Any):
        super().__init__(**http_options)
        self.api_key = api_key
        self.phrases = phrases
        self.limit = limit

    async def fetch_items(self) -> List[RawItem]:
        params = {
            "q": " OR ".join(self.phrases),
            "count": self.limit,
            "mkt": "en-US",
        }

        async with self.client() as client:
            data = await self.get_json(
                client,
                self.BASE_URL,
                label="bing-news",
                params=params,
                headers={"Ocp-Apim-Subscription-Key": self.api_key},
            )

        if not isinstance(data, dict) or not isinstance(data.get("value", []), list):
            raise SourceSchemaError("unexpected Bing News payload")

        return [
            RawItem(
                source=SourceKind.BING_NEWS,
                id=article.get("url"),
                title=article.get("name") or "",
                link=article.get("url") or "",
                text=f"{article.get('description') or ''} {article.get('body') or ''}".strip(),
            )
            for article in data.get("value", [])
        ]
