"""
Ingest from reddit through the authenticated API
"""
import logging
from typing import List, Optional

from asyncpraw import Reddit

from core.entities import RawItem, SourceKind
from ingestion.base import SourceAdapter, SourceUnavailableError
from ingestion.reddit import DEFAULT_SUBREDDITS

logger = logging.getLogger(__name__)

USER_AGENT = "invite-sniper/1.0 (by script)"


class SubRedditOAuthAdapter(SourceAdapter):
    kind = SourceKind.REDDIT

    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        username: str,
        password: str,
        subreddits: Optional[List[str]] = None,
        limit: int = 40,
    ):
        self.credentials = {
            "client_id": client_id,
            "client_secret": client_secret,
            "username": username,
            "password": password,
        }
        self.subreddits = subreddits or list(DEFAULT_SUBREDDITS)
        self.limit = limit

    async def fetch_items(self) -> List[RawItem]:
        items: List[RawItem] = []
        failures = 0

        async with Reddit(user_agent=USER_AGENT, **self.credentials) as reddit:
            for sub in self.subreddits:
                try:
                    subreddit = await reddit.subreddit(sub)
                    count = 0
                    async for submission in subreddit.new(limit=self.limit):
                        items.append(
                            RawItem(
                                source=SourceKind.REDDIT,
                                id=submission.name or submission.id,
                                title=submission.title or "",
                                link=f"https://reddit.com{submission.permalink}",
                                text=submission.selftext or "",
                            )
                        )
                        count += 1
                    logger.info(f"Reddit(oauth) r/{sub} -> {count}")
                except Exception as e:
                    failures += 1
                    logger.warning(f"Reddit(oauth) r/{sub} failed: {e}")

        if self.subreddits and failures == len(self.subreddits):
            raise SourceUnavailableError("every subreddit request failed")

        return items
