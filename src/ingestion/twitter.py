"""
Twitter/X search through the snscrape command line tool
"""
import asyncio
import json
import logging
from typing import List

from core.entities import RawItem, SourceKind
from ingestion.base import SourceAdapter

logger = logging.getLogger(__name__)


def build_query(phrases: List[str]) -> str:
    return " OR ".join(f'"{p}"' for p in phrases) + " lang:en"


class SnscrapeTwitterAdapter(SourceAdapter):
    kind = SourceKind.TWITTER

    def __init__(
        self,
        phrases: List[str],
        limit: int = 40,
        timeout: float = 60.0,
        executable: str = "snscrape",
    ):
        self.phrases = phrases
        self.limit = limit
        self.timeout = timeout
        self.executable = executable

    async def fetch_items(self) -> List[RawItem]:
        proc = await asyncio.create_subprocess_exec(
            self.executable,
            "--jsonl",
            f"--max-results={self.limit}",
            "twitter-search",
            build_query(self.phrases),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise

        if proc.returncode != 0:
            raise RuntimeError(
                f"snscrape exited with {proc.returncode}: {stderr.decode(errors='replace')[:200]}"
            )

        return self.parse_output(stdout.decode("utf-8", errors="replace"))

    def parse_output(self, output: str) -> List[RawItem]:
        items: List[RawItem] = []

        for line in output.splitlines():
            if not line.strip():
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                logger.debug(f"Skipping malformed snscrape line: {line[:80]}")
                continue
            if not isinstance(obj, dict):
                logger.debug(f"Skipping non-object snscrape line: {line[:80]}")
                continue

            tweet_id = str(obj.get("id", ""))
            text = obj.get("rawContent") or obj.get("content") or ""
            items.append(
                RawItem(
                    source=SourceKind.TWITTER,
                    id=tweet_id or None,
                    title=text[:80],
                    link=f"https://twitter.com/i/web/status/{tweet_id}" if tweet_id else "",
                    text=text,
                )
            )
            if len(items) >= self.limit:
                break

        return items
