"""
Aggregation engine: gathers items from every source, keeps the relevant
ones, extracts codes and deduplicates them against the seen state.
"""
import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

from core.entities import CodeCandidate, RawItem, RunResult, RunStats, SeenState, SourceResult
from ingestion.base import SourceAdapter
from ingestion.web import LinkCrawler
from processing.extractor import CodeExtractor
from processing.prefilter import RelevanceFilter

logger = logging.getLogger(__name__)


class AggregationEngine:
    """
    Orchestrates adapters → relevance filter → code extraction → dedupe.

    The processing pass is strictly sequential over items in adapter order,
    so when two posts carry the same new code the earlier one wins.
    """

    def __init__(
        self,
        relevance: RelevanceFilter,
        extractor: CodeExtractor,
        crawler: Optional[LinkCrawler] = None,
        max_entries: int = 12,
    ):
        self.relevance = relevance
        self.extractor = extractor
        self.crawler = crawler
        self.max_entries = max_entries

    async def gather(self, adapters: Sequence[SourceAdapter]) -> Tuple[List[RawItem], List[SourceResult]]:
        """
        Invoke every adapter concurrently; failures stay isolated.
        Items are concatenated in adapter order, not arrival order.
        """
        outcomes = await asyncio.gather(
            *(adapter.collect() for adapter in adapters),
            return_exceptions=True,
        )

        items: List[RawItem] = []
        results: List[SourceResult] = []
        for adapter, outcome in zip(adapters, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error(f"Source {adapter.name} raised past its guard: {outcome}")
                outcome = SourceResult(source=adapter.name, error=f"{type(outcome).__name__}: {outcome}")
            results.append(outcome)
            items.extend(outcome.items)

        return items, results

    async def expand(self, items: List[RawItem]) -> Optional[SourceResult]:
        """Fetch pages linked from the gathered items, one hop deep."""
        if self.crawler is None or not items:
            return None
        return await self.crawler.crawl(items)

    def process(self, items: Sequence[RawItem], seen: SeenState, stats: Optional[RunStats] = None) -> List[CodeCandidate]:
        """
        Single ordered pass over items. Marks every visited post and every
        discovered code as seen, relevant or not.
        """
        stats = stats if stats is not None else RunStats()
        new_entries: List[CodeCandidate] = []

        for item in items:
            post_id = item.resolved_id()
            if seen.has_post(post_id):
                stats.skipped_seen += 1
                continue

            text = item.combined_text()
            if not self.relevance.is_relevant(text):
                stats.irrelevant += 1
                seen.mark_post(post_id)
                continue

            stats.relevant += 1
            # Codes within one post are reported in sorted order
            for code in sorted(self.extractor.extract(text)):
                if seen.has_code(code):
                    continue
                new_entries.append(
                    CodeCandidate(
                        source=item.source,
                        post_id=post_id,
                        title=item.title or "",
                        link=item.link or "",
                        code=code,
                    )
                )
                seen.mark_code(code)
                logger.info(f"New code {code} from {item.source.value} post {post_id}")

            seen.mark_post(post_id)

        stats.new_codes += len(new_entries)
        return new_entries

    async def run(self, adapters: Sequence[SourceAdapter], seen: SeenState) -> RunResult:
        stats = RunStats()

        items, results = await self.gather(adapters)
        stats.sources.extend(results)

        derived = await self.expand(items)
        if derived is not None:
            stats.sources.append(derived)
            stats.crawled = len(derived.items)
            items.extend(derived.items)

        stats.scanned = len(items)
        logger.info(f"Total aggregated items: {len(items)}")

        new_entries = self.process(items, seen, stats)
        notify_entries = new_entries[:self.max_entries]
        if len(new_entries) > len(notify_entries):
            logger.info(
                f"Notification capped at {len(notify_entries)} of {len(new_entries)} new codes; "
                f"the rest are recorded as seen"
            )

        return RunResult(new_entries=new_entries, notify_entries=notify_entries, stats=stats)
