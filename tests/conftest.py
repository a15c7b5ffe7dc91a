"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import pytest

from core.entities import RawItem, SourceKind
from delivery.base import DeliveryChannel, NotificationMessage
from ingestion.base import SourceAdapter
from processing.extractor import CodeExtractor
from processing.prefilter import RelevanceFilter
from services.seen_store import SeenStore
from workflows.aggregator import AggregationEngine


class StaticAdapter(SourceAdapter):
    """Adapter returning a fixed item list, or raising a fixed error."""

    def __init__(
        self,
        kind: SourceKind,
        items: Optional[List[RawItem]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.kind = kind
        self.items = items or []
        self.error = error
        self.calls = 0

    async def fetch_items(self) -> List[RawItem]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.items)


class RecordingChannel(DeliveryChannel):
    def __init__(self, name: str = "recording", fail: bool = False) -> None:
        self.name = name
        self.fail = fail
        self.messages: List[NotificationMessage] = []

    async def deliver(self, message: NotificationMessage) -> None:
        if self.fail:
            raise RuntimeError("webhook unreachable")
        self.messages.append(message)


def make_item(
    source: SourceKind,
    item_id: Optional[str],
    title: str = "",
    text: str = "",
    link: str = "",
) -> RawItem:
    return RawItem(source=source, id=item_id, title=title, link=link, text=text)


@pytest.fixture
def engine() -> AggregationEngine:
    return AggregationEngine(
        relevance=RelevanceFilter(),
        extractor=CodeExtractor(),
        max_entries=12,
    )


@pytest.fixture
def store(tmp_path: Path) -> SeenStore:
    return SeenStore(str(tmp_path / "seen.json"))
