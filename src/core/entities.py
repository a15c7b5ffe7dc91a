from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set


class SourceKind(str, Enum):
    """
    Origin kinds an item can come from.
    """
    REDDIT = "reddit"
    TWITTER = "twitter"
    BING_NEWS = "bing-news"
    RSS = "rss"
    MASTODON = "mastodon"
    WEB = "web"


@dataclass(frozen=True)
class RawItem:
    """
    Canonical representation of a fetched post, article or page.
    Lives for a single run only.
    """
    source: SourceKind
    id: Optional[str]
    title: str = ""
    link: str = ""
    text: str = ""

    def resolved_id(self) -> str:
        """
        Origin id when present, otherwise a synthetic one derived
        from the source and the link (or title).
        """
        if self.id:
            return str(self.id)

        anchor = self.link or self.title
        if not anchor:
            anchor = hashlib.sha1(self.text.encode("utf-8")).hexdigest()
        return f"{self.source.value}|{anchor}"

    def combined_text(self) -> str:
        return f"{self.title or ''}\n\n{self.text or ''}"


@dataclass(frozen=True)
class CodeCandidate:
    """
    A newly discovered code together with the post it came from.
    """
    source: SourceKind
    post_id: str
    title: str
    link: str
    code: str


@dataclass
class SeenState:
    """
    Post ids and codes that were already processed.
    Both sets only ever grow.
    """
    posts: Set[str] = field(default_factory=set)
    codes: Set[str] = field(default_factory=set)

    def has_post(self, post_id: str) -> bool:
        return post_id in self.posts

    def mark_post(self, post_id: str) -> None:
        self.posts.add(post_id)

    def has_code(self, code: str) -> bool:
        return code in self.codes

    def mark_code(self, code: str) -> None:
        self.codes.add(code)


@dataclass
class SourceResult:
    """
    Outcome of invoking one source adapter: either items or a diagnostic.
    """
    source: str
    items: List[RawItem] = field(default_factory=list)
    error: Optional[str] = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RunStats:
    scanned: int = 0
    skipped_seen: int = 0
    irrelevant: int = 0
    relevant: int = 0
    new_codes: int = 0
    crawled: int = 0
    sources: List[SourceResult] = field(default_factory=list)

    @property
    def failed_sources(self) -> List[str]:
        return [result.source for result in self.sources if not result.ok]


@dataclass
class RunResult:
    """
    Everything one aggregation run produced.
    `new_entries` holds every discovered code, `notify_entries` the capped
    subset that goes into the notification.
    """
    new_entries: List[CodeCandidate]
    notify_entries: List[CodeCandidate]
    stats: RunStats
