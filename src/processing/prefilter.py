from typing import Iterable, List, Optional

DEFAULT_PHRASES = [
    "sora invite",
    "sora 2 code",
    "sora invite code",
    "sora code",
    "sora2 invite",
]


def keyword_match(text: str, keywords: Iterable[str]) -> bool:
    text = text.lower()
    return any(k.lower() in text for k in keywords)


class RelevanceFilter:
    """
    Decides whether a post is about the tracked event.

    A text is relevant when it contains any trigger phrase, compared
    case-insensitively as a plain substring. Word boundaries are ignored,
    so "xsora invitez" still matches "sora invite".
    """

    def __init__(self, phrases: Optional[Iterable[str]] = None):
        source = DEFAULT_PHRASES if phrases is None else phrases
        self.phrases: List[str] = [p.lower() for p in source if p and p.strip()]

    def is_relevant(self, text: Optional[str]) -> bool:
        if not text or not self.phrases:
            return False
        return keyword_match(text, self.phrases)


def is_relevant(text: Optional[str], phrases: Optional[Iterable[str]] = None) -> bool:
    return RelevanceFilter(phrases).is_relevant(text)
