import re
from typing import Iterable, Optional, Set

DEFAULT_STOP_WORDS = ["FREE", "CODE", "SORA", "OPENAI", "INVITE"]

# Purely numeric tokens shorter than this are never codes. With the default
# minimum length of 5 the pattern already rules them out.
MIN_NUMERIC_LENGTH = 5


class CodeExtractor:
    """
    Pulls redemption-code shaped tokens out of free text.

    Tokens are maximal runs of letters and digits whose length lies in
    [min_length, max_length]; longer runs produce no match at all.
    """

    def __init__(
        self,
        min_length: int = 5,
        max_length: int = 8,
        stop_words: Optional[Iterable[str]] = None,
    ):
        if min_length < 1 or max_length < min_length:
            raise ValueError(f"invalid code length bounds: [{min_length}, {max_length}]")

        self.min_length = min_length
        self.max_length = max_length
        words = DEFAULT_STOP_WORDS if stop_words is None else stop_words
        self.stop_words: Set[str] = {w.upper() for w in words}
        self.pattern = re.compile(
            rf"\b[A-Z0-9]{{{min_length},{max_length}}}\b",
            re.IGNORECASE | re.ASCII,
        )

    def extract(self, text: Optional[str]) -> Set[str]:
        codes: Set[str] = set()
        if not text:
            return codes

        for match in self.pattern.finditer(text):
            token = match.group(0).upper()
            if token in self.stop_words:
                continue
            if token.isdigit() and len(token) < MIN_NUMERIC_LENGTH:
                continue
            codes.add(token)

        return codes


def extract_codes(text: Optional[str]) -> Set[str]:
    return CodeExtractor().extract(text)
