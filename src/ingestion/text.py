import re

from bs4 import BeautifulSoup

_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def strip_html(markup: str) -> str:
    """Return the visible text of an HTML fragment with whitespace collapsed."""
    if not markup:
        return ""
    return collapse_whitespace(BeautifulSoup(markup, "html.parser").get_text(" "))
