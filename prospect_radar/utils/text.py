"""Small text helpers shared by the matchers and scorers."""

import re
from functools import lru_cache

_HTML_TAG = re.compile(r"<[^>]*>?")
_WHITESPACE = re.compile(r"\s+")


def strip_html(text: str) -> str:
    """Remove HTML tags and collapse whitespace."""
    clean = _HTML_TAG.sub("", text or "")
    return _WHITESPACE.sub(" ", clean).strip()


@lru_cache(maxsize=1024)
def _prefix_pattern(term: str) -> re.Pattern:
    return re.compile(r"(?<!\w)" + re.escape(term.lower()))


def mentions(text: str, term: str) -> bool:
    """
    Case-insensitive containment anchored at a word start.

    "digital" matches "digitalisation", but "cto" does not match
    "director" and "erp" does not match "enterprise".
    """
    if not text or not term:
        return False
    return _prefix_pattern(term).search(text.lower()) is not None


def mentions_any(text: str, terms) -> bool:
    """True if any of ``terms`` is mentioned in ``text``."""
    return any(mentions(text, term) for term in terms)


def contains_word(haystack: str, needle: str) -> bool:
    """Case-insensitive containment with word boundaries on both sides."""
    needle = (needle or "").strip()
    if not needle or not haystack:
        return False
    pattern = r"(?<!\w)" + re.escape(needle.lower()) + r"(?!\w)"
    return re.search(pattern, haystack.lower()) is not None


def significant_words(text: str, min_length: int = 4, separators: str = r"[\s,&]+") -> list[str]:
    """Lower-cased words of at least ``min_length`` characters, in order."""
    words = re.split(separators, (text or "").lower())
    return [w for w in words if len(w) >= min_length]
