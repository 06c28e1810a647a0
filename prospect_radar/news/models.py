"""Data models for raw feed records and normalized news items."""

from dataclasses import dataclass, replace
from typing import Optional, TypedDict, Union

DEFAULT_CATEGORY = "Actualité"


class RawNewsRecord(TypedDict, total=False):
    """Raw item as returned by a feed fetch or typed in manually."""

    title: str
    pubDate: str
    categories: Union[list[str], str]
    description: str
    link: str
    source: str


@dataclass(frozen=True)
class NewsItem:
    """Canonical news item. The title is its identity key."""

    title: str
    date: str  # display date, e.g. "06 Avr. 2025"
    categories: tuple[str, ...]
    description: str
    link: Optional[str]
    source_timestamp: float  # seconds since epoch, for sorting
    analyzed: bool = False
    source: str = ""

    @property
    def category(self) -> str:
        """Categories joined for display."""
        return ", ".join(self.categories) or DEFAULT_CATEGORY

    @property
    def text(self) -> str:
        """Title, description and categories in one string, for matching."""
        return f"{self.title} {self.description} {self.category}"

    def mark_analyzed(self) -> "NewsItem":
        return replace(self, analyzed=True)
