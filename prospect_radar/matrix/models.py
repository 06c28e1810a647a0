"""Relevance matrix rows."""

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..news.models import NewsItem
    from ..oracle.base import OfferMatch

RELEVANCE_SCORES = (1, 2, 3)


@dataclass(frozen=True)
class RelevanceRow:
    """
    One (news, service line, offer detail) cell of the relevance matrix.

    relevance_score: 3 = direct/immediate, 2 = probable/contextual,
    1 = peripheral/indirect.
    """

    news_title: str
    news_date: str
    news_category: str
    news_description: str
    news_link: Optional[str]
    offer_category: str
    offer_detail: str
    relevance_score: int
    justification: Optional[str] = None
    news_timestamp: float = 0.0

    def __post_init__(self) -> None:
        if self.relevance_score not in RELEVANCE_SCORES:
            raise ValueError(f"relevance_score must be 1, 2 or 3, got {self.relevance_score!r}")

    @classmethod
    def from_match(cls, item: "NewsItem", match: "OfferMatch") -> "RelevanceRow":
        return cls(
            news_title=item.title,
            news_date=item.date,
            news_category=item.category,
            news_description=item.description,
            news_link=item.link,
            offer_category=match.category,
            offer_detail=match.detail,
            relevance_score=match.relevance_score,
            justification=match.justification or None,
            news_timestamp=item.source_timestamp,
        )

    def to_dict(self) -> dict:
        return asdict(self)
