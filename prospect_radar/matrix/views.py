"""Read-side views over the relevance matrix: filtering and per-news grouping."""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..news.models import DEFAULT_CATEGORY
from ..opportunities.deriver import EngagementsByOffering, has_opportunities
from .models import RelevanceRow


@dataclass(frozen=True)
class OfferView:
    category: str
    detail: str
    relevance_score: int
    justification: Optional[str]
    has_opportunities: bool

    @property
    def high_potential(self) -> bool:
        return self.relevance_score == 3 and not self.has_opportunities


@dataclass
class NewsGroup:
    """All matrix rows of one news item."""

    news: str
    news_date: str
    news_category: str
    news_description: str
    news_link: Optional[str]
    news_timestamp: float = 0.0
    offers: list[OfferView] = field(default_factory=list)

    @property
    def from_feed(self) -> bool:
        return bool(self.news_link)

    @property
    def high_potential(self) -> bool:
        return any(offer.high_potential for offer in self.offers)

    def to_dict(self) -> dict:
        return {
            "news": self.news,
            "news_date": self.news_date,
            "news_category": self.news_category,
            "news_description": self.news_description,
            "news_link": self.news_link,
            "from_feed": self.from_feed,
            "high_potential": self.high_potential,
            "offers": [
                {
                    "category": o.category,
                    "detail": o.detail,
                    "relevance_score": o.relevance_score,
                    "justification": o.justification,
                    "has_opportunities": o.has_opportunities,
                    "high_potential": o.high_potential,
                }
                for o in self.offers
            ],
        }


def filter_matrix(
    rows: Iterable[RelevanceRow],
    service_line: str = "all",
    search: str = "",
    min_relevance: int = 0,
    feed_only: bool = False,
) -> list[RelevanceRow]:
    """
    Filter matrix rows the way the dashboard does.

    Args:
        rows: Matrix rows
        service_line: Keep one service line, or "all"
        search: Case-insensitive text over title, category, detail and description
        min_relevance: Minimum relevance score
        feed_only: Keep only rows whose news has a link (feed items)
    """
    needle = search.strip().lower()

    def matches(row: RelevanceRow) -> bool:
        if service_line != "all" and row.offer_category != service_line:
            return False
        if row.relevance_score < min_relevance:
            return False
        if feed_only and not row.news_link:
            return False
        if needle:
            haystack = " ".join(
                (row.news_title, row.news_category, row.offer_detail, row.news_description)
            ).lower()
            return needle in haystack
        return True

    return [row for row in rows if matches(row)]


def group_by_news(
    rows: Iterable[RelevanceRow],
    engagements_by_offering: EngagementsByOffering,
    high_potential_only: bool = False,
) -> list[NewsGroup]:
    """Group rows by news title, newest first."""
    groups: dict[str, NewsGroup] = {}
    for row in rows:
        group = groups.get(row.news_title)
        if group is None:
            group = groups[row.news_title] = NewsGroup(
                news=row.news_title,
                news_date=row.news_date,
                news_category=row.news_category or DEFAULT_CATEGORY,
                news_description=row.news_description or "",
                news_link=row.news_link,
                news_timestamp=row.news_timestamp,
            )
        group.offers.append(
            OfferView(
                category=row.offer_category,
                detail=row.offer_detail,
                relevance_score=row.relevance_score,
                justification=row.justification,
                has_opportunities=has_opportunities(row.offer_detail, engagements_by_offering),
            )
        )

    result = list(groups.values())
    if high_potential_only:
        result = [g for g in result if g.high_potential]
    return sorted(result, key=lambda g: g.news_timestamp, reverse=True)
