"""Engagements, statistics and selected opportunities."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..matrix.models import RelevanceRow


class EngagementStatus(str, Enum):
    ACTIVE = "Active"
    WON = "Booked"
    LOST = "Lost"

    @classmethod
    def from_label(cls, label: Optional[str]) -> "EngagementStatus":
        """Map CRM labels ("Booked - Signed", "Lost to competitor"...) onto a status."""
        text = (label or "").strip().lower()
        if text.startswith("booked") or text == "won":
            return cls.WON
        if text.startswith("lost"):
            return cls.LOST
        return cls.ACTIVE


@dataclass
class Engagement:
    """An existing client project tied to an offering."""

    offering: str
    status: EngagementStatus = EngagementStatus.ACTIVE
    estimated_value: float = 0.0
    name: str = ""
    close_date: str = ""  # DD/MM/YYYY

    @property
    def close_year(self) -> Optional[str]:
        parts = self.close_date.split("/")
        if len(parts) == 3 and len(parts[2]) == 4 and parts[2].isdigit():
            return parts[2]
        return None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class OfferingStats:
    total: int = 0
    booked: int = 0
    lost: int = 0
    total_value: float = 0.0
    booked_value: float = 0.0

    @property
    def win_rate(self) -> float:
        """Booked share of all engagements, in percent, one decimal."""
        if not self.total:
            return 0.0
        return round(self.booked / self.total * 100, 1)

    def add(self, other: "OfferingStats") -> None:
        self.total += other.total
        self.booked += other.booked
        self.lost += other.lost
        self.total_value += other.total_value
        self.booked_value += other.booked_value

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "booked": self.booked,
            "lost": self.lost,
            "win_rate": self.win_rate,
            "total_value": self.total_value,
            "booked_value": self.booked_value,
        }


@dataclass
class ServiceLineStats(OfferingStats):
    offerings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["offerings"] = list(self.offerings)
        return data


@dataclass(frozen=True)
class SelectedOpportunity:
    """An opportunity chosen for prospecting. Identity is (category, detail)."""

    category: str
    detail: str
    news: str = ""
    news_date: str = ""
    news_description: str = ""
    news_link: Optional[str] = None
    relevance_score: int = 0

    @property
    def key(self) -> tuple[str, str]:
        return (self.category, self.detail)

    @property
    def label(self) -> str:
        return f"{self.category}-{self.detail}"

    @classmethod
    def from_row(cls, row: "RelevanceRow") -> "SelectedOpportunity":
        return cls(
            category=row.offer_category,
            detail=row.offer_detail,
            news=row.news_title,
            news_date=row.news_date,
            news_description=row.news_description,
            news_link=row.news_link,
            relevance_score=row.relevance_score,
        )

    def to_dict(self) -> dict:
        return asdict(self)
