"""Contact data model."""

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Optional

from ..oracle.base import UNSPECIFIED_ROLE

if TYPE_CHECKING:
    from ..news.models import NewsItem
    from ..oracle.base import ContactCandidate

# Role values that mean "we don't know"; compared case-insensitively.
UNSPECIFIED_ROLES = {"unspecified", "poste non spécifié", ""}


@dataclass(frozen=True)
class ContactSource:
    """News item a contact was found in."""

    title: str
    date: str = ""
    link: Optional[str] = None

    @classmethod
    def from_news(cls, item: "NewsItem") -> "ContactSource":
        return cls(title=item.title, date=item.date, link=item.link)


@dataclass(frozen=True)
class Contact:
    """
    A person at the target company.

    The identity key is the lower-cased full name. ``relevance_score``
    is only set on copies returned by the scorers.
    """

    full_name: str
    role: str = UNSPECIFIED_ROLE
    department: str = ""
    email: str = ""
    phone: str = ""
    company: str = ""
    confidence_score: float = 0.5
    sources: tuple[ContactSource, ...] = field(default_factory=tuple)
    relevance_score: Optional[float] = None

    @property
    def key(self) -> str:
        return " ".join(self.full_name.lower().split())

    @property
    def has_role(self) -> bool:
        return self.role.strip().lower() not in UNSPECIFIED_ROLES

    @property
    def reachable(self) -> bool:
        return bool(self.email or self.phone)

    @property
    def complete(self) -> bool:
        return bool(self.email and self.phone and self.department)

    def with_score(self, score: float) -> "Contact":
        return replace(self, relevance_score=score)

    @classmethod
    def from_candidate(
        cls,
        candidate: "ContactCandidate",
        source: Optional[ContactSource] = None,
    ) -> "Contact":
        return cls(
            full_name=candidate.full_name,
            role=candidate.role or UNSPECIFIED_ROLE,
            department=candidate.department,
            email=candidate.email,
            phone=candidate.phone,
            company=candidate.company,
            confidence_score=candidate.confidence,
            sources=(source,) if source else (),
        )

    def to_dict(self) -> dict:
        return {
            "full_name": self.full_name,
            "role": self.role,
            "department": self.department,
            "email": self.email,
            "phone": self.phone,
            "company": self.company,
            "confidence_score": self.confidence_score,
            "sources": [
                {"title": s.title, "date": s.date, "link": s.link} for s in self.sources
            ],
            "relevance_score": self.relevance_score,
        }
