"""Oracle contract: structured judgments and tagged call results.

An oracle reads one news item and either judges which offerings it is
relevant to or extracts the people it mentions. Call sites never see
raw model output; they get one of the result variants below and must
handle each of them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar, Union

if TYPE_CHECKING:
    from ..news.models import NewsItem
    from ..offerings.taxonomy import OfferingTaxonomy

T = TypeVar("T")

UNSPECIFIED_ROLE = "Unspecified"


@dataclass(frozen=True)
class OfferMatch:
    """One service line judged relevant to a news item."""

    category: str
    offerings: tuple[str, ...]
    relevance_score: int
    justification: str = ""
    opportunities: tuple[str, ...] = ()

    @property
    def detail(self) -> str:
        """Offerings joined by ", "; the service line for category-only matches."""
        return ", ".join(self.offerings) or self.category


@dataclass(frozen=True)
class RelevanceJudgment:
    matches: tuple[OfferMatch, ...] = ()
    summary: str = ""


@dataclass(frozen=True)
class ContactCandidate:
    """A person found in a news item, before it becomes a Contact."""

    full_name: str
    role: str = UNSPECIFIED_ROLE
    department: str = ""
    email: str = ""
    phone: str = ""
    company: str = ""
    confidence: float = 0.5


# Tagged result variants


@dataclass(frozen=True)
class OracleOk(Generic[T]):
    value: T


@dataclass(frozen=True)
class OracleParseError:
    """The oracle answered but no usable JSON object was found."""

    raw_text: str
    reason: str


@dataclass(frozen=True)
class OracleTimeout:
    seconds: float


@dataclass(frozen=True)
class OracleUnavailable:
    """The call itself failed (network, auth, provider error)."""

    error: str


OracleResult = Union[OracleOk, OracleParseError, OracleTimeout, OracleUnavailable]


def describe_failure(result: OracleResult) -> str:
    """Human-readable reason for a non-Ok result."""
    if isinstance(result, OracleParseError):
        return f"unparseable response ({result.reason})"
    if isinstance(result, OracleTimeout):
        return f"timed out after {result.seconds:g}s"
    if isinstance(result, OracleUnavailable):
        return f"unavailable: {result.error}"
    return "ok"


class TextOracle(ABC):
    """
    Pluggable text-understanding capability.

    ``rate_limited`` tells callers whether calls must be paced (remote
    LLM) or can run back to back (local heuristics).
    """

    name: str = "oracle"
    rate_limited: bool = True

    @abstractmethod
    async def judge_relevance(
        self,
        item: "NewsItem",
        taxonomy: "OfferingTaxonomy",
        max_categories: int = 3,
    ) -> OracleResult:
        """Return OracleOk(RelevanceJudgment) or a failure variant."""

    @abstractmethod
    async def extract_contacts(self, item: "NewsItem") -> OracleResult:
        """Return OracleOk(list[ContactCandidate]) or a failure variant."""
