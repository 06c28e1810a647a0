"""Deterministic keyword oracle, used when no LLM is available.

Relevance:
- 3: an offering name appears verbatim and a strong-signal verb
  ("lance", "investit", "acquisition"...) co-occurs
- 2: an offering matches through its significant words only
- 1: only the service line's contextual keywords match; the service
  line name stands in for the offering

Contacts are pulled out with three "name, title" regex patterns.
"""

import logging
import re
from typing import TYPE_CHECKING, Optional

from ..utils.text import mentions, mentions_any, significant_words, strip_html
from .base import ContactCandidate, OfferMatch, OracleOk, OracleResult, RelevanceJudgment, TextOracle

if TYPE_CHECKING:
    from ..news.models import NewsItem
    from ..offerings.taxonomy import OfferingTaxonomy

logger = logging.getLogger(__name__)

STRONG_SIGNALS = (
    "lance",
    "lancement",
    "investit",
    "investissement",
    "acquisition",
    "acquiert",
    "annonce",
    "launch",
    "invests",
    "acquires",
    "partenariat",
    "partnership",
    "déploie",
    "deploys",
    "signe",
    "contrat",
)

_TITLES = (
    r"(?i:directeur|directrice|présidente|président|CEO|PDG|DG|DSI|CFO|CTO|CDO|CIO|CHRO|COO|CMO"
    r"|vice-président|VP|responsable|manager|chef|head|leader|dirigeant|fondatrice|fondateur"
    r"|chief|officer|executive)"
)
_NAME = r"[A-ZÀ-Ý][a-zà-ÿ]+(?:[ -][A-ZÀ-Ý][a-zà-ÿ]+)"
_ROLE = r"[^,.;]*?\b" + _TITLES + r"\b[^,.;]*"

# (pattern, name group, role group, confidence)
CONTACT_PATTERNS = (
    (re.compile(rf"({_NAME}+)\s*,\s*({_ROLE})"), 1, 2, 0.8),
    (re.compile(rf"(?:M\.|Mme|Mlle|Mr\.|Mrs\.|Ms\.)\s+({_NAME}*)\s*,\s*({_ROLE})"), 1, 2, 0.7),
    (re.compile(rf"\b({_TITLES}\b[^,.;]*),\s+({_NAME}+)"), 2, 1, 0.7),
)

# Capitalised words that open a sentence rather than a name.
_LEADING_NOISE = {"selon", "pour", "par", "avec", "according", "says", "said", "by", "for"}


def _clean_name(raw: str) -> str:
    words = raw.split()
    while len(words) > 2 and words[0].lower() in _LEADING_NOISE:
        words = words[1:]
    return " ".join(words)


def find_contacts_in_text(text: str, company: str = "") -> list[ContactCandidate]:
    """Regex contact extraction; each name is reported once, first pattern wins."""
    clean = strip_html(text)
    seen: set[str] = set()
    found: list[ContactCandidate] = []

    for pattern, name_group, role_group, confidence in CONTACT_PATTERNS:
        for match in pattern.finditer(clean):
            name = _clean_name(match.group(name_group).strip())
            role = " ".join(match.group(role_group).split())
            if not name or name.lower() in seen:
                continue
            seen.add(name.lower())
            found.append(
                ContactCandidate(
                    full_name=name,
                    role=role,
                    company=company,
                    confidence=confidence,
                )
            )
    return found


def _offering_overlaps(offering: str, text: str) -> bool:
    return any(mentions(text, word) for word in significant_words(offering))


class KeywordOracle(TextOracle):
    """Rule-based oracle; synchronous underneath and never rate limited."""

    name = "keywords"
    rate_limited = False

    def __init__(self, company_name: str = ""):
        self.company_name = company_name

    def judge(
        self,
        item: "NewsItem",
        taxonomy: "OfferingTaxonomy",
        max_categories: int = 3,
    ) -> RelevanceJudgment:
        text = item.text.lower()
        strong = mentions_any(text, STRONG_SIGNALS)

        # (best score, keyword hits, taxonomy order, matches)
        ranked: list[tuple[int, int, int, list[OfferMatch]]] = []
        for order, (line, offerings) in enumerate(taxonomy):
            direct = [o for o in offerings if strong and o.lower() in text]
            probable = [
                o
                for o in offerings
                if o not in direct and (o.lower() in text or _offering_overlaps(o, text))
            ]
            hits = [k for k in taxonomy.keywords_for(line) if mentions(text, k)]

            matches: list[OfferMatch] = []
            if direct:
                matches.append(
                    OfferMatch(
                        category=line,
                        offerings=tuple(direct),
                        relevance_score=3,
                        justification="Offering named alongside a strong signal",
                    )
                )
            if probable:
                matches.append(
                    OfferMatch(
                        category=line,
                        offerings=tuple(probable),
                        relevance_score=2,
                        justification="Offering terms found in the news",
                    )
                )
            if not matches and hits:
                matches.append(
                    OfferMatch(
                        category=line,
                        offerings=(),
                        relevance_score=1,
                        justification="Context keywords: " + ", ".join(hits[:5]),
                    )
                )
            if matches:
                best = max(m.relevance_score for m in matches)
                ranked.append((best, len(hits), order, matches))

        ranked.sort(key=lambda entry: (-entry[0], -entry[1], entry[2]))
        kept = [m for _, _, _, matches in ranked[:max_categories] for m in matches]
        return RelevanceJudgment(matches=tuple(kept))

    def find_contacts(self, item: "NewsItem") -> list[ContactCandidate]:
        return find_contacts_in_text(f"{item.title}. {item.description}", self.company_name)

    async def judge_relevance(
        self,
        item: "NewsItem",
        taxonomy: "OfferingTaxonomy",
        max_categories: int = 3,
    ) -> OracleResult:
        return OracleOk(self.judge(item, taxonomy, max_categories))

    async def extract_contacts(self, item: "NewsItem") -> OracleResult:
        return OracleOk(self.find_contacts(item))


def default_oracle(company=None, use_llm: Optional[bool] = None, costs=None) -> TextOracle:
    """LLM oracle when configured (and wanted), keyword fallback otherwise."""
    from ..config.settings import settings

    wanted = settings.oracle_available if use_llm is None else use_llm
    company_name = company.name if company is not None else ""
    if wanted and company is not None and settings.oracle_available:
        from .llm_oracle import LiteLLMOracle

        return LiteLLMOracle(company, costs=costs)

    logger.info("[ORACLE] Using keyword fallback oracle")
    return KeywordOracle(company_name)
