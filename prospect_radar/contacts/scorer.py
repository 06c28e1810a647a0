"""Contact relevance scoring.

Three scoring surfaces, deliberately kept separate:

- score_contact / rank_contacts: broad ranking of every contact against
  the whole active selection (score > 0.5, top 20)
- deep_match_contacts: strict match against a single opened
  opportunity, with a small executive backstop
- score_contact_for_opportunity / recommend_for_opportunity: per
  opportunity recommendations (score > 0.4, top 10)
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

from ..opportunities.models import SelectedOpportunity
from ..utils.text import mentions, mentions_any, significant_words
from .models import Contact

if TYPE_CHECKING:
    from ..company.profile import TargetCompany

logger = logging.getLogger(__name__)

DECISION_MAKER_TERMS = (
    "CEO",
    "PDG",
    "President",
    "Président",
    "Directeur Général",
    "Chief",
    "CTO",
    "CDO",
    "CIO",
    "CFO",
    "COO",
    "Directeur",
    "Director",
    "SVP",
    "EVP",
    "Vice-Président",
    "Vice President",
    "VP",
)

EXPERTISE_KEYWORDS = (
    "digital",
    "transformation",
    "innovation",
    "data",
    "cybersécurité",
    "stratégie",
    "analytique",
    "intelligence artificielle",
    "cloud",
    "sécurité",
    "performance",
    "erp",
    "crm",
    "marketing",
    "commercial",
    "supply chain",
    "logistique",
    "ressources humaines",
)

# Ordered: the first matching entry wins, so specific titles come first.
HIERARCHY_BONUS = (
    ("Directeur Général", 1.5),
    ("Chief Executive", 1.6),
    ("CEO", 1.6),
    ("PDG", 1.6),
    ("Chief Technology", 1.5),
    ("CTO", 1.5),
    ("Vice-Président", 1.4),
    ("Vice President", 1.4),
    ("Chief Digital", 1.4),
    ("CDO", 1.4),
    ("Chief Information", 1.4),
    ("CIO", 1.4),
    ("Chief", 1.4),
    ("Directeur", 1.3),
    ("Director", 1.3),
    ("Responsable", 1.1),
    ("Head", 1.1),
)

RANK_THRESHOLD = 0.5
RANK_LIMIT = 20


def _clamp(value: float) -> float:
    return round(max(0.0, min(1.0, value)), 4)


def _contains(haystack: str, needle: str) -> bool:
    needle = needle.strip().lower()
    return bool(needle) and needle in haystack


def hierarchy_bonus(role: str) -> float:
    """Bonus of the first hierarchy entry found in the role (0 if none)."""
    for term, multiplier in HIERARCHY_BONUS:
        if mentions(role, term):
            return multiplier * 0.1
    return 0.0


def score_contact(
    contact: Contact,
    opportunities: Sequence[SelectedOpportunity],
    company: Optional["TargetCompany"] = None,
) -> float:
    """
    Score a contact against the full active set of opportunities.

    Args:
        contact: Contact to score
        opportunities: All selected opportunities (bonuses accumulate)
        company: Target company whose email domains earn a bonus

    Returns:
        Relevance in [0, 1]; 0 for contacts without a role
    """
    if not contact.role.strip():
        return 0.0

    role = contact.role
    info = f"{contact.role} {contact.department}"
    role_lower = role.lower()
    department_lower = contact.department.lower()

    score = 0.3 if mentions_any(role, DECISION_MAKER_TERMS) else 0.1
    score += 0.2 * sum(1 for keyword in EXPERTISE_KEYWORDS if mentions(info, keyword))
    score += hierarchy_bonus(role)

    for opportunity in opportunities:
        if _contains(role_lower, opportunity.detail) or _contains(
            department_lower, opportunity.detail
        ):
            score += 0.3
        if _contains(role_lower, opportunity.news) or _contains(department_lower, opportunity.news):
            score += 0.2

    if company is not None and company.is_company_email(contact.email):
        score += 0.2

    if len(contact.sources) > 1:
        score += 0.1 * min(len(contact.sources) - 1, 3)

    if contact.complete:
        score += 0.1

    return _clamp(score)


def rank_contacts(
    contacts: Iterable[Contact],
    opportunities: Sequence[SelectedOpportunity],
    company: Optional["TargetCompany"] = None,
    limit: int = RANK_LIMIT,
) -> list[Contact]:
    """
    Short list of the most relevant reachable contacts.

    Keeps score > 0.5 with an email or phone and a specified role,
    sorted by descending score (stable), truncated to ``limit``.
    Returned contacts are copies carrying ``relevance_score``.
    """
    scored = []
    for contact in contacts:
        score = score_contact(contact, opportunities, company)
        if score > RANK_THRESHOLD and contact.reachable and contact.has_role:
            scored.append(contact.with_score(score))

    scored.sort(key=lambda c: c.relevance_score, reverse=True)
    logger.info("[SCORER] %d contacts qualify, keeping %d", len(scored), min(len(scored), limit))
    return scored[:limit]


# Deep match

DEEP_DECISION_TERMS = (
    "directeur",
    "director",
    "chief",
    "head",
    "président",
    "ceo",
    "cfo",
    "cio",
    "cto",
)

DEEP_EXPERTISE_BY_CATEGORY = {
    "Finance & Risk": ("comptable", "contrôleur", "auditeur", "fiscal", "conformité", "trésorier"),
    "Technology": ("architecte", "développeur", "cyber", "data", "réseau", "infrastructure"),
    "Operations": ("production", "approvisionnement", "maintenance", "qualité", "lean", "logistique"),
    "People & Strategy": ("talent", "organisation", "transformation", "conduite", "change", "projet"),
    "Customer & Growth": ("marketing", "commercial", "vente", "digital", "produit", "crm"),
    "BE Capital": ("fusion", "m&a", "transaction", "acquisition", "investissement", "private"),
}

TOP_EXECUTIVE_TERMS = ("président", "president", "ceo", "directeur général")

BACKSTOP_LEVEL = 5
_NEWS_SEPARATORS = r"[\s,&.;:!?()\"'’]+"


@dataclass(frozen=True)
class DeepMatch:
    contact: Contact
    match_level: int
    backstop: bool = False

    def to_dict(self) -> dict:
        data = self.contact.to_dict()
        data["match_level"] = self.match_level
        data["backstop"] = self.backstop
        return data


def _deep_level(
    contact: Contact,
    offer_keywords: list[str],
    news_keywords: list[str],
    expertise_terms: Sequence[str],
) -> tuple[int, bool]:
    """(match level, qualifies) for one contact."""
    role = contact.role.lower()
    department = contact.department.lower()
    level = 0

    direct_offer = False
    for keyword in offer_keywords:
        if keyword in role:
            level += 3
            direct_offer = True
        if keyword in department:
            level += 1
            direct_offer = True

    direct_news = False
    for keyword in news_keywords:
        if keyword in role:
            level += 2
            direct_news = True
        if keyword in department:
            level += 1
            direct_news = True

    direct = direct_offer or direct_news
    decision_maker = any(term in role for term in DEEP_DECISION_TERMS)
    if decision_maker:
        level += 1
        if direct:
            level += 4

    expertise = [t for t in expertise_terms if t in role or t in department]
    level += 3 * len(expertise)

    qualifies = (
        (decision_maker and direct)
        or (bool(expertise) and direct)
        or (direct_offer and direct_news and level >= 7)
    )
    return level, qualifies


def deep_match_contacts(
    contacts: Sequence[Contact],
    opportunity: SelectedOpportunity,
    limit: int = 20,
    min_candidates: int = 5,
    max_backstop: int = 3,
) -> list[DeepMatch]:
    """
    Strict match of contacts against one opportunity.

    When fewer than ``min_candidates`` qualify, up to ``max_backstop``
    top executives whose role shares a 4-letter prefix with an offer
    keyword are added at a fixed level.
    """
    offer_keywords = significant_words(opportunity.detail, min_length=4)
    news_keywords = significant_words(
        f"{opportunity.news} {opportunity.news_description}",
        min_length=6,
        separators=_NEWS_SEPARATORS,
    )
    expertise_terms = DEEP_EXPERTISE_BY_CATEGORY.get(opportunity.category, ())

    matches: list[DeepMatch] = []
    for contact in contacts:
        if not contact.role.strip():
            continue
        level, qualifies = _deep_level(contact, offer_keywords, news_keywords, expertise_terms)
        if qualifies:
            matches.append(DeepMatch(contact=contact, match_level=level))

    if len(matches) < min_candidates:
        included = {m.contact.key for m in matches}
        prefixes = [k[:4] for k in offer_keywords]
        backstop = []
        for contact in contacts:
            role = contact.role.lower()
            if (
                contact.key not in included
                and any(term in role for term in TOP_EXECUTIVE_TERMS)
                and any(prefix in role for prefix in prefixes)
            ):
                backstop.append(DeepMatch(contact=contact, match_level=BACKSTOP_LEVEL, backstop=True))
                if len(backstop) >= max_backstop:
                    break
        matches.extend(backstop)

    matches.sort(key=lambda m: m.match_level, reverse=True)
    logger.info(
        "[SCORER] Deep match for %s: %d contacts", opportunity.label, min(len(matches), limit)
    )
    return matches[:limit]


# Per-opportunity recommendations

CATEGORY_EXPERTISE = {
    "Finance & Risk": ("finance", "risk", "comptable", "fiscal", "audit", "conformité"),
    "Technology": ("it", "digital", "data", "cyber", "cloud", "architecture"),
    "Operations": ("production", "supply", "logistique", "maintenance", "qualité"),
    "People & Strategy": ("rh", "stratégie", "change", "talent", "transformation"),
    "Customer & Growth": ("marketing", "commercial", "vente", "client", "crm"),
    "BE Capital": ("m&a", "acquisition", "fusion", "investissement"),
}

_KEYWORD_SEPARATORS = r"[\s,;.\-]+"
RECOMMEND_THRESHOLD = 0.4
RECOMMEND_LIMIT = 10


def _count_mentions(info: str, terms: Iterable[str]) -> int:
    return sum(1 for term in terms if mentions(info, term))


def score_contact_for_opportunity(
    contact: Contact,
    opportunity: SelectedOpportunity,
    company: Optional["TargetCompany"] = None,
) -> float:
    """Relevance of one contact to one opportunity, in [0, 1]."""
    if not contact.role.strip():
        return 0.0

    info = f"{contact.role} {contact.department}"
    score = 0.3 if mentions_any(contact.role, DECISION_MAKER_TERMS) else 0.1

    offer_keywords = significant_words(opportunity.detail, separators=_KEYWORD_SEPARATORS)
    score += min(0.5, 0.1 * _count_mentions(info, offer_keywords))

    news_keywords = significant_words(opportunity.news, separators=_KEYWORD_SEPARATORS)
    score += min(0.3, 0.05 * _count_mentions(info, news_keywords))

    expertise = CATEGORY_EXPERTISE.get(opportunity.category, ())
    score += min(0.4, 0.1 * _count_mentions(info, expertise))

    news = opportunity.news.lower().strip()
    if news and any(
        s.title and (news in s.title.lower() or s.title.lower() in news) for s in contact.sources
    ):
        score += 0.2

    if opportunity.relevance_score == 3:
        score += 0.1

    if company is not None and company.is_company_email(contact.email):
        score += 0.1

    return _clamp(score)


def recommend_for_opportunity(
    contacts: Iterable[Contact],
    opportunity: SelectedOpportunity,
    company: Optional["TargetCompany"] = None,
    limit: int = RECOMMEND_LIMIT,
) -> list[Contact]:
    """Top reachable contacts for one opportunity (score > 0.4)."""
    scored = []
    for contact in contacts:
        score = score_contact_for_opportunity(contact, opportunity, company)
        if score > RECOMMEND_THRESHOLD and contact.reachable and contact.has_role:
            scored.append(contact.with_score(score))
    scored.sort(key=lambda c: c.relevance_score, reverse=True)
    return scored[:limit]


def recommend_by_opportunity(
    contacts: Sequence[Contact],
    opportunities: Iterable[SelectedOpportunity],
    company: Optional["TargetCompany"] = None,
) -> dict[str, list[Contact]]:
    """Recommendations keyed by "{category}-{detail}"."""
    return {
        opportunity.label: recommend_for_opportunity(contacts, opportunity, company)
        for opportunity in opportunities
    }
