"""Function titles mentioned in the news, and the contacts that hold them."""

import re
from typing import Iterable, Sequence

from ..matrix.models import RelevanceRow
from .models import Contact

FUNCTION_KEYWORDS = (
    "Vice-président",
    "Vice President",
    "Directeur",
    "Directrice",
    "Director",
    "Responsable",
    "Head of",
    "Chef de",
    "Manager",
    "Président",
    "President",
    "CEO",
    "COO",
    "CFO",
    "CTO",
    "CIO",
    "CISO",
    "CDO",
    "CMO",
    "CSO",
    "VP",
)

_KEYWORDS = "(?i:" + "|".join(re.escape(k) for k in FUNCTION_KEYWORDS) + ")"
_CAPITALISED = r"[A-ZÀ-Ý][a-zà-ÿ]+(?:\s+[A-ZÀ-Ý][a-zà-ÿ]+)*"

FUNCTION_PATTERNS = (
    # "Directeur de la Stratégie", "Head of Procurement"
    re.compile(
        rf"\b{_KEYWORDS}\s+(?:(?i:de la|des|du|de|of|for)\s+|(?i:d)['’])?{_CAPITALISED}"
    ),
    # "Supply Chain Director"
    re.compile(rf"{_CAPITALISED}\s+{_KEYWORDS}\b"),
)

# Equivalent titles across languages: (in role, in contact)
_EQUIVALENTS = (
    ("directeur", "director"),
    ("director", "directeur"),
    ("responsable", "head"),
    ("head of", "responsable"),
)


def identify_roles_in_news(matrix: Iterable[RelevanceRow]) -> list[str]:
    """Distinct function titles found in the matrix's news texts, first-seen order."""
    roles: dict[str, None] = {}
    seen_news: set[str] = set()
    for row in matrix:
        if row.news_title in seen_news:
            continue
        seen_news.add(row.news_title)
        text = f"{row.news_title} {row.news_description}"
        for pattern in FUNCTION_PATTERNS:
            for match in pattern.finditer(text):
                roles.setdefault(" ".join(match.group(0).split()), None)
    return list(roles)


def _holds_role(contact: Contact, role: str) -> bool:
    role_text = role.lower()
    contact_role = contact.role.lower().strip()
    info = f"{contact.role} {contact.department}".lower()
    if role_text in info or (contact_role and contact_role in role_text):
        return True
    return any(a in role_text and b in info for a, b in _EQUIVALENTS)


def match_contacts_to_roles(
    contacts: Sequence[Contact],
    roles: Iterable[str],
) -> dict[str, list[Contact]]:
    """Map each role to the contacts that hold it; roles without contacts are left out."""
    mapping: dict[str, list[Contact]] = {}
    for role in roles:
        holders = [c for c in contacts if c.has_role and _holds_role(c, role)]
        if holders:
            mapping[role] = holders
    return mapping


def missing_roles(roles: Iterable[str], roles_to_contacts: dict[str, list[Contact]]) -> list[str]:
    """Roles mentioned in the news that no known contact holds."""
    return [role for role in roles if role not in roles_to_contacts]
