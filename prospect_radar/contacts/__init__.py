"""Contacts: model, deduplication, extraction, import and scoring."""

from .dedupe import dedupe_contacts, merge_contacts
from .extraction import ContactExtractor
from .importer import import_contacts, normalize_contact_rows, normalize_title, read_contact_rows
from .models import Contact, ContactSource
from .roles import identify_roles_in_news, match_contacts_to_roles, missing_roles
from .scorer import (
    DeepMatch,
    deep_match_contacts,
    rank_contacts,
    recommend_by_opportunity,
    recommend_for_opportunity,
    score_contact,
    score_contact_for_opportunity,
)

__all__ = [
    "Contact",
    "ContactExtractor",
    "ContactSource",
    "DeepMatch",
    "dedupe_contacts",
    "deep_match_contacts",
    "identify_roles_in_news",
    "import_contacts",
    "match_contacts_to_roles",
    "merge_contacts",
    "missing_roles",
    "normalize_contact_rows",
    "normalize_title",
    "rank_contacts",
    "read_contact_rows",
    "recommend_by_opportunity",
    "recommend_for_opportunity",
    "score_contact",
    "score_contact_for_opportunity",
]
