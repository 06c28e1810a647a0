"""Merge contacts found by several extraction passes."""

import logging
from dataclasses import replace
from typing import Iterable

from .models import Contact, ContactSource

logger = logging.getLogger(__name__)


def _union_sources(*groups: Iterable[ContactSource]) -> tuple[ContactSource, ...]:
    merged: list[ContactSource] = []
    for group in groups:
        for source in group:
            if source not in merged:
                merged.append(source)
    return tuple(merged)


def merge_contacts(kept: Contact, other: Contact) -> Contact:
    """
    Merge two instances of the same person.

    Role and confidence come from the higher-confidence instance (the
    first one on ties). Sources are unioned in order of first
    appearance; blank email, phone and department are filled in.
    """
    winner = other if other.confidence_score > kept.confidence_score else kept
    return replace(
        kept,
        role=winner.role,
        confidence_score=winner.confidence_score,
        email=kept.email or other.email,
        phone=kept.phone or other.phone,
        department=kept.department or other.department,
        company=kept.company or other.company,
        sources=_union_sources(kept.sources, other.sources),
    )


def dedupe_contacts(contacts: Iterable[Contact]) -> list[Contact]:
    """Collapse contacts sharing an identity key, keeping first-seen order."""
    merged: dict[str, Contact] = {}
    total = 0
    for contact in contacts:
        total += 1
        key = contact.key
        if not key:
            continue
        merged[key] = merge_contacts(merged[key], contact) if key in merged else contact

    if total != len(merged):
        logger.info("[CONTACTS] Deduplicated %d contacts into %d", total, len(merged))
    return list(merged.values())
