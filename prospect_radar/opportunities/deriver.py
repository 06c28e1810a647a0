"""White-space opportunity derivation and engagement statistics.

A white-space opportunity is an offering the news talks about while no
engagement exists for it. Everything here is derived on read from the
matrix and the engagement mapping; nothing is cached.
"""

import logging
from typing import Iterable, Mapping, Optional, Sequence

from ..matrix.models import RelevanceRow
from ..offerings.taxonomy import OfferingTaxonomy, fuzzy_offering_match, split_offer_detail
from .models import (
    Engagement,
    EngagementStatus,
    OfferingStats,
    SelectedOpportunity,
    ServiceLineStats,
)

logger = logging.getLogger(__name__)

EngagementsByOffering = Mapping[str, Sequence[Engagement]]


def group_engagements(
    engagements: Iterable[Engagement],
    taxonomy: Optional[OfferingTaxonomy] = None,
) -> dict[str, list[Engagement]]:
    """
    Group engagements by offering.

    Every taxonomy offering gets an entry (possibly empty) so callers
    can tell "no engagement" from "unknown offering".
    """
    grouped: dict[str, list[Engagement]] = {}
    if taxonomy is not None:
        grouped = {offering: [] for offering in taxonomy.offerings}
    for engagement in engagements:
        if engagement.offering:
            grouped.setdefault(engagement.offering, []).append(engagement)
    return grouped


def offers_in_news(matrix: Iterable[RelevanceRow], taxonomy: OfferingTaxonomy) -> list[str]:
    """Taxonomy offerings mentioned by any row's offer detail, in first-seen order."""
    found: dict[str, None] = {}
    for row in matrix:
        for token in split_offer_detail(row.offer_detail):
            for offering in taxonomy.offerings:
                if fuzzy_offering_match(token, offering):
                    found.setdefault(offering, None)
    return list(found)


def find_white_space(
    matrix: Iterable[RelevanceRow],
    taxonomy: OfferingTaxonomy,
    engagements_by_offering: EngagementsByOffering,
) -> list[str]:
    """Offerings mentioned in the news that have no engagement."""
    white_space = [
        offering
        for offering in offers_in_news(matrix, taxonomy)
        if not engagements_by_offering.get(offering)
    ]
    logger.info("[OPPORTUNITIES] %d white-space offerings", len(white_space))
    return white_space


def has_opportunities(offer_detail: str, engagements_by_offering: EngagementsByOffering) -> bool:
    """
    True if any token of a (possibly grouped) offer detail fuzzily
    matches an offering that already has engagements.
    """
    return any(
        fuzzy_offering_match(token, offering) and bool(engagements)
        for token in split_offer_detail(offer_detail)
        for offering, engagements in engagements_by_offering.items()
    )


def has_prospection_potential(
    row: RelevanceRow,
    engagements_by_offering: EngagementsByOffering,
    offering: Optional[str] = None,
) -> bool:
    """Score-3 row whose offering (default: the row's detail) has no engagement."""
    if row.relevance_score != 3:
        return False
    return not has_opportunities(offering or row.offer_detail, engagements_by_offering)


def potential_opportunities(matrix: Iterable[RelevanceRow]) -> list[SelectedOpportunity]:
    """Score-3 rows as opportunities, one per (category, detail)."""
    seen: set[tuple[str, str]] = set()
    result = []
    for row in matrix:
        if row.relevance_score != 3:
            continue
        opportunity = SelectedOpportunity.from_row(row)
        if opportunity.key not in seen:
            seen.add(opportunity.key)
            result.append(opportunity)
    return result


def new_opportunities(
    matrix: Iterable[RelevanceRow],
    engagements_by_offering: EngagementsByOffering,
) -> list[SelectedOpportunity]:
    """Potential opportunities not already covered by an engagement."""
    return [
        opportunity
        for opportunity in potential_opportunities(matrix)
        if not has_opportunities(opportunity.detail, engagements_by_offering)
    ]


# Statistics


def _stats(engagements: Iterable[Engagement]) -> OfferingStats:
    stats = OfferingStats()
    for engagement in engagements:
        stats.total += 1
        stats.total_value += engagement.estimated_value
        if engagement.status == EngagementStatus.WON:
            stats.booked += 1
            stats.booked_value += engagement.estimated_value
        elif engagement.status == EngagementStatus.LOST:
            stats.lost += 1
    return stats


def offering_stats(engagements_by_offering: EngagementsByOffering) -> dict[str, OfferingStats]:
    return {offering: _stats(engagements) for offering, engagements in engagements_by_offering.items()}


def service_line_stats(
    taxonomy: OfferingTaxonomy,
    stats_by_offering: Mapping[str, OfferingStats],
) -> dict[str, ServiceLineStats]:
    """Roll offering statistics up to their service lines."""
    result: dict[str, ServiceLineStats] = {}
    for line, offerings in taxonomy:
        line_stats = ServiceLineStats(offerings=list(offerings))
        for offering in offerings:
            if offering in stats_by_offering:
                line_stats.add(stats_by_offering[offering])
        result[line] = line_stats
    return result


def yearly_stats(engagements: Iterable[Engagement]) -> dict[str, OfferingStats]:
    """Statistics per close-date year; engagements without a valid date are left out."""
    by_year: dict[str, list[Engagement]] = {}
    for engagement in engagements:
        year = engagement.close_year
        if year:
            by_year.setdefault(year, []).append(engagement)
    return {year: _stats(items) for year, items in sorted(by_year.items())}
