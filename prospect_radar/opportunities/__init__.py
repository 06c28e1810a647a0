from .deriver import (
    find_white_space,
    group_engagements,
    has_opportunities,
    has_prospection_potential,
    new_opportunities,
    offering_stats,
    offers_in_news,
    potential_opportunities,
    service_line_stats,
    yearly_stats,
)
from .ledger import SelectionLedger
from .models import Engagement, EngagementStatus, OfferingStats, SelectedOpportunity, ServiceLineStats

__all__ = [
    "Engagement",
    "EngagementStatus",
    "OfferingStats",
    "SelectedOpportunity",
    "SelectionLedger",
    "ServiceLineStats",
    "find_white_space",
    "group_engagements",
    "has_opportunities",
    "has_prospection_potential",
    "new_opportunities",
    "offering_stats",
    "offers_in_news",
    "potential_opportunities",
    "service_line_stats",
    "yearly_stats",
]
