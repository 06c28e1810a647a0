"""Offering taxonomy module."""

from .taxonomy import (
    OfferingTaxonomy,
    fuzzy_offering_match,
    load_taxonomy,
    split_offer_detail,
)

__all__ = [
    "OfferingTaxonomy",
    "fuzzy_offering_match",
    "load_taxonomy",
    "split_offer_detail",
]
