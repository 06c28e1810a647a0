"""
Tests for prospect_radar.offerings.taxonomy.

What we test
------------
- fuzzy_offering_match: containment both ways, word boundaries, case, empties.
- split_offer_detail: grouped details split on ", ".
- OfferingTaxonomy invariants: unique offerings, one service line per offering.
- load_taxonomy: shipped YAML, missing file fallback, empty file rejected.
"""

from __future__ import annotations

import pytest

from prospect_radar.exceptions import TaxonomyError
from prospect_radar.offerings.taxonomy import (
    OfferingTaxonomy,
    fuzzy_offering_match,
    load_taxonomy,
    split_offer_detail,
)


# ── fuzzy_offering_match ──────────────────────────────────────────────────────


def test_fuzzy_match_token_inside_offering() -> None:
    assert fuzzy_offering_match("Data", "Data, Analytics and AI")


def test_fuzzy_match_is_symmetric() -> None:
    assert fuzzy_offering_match("Data, Analytics and AI", "data")


def test_fuzzy_match_exact_ignores_case() -> None:
    assert fuzzy_offering_match("cybersecurity", "Cybersecurity")


def test_fuzzy_match_requires_word_boundaries() -> None:
    """Short names no longer match inside unrelated words."""
    assert not fuzzy_offering_match("AI", "Maintenance")
    assert not fuzzy_offering_match("Tax", "Taxonomy Services")


def test_fuzzy_match_empty_never_matches() -> None:
    assert not fuzzy_offering_match("", "Cloud & Sourcing")
    assert not fuzzy_offering_match("Cloud & Sourcing", "   ")


def test_split_offer_detail() -> None:
    assert split_offer_detail("Cloud & Sourcing, Cybersecurity") == [
        "Cloud & Sourcing",
        "Cybersecurity",
    ]
    assert split_offer_detail("") == []


# ── OfferingTaxonomy ──────────────────────────────────────────────────────────


def test_service_line_lookup() -> None:
    taxonomy = OfferingTaxonomy.from_mapping(
        {"Technology": ["Cybersecurity", "Cloud & Sourcing"], "BE Capital": ["Due Diligence"]}
    )
    assert taxonomy.service_line_of("Due Diligence") == "BE Capital"
    assert taxonomy.service_line_of("Unknown") is None
    assert taxonomy.offerings == ["Cybersecurity", "Cloud & Sourcing", "Due Diligence"]
    assert "Technology" in taxonomy
    assert "Cybersecurity" not in taxonomy


def test_offering_in_two_service_lines_rejected() -> None:
    with pytest.raises(TaxonomyError):
        OfferingTaxonomy.from_mapping({"A": ["Shared"], "B": ["Shared"]})


def test_duplicate_offering_in_line_rejected() -> None:
    with pytest.raises(TaxonomyError):
        OfferingTaxonomy.from_mapping({"A": ["Dup", "Dup"]})


def test_empty_taxonomy_rejected() -> None:
    with pytest.raises(TaxonomyError):
        OfferingTaxonomy.from_mapping({})


def test_resolve_free_text_token() -> None:
    taxonomy = OfferingTaxonomy.from_mapping({"Technology": ["Data, Analytics and AI", "Cybersecurity"]})
    assert taxonomy.resolve("analytics") == ["Data, Analytics and AI"]


# ── load_taxonomy ─────────────────────────────────────────────────────────────


def test_load_shipped_taxonomy() -> None:
    taxonomy = load_taxonomy()
    assert list(taxonomy.service_lines) == [
        "Finance & Risk",
        "Technology",
        "Operations",
        "People & Strategy",
        "Customer & Growth",
        "BE Capital",
    ]
    assert "cloud" in taxonomy.keywords_for("Technology")


def test_load_missing_file_uses_fallback(tmp_path) -> None:
    taxonomy = load_taxonomy(tmp_path / "absent.yaml")
    assert "Technology" in taxonomy
    assert taxonomy.offerings


def test_load_file_without_service_lines_fails(tmp_path) -> None:
    path = tmp_path / "offerings.yaml"
    path.write_text("service_lines: {}\n", encoding="utf-8")
    with pytest.raises(TaxonomyError):
        load_taxonomy(path)
