"""
Tests for prospect_radar.oracle.keyword_oracle.

What we test
------------
- Score 3: offering named verbatim alongside a strong signal.
- Score 2: offering matched through its significant words only.
- Score 1: only service-line keywords match; the line name stands in.
- No match at all yields an empty judgment.
- max_categories caps the number of service lines.
- Regex contact extraction ("Name, title").
"""

from __future__ import annotations

import asyncio

from prospect_radar.oracle.base import OracleOk
from prospect_radar.oracle.keyword_oracle import KeywordOracle, find_contacts_in_text


def test_direct_match_scores_three(taxonomy, make_news) -> None:
    item = make_news(
        "Schneider Electric lance une offre Cybersecurity",
        "Nouvelle solution pour les industriels.",
    )
    judgment = KeywordOracle("Schneider Electric").judge(item, taxonomy)

    assert len(judgment.matches) == 1
    match = judgment.matches[0]
    assert match.category == "Technology"
    assert match.offerings == ("Cybersecurity",)
    assert match.relevance_score == 3


def test_word_overlap_scores_two(taxonomy, make_news) -> None:
    item = make_news("Schneider Electric et le cloud souverain")
    judgment = KeywordOracle().judge(item, taxonomy)

    assert [(m.category, m.offerings, m.relevance_score) for m in judgment.matches] == [
        ("Technology", ("Cloud & Sourcing",), 2)
    ]


def test_keywords_only_scores_one(taxonomy, make_news) -> None:
    item = make_news("Schneider Electric recrute des talents")
    judgment = KeywordOracle().judge(item, taxonomy)

    assert len(judgment.matches) == 1
    match = judgment.matches[0]
    assert match.category == "People & Strategy"
    assert match.offerings == ()
    assert match.detail == "People & Strategy"
    assert match.relevance_score == 1


def test_unrelated_news_has_no_match(taxonomy, make_news) -> None:
    judgment = KeywordOracle().judge(make_news("Schneider Electric publie son rapport"), taxonomy)
    assert judgment.matches == ()


def test_max_categories_caps_service_lines(taxonomy, make_news) -> None:
    item = make_news(
        "Schneider Electric: cloud, marketing, logistique, fusion et talents",
    )
    judgment = KeywordOracle().judge(item, taxonomy, max_categories=2)
    assert len({m.category for m in judgment.matches}) <= 2


def test_async_interface_wraps_in_ok(taxonomy, make_news) -> None:
    oracle = KeywordOracle()
    assert oracle.rate_limited is False
    result = asyncio.run(oracle.judge_relevance(make_news(), taxonomy))
    assert isinstance(result, OracleOk)


def test_find_contact_name_then_title() -> None:
    text = "Nomination chez Schneider Electric. Jean Dupont, directeur général de Schneider Electric, annonce un plan."
    contacts = find_contacts_in_text(text, "Schneider Electric")

    assert len(contacts) == 1
    assert contacts[0].full_name == "Jean Dupont"
    assert contacts[0].role == "directeur général de Schneider Electric"
    assert contacts[0].company == "Schneider Electric"
    assert contacts[0].confidence == 0.8


def test_find_contacts_reports_each_name_once() -> None:
    text = "Marie Curie, directrice des achats. Marie Curie, directrice des achats."
    assert len(find_contacts_in_text(text)) == 1


def test_extract_contacts_from_item(make_news) -> None:
    item = make_news("Schneider Electric nomme Paul Martin", "Paul Martin, CTO du groupe, arrive.")
    result = asyncio.run(KeywordOracle("Schneider Electric").extract_contacts(item))
    assert isinstance(result, OracleOk)
    assert [c.full_name for c in result.value] == ["Paul Martin"]
