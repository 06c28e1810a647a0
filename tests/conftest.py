"""
Shared pytest fixtures for the prospect_radar test suite.

Provides:
  - ``taxonomy`` / ``company``: the shipped offering taxonomy and a small
    target-company profile.
  - ``make_news`` / ``make_row``: factories for NewsItem and RelevanceRow.
  - ``FakeOracle``: a scripted, rate-limited oracle for pipeline tests.
  - ``recording_sleep``: an injectable sleep that records its calls.
"""

from __future__ import annotations

import asyncio

import pytest

from prospect_radar.company.profile import TargetCompany
from prospect_radar.matrix.models import RelevanceRow
from prospect_radar.news.models import NewsItem
from prospect_radar.offerings.taxonomy import load_taxonomy
from prospect_radar.oracle.base import (
    OfferMatch,
    OracleOk,
    RelevanceJudgment,
    TextOracle,
)


# ── Reference data ────────────────────────────────────────────────────────────

@pytest.fixture
def taxonomy():
    """The taxonomy shipped in config/offerings.yaml."""
    return load_taxonomy()


@pytest.fixture
def company() -> TargetCompany:
    return TargetCompany(
        name="Schneider Electric",
        domains=["se.com", "schneider-electric.com"],
        keywords=["schneider", "energy management"],
        official_hosts=["se.com"],
    )


# ── Domain object factories ───────────────────────────────────────────────────

@pytest.fixture
def make_news():
    def _make(
        title: str = "Schneider Electric lance une offre Cybersecurity",
        description: str = "",
        date: str = "06 Avr. 2025",
        link: str | None = None,
        timestamp: float = 1743926400.0,
        categories: tuple[str, ...] = (),
    ) -> NewsItem:
        return NewsItem(
            title=title,
            date=date,
            categories=categories,
            description=description,
            link=link,
            source_timestamp=timestamp,
        )

    return _make


@pytest.fixture
def make_row():
    def _make(
        detail: str = "Cybersecurity",
        category: str = "Technology",
        score: int = 3,
        title: str = "Schneider Electric lance une offre Cybersecurity",
        date: str = "06 Avr. 2025",
        description: str = "",
        link: str | None = None,
        timestamp: float = 0.0,
    ) -> RelevanceRow:
        return RelevanceRow(
            news_title=title,
            news_date=date,
            news_category="Actualité",
            news_description=description,
            news_link=link,
            offer_category=category,
            offer_detail=detail,
            relevance_score=score,
            news_timestamp=timestamp,
        )

    return _make


# ── Oracle doubles ────────────────────────────────────────────────────────────

class FakeOracle(TextOracle):
    """
    Scripted oracle.

    ``script`` maps a news title to what judge_relevance returns: an
    OracleResult, or an exception instance to raise. Unscripted titles
    get a single Technology/Cybersecurity match scored 2.
    """

    name = "fake"

    def __init__(self, script=None, contacts=None, rate_limited: bool = True):
        self.script = script or {}
        self.contacts = contacts or {}
        self.rate_limited = rate_limited
        self.judged: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def judge_relevance(self, item, taxonomy, max_categories=3):
        self.judged.append(item.title)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
        finally:
            self.in_flight -= 1

        outcome = self.script.get(item.title)
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is not None:
            return outcome
        return OracleOk(
            RelevanceJudgment(
                matches=(OfferMatch("Technology", ("Cybersecurity",), 2, "scripted"),)
            )
        )

    async def extract_contacts(self, item):
        outcome = self.contacts.get(item.title, [])
        if isinstance(outcome, list):
            return OracleOk(outcome)
        return outcome


@pytest.fixture
def fake_oracle_cls():
    return FakeOracle


@pytest.fixture
def recording_sleep():
    """Async sleep replacement; ``recording_sleep.calls`` holds the delays."""

    class _Sleep:
        def __init__(self):
            self.calls: list[float] = []
            self.on_call = None

        async def __call__(self, delay: float) -> None:
            self.calls.append(delay)
            if self.on_call is not None:
                self.on_call()

    return _Sleep()
