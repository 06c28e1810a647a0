"""
Tests for prospect_radar.news.normalizer.

What we test
------------
- Date parsing: RFC 822, ISO 8601, rss2json style; unparseable -> epoch.
- Display dates in the French short-month format, and parsing them back.
- Category normalisation and HTML stripping.
- normalize_batch: company relevance filter, title dedupe, newest first.
"""

from __future__ import annotations

from datetime import datetime, timezone

from prospect_radar.news.normalizer import (
    EPOCH,
    format_display_date,
    normalize_batch,
    normalize_news_item,
    parse_display_date,
    parse_pub_date,
)


def test_parse_rfc822_date() -> None:
    parsed = parse_pub_date("Sun, 06 Apr 2025 10:00:00 GMT")
    assert parsed == datetime(2025, 4, 6, 10, 0, tzinfo=timezone.utc)


def test_parse_iso_and_rss2json_dates() -> None:
    assert parse_pub_date("2025-04-06T10:00:00Z").day == 6
    assert parse_pub_date("2025-04-06 10:00:00").hour == 10


def test_parse_garbage_date_returns_none() -> None:
    assert parse_pub_date("next tuesday") is None
    assert parse_pub_date("") is None


def test_display_date_format() -> None:
    assert format_display_date(datetime(2025, 4, 6)) == "06 Avr. 2025"
    assert format_display_date(datetime(2024, 12, 25)) == "25 Déc. 2024"


def test_display_date_parses_back() -> None:
    assert parse_display_date("06 Avr. 2025") == datetime(2025, 4, 6, tzinfo=timezone.utc)


def test_unparseable_display_date_sorts_as_epoch() -> None:
    assert parse_display_date("someday") == EPOCH


def test_invalid_pub_date_becomes_epoch() -> None:
    item = normalize_news_item({"title": "Schneider", "pubDate": "not a date"})
    assert item.date == "01 Janv. 1970"
    assert item.source_timestamp == 0.0


def test_categories_and_html() -> None:
    item = normalize_news_item(
        {
            "title": "  Schneider Electric  ",
            "pubDate": "2025-04-06",
            "categories": "Energie, Industrie, Energie",
            "description": "<p>Un <b>nouveau</b>\n site</p>",
            "link": "",
        }
    )
    assert item.title == "Schneider Electric"
    assert item.categories == ("Energie", "Industrie")
    assert item.category == "Energie, Industrie"
    assert item.description == "Un nouveau site"
    assert item.link is None


def test_missing_categories_use_default() -> None:
    item = normalize_news_item({"title": "x", "pubDate": "2025-04-06"})
    assert item.category == "Actualité"


def test_normalize_batch_filters_dedupes_and_sorts(company) -> None:
    records = [
        {"title": "Schneider ouvre une usine", "pubDate": "2025-01-10"},
        {"title": "Un concurrent recrute", "pubDate": "2025-03-01"},
        {"title": "Schneider signe un contrat", "pubDate": "2025-03-15"},
        {"title": "Schneider ouvre une usine", "pubDate": "2025-02-01"},
        {"title": "Résultats trimestriels", "pubDate": "2025-02-20", "source": "https://www.se.com/feed"},
    ]
    items = normalize_batch(records, company=company)

    assert [i.title for i in items] == [
        "Schneider signe un contrat",
        "Résultats trimestriels",
        "Schneider ouvre une usine",
    ]
    # First occurrence of a duplicated title wins.
    assert items[-1].date == "10 Janv. 2025"


def test_normalize_batch_without_company_keeps_everything() -> None:
    items = normalize_batch([{"title": "a"}, {"title": "b"}], source="manual")
    assert len(items) == 2
    assert all(i.source == "manual" for i in items)
