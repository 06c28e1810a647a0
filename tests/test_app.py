"""
Tests for the FastAPI dashboard (prospect_radar.app.main).

Every test builds its own app around a fresh DashboardState and uses the
keyword oracle (``offline``), so no LLM is called.

What we test
------------
- Building the matrix from posted news, then filtering and grouping it.
- White space and new opportunities before and after engagements are set.
- Selection endpoints: idempotent select, deselect, clear.
- Contact import (format errors -> 400), ranking, deep match, roles.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from prospect_radar.app.main import create_app
from prospect_radar.app.state import DashboardState
from prospect_radar.contacts.models import Contact
from prospect_radar.opportunities.ledger import SelectionLedger

NEWS = [
    {
        "title": "Schneider Electric lance une offre Cybersecurity",
        "pubDate": "2025-04-06",
        "description": "Nouvelle solution pour les industriels.",
        "link": "https://www.se.com/news/cyber",
    },
    {
        "title": "Schneider Electric recrute des talents",
        "pubDate": "2025-03-01",
    },
    {
        "title": "Un concurrent publie ses résultats",
        "pubDate": "2025-04-01",
    },
]

CYBER = {"category": "Technology", "detail": "Cybersecurity", "news": NEWS[0]["title"], "relevance_score": 3}


@pytest.fixture
def state(taxonomy, company) -> DashboardState:
    return DashboardState(taxonomy=taxonomy, company=company)


@pytest.fixture
def client(state) -> TestClient:
    return TestClient(create_app(state))


@pytest.fixture
def built(client) -> TestClient:
    response = client.post("/api/matrix", json={"news": NEWS, "offline": True})
    assert response.status_code == 200
    return client


def test_health_and_reference_data(client) -> None:
    assert client.get("/health").json()["status"] == "healthy"
    assert "Technology" in client.get("/api/taxonomy").json()
    assert client.get("/api/company").json()["name"] == "Schneider Electric"


def test_build_matrix(client, state) -> None:
    body = client.post("/api/matrix", json={"news": NEWS, "offline": True}).json()

    # The competitor item is not about the target company.
    assert body["news_count"] == 2
    assert body["analyzed_count"] == 2
    assert {(r["offer_category"], r["offer_detail"], r["relevance_score"]) for r in body["rows"]} == {
        ("Technology", "Cybersecurity", 3),
        ("People & Strategy", "People & Strategy", 1),
    }
    assert all(n.analyzed for n in state.news)


def test_merge_appends_rows(built) -> None:
    extra = [{"title": "Schneider Electric et le cloud souverain", "pubDate": "2025-04-07"}]
    body = built.post("/api/matrix", json={"news": extra, "offline": True, "merge": True}).json()
    assert len(body["rows"]) == 3
    assert body["news_count"] == 3


def test_filtered_matrix_and_grouped_news(built) -> None:
    rows = built.get("/api/matrix", params={"min_relevance": 3}).json()
    assert [r["offer_detail"] for r in rows] == ["Cybersecurity"]

    feed_rows = built.get("/api/matrix", params={"feed_only": "true"}).json()
    assert [r["news_title"] for r in feed_rows] == [NEWS[0]["title"]]

    groups = built.get("/api/news", params={"high_potential_only": "true"}).json()
    assert [g["news"] for g in groups] == [NEWS[0]["title"]]
    assert groups[0]["offers"][0]["high_potential"] is True


def test_white_space_follows_engagements(built) -> None:
    body = built.get("/api/white-space").json()
    assert body["offerings"] == ["Cybersecurity"]
    assert [o["detail"] for o in body["new_opportunities"]] == ["Cybersecurity"]

    response = built.put(
        "/api/engagements",
        json={"engagements": [{"offering": "Cybersecurity", "status": "Booked - Signed", "estimated_value": 120}]},
    )
    assert response.json() == {"count": 1}

    body = built.get("/api/white-space").json()
    assert body["offerings"] == []
    assert body["new_opportunities"] == []

    stats = built.get("/api/stats").json()
    assert stats["offerings"]["Cybersecurity"]["win_rate"] == 100.0
    assert stats["service_lines"]["Technology"]["booked_value"] == 120.0


def test_selection_endpoints(client, state) -> None:
    first = client.post("/api/selection", json=CYBER).json()
    assert first["changed"] is True
    assert [o["detail"] for o in first["selected"]] == ["Cybersecurity"]

    again = client.post("/api/selection", json=CYBER).json()
    assert again["changed"] is False
    assert len(again["selected"]) == 1
    assert len(state.ledger) == 1

    removed = client.post("/api/selection/deselect", json=CYBER).json()
    assert removed == {"selected": [], "changed": True}

    client.post("/api/selection", json=CYBER)
    assert client.delete("/api/selection").json() == {"selected": [], "changed": True}
    assert client.delete("/api/selection").json()["changed"] is False


def test_ledger_is_owned_by_state(taxonomy, company) -> None:
    ledger = SelectionLedger()
    seen = []
    ledger.subscribe(seen.append)
    client = TestClient(create_app(DashboardState(taxonomy=taxonomy, company=company, ledger=ledger)))

    client.post("/api/selection", json=CYBER)
    assert len(seen) == 1


def test_contact_import_errors(client) -> None:
    assert client.post("/api/contacts/import", json={"rows": []}).status_code == 400
    response = client.post("/api/contacts/import", json={"rows": [{"Email": "x@se.com"}]})
    assert response.status_code == 400
    assert "Full Name" in response.json()["detail"]


def test_contact_import_dedupes_and_ranks(client) -> None:
    rows = [
        {"Full Name": "Anne Roy", "Role": "Directeur Digital", "Email": "anne@se.com"},
        {"Full Name": "anne roy", "Role": "CDO", "Phone": "0102"},
        {"Full Name": "Paul Martin", "Role": "Jardinier"},
    ]
    contacts = client.post("/api/contacts/import", json={"rows": rows}).json()
    assert [c["full_name"] for c in contacts] == ["Anne Roy", "Paul Martin"]
    assert contacts[0]["phone"] == "0102"

    client.post("/api/selection", json=CYBER)
    ranked = client.get("/api/contacts/ranked").json()
    assert [c["full_name"] for c in ranked] == ["Anne Roy"]
    assert ranked[0]["relevance_score"] > 0.5

    recommendations = client.get("/api/contacts/recommendations").json()
    assert list(recommendations) == ["Technology-Cybersecurity"]


def test_deep_match_endpoint(client, state) -> None:
    state.contacts = [
        Contact("Anne Roy", role="Head of Cybersecurity", email="anne@se.com"),
        Contact("Book Keeper", role="Comptable", email="bk@se.com"),
    ]
    matches = client.post("/api/contacts/deep-match", json=CYBER).json()
    assert [m["full_name"] for m in matches] == ["Anne Roy"]
    assert matches[0]["match_level"] > 0
    assert matches[0]["backstop"] is False


def test_extract_contacts_offline(client) -> None:
    news = [
        {
            "title": "Schneider Electric lance une offre Cybersecurity",
            "pubDate": "2025-04-06",
            "description": "Jean Dupont, directeur général de Schneider Electric, annonce un plan.",
        }
    ]
    client.post("/api/matrix", json={"news": news, "offline": True})
    found = client.post("/api/contacts/extract", json={"offline": True}).json()

    assert [c["full_name"] for c in found] == ["Jean Dupont"]
    assert found[0]["sources"][0]["title"] == news[0]["title"]
    assert [c["full_name"] for c in client.get("/api/contacts").json()] == ["Jean Dupont"]


def test_extract_rejects_zero_max_items(client) -> None:
    assert client.post("/api/contacts/extract", json={"max_items": 0}).status_code == 422


def test_roles_endpoint(client) -> None:
    news = [{"title": "Schneider nomme un nouveau Directeur de la Stratégie", "pubDate": "2025-04-06"}]
    client.post("/api/matrix", json={"news": news, "offline": True})
    body = client.get("/api/roles").json()
    assert body["roles"] == ["Directeur de la Stratégie"]
    assert body["missing"] == ["Directeur de la Stratégie"]
