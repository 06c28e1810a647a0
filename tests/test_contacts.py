"""
Tests for prospect_radar.contacts (models, dedupe, extraction, import, roles).

What we test
------------
- Contact identity key ignores case and extra whitespace.
- dedupe_contacts: merge rules, first-seen order, idempotence.
- ContactExtractor: sources attached, failures isolated, pacing only for
  rate-limited oracles.
- Import: header mapping, title normalisation, file reading, format errors.
- Roles named in the news, matched against known contacts.
"""

from __future__ import annotations

import asyncio
import json

import pytest

from prospect_radar.contacts.dedupe import dedupe_contacts
from prospect_radar.contacts.extraction import ContactExtractor
from prospect_radar.contacts.importer import (
    import_contacts,
    normalize_contact_rows,
    normalize_title,
    read_contact_rows,
)
from prospect_radar.contacts.models import Contact, ContactSource
from prospect_radar.contacts.roles import (
    identify_roles_in_news,
    match_contacts_to_roles,
    missing_roles,
)
from prospect_radar.exceptions import ImportFormatError
from prospect_radar.oracle.base import ContactCandidate, OracleTimeout


SOURCE_A = ContactSource("News A", "01 Janv. 2025")
SOURCE_B = ContactSource("News B", "02 Janv. 2025")


# ── Model ─────────────────────────────────────────────────────────────────────


def test_contact_key_normalised() -> None:
    assert Contact("  Jean   DUPONT ").key == "jean dupont"


def test_unspecified_roles() -> None:
    assert not Contact("a", role="Unspecified").has_role
    assert not Contact("a", role="Poste non spécifié").has_role
    assert Contact("a", role="CTO").has_role


# ── Dedupe ────────────────────────────────────────────────────────────────────


def test_dedupe_merges_same_person() -> None:
    contacts = [
        Contact("Jean Dupont", role="CTO", confidence_score=0.7, sources=(SOURCE_A,)),
        Contact("Paul Martin", role="CEO"),
        Contact(
            "jean  dupont",
            role="Directeur Technique",
            email="jean.dupont@se.com",
            confidence_score=0.9,
            sources=(SOURCE_B, SOURCE_A),
        ),
    ]
    merged = dedupe_contacts(contacts)

    assert [c.full_name for c in merged] == ["Jean Dupont", "Paul Martin"]
    jean = merged[0]
    assert jean.role == "Directeur Technique"
    assert jean.confidence_score == 0.9
    assert jean.email == "jean.dupont@se.com"
    assert jean.sources == (SOURCE_A, SOURCE_B)


def test_dedupe_tie_keeps_first_role() -> None:
    merged = dedupe_contacts([Contact("Anne Roy", role="CFO"), Contact("ANNE ROY", role="DAF")])
    assert merged[0].role == "CFO"


def test_dedupe_is_idempotent() -> None:
    contacts = [
        Contact("Jean Dupont", role="CTO", sources=(SOURCE_A,)),
        Contact("JEAN DUPONT", role="CTO", phone="0102", sources=(SOURCE_B,)),
        Contact("Anne Roy"),
    ]
    once = dedupe_contacts(contacts)
    assert dedupe_contacts(once) == once


def test_dedupe_skips_nameless() -> None:
    assert dedupe_contacts([Contact("   ")]) == []


# ── Extraction ────────────────────────────────────────────────────────────────


def test_extractor_attaches_sources_and_dedupes(make_news, fake_oracle_cls, recording_sleep) -> None:
    first, second, broken = make_news("First"), make_news("Second"), make_news("Broken")
    oracle = fake_oracle_cls(
        contacts={
            "First": [ContactCandidate("Jean Dupont", "CTO", confidence=0.6)],
            "Second": [ContactCandidate("Jean Dupont", "CTO", confidence=0.8)],
            "Broken": OracleTimeout(seconds=30.0),
        }
    )
    extractor = ContactExtractor(oracle, delay_seconds=1.0, sleep=recording_sleep)
    contacts = asyncio.run(extractor.extract_from_news([first, second, broken]))

    assert len(contacts) == 1
    assert contacts[0].confidence_score == 0.8
    assert [s.title for s in contacts[0].sources] == ["First", "Second"]
    # One call at a time, spaced between calls only.
    assert recording_sleep.calls == [1.0, 1.0]


def test_extractor_no_delay_for_local_oracle(make_news, fake_oracle_cls, recording_sleep) -> None:
    oracle = fake_oracle_cls(rate_limited=False)
    extractor = ContactExtractor(oracle, delay_seconds=1.0, sleep=recording_sleep)
    asyncio.run(extractor.extract_from_news([make_news("a"), make_news("b")]))
    assert recording_sleep.calls == []


# ── Import ────────────────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Chief Financial Officer", "CFO / Directeur Financier"),
        ("Vice-Président Ventes", "VP / Vice-Président"),
        ("Directeur Général", "CEO / PDG"),
        ("Directeur Commercial", "Directeur Commercial"),
        ("Responsable Achats", "Responsable Achats"),
        ("Jardinier", "Autre"),
        ("", "Unspecified"),
        ("Poste non spécifié", "Unspecified"),
    ],
)
def test_normalize_title(title: str, expected: str) -> None:
    assert normalize_title(title) == expected


def test_rows_with_first_and_last_name() -> None:
    rows = [
        {"First Name": "Marie", "Last Name": "Curie", "Role": "Chief Financial Officer", "Email": "m@se.com", "Account": ""},
        {"First Name": "", "Last Name": "", "Role": "CEO"},
    ]
    contacts = normalize_contact_rows(rows, "Schneider Electric")

    assert len(contacts) == 1
    marie = contacts[0]
    assert marie.full_name == "Marie Curie"
    assert marie.role == "CFO / Directeur Financier"
    assert marie.company == "Schneider Electric"
    assert marie.confidence_score == 1.0


def test_rows_with_full_name_and_account() -> None:
    contacts = normalize_contact_rows([{"Full Name": "Paul Martin", "_BE_AccountName": "SE France"}])
    assert contacts[0].company == "SE France"
    assert contacts[0].role == "Unspecified"


def test_no_rows_is_format_error() -> None:
    with pytest.raises(ImportFormatError):
        normalize_contact_rows([])


def test_no_name_columns_is_format_error() -> None:
    with pytest.raises(ImportFormatError):
        normalize_contact_rows([{"Email": "x@se.com", "Role": "CTO"}])


def test_read_csv(tmp_path) -> None:
    path = tmp_path / "contacts.csv"
    path.write_text("Full Name,Role,Email\nJean Dupont,CTO,jean@se.com\n", encoding="utf-8-sig")
    contacts = import_contacts(path)
    assert contacts[0].full_name == "Jean Dupont"
    assert contacts[0].email == "jean@se.com"


def test_read_json_wrapped(tmp_path) -> None:
    path = tmp_path / "contacts.json"
    path.write_text(json.dumps({"contacts": [{"Full Name": "Anne Roy"}]}), encoding="utf-8")
    assert read_contact_rows(path) == [{"Full Name": "Anne Roy"}]


def test_unsupported_file_type(tmp_path) -> None:
    path = tmp_path / "contacts.xlsx"
    path.write_bytes(b"")
    with pytest.raises(ImportFormatError):
        read_contact_rows(path)


# ── Roles ─────────────────────────────────────────────────────────────────────


def test_roles_found_in_news(make_row) -> None:
    matrix = [
        make_row(title="Schneider nomme un nouveau Directeur de la Stratégie"),
        make_row(title="Schneider nomme un nouveau Directeur de la Stratégie", detail="Other"),
        make_row(title="Schneider recrute un Head of Procurement"),
    ]
    assert identify_roles_in_news(matrix) == ["Directeur de la Stratégie", "Head of Procurement"]


def test_roles_matched_and_missing(make_row) -> None:
    roles = ["Directeur de la Stratégie", "Head of Procurement"]
    contacts = [
        Contact("Anne Roy", role="Directeur de la Stratégie"),
        Contact("Paul Martin", role="Unspecified", department="Head of Procurement"),
    ]
    matched = match_contacts_to_roles(contacts, roles)

    assert list(matched) == ["Directeur de la Stratégie"]
    assert [c.full_name for c in matched["Directeur de la Stratégie"]] == ["Anne Roy"]
    assert missing_roles(roles, matched) == ["Head of Procurement"]
