"""Contact import: header mapping, role normalisation and file reading.

Rows arrive as dicts keyed by the file's own header labels (CRM export,
CSV or JSON). They are mapped onto Contact with confidence 1.0.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from ..exceptions import ImportFormatError
from ..oracle.base import UNSPECIFIED_ROLE
from ..utils.text import mentions, mentions_any
from .models import Contact

logger = logging.getLogger(__name__)

DEFAULT_COMPANY = "Schneider Electric"
OTHER_ROLE = "Autre"

# header label (lower-cased) -> Contact field
HEADER_FIELDS = {
    "full name": "full_name",
    "first name": "first_name",
    "last name": "last_name",
    "role": "role",
    "email": "email",
    "phone": "phone",
    "department": "department",
    "account": "company",
    "_be_accountname": "company",
}

# (standard role, any of, also requires one of); first match wins.
_TITLE_RULES: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    ("VP / Vice-Président", ("vice", "vp"), ()),
    ("CEO / PDG", ("pdg", "ceo", "président", "president", "chief executive", "directeur général"), ()),
    ("CFO / Directeur Financier", ("cfo", "financier", "finance", "chief financial"), ()),
    ("CIO / DSI", ("cio", "dsi", "systèmes d'information", "information technology", "informatique"), ()),
    ("CTO / Directeur Technique", ("cto", "technique", "technology", "technical"), ()),
    ("CDO / Directeur Digital", ("cdo", "digital", "numérique"), ()),
    ("COO / Directeur des Opérations", ("coo", "opérations", "operations"), ()),
    ("CMO / Directeur Marketing", ("cmo", "marketing"), ()),
    ("CHRO / DRH", ("rh", "ressources humaines", "human resources", "chro", "drh"), ()),
    ("CSO / Directeur Sécurité", ("cso", "sécurité", "security"), ()),
    ("Directeur Stratégie", ("stratégie", "strategy"), ()),
    ("Directeur Commercial", ("commercial", "ventes", "sales"), ("directeur", "director")),
    ("Directeur de la Transformation", ("transformation",), ()),
    ("Directeur de l'Innovation", ("innovation",), ()),
    ("Directeur de la Supply Chain", ("supply chain", "chaîne", "logistique"), ()),
    ("Directeur de Production", ("production", "manufacturing"), ()),
    ("Directeur de Projet", ("projet", "project"), ()),
    ("Responsable IT", ("it", "informatique"), ("responsable", "manager", "chef")),
    ("Responsable Commercial", ("commercial", "ventes", "sales"), ("responsable", "manager", "chef")),
    ("Responsable Achats", ("achat", "procurement", "purchasing"), ()),
    ("Chef de Produit", ("produit", "product"), ()),
)


def normalize_title(title: Optional[str]) -> str:
    """Classify a free-text job title into a standard role."""
    text = (title or "").strip()
    if not text or text.lower() in ("unspecified", "poste non spécifié"):
        return UNSPECIFIED_ROLE

    for label, terms, required in _TITLE_RULES:
        if any(mentions(text, term) for term in terms):
            if not required or mentions_any(text, required):
                return label
    return OTHER_ROLE


def _column_map(headers: Iterable[str]) -> dict[str, str]:
    """Contact field -> header label, for the headers this file has."""
    mapping: dict[str, str] = {}
    for header in headers:
        field_name = HEADER_FIELDS.get(str(header).strip().lower())
        if field_name and field_name not in mapping:
            mapping[field_name] = header
    return mapping


def _cell(row: Mapping[str, Any], columns: Mapping[str, str], field_name: str) -> str:
    header = columns.get(field_name)
    if header is None:
        return ""
    value = row.get(header)
    return "" if value is None else str(value).strip()


def normalize_contact_rows(
    rows: Iterable[Mapping[str, Any]],
    default_company: str = DEFAULT_COMPANY,
) -> list[Contact]:
    """
    Map raw table rows onto contacts.

    Raises:
        ImportFormatError: If the table has no data rows or no name columns
    """
    rows = list(rows)
    if not rows:
        raise ImportFormatError("No data could be read from the contact file")

    headers: list[str] = []
    for row in rows:
        headers.extend(h for h in row.keys() if h not in headers)
    columns = _column_map(headers)

    if "full_name" not in columns and not {"first_name", "last_name"} <= columns.keys():
        raise ImportFormatError(
            "The contact file needs a 'Full Name' column or 'First Name' and 'Last Name' columns"
        )

    contacts = []
    for row in rows:
        full_name = _cell(row, columns, "full_name")
        if not full_name:
            full_name = " ".join(
                part
                for part in (_cell(row, columns, "first_name"), _cell(row, columns, "last_name"))
                if part
            )
        if not full_name:
            continue

        contacts.append(
            Contact(
                full_name=full_name,
                role=normalize_title(_cell(row, columns, "role")),
                department=_cell(row, columns, "department"),
                email=_cell(row, columns, "email"),
                phone=_cell(row, columns, "phone"),
                company=_cell(row, columns, "company") or default_company,
                confidence_score=1.0,
            )
        )

    logger.info("[IMPORT] %d contacts from %d rows", len(contacts), len(rows))
    return contacts


def read_contact_rows(path: Path) -> list[dict]:
    """
    Read raw rows from a CSV file or a JSON list of objects.

    Raises:
        ImportFormatError: If the file type is unsupported or the content is malformed
    """
    suffix = path.suffix.lower()
    if suffix == ".csv":
        with open(path, encoding="utf-8-sig", newline="") as f:
            return list(csv.DictReader(f))
    if suffix == ".json":
        with open(path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ImportFormatError(f"{path.name} is not valid JSON: {e}") from e
        if isinstance(data, dict):
            data = data.get("contacts", [])
        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise ImportFormatError(f"{path.name} must contain a list of contact objects")
        return data
    raise ImportFormatError(f"Unsupported contact file type: {path.suffix or path.name}")


def import_contacts(path: Path, default_company: str = DEFAULT_COMPANY) -> list[Contact]:
    """Read and normalize a contact file."""
    return normalize_contact_rows(read_contact_rows(path), default_company)
