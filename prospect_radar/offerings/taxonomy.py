"""Offering taxonomy: service lines and the consulting offerings they group.

The taxonomy is read-only reference data. It is loaded once from YAML
(``config/offerings.yaml``) and shared by every other component.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Mapping, Optional, Sequence

import yaml

from ..exceptions import TaxonomyError
from ..utils.text import contains_word

logger = logging.getLogger(__name__)


def fuzzy_offering_match(a: str, b: str) -> bool:
    """
    Loose match between an offering name and a free-text offer token.

    True when either string contains the other on word boundaries,
    ignoring case. "Data" matches "Data, Analytics and AI"; "AI" does
    not match "Maintenance". Empty strings never match.
    """
    a = (a or "").strip()
    b = (b or "").strip()
    if not a or not b:
        return False
    return contains_word(a, b) or contains_word(b, a)


def split_offer_detail(offer_detail: str) -> list[str]:
    """Split a joined offer detail ("A, B") into its tokens."""
    return [token for token in (offer_detail or "").split(", ") if token.strip()]


@dataclass(frozen=True)
class OfferingTaxonomy:
    """
    Mapping of service line -> ordered offerings.

    Invariants (checked at construction):
    - offering names are unique within a service line
    - an offering belongs to exactly one service line
    """

    service_lines: Mapping[str, tuple[str, ...]]
    keywords: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.service_lines:
            raise TaxonomyError("Offering taxonomy is empty")

        owner: dict[str, str] = {}
        for line, offerings in self.service_lines.items():
            for offering in offerings:
                if owner.get(offering) == line:
                    raise TaxonomyError(f"Offering '{offering}' duplicated in '{line}'")
                if offering in owner:
                    raise TaxonomyError(
                        f"Offering '{offering}' listed under both "
                        f"'{owner[offering]}' and '{line}'"
                    )
                owner[offering] = line
        # Frozen dataclass: stash the derived inverse map once.
        object.__setattr__(self, "_service_line_of", owner)

    @classmethod
    def from_mapping(
        cls,
        service_lines: Mapping[str, Sequence[str]],
        keywords: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> "OfferingTaxonomy":
        """Build a taxonomy from plain dicts/lists."""
        if not service_lines:
            raise TaxonomyError("No taxonomy provided")
        return cls(
            service_lines={line: tuple(offers) for line, offers in service_lines.items()},
            keywords={line: tuple(words) for line, words in (keywords or {}).items()},
        )

    @property
    def offerings(self) -> list[str]:
        """All offerings, in service-line order."""
        return [o for offers in self.service_lines.values() for o in offers]

    def service_line_of(self, offering: str) -> Optional[str]:
        """Service line owning ``offering`` (exact name), or None."""
        return self._service_line_of.get(offering)

    def keywords_for(self, service_line: str) -> tuple[str, ...]:
        return self.keywords.get(service_line, ())

    def resolve(self, token: str) -> list[str]:
        """Offerings that fuzzily match a free-text token."""
        return [o for o in self.offerings if fuzzy_offering_match(token, o)]

    def __iter__(self) -> Iterator[tuple[str, tuple[str, ...]]]:
        return iter(self.service_lines.items())

    def __contains__(self, service_line: object) -> bool:
        return service_line in self.service_lines

    def to_prompt(self) -> str:
        """Format the taxonomy for an oracle prompt."""
        return "\n\n".join(
            f"{line}:\n" + "\n".join(f"  - {offer}" for offer in offers)
            for line, offers in self.service_lines.items()
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {line: list(offers) for line, offers in self.service_lines.items()}


# Used when config/offerings.yaml is missing.
_FALLBACK_SERVICE_LINES = {
    "Finance & Risk": ["Finance Transformation", "Risk & Compliance"],
    "Technology": ["Data, Analytics and AI", "Cloud & Sourcing", "Cybersecurity"],
    "Operations": ["Smart Manufacturing", "Supply Chain Planning"],
    "People & Strategy": ["Corporate Strategy", "Change Management"],
    "Customer & Growth": ["Customer Experience", "Marketing & Sales Excellence"],
    "BE Capital": ["Mergers & Acquisitions", "Post-Merger Integration"],
}


def load_taxonomy(path: Optional[Path] = None) -> OfferingTaxonomy:
    """
    Load the offering taxonomy from YAML config.

    Args:
        path: Path to offerings.yaml (default: settings.taxonomy_file)

    Returns:
        OfferingTaxonomy

    Raises:
        TaxonomyError: If the file exists but defines no service lines
    """
    if path is None:
        from ..config.settings import settings

        path = settings.taxonomy_file

    if not path.exists():
        logger.warning("[TAXONOMY] %s not found, using hardcoded fallback", path)
        return OfferingTaxonomy.from_mapping(_FALLBACK_SERVICE_LINES)

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    lines = data.get("service_lines") or {}
    if not lines:
        raise TaxonomyError(f"No service lines defined in {path}")

    taxonomy = OfferingTaxonomy.from_mapping(
        {name: entry.get("offerings", []) for name, entry in lines.items()},
        {name: entry.get("keywords", []) for name, entry in lines.items()},
    )
    logger.info(
        "[TAXONOMY] Loaded %d service lines / %d offerings from %s",
        len(taxonomy.service_lines),
        len(taxonomy.offerings),
        path.name,
    )
    return taxonomy
