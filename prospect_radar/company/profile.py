"""Target company profile.

Provides the TargetCompany dataclass describing the account being
prospected (name, email domains, relevance keywords, official news hosts)
and a loader that reads it from YAML config.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional
from urllib.parse import urlparse

import yaml

from ..utils.text import mentions_any

if TYPE_CHECKING:
    from ..news.models import NewsItem

logger = logging.getLogger(__name__)


@dataclass
class TargetCompany:
    """Company whose news is monitored and whose people are prospected."""

    name: str
    domains: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    official_hosts: list[str] = field(default_factory=list)

    def is_company_email(self, email: Optional[str]) -> bool:
        """True if the email's domain is a company domain or one of its sub-domains."""
        if not email or "@" not in email:
            return False
        domain = email.rsplit("@", 1)[1].strip().lower()
        return any(domain == d or domain.endswith("." + d) for d in self.domains)

    def is_official_source(self, source: Optional[str]) -> bool:
        """True if the feed URL is served from one of the company's own hosts."""
        if not source:
            return False
        host = (urlparse(source).hostname or source).lower()
        return any(host == h or host.endswith("." + h) for h in self.official_hosts)

    def is_relevant(self, item: "NewsItem") -> bool:
        """Official sources are always relevant; others must mention a keyword."""
        if self.is_official_source(item.source):
            return True
        content = f"{item.title} {item.description} {item.category}"
        return mentions_any(content, self.keywords)

    def to_prompt(self) -> str:
        """Format context for oracle prompts."""
        return f"{self.name} (domains: {', '.join(self.domains) or 'n/a'})"

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "name": self.name,
            "domains": self.domains,
            "keywords": self.keywords,
            "official_hosts": self.official_hosts,
        }


def load_target_company(path: Optional[Path] = None) -> TargetCompany:
    """
    Load the target company from YAML config.

    Args:
        path: Path to target_company.yaml (default: settings.company_file)

    Returns:
        TargetCompany, or a hardcoded fallback if the file is missing
    """
    if path is None:
        from ..config.settings import settings

        path = settings.company_file

    if not path.exists():
        logger.warning("Target company config not found, using hardcoded fallback")
        return TargetCompany(
            name="Schneider Electric",
            domains=["se.com", "schneider-electric.com", "schneider.com"],
            keywords=["schneider", "schneider electric", "energy management"],
            official_hosts=["se.com"],
        )

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return TargetCompany(
        name=data.get("name", ""),
        domains=[d.lower() for d in data.get("domains", [])],
        keywords=data.get("keywords", []),
        official_hosts=[h.lower() for h in data.get("official_hosts", [])],
    )
