"""Load feed sources from JSON configuration."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class FeedEntry:
    """A feed source from feeds.json."""

    name: str
    xml_url: str
    type: str  # "official" or "general"
    category: str
    enabled: bool = True
    quick: bool = False


def load_feeds(path: Optional[Path] = None) -> list[FeedEntry]:
    """
    Load feed entries from JSON file.

    Args:
        path: Path to feeds.json. Defaults to settings.feeds_file.

    Returns:
        List of enabled FeedEntry objects.
    """
    if path is None:
        from ..config.settings import settings

        path = settings.feeds_file

    if not path.exists():
        logger.warning("[FEEDS] Feed file not found: %s", path)
        return []

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    feeds = []
    for entry in data.get("feeds", []):
        feed = FeedEntry(
            name=entry["name"],
            xml_url=entry["xml_url"],
            type=entry.get("type", "general"),
            category=entry.get("category", "news"),
            enabled=entry.get("enabled", True),
            quick=entry.get("quick", False),
        )
        if feed.enabled:
            feeds.append(feed)

    logger.info("[FEEDS] Loaded %d enabled feeds from %s", len(feeds), path.name)
    return feeds


def get_feed_urls(quick: bool = False, path: Optional[Path] = None) -> list[str]:
    """
    Get feed URLs.

    Args:
        quick: If True, return only quick-mode feeds.
        path: Path to feeds.json.

    Returns:
        List of RSS feed URLs.
    """
    feeds = load_feeds(path)
    if quick:
        return [f.xml_url for f in feeds if f.quick]
    return [f.xml_url for f in feeds]
