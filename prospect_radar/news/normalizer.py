"""Normalize heterogeneous raw news records into NewsItem.

Raw records come from RSS feeds or manual entry and disagree on date
formats, category shapes and HTML content. Everything downstream only
sees NewsItem.
"""

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import TYPE_CHECKING, Iterable, Optional, Union

from ..utils.text import strip_html
from .models import NewsItem, RawNewsRecord

if TYPE_CHECKING:
    from ..company.profile import TargetCompany

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

MONTHS_FR = [
    "Janv.",
    "Févr.",
    "Mars",
    "Avr.",
    "Mai",
    "Juin",
    "Juil.",
    "Août",
    "Sept.",
    "Oct.",
    "Nov.",
    "Déc.",
]

_FALLBACK_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d", "%d/%m/%Y")


def format_display_date(dt: datetime) -> str:
    """Format as "06 Avr. 2025"."""
    return f"{dt.day:02d} {MONTHS_FR[dt.month - 1]} {dt.year}"


def parse_display_date(value: str) -> datetime:
    """
    Parse a display date ("06 Avr. 2025") back into a datetime.

    Unparseable values are logged and mapped to the epoch so that
    sorting stays total.
    """
    parts = (value or "").split(" ")
    if len(parts) == 3 and parts[1] in MONTHS_FR:
        try:
            return datetime(
                int(parts[2]), MONTHS_FR.index(parts[1]) + 1, int(parts[0]), tzinfo=timezone.utc
            )
        except ValueError:
            pass
    logger.warning("[NORMALIZER] Unrecognized display date: %r", value)
    return EPOCH


def parse_pub_date(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse an RFC 822, ISO 8601 or rss2json-style date. None if unparseable."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not value or not isinstance(value, str):
        return None

    text = value.strip()
    parsed: Optional[datetime] = None
    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        parsed = None

    if parsed is None:
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            parsed = None

    if parsed is None:
        for fmt in _FALLBACK_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _categories(raw) -> tuple[str, ...]:
    if isinstance(raw, str):
        raw = raw.split(",")
    seen: list[str] = []
    for cat in raw or []:
        cat = str(cat).strip()
        if cat and cat not in seen:
            seen.append(cat)
    return tuple(seen)


def normalize_news_item(record: RawNewsRecord, source: str = "") -> NewsItem:
    """
    Convert one raw record into a NewsItem.

    Args:
        record: Raw feed/manual record
        source: Feed URL (or "manual") the record came from

    Returns:
        NewsItem; an invalid date becomes the epoch sentinel
    """
    published = parse_pub_date(record.get("pubDate"))
    if published is None:
        logger.warning(
            "[NORMALIZER] Invalid date %r for %r, using epoch",
            record.get("pubDate"),
            record.get("title"),
        )
        published = EPOCH

    return NewsItem(
        title=(record.get("title") or "").strip() or "Sans titre",
        date=format_display_date(published),
        categories=_categories(record.get("categories")),
        description=strip_html(record.get("description", "")),
        link=record.get("link") or None,
        source_timestamp=published.timestamp(),
        source=source or record.get("source", ""),
    )


def dedupe_by_title(items: Iterable[NewsItem]) -> list[NewsItem]:
    """Keep the first item for each exact title."""
    seen: set[str] = set()
    unique = []
    for item in items:
        if item.title not in seen:
            seen.add(item.title)
            unique.append(item)
    return unique


def normalize_batch(
    records: Iterable[RawNewsRecord],
    company: Optional["TargetCompany"] = None,
    source: str = "",
) -> list[NewsItem]:
    """
    Normalize, filter to the target company, dedupe by title, newest first.

    Args:
        records: Raw records (each may carry its own "source")
        company: If given, drop items that are not relevant to it
        source: Default source for records without one

    Returns:
        List of NewsItem sorted by publication date (newest first)
    """
    items = [normalize_news_item(r, r.get("source", source)) for r in records]
    total = len(items)

    if company is not None:
        items = [i for i in items if company.is_relevant(i)]

    unique = dedupe_by_title(items)
    logger.info(
        "[NORMALIZER] %d records -> %d relevant -> %d unique",
        total,
        len(items),
        len(unique),
    )
    return sorted(unique, key=lambda i: i.source_timestamp, reverse=True)
