"""RSS feed fetching for the news pipeline.

Fetches raw records from the company's official feeds and from general
business/tech feeds. Normalization and relevance filtering happen later
in news.normalizer.
"""

import asyncio
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Optional

import feedparser

from .feed_loader import get_feed_urls
from .models import RawNewsRecord

logger = logging.getLogger(__name__)


class NewsFetcher:
    """
    Fetches raw news records from RSS feeds.

    Feeds are fetched concurrently; a failing feed contributes no
    records and never aborts the others.
    """

    def __init__(
        self,
        feeds: Optional[list[str]] = None,
        days_back: Optional[int] = None,
        quick_mode: bool = False,
    ):
        """
        Initialize news fetcher.

        Args:
            feeds: List of RSS feed URLs (default: loaded from feeds.json)
            days_back: Drop entries older than this many days (None keeps all)
            quick_mode: Use minimal feed list for faster testing
        """
        self.feeds = feeds if feeds else get_feed_urls(quick=quick_mode)
        self.days_back = days_back

    async def fetch_all(self) -> list[RawNewsRecord]:
        """
        Fetch records from all configured feeds concurrently.

        Returns:
            Raw records from every feed that answered, each tagged with its source URL
        """
        loop = asyncio.get_running_loop()
        tasks = [loop.run_in_executor(None, self._fetch_feed, url) for url in self.feeds]
        results = await asyncio.gather(*tasks, return_exceptions=True) if tasks else []

        records: list[RawNewsRecord] = []
        failed_feeds = 0
        for url, result in zip(self.feeds, results):
            if isinstance(result, list):
                records.extend(result)
            else:
                failed_feeds += 1
                logger.warning("[FETCHER] Feed %s failed: %s", url, result)

        logger.info(
            "[FETCHER] Fetched %d records from %d feeds (%d failed)",
            len(records),
            len(self.feeds) - failed_feeds,
            failed_feeds,
        )
        return records

    def _fetch_feed(self, feed_url: str) -> list[RawNewsRecord]:
        """
        Fetch and parse a single RSS feed.

        Args:
            feed_url: URL of the RSS feed

        Returns:
            Raw records from the feed (empty on failure)
        """
        try:
            feed = feedparser.parse(feed_url)
        except Exception as e:
            logger.warning("[FETCHER] Could not parse %s: %s", feed_url, e)
            return []

        cutoff = None
        if self.days_back is not None:
            cutoff = datetime.now(timezone.utc) - timedelta(days=self.days_back)

        records: list[RawNewsRecord] = []
        for entry in feed.entries:
            if cutoff is not None:
                published = self._parse_date(entry)
                if published is None or published < cutoff:
                    continue

            records.append(
                RawNewsRecord(
                    title=entry.get("title", ""),
                    pubDate=entry.get("published") or entry.get("updated") or "",
                    categories=[t.get("term", "") for t in entry.get("tags", [])],
                    description=entry.get("summary", ""),
                    link=entry.get("link", ""),
                    source=feed_url,
                )
            )
        return records

    def _parse_date(self, entry: feedparser.FeedParserDict) -> Optional[datetime]:
        """Parse entry date from various RSS formats."""
        parsed: Optional[time.struct_time] = entry.get("published_parsed") or entry.get(
            "updated_parsed"
        )
        if not parsed:
            return None
        return datetime(*parsed[:6], tzinfo=timezone.utc)

    def fetch_sync(self) -> list[RawNewsRecord]:
        """Synchronous wrapper for fetch_all()."""
        return asyncio.run(self.fetch_all())
