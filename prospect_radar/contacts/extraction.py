"""Contact extraction from news items through the oracle."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Sequence

from ..news.models import NewsItem
from ..oracle.base import (
    OracleOk,
    OracleParseError,
    OracleTimeout,
    OracleUnavailable,
    TextOracle,
    describe_failure,
)
from ..utils.rate_limit import BatchScheduler
from .dedupe import dedupe_contacts
from .models import Contact, ContactSource

logger = logging.getLogger(__name__)


class ContactExtractor:
    """
    Extracts contacts from news, one oracle call at a time.

    Calls to a rate-limited oracle are spaced by ``delay_seconds``. An
    item whose extraction fails contributes no contacts.
    """

    def __init__(
        self,
        oracle: TextOracle,
        delay_seconds: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        from ..config.settings import settings

        self.oracle = oracle
        if delay_seconds is None:
            delay_seconds = settings.contact_call_delay_seconds
        self.delay_seconds = delay_seconds if oracle.rate_limited else 0.0
        self._sleep = sleep

    def _contacts_for(self, item: NewsItem, result: Any) -> list[Contact]:
        if isinstance(result, OracleOk):
            source = ContactSource.from_news(item)
            return [Contact.from_candidate(c, source) for c in result.value]
        if isinstance(result, (OracleParseError, OracleTimeout, OracleUnavailable)):
            logger.warning("[CONTACTS] No contacts from %r: %s", item.title, describe_failure(result))
        else:
            logger.warning("[CONTACTS] No contacts from %r: %s", item.title, result)
        return []

    async def extract_from_news(self, items: Sequence[NewsItem]) -> list[Contact]:
        """
        Extract and deduplicate contacts from every news item.

        Returns:
            Deduplicated contacts, each carrying the news items it was found in
        """
        scheduler = BatchScheduler(1, self.delay_seconds, sleep=self._sleep)
        results = await scheduler.run(list(items), self.oracle.extract_contacts)

        found: list[Contact] = []
        for item, result in zip(items, results):
            found.extend(self._contacts_for(item, result))

        contacts = dedupe_contacts(found)
        logger.info(
            "[CONTACTS] Extracted %d contacts from %d news items", len(contacts), len(items)
        )
        return contacts

    def extract_sync(self, items: Sequence[NewsItem]) -> list[Contact]:
        """Synchronous wrapper for extract_from_news()."""
        return asyncio.run(self.extract_from_news(items))
