"""Relevance matrix construction.

Drives the oracle over a batch of news items and flattens each grouped
judgment into RelevanceRow objects. A news item whose judgment fails
(timeout, unparseable answer, provider error) contributes no rows and
never aborts the build.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, Optional, Sequence

from ..exceptions import TaxonomyError
from ..news.models import NewsItem
from ..offerings.taxonomy import OfferingTaxonomy
from ..oracle.base import (
    OracleOk,
    OracleParseError,
    OracleResult,
    OracleTimeout,
    OracleUnavailable,
    RelevanceJudgment,
    TextOracle,
    describe_failure,
)
from ..utils.rate_limit import BatchScheduler
from .models import RelevanceRow

logger = logging.getLogger(__name__)


def flatten_judgment(item: NewsItem, judgment: RelevanceJudgment) -> list[RelevanceRow]:
    """One row per (service line, offer detail) in the judgment."""
    return [RelevanceRow.from_match(item, match) for match in judgment.matches]


def merge_matrices(*matrices: Iterable[RelevanceRow]) -> list[RelevanceRow]:
    """Concatenate matrices from several sources; rows are not deduplicated."""
    merged: list[RelevanceRow] = []
    for matrix in matrices:
        merged.extend(matrix)
    return merged


def mark_analyzed(items: Sequence[NewsItem], limit: Optional[int]) -> list[NewsItem]:
    """Flag the first ``limit`` items (all when None) as analyzed."""
    cutoff = len(items) if limit is None else limit
    return [item.mark_analyzed() if i < cutoff else item for i, item in enumerate(items)]


class RelevanceMatrixBuilder:
    """
    Builds the news x offering relevance matrix.

    A rate-limited oracle is called in batches of ``batch_size``
    concurrent requests with ``delay_seconds`` between batches. A local
    oracle (keyword fallback) is called item by item with no pacing.
    """

    def __init__(
        self,
        oracle: TextOracle,
        batch_size: Optional[int] = None,
        delay_seconds: Optional[float] = None,
        max_categories: int = 3,
        max_articles: Optional[int] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        from ..config.settings import settings

        self.oracle = oracle
        self.batch_size = batch_size or settings.batch_size
        self.delay_seconds = (
            delay_seconds if delay_seconds is not None else settings.batch_delay_seconds
        )
        self.max_categories = max_categories
        self.max_articles = max_articles
        self._sleep = sleep

    def _rows_for(self, item: NewsItem, result: Any) -> list[RelevanceRow]:
        if isinstance(result, OracleOk):
            rows = flatten_judgment(item, result.value)
            logger.debug("[MATRIX] %r -> %d rows", item.title, len(rows))
            return rows
        if isinstance(result, (OracleParseError, OracleTimeout, OracleUnavailable)):
            logger.warning("[MATRIX] Skipping %r: %s", item.title, describe_failure(result))
            return []
        # Exception escaped the oracle (captured by the scheduler).
        logger.warning("[MATRIX] Skipping %r: %s", item.title, result)
        return []

    async def _judge(self, item: NewsItem, taxonomy: OfferingTaxonomy) -> OracleResult:
        return await self.oracle.judge_relevance(item, taxonomy, self.max_categories)

    async def build_matrix(
        self,
        news_items: Sequence[NewsItem],
        taxonomy: Optional[OfferingTaxonomy],
    ) -> list[RelevanceRow]:
        """
        Judge every news item against the taxonomy.

        Args:
            news_items: Normalized news items (newest first)
            taxonomy: Offering taxonomy; required

        Returns:
            Flat list of RelevanceRow, grouped by news item in input order

        Raises:
            TaxonomyError: If no taxonomy is provided
        """
        if taxonomy is None:
            raise TaxonomyError("Cannot build a relevance matrix without a taxonomy")

        items = list(news_items)
        if self.max_articles is not None:
            items = items[: self.max_articles]
        if not items:
            return []

        logger.info(
            "[MATRIX] Judging %d news items with %s oracle", len(items), self.oracle.name
        )

        if self.oracle.rate_limited:
            scheduler = BatchScheduler(self.batch_size, self.delay_seconds, sleep=self._sleep)
            results = await scheduler.run(items, lambda item: self._judge(item, taxonomy))
        else:
            results = []
            for item in items:
                try:
                    results.append(await self._judge(item, taxonomy))
                except Exception as e:
                    results.append(e)

        matrix: list[RelevanceRow] = []
        for item, result in zip(items, results):
            try:
                matrix.extend(self._rows_for(item, result))
            except ValueError as e:
                logger.warning("[MATRIX] Skipping %r: invalid judgment: %s", item.title, e)

        logger.info(
            "[MATRIX] %d rows from %d news items (%d without matches)",
            len(matrix),
            len(items),
            len(items) - len({row.news_title for row in matrix}),
        )
        return matrix

    def build_matrix_sync(
        self,
        news_items: Sequence[NewsItem],
        taxonomy: Optional[OfferingTaxonomy],
    ) -> list[RelevanceRow]:
        """Synchronous wrapper for build_matrix()."""
        return asyncio.run(self.build_matrix(news_items, taxonomy))
