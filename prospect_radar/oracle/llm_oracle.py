"""LiteLLM-backed oracle.

Renders a prompt, calls the model through the shared LiteLLM client,
extracts the first JSON object from the answer and maps it onto the
structured judgment types. Every failure is converted into a result
variant; nothing raises out of judge_relevance or extract_contacts.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, Union

from ..prompts import render
from ..utils.cost_tracker import PipelineCosts
from ..utils.json_extract import extract_json_object
from ..utils.llm_client import get_completion_async
from .base import (
    UNSPECIFIED_ROLE,
    ContactCandidate,
    OfferMatch,
    OracleOk,
    OracleParseError,
    OracleResult,
    OracleTimeout,
    OracleUnavailable,
    RelevanceJudgment,
    TextOracle,
)

if TYPE_CHECKING:
    from ..company.profile import TargetCompany
    from ..news.models import NewsItem
    from ..offerings.taxonomy import OfferingTaxonomy

logger = logging.getLogger(__name__)

CompletionFn = Callable[..., Awaitable[Any]]


def _clamp_score(value: Any) -> int:
    try:
        score = int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return 1
    return max(1, min(3, score))


def _clamp_confidence(value: Any, default: float = 0.5) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return default
    return max(0.0, min(1.0, confidence))


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _resolve_offerings(names: list, taxonomy: "OfferingTaxonomy") -> list[str]:
    """Map model-written offering names onto taxonomy names; unknown names are dropped."""
    by_lower = {o.lower(): o for o in taxonomy.offerings}
    resolved: list[str] = []
    for name in names:
        name = str(name).strip()
        if not name:
            continue
        exact = by_lower.get(name.lower())
        candidates = [exact] if exact else taxonomy.resolve(name)
        for offering in candidates:
            if offering not in resolved:
                resolved.append(offering)
    return resolved


def parse_relevance_judgment(
    data: dict,
    taxonomy: "OfferingTaxonomy",
    max_categories: int = 3,
) -> RelevanceJudgment:
    """
    Convert the model's JSON into a RelevanceJudgment.

    Scores are clamped to 1..3. A match whose category is not a service
    line is attributed to the line of its first recognised offering.
    Matches left without any taxonomy offering are dropped.
    """
    matches: list[OfferMatch] = []
    for raw in _as_list(data.get("matches")):
        if not isinstance(raw, dict):
            continue

        offerings = _resolve_offerings(_as_list(raw.get("offerings")), taxonomy)
        category = str(raw.get("category") or "").strip()
        if category not in taxonomy:
            if not offerings:
                logger.debug("[ORACLE] Dropping match with unknown category %r", category)
                continue
            category = taxonomy.service_line_of(offerings[0])

        offerings = [o for o in offerings if taxonomy.service_line_of(o) == category]
        if not offerings:
            continue

        matches.append(
            OfferMatch(
                category=category,
                offerings=tuple(offerings),
                relevance_score=_clamp_score(raw.get("relevanceScore")),
                justification=str(raw.get("justification") or "").strip(),
                opportunities=tuple(str(o) for o in _as_list(raw.get("opportunities")) if o),
            )
        )
        if len(matches) >= max_categories:
            break

    return RelevanceJudgment(matches=tuple(matches), summary=str(data.get("summary") or ""))


def parse_contact_candidates(data: dict, default_company: str = "") -> list[ContactCandidate]:
    """Convert the model's JSON into contact candidates; entries without a name are skipped."""
    candidates = []
    for raw in _as_list(data.get("contacts")):
        if not isinstance(raw, dict):
            continue
        full_name = str(raw.get("fullName") or "").strip()
        if not full_name:
            continue
        candidates.append(
            ContactCandidate(
                full_name=full_name,
                role=str(raw.get("role") or "").strip() or UNSPECIFIED_ROLE,
                department=str(raw.get("department") or "").strip(),
                email=str(raw.get("email") or "").strip(),
                phone=str(raw.get("phone") or "").strip(),
                company=str(raw.get("company") or "").strip() or default_company,
                confidence=_clamp_confidence(raw.get("confidenceScore")),
            )
        )
    return candidates


class LiteLLMOracle(TextOracle):
    """
    Oracle backed by any LiteLLM-supported model.

    ``completion`` defaults to utils.llm_client.get_completion_async and
    can be replaced with a coroutine returning ``(text, response)``.
    """

    name = "litellm"
    rate_limited = True

    def __init__(
        self,
        company: "TargetCompany",
        model: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        completion: Optional[CompletionFn] = None,
        costs: Optional[PipelineCosts] = None,
    ):
        from ..config.settings import settings

        self.company = company
        self.model = model or settings.oracle_model
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.oracle_timeout_seconds
        )
        self.max_tokens = max_tokens or settings.oracle_max_tokens
        self.temperature = temperature if temperature is not None else settings.oracle_temperature
        self.completion = completion or get_completion_async
        self.costs = costs if costs is not None else PipelineCosts()

    async def _ask(self, step: str, prompt: str) -> Union[str, OracleTimeout, OracleUnavailable]:
        try:
            text, response = await asyncio.wait_for(
                self.completion(
                    model=self.model,
                    messages=[{"role": "user", "content": prompt}],
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                    return_full_response=True,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning("[ORACLE] %s call timed out after %ss", step, self.timeout_seconds)
            return OracleTimeout(seconds=self.timeout_seconds)
        except Exception as e:
            logger.warning("[ORACLE] %s call failed: %s", step, e)
            return OracleUnavailable(error=str(e))

        self.costs.record(step, self.model, response)
        logger.debug("[ORACLE] %s answered (%d chars)", step, len(text or ""))
        return text or ""

    def _news_fields(self, item: "NewsItem") -> dict[str, str]:
        return {
            "company_name": self.company.name,
            "title": item.title,
            "date": item.date,
            "category": item.category,
            "description": item.description,
            "link": item.link or "",
        }

    async def judge_relevance(
        self,
        item: "NewsItem",
        taxonomy: "OfferingTaxonomy",
        max_categories: int = 3,
    ) -> OracleResult:
        prompt = render(
            "relevance",
            taxonomy=taxonomy.to_prompt(),
            max_categories=str(max_categories),
            **self._news_fields(item),
        )
        answer = await self._ask("relevance", prompt)
        if not isinstance(answer, str):
            return answer

        data = extract_json_object(answer)
        if data is None:
            logger.warning("[ORACLE] No JSON in relevance answer for %r", item.title)
            return OracleParseError(raw_text=answer, reason="no JSON object found")
        return OracleOk(parse_relevance_judgment(data, taxonomy, max_categories))

    async def extract_contacts(self, item: "NewsItem") -> OracleResult:
        prompt = render("contacts", **self._news_fields(item))
        answer = await self._ask("contacts", prompt)
        if not isinstance(answer, str):
            return answer

        data = extract_json_object(answer)
        if data is None:
            logger.warning("[ORACLE] No JSON in contacts answer for %r", item.title)
            return OracleParseError(raw_text=answer, reason="no JSON object found")
        return OracleOk(parse_contact_candidates(data, default_company=self.company.name))
