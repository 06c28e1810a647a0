"""Usage and cost accounting for oracle LLM calls.

Each oracle step ("relevance", "contacts") accumulates the tokens and
price of its calls, priced with LiteLLM's model table.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import litellm

logger = logging.getLogger(__name__)

# USD per 1M tokens (input, output), for models LiteLLM cannot price.
_FAMILY_RATES = {
    "opus": (15.0, 75.0),
    "sonnet": (3.0, 15.0),
    "haiku": (0.8, 4.0),
    "gemini": (0.5, 1.5),
}


@dataclass
class StepCost:
    """Running totals for one oracle step."""

    step_name: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    cost_usd: float = 0.0
    call_count: int = 0

    def add(self, input_tokens: int, output_tokens: int, cost_usd: float) -> None:
        self.input_tokens += input_tokens
        self.output_tokens += output_tokens
        self.cost_usd += cost_usd
        self.call_count += 1

    def to_dict(self) -> dict:
        return {
            "model": self.model,
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "cost_usd": round(self.cost_usd, 6),
            "call_count": self.call_count,
        }


@dataclass
class PipelineCosts:
    """Per-step usage of one run (CLI) or one dashboard session."""

    steps: dict[str, StepCost] = field(default_factory=dict)

    def record(self, step_name: str, model: str, response: Any) -> None:
        """Account one LiteLLM response (None for canned replies) under ``step_name``."""
        step = self.steps.setdefault(step_name, StepCost(step_name=step_name, model=model))
        step.add(*extract_usage_from_litellm_response(response))

    def total_cost(self) -> float:
        return sum(s.cost_usd for s in self.steps.values())

    def to_dict(self) -> dict:
        return {
            "total_cost_usd": round(self.total_cost(), 6),
            "total_input_tokens": sum(s.input_tokens for s in self.steps.values()),
            "total_output_tokens": sum(s.output_tokens for s in self.steps.values()),
            "steps": {name: step.to_dict() for name, step in self.steps.items()},
        }


def calculate_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    """Price a call from token counts; per-family rates when LiteLLM has no entry."""
    try:
        cost = litellm.completion_cost(
            model=model,
            prompt_tokens=input_tokens,
            completion_tokens=output_tokens,
        )
        if cost:
            return cost
    except Exception as e:
        logger.warning("[COST] No LiteLLM pricing for model %s: %s", model, e)

    lowered = model.lower()
    for family, (input_rate, output_rate) in _FAMILY_RATES.items():
        if family in lowered:
            return (input_tokens * input_rate + output_tokens * output_rate) / 1_000_000
    return 0.0


def extract_usage_from_litellm_response(response: Any) -> tuple[int, int, float]:
    """(input_tokens, output_tokens, cost_usd) of a LiteLLM response; zeros without usage."""
    usage = getattr(response, "usage", None)
    if usage is None:
        return 0, 0, 0.0

    input_tokens = usage.prompt_tokens or 0
    output_tokens = usage.completion_tokens or 0
    try:
        cost = litellm.completion_cost(completion_response=response) or 0.0
    except Exception as e:
        logger.warning("[COST] Could not price LiteLLM response: %s", e)
        cost = 0.0
    if not cost:
        cost = calculate_cost(getattr(response, "model", None) or "unknown", input_tokens, output_tokens)
    return input_tokens, output_tokens, cost
