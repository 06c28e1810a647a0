from .base import (
    ContactCandidate,
    OfferMatch,
    OracleOk,
    OracleParseError,
    OracleResult,
    OracleTimeout,
    OracleUnavailable,
    RelevanceJudgment,
    TextOracle,
    describe_failure,
)
from .keyword_oracle import KeywordOracle, default_oracle, find_contacts_in_text
from .llm_oracle import LiteLLMOracle

__all__ = [
    "ContactCandidate",
    "OfferMatch",
    "OracleOk",
    "OracleParseError",
    "OracleResult",
    "OracleTimeout",
    "OracleUnavailable",
    "RelevanceJudgment",
    "TextOracle",
    "describe_failure",
    "KeywordOracle",
    "LiteLLMOracle",
    "default_oracle",
    "find_contacts_in_text",
]
