"""Pydantic request/response models for the web API."""

from typing import Optional, Union

from pydantic import BaseModel, field_validator


class StepCostData(BaseModel):
    """Usage for a single oracle step."""

    model: str
    input_tokens: int
    output_tokens: int
    cost_usd: float
    call_count: int


class CostBreakdown(BaseModel):
    """LLM usage across oracle steps."""

    total_cost_usd: float
    total_input_tokens: int
    total_output_tokens: int
    steps: dict[str, StepCostData] = {}


class NewsItemIn(BaseModel):
    """Raw news record, as typed in manually or fetched from a feed."""

    title: str = ""
    pubDate: str = ""
    categories: Union[list[str], str] = []
    description: str = ""
    link: str = ""


class BuildMatrixRequest(BaseModel):
    """Request body for POST /api/matrix."""

    news: list[NewsItemIn] = []
    fetch_feeds: bool = False
    quick: bool = False
    offline: bool = False
    merge: bool = False
    source: str = "manual"


class RelevanceRowData(BaseModel):
    news_title: str
    news_date: str
    news_category: str
    news_description: str
    news_link: Optional[str] = None
    offer_category: str
    offer_detail: str
    relevance_score: int
    justification: Optional[str] = None


class MatrixResponse(BaseModel):
    rows: list[RelevanceRowData]
    news_count: int = 0
    analyzed_count: int = 0
    costs: Optional[CostBreakdown] = None


class OpportunityData(BaseModel):
    """An opportunity as selected in the dashboard; identity is (category, detail)."""

    category: str
    detail: str
    news: str = ""
    news_date: str = ""
    news_description: str = ""
    news_link: Optional[str] = None
    relevance_score: int = 0


class SelectionResponse(BaseModel):
    selected: list[OpportunityData]
    changed: bool = False


class EngagementData(BaseModel):
    offering: str
    status: str = "Active"
    estimated_value: float = 0.0
    name: str = ""
    close_date: str = ""


class EngagementsRequest(BaseModel):
    engagements: list[EngagementData]


class WhiteSpaceResponse(BaseModel):
    offerings: list[str]
    new_opportunities: list[OpportunityData] = []


class ContactSourceData(BaseModel):
    title: str
    date: str = ""
    link: Optional[str] = None


class ContactData(BaseModel):
    full_name: str
    role: str
    department: str = ""
    email: str = ""
    phone: str = ""
    company: str = ""
    confidence_score: float = 0.5
    sources: list[ContactSourceData] = []
    relevance_score: Optional[float] = None


class DeepMatchData(ContactData):
    match_level: int
    backstop: bool = False


class ContactRowsRequest(BaseModel):
    """Rows from an external contact table, keyed by its own header labels."""

    rows: list[dict]
    default_company: str = "Schneider Electric"
    replace: bool = False


class ExtractContactsRequest(BaseModel):
    offline: bool = False
    max_items: Optional[int] = None

    @field_validator("max_items")
    @classmethod
    def validate_max_items(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("max_items must be at least 1")
        return v


class RolesResponse(BaseModel):
    roles: list[str]
    matched: dict[str, list[ContactData]] = {}
    missing: list[str] = []
