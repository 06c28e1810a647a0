"""In-memory dashboard state, owned by the application instance."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..company.profile import TargetCompany, load_target_company
from ..contacts.models import Contact
from ..matrix.models import RelevanceRow
from ..news.models import NewsItem
from ..offerings.taxonomy import OfferingTaxonomy, load_taxonomy
from ..opportunities.deriver import group_engagements
from ..opportunities.ledger import SelectionLedger
from ..opportunities.models import Engagement
from ..oracle.base import TextOracle
from ..oracle.keyword_oracle import KeywordOracle
from ..utils.cost_tracker import PipelineCosts

logger = logging.getLogger(__name__)


@dataclass
class DashboardState:
    """
    Everything one dashboard session knows. Nothing is persisted.

    The selection ledger lives here and is handed to whoever needs it;
    there is no module-level ledger.
    """

    taxonomy: OfferingTaxonomy
    company: TargetCompany
    ledger: SelectionLedger = field(default_factory=SelectionLedger)
    news: list[NewsItem] = field(default_factory=list)
    matrix: list[RelevanceRow] = field(default_factory=list)
    engagements: list[Engagement] = field(default_factory=list)
    contacts: list[Contact] = field(default_factory=list)
    costs: PipelineCosts = field(default_factory=PipelineCosts)
    llm_oracle: Optional[TextOracle] = None

    @classmethod
    def from_config(cls) -> "DashboardState":
        return cls(taxonomy=load_taxonomy(), company=load_target_company())

    @property
    def engagements_by_offering(self) -> dict[str, list[Engagement]]:
        return group_engagements(self.engagements, self.taxonomy)

    def oracle(self, offline: bool = False) -> TextOracle:
        """The LLM oracle unless offline or unconfigured; keyword fallback otherwise."""
        if not offline:
            if self.llm_oracle is None:
                from ..config.settings import settings

                if settings.oracle_available:
                    from ..oracle.llm_oracle import LiteLLMOracle

                    self.llm_oracle = LiteLLMOracle(self.company, costs=self.costs)
            if self.llm_oracle is not None:
                return self.llm_oracle
            logger.info("[STATE] No LLM oracle configured, using keyword fallback")
        return KeywordOracle(self.company.name)
