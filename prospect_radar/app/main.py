"""FastAPI web application for the prospecting dashboard."""

import logging
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request

from .models import (
    BuildMatrixRequest,
    ContactData,
    ContactRowsRequest,
    CostBreakdown,
    DeepMatchData,
    EngagementsRequest,
    ExtractContactsRequest,
    MatrixResponse,
    OpportunityData,
    RelevanceRowData,
    RolesResponse,
    SelectionResponse,
    WhiteSpaceResponse,
)
from .state import DashboardState
from ..config.settings import settings
from ..contacts.dedupe import dedupe_contacts
from ..contacts.extraction import ContactExtractor
from ..contacts.importer import normalize_contact_rows
from ..contacts.roles import identify_roles_in_news, match_contacts_to_roles, missing_roles
from ..contacts.scorer import deep_match_contacts, rank_contacts, recommend_by_opportunity
from ..exceptions import ImportFormatError, TaxonomyError
from ..matrix.builder import RelevanceMatrixBuilder, mark_analyzed, merge_matrices
from ..matrix.views import filter_matrix, group_by_news
from ..news.fetcher import NewsFetcher
from ..news.normalizer import normalize_batch
from ..opportunities.deriver import (
    find_white_space,
    new_opportunities,
    offering_stats,
    service_line_stats,
    yearly_stats,
)
from ..opportunities.models import Engagement, EngagementStatus, SelectedOpportunity

logger = logging.getLogger(__name__)


def get_state(request: Request) -> DashboardState:
    return request.app.state.dashboard


def _opportunity(data: OpportunityData) -> SelectedOpportunity:
    return SelectedOpportunity(**data.model_dump())


def _selection(state: DashboardState, changed: bool = False) -> SelectionResponse:
    return SelectionResponse(
        selected=[OpportunityData(**o.to_dict()) for o in state.ledger.get_all()],
        changed=changed,
    )


def _costs(state: DashboardState) -> Optional[CostBreakdown]:
    if not state.costs.steps:
        return None
    return CostBreakdown(**state.costs.to_dict())


def create_app(state: Optional[DashboardState] = None) -> FastAPI:
    """Build the app around one DashboardState (loaded from config when not given)."""
    app = FastAPI(title="Prospect Radar")
    app.state.dashboard = state or DashboardState.from_config()

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "oracle": "litellm" if settings.oracle_available else "keywords"}

    @app.get("/api/taxonomy")
    async def get_taxonomy(state: DashboardState = Depends(get_state)):
        return state.taxonomy.to_dict()

    @app.get("/api/company")
    async def get_company(state: DashboardState = Depends(get_state)):
        return state.company.to_dict()

    # ========================================================================
    # Relevance matrix
    # ========================================================================

    @app.post("/api/matrix", response_model=MatrixResponse)
    async def build_matrix(request: BuildMatrixRequest, state: DashboardState = Depends(get_state)):
        """Normalize news (posted and/or fetched), judge it and store the matrix."""
        records = [dict(item.model_dump(), source=request.source) for item in request.news]
        if request.fetch_feeds:
            fetcher = NewsFetcher(days_back=settings.news_days_back, quick_mode=request.quick)
            records.extend(await fetcher.fetch_all())

        items = normalize_batch(records, company=state.company)
        builder = RelevanceMatrixBuilder(
            state.oracle(offline=request.offline),
            max_articles=settings.max_articles_to_analyze,
        )
        try:
            rows = await builder.build_matrix(items, state.taxonomy)
        except TaxonomyError as e:
            logger.error("[API] Matrix build failed: %s", e)
            raise HTTPException(status_code=500, detail=str(e))

        analyzed = mark_analyzed(items, settings.max_articles_to_analyze)
        if request.merge:
            state.news = state.news + analyzed
            state.matrix = merge_matrices(state.matrix, rows)
        else:
            state.news = analyzed
            state.matrix = rows

        return MatrixResponse(
            rows=[RelevanceRowData(**r.to_dict()) for r in state.matrix],
            news_count=len(state.news),
            analyzed_count=sum(1 for n in state.news if n.analyzed),
            costs=_costs(state),
        )

    @app.get("/api/matrix", response_model=list[RelevanceRowData])
    async def get_matrix(
        service_line: str = "all",
        search: str = "",
        min_relevance: int = 0,
        feed_only: bool = False,
        state: DashboardState = Depends(get_state),
    ):
        rows = filter_matrix(state.matrix, service_line, search, min_relevance, feed_only)
        return [RelevanceRowData(**r.to_dict()) for r in rows]

    @app.get("/api/news")
    async def get_grouped_news(
        service_line: str = "all",
        search: str = "",
        min_relevance: int = 0,
        feed_only: bool = False,
        high_potential_only: bool = False,
        state: DashboardState = Depends(get_state),
    ):
        """Matrix grouped by news item, with white-space flags per offer."""
        rows = filter_matrix(state.matrix, service_line, search, min_relevance, feed_only)
        groups = group_by_news(rows, state.engagements_by_offering, high_potential_only)
        return [g.to_dict() for g in groups]

    # ========================================================================
    # Engagements and opportunities
    # ========================================================================

    @app.put("/api/engagements")
    async def set_engagements(request: EngagementsRequest, state: DashboardState = Depends(get_state)):
        state.engagements = [
            Engagement(
                offering=e.offering,
                status=EngagementStatus.from_label(e.status),
                estimated_value=e.estimated_value,
                name=e.name,
                close_date=e.close_date,
            )
            for e in request.engagements
        ]
        return {"count": len(state.engagements)}

    @app.get("/api/stats")
    async def get_stats(state: DashboardState = Depends(get_state)):
        per_offering = offering_stats(state.engagements_by_offering)
        return {
            "offerings": {k: v.to_dict() for k, v in per_offering.items()},
            "service_lines": {
                k: v.to_dict() for k, v in service_line_stats(state.taxonomy, per_offering).items()
            },
            "years": {k: v.to_dict() for k, v in yearly_stats(state.engagements).items()},
        }

    @app.get("/api/white-space", response_model=WhiteSpaceResponse)
    async def get_white_space(state: DashboardState = Depends(get_state)):
        engagements = state.engagements_by_offering
        return WhiteSpaceResponse(
            offerings=find_white_space(state.matrix, state.taxonomy, engagements),
            new_opportunities=[
                OpportunityData(**o.to_dict()) for o in new_opportunities(state.matrix, engagements)
            ],
        )

    # ========================================================================
    # Selection ledger
    # ========================================================================

    @app.get("/api/selection", response_model=SelectionResponse)
    async def get_selection(state: DashboardState = Depends(get_state)):
        return _selection(state)

    @app.post("/api/selection", response_model=SelectionResponse)
    async def select_opportunity(data: OpportunityData, state: DashboardState = Depends(get_state)):
        changed = state.ledger.select(_opportunity(data))
        return _selection(state, changed)

    @app.post("/api/selection/deselect", response_model=SelectionResponse)
    async def deselect_opportunity(data: OpportunityData, state: DashboardState = Depends(get_state)):
        changed = state.ledger.deselect(_opportunity(data))
        return _selection(state, changed)

    @app.delete("/api/selection", response_model=SelectionResponse)
    async def clear_selection(state: DashboardState = Depends(get_state)):
        changed = len(state.ledger) > 0
        state.ledger.clear()
        return _selection(state, changed)

    # ========================================================================
    # Contacts
    # ========================================================================

    @app.get("/api/contacts", response_model=list[ContactData])
    async def list_contacts(state: DashboardState = Depends(get_state)):
        return [ContactData(**c.to_dict()) for c in state.contacts]

    @app.post("/api/contacts/import", response_model=list[ContactData])
    async def import_contact_rows(request: ContactRowsRequest, state: DashboardState = Depends(get_state)):
        try:
            imported = normalize_contact_rows(request.rows, request.default_company)
        except ImportFormatError as e:
            raise HTTPException(status_code=400, detail=str(e))
        existing = [] if request.replace else state.contacts
        state.contacts = dedupe_contacts(existing + imported)
        return [ContactData(**c.to_dict()) for c in state.contacts]

    @app.post("/api/contacts/extract", response_model=list[ContactData])
    async def extract_contacts(request: ExtractContactsRequest, state: DashboardState = Depends(get_state)):
        """Extract contacts from the analyzed news and merge them into the known contacts."""
        items = [n for n in state.news if n.analyzed]
        if request.max_items:
            items = items[: request.max_items]
        extractor = ContactExtractor(state.oracle(offline=request.offline))
        found = await extractor.extract_from_news(items)
        state.contacts = dedupe_contacts(state.contacts + found)
        return [ContactData(**c.to_dict()) for c in found]

    @app.get("/api/contacts/ranked", response_model=list[ContactData])
    async def ranked_contacts(state: DashboardState = Depends(get_state)):
        ranked = rank_contacts(state.contacts, state.ledger.get_all(), state.company)
        return [ContactData(**c.to_dict()) for c in ranked]

    @app.get("/api/contacts/recommendations")
    async def recommendations(state: DashboardState = Depends(get_state)):
        by_opportunity = recommend_by_opportunity(state.contacts, state.ledger.get_all(), state.company)
        return {key: [c.to_dict() for c in contacts] for key, contacts in by_opportunity.items()}

    @app.post("/api/contacts/deep-match", response_model=list[DeepMatchData])
    async def deep_match(data: OpportunityData, state: DashboardState = Depends(get_state)):
        matches = deep_match_contacts(state.contacts, _opportunity(data))
        return [DeepMatchData(**m.to_dict()) for m in matches]

    @app.get("/api/roles", response_model=RolesResponse)
    async def roles(state: DashboardState = Depends(get_state)):
        found = identify_roles_in_news(state.matrix)
        matched = match_contacts_to_roles(state.contacts, found)
        return RolesResponse(
            roles=found,
            matched={
                role: [ContactData(**c.to_dict()) for c in contacts]
                for role, contacts in matched.items()
            },
            missing=missing_roles(found, matched),
        )

    return app


app = create_app()


if __name__ == "__main__":
    import os

    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(
        "prospect_radar.app.main:app",
        host="0.0.0.0",
        port=port,
    )
