"""
Lead pipeline service - dispatches enrich/score batches.

Lead resolution is all-or-nothing: if any requested id is missing from
the caller's tenant the whole batch is rejected. Once resolved, each lead
is processed and persisted on its own; a failed write is rolled back and
reported in the per-item results while the rest of the batch continues.
"""
import logging
import uuid
from typing import Any, List

from leadqual.core.exceptions import (
    NotFoundError,
    PartialAccessDeniedError,
    PersistenceError,
    TenantNotFoundError,
    UnauthorizedError,
)
from leadqual.enrichment.service import apply_enrichment, enrich_lead
from leadqual.models.lead import Lead
from leadqual.models.scoring import LeadScore
from leadqual.repositories.lead_repo import LeadRepository
from leadqual.repositories.scoring_repo import LeadScoreRepository
from leadqual.repositories.user_repo import UserRepository
from leadqual.schemas.enrichment import (
    EnrichBatchResult,
    EnrichmentStatusResponse,
    EnrichRequest,
    LeadItemResult,
    PipelineResponse,
    ScoreBatchResult,
    ScoredLead,
    ScoreRequest,
    parse_pipeline_request,
)
from leadqual.schemas.lead import LeadResponse, LeadScoreResponse
from leadqual.scoring.service import apply_score, score_lead

logger = logging.getLogger(__name__)


class LeadPipelineService:
    """Service for enrichment and scoring batches."""

    def __init__(
        self,
        user_repo: UserRepository,
        lead_repo: LeadRepository,
        score_repo: LeadScoreRepository
    ):
        self.user_repo = user_repo
        self.lead_repo = lead_repo
        self.score_repo = score_repo

    async def dispatch(self, user_id: uuid.UUID, body: Any) -> PipelineResponse:
        """
        Validate the payload, resolve tenant and leads, run the requested stage.

        Validation happens before any lookup, so a bad action or payload
        never touches the database.
        """
        request = parse_pipeline_request(body)
        org_id = await self.resolve_tenant(user_id)
        leads = await self.resolve_leads(org_id, request.lead_ids)

        if isinstance(request, EnrichRequest):
            data = await self.enrich_leads(leads, request)
        else:
            data = await self.score_leads(leads, request)
        return PipelineResponse(success=True, data=data)

    async def resolve_tenant(self, user_id: uuid.UUID) -> uuid.UUID:
        """Map the authenticated user to their organization."""
        user = await self.user_repo.get(user_id)
        if not user or not user.current_org_id:
            raise TenantNotFoundError()
        if not user.is_active:
            raise UnauthorizedError("User account is deactivated")
        return user.current_org_id

    async def resolve_leads(self, org_id: uuid.UUID, lead_ids: List[uuid.UUID]) -> List[Lead]:
        """Fetch every requested lead in request order, or reject the batch."""
        leads = await self.lead_repo.get_many_for_org(org_id, lead_ids)
        if len(leads) != len(lead_ids):
            logger.warning(
                f"Rejected batch for org {org_id}: requested {len(lead_ids)} leads, "
                f"found {len(leads)}"
            )
            raise PartialAccessDeniedError(requested=len(lead_ids), found=len(leads))

        by_id = {lead.id: lead for lead in leads}
        return [by_id[lead_id] for lead_id in lead_ids]

    async def enrich_leads(self, leads: List[Lead], request: EnrichRequest) -> EnrichBatchResult:
        """Enrich and persist each lead."""
        enriched: List[LeadResponse] = []
        results: List[LeadItemResult] = []

        # Ids are read up front; a rollback expires every loaded lead,
        # so each lead after the first failure is reloaded before use
        lead_ids = [lead.id for lead in leads]
        rolled_back = False

        for lead_id, lead in zip(lead_ids, leads):
            try:
                if rolled_back:
                    await self.lead_repo.refresh(lead)
                fields = enrich_lead(lead, request.enrichment_level, request.providers)
                apply_enrichment(lead, fields, request.enrichment_level, request.providers)
                lead = await self.lead_repo.save(lead)
            except PersistenceError as e:
                logger.error(f"Error updating lead {lead_id}: {e.__cause__ or e}")
                results.append(LeadItemResult(lead_id=lead_id, ok=False, error=e.message))
                rolled_back = True
                continue

            enriched.append(LeadResponse.model_validate(lead))
            results.append(LeadItemResult(lead_id=lead_id, ok=True))

        logger.info(
            f"Enriched {len(enriched)}/{len(leads)} leads at level "
            f"{request.enrichment_level.value}"
        )
        return EnrichBatchResult(
            enriched_leads=enriched,
            count=len(enriched),
            enrichment_level=request.enrichment_level,
            results=results,
        )

    async def score_leads(self, leads: List[Lead], request: ScoreRequest) -> ScoreBatchResult:
        """Score each lead; the score row and lead update commit together."""
        scored: List[ScoredLead] = []
        results: List[LeadItemResult] = []

        lead_ids = [lead.id for lead in leads]
        rolled_back = False

        for lead_id, lead in zip(lead_ids, leads):
            try:
                if rolled_back:
                    await self.lead_repo.refresh(lead)
                breakdown = score_lead(lead, request.weights)
                record = apply_score(lead, breakdown, request.weights)
                lead = await self.lead_repo.save(lead, record)
            except PersistenceError as e:
                logger.error(f"Error creating score record for lead {lead_id}: {e.__cause__ or e}")
                results.append(LeadItemResult(lead_id=lead_id, ok=False, error=e.message))
                rolled_back = True
                continue

            scored.append(ScoredLead(
                lead=LeadResponse.model_validate(lead),
                scores=LeadScoreResponse.model_validate(record),
            ))
            results.append(LeadItemResult(lead_id=lead_id, ok=True))

        logger.info(f"Scored {len(scored)}/{len(leads)} leads")
        return ScoreBatchResult(
            scored_leads=scored,
            count=len(scored),
            weights=request.weights,
            results=results,
        )

    async def get_lead(self, user_id: uuid.UUID, lead_id: uuid.UUID) -> Lead:
        """Get a lead in the caller's organization."""
        org_id = await self.resolve_tenant(user_id)
        lead = await self.lead_repo.get_for_org(org_id, lead_id)
        if not lead:
            raise NotFoundError("Lead", str(lead_id))
        return lead

    async def get_enrichment_status(
        self,
        user_id: uuid.UUID,
        lead_id: uuid.UUID
    ) -> EnrichmentStatusResponse:
        """Enrichment state and last run metadata of a lead."""
        lead = await self.get_lead(user_id, lead_id)
        postprocessing = lead.postprocessing or {}
        return EnrichmentStatusResponse(
            lead_id=lead.id,
            status=lead.status,
            score=lead.score,
            sources=lead.sources or [],
            enriched_at=lead.enriched_at,
            last_enrichment=postprocessing.get("enrichment"),
        )

    async def list_scores(self, user_id: uuid.UUID, lead_id: uuid.UUID) -> List[LeadScore]:
        """Scoring history of a lead, newest first."""
        lead = await self.get_lead(user_id, lead_id)
        return await self.score_repo.list_for_lead(lead.org_id, lead.id)
