"""
Lead enrichment & scoring API routes.
"""
import uuid
from typing import List

from fastapi import APIRouter, Depends, Request

from leadqual.config import settings
from leadqual.core.exceptions import ValidationError
from leadqual.schemas.enrichment import EnrichmentStatusResponse, PipelineResponse
from leadqual.schemas.lead import LeadScoreResponse
from leadqual.services.lead_pipeline_service import LeadPipelineService
from leadqual.api.deps import get_current_user_id, get_pipeline_service

router = APIRouter(prefix=f"{settings.API_PREFIX}/leads/enrichment", tags=["Enrichment"])


@router.post("", response_model=PipelineResponse)
async def enrich_or_score_leads(
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: LeadPipelineService = Depends(get_pipeline_service)
):
    """
    Enrich or score a batch of leads.

    Body: `action` ("enrich" | "score"), `lead_ids`, and either
    `enrichment_level`/`providers` or `weights`.
    """
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError(details=[{
            "loc": [],
            "msg": "Request body must be valid JSON",
            "type": "json_invalid",
        }])
    return await service.dispatch(user_id, body)


@router.get("/{lead_id}", response_model=EnrichmentStatusResponse)
async def get_enrichment_status(
    lead_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: LeadPipelineService = Depends(get_pipeline_service)
):
    """Get enrichment status for a lead."""
    return await service.get_enrichment_status(user_id, lead_id)


@router.get("/{lead_id}/scores", response_model=List[LeadScoreResponse])
async def list_lead_scores(
    lead_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: LeadPipelineService = Depends(get_pipeline_service)
):
    """Scoring history for a lead, newest first."""
    return await service.list_scores(user_id, lead_id)
