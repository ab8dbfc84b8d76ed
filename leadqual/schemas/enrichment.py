"""
Enrichment and scoring schemas.
The dispatch payload is a tagged variant on `action`; it is validated
into EnrichRequest or ScoreRequest before any data access.
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from leadqual.config import settings
from leadqual.core.exceptions import InvalidActionError, ValidationError
from leadqual.models.scoring import DEFAULT_WEIGHTS
from leadqual.schemas.lead import LeadResponse, LeadScoreResponse


class EnrichmentLevel(str, Enum):
    BASIC = "BASIC"
    ENHANCED = "ENHANCED"
    PREMIUM = "PREMIUM"


class Provider(str, Enum):
    CLEARBIT = "CLEARBIT"
    ZOOMINFO = "ZOOMINFO"
    OPPORTUNITY = "OPPORTUNITY"
    COMPLIANCE = "COMPLIANCE"


ACTIONS = ("enrich", "score")


class ScoringWeights(BaseModel):
    """Dimension weights; each field defaults independently."""
    fit: float = Field(default=DEFAULT_WEIGHTS["fit"], ge=0, le=1)
    intent: float = Field(default=DEFAULT_WEIGHTS["intent"], ge=0, le=1)
    engagement: float = Field(default=DEFAULT_WEIGHTS["engagement"], ge=0, le=1)
    viability: float = Field(default=DEFAULT_WEIGHTS["viability"], ge=0, le=1)
    recency: float = Field(default=DEFAULT_WEIGHTS["recency"], ge=0, le=1)


class _BatchRequest(BaseModel):
    lead_ids: List[uuid.UUID] = Field(min_length=1, max_length=settings.MAX_BATCH_SIZE)

    @field_validator("lead_ids")
    @classmethod
    def no_duplicate_ids(cls, value: List[uuid.UUID]) -> List[uuid.UUID]:
        if len(set(value)) != len(value):
            raise ValueError("lead_ids must not contain duplicates")
        return value


class EnrichRequest(_BatchRequest):
    """Enrich a batch of leads."""
    action: Literal["enrich"]
    enrichment_level: EnrichmentLevel = EnrichmentLevel.BASIC
    providers: Optional[List[Provider]] = None

    class Config:
        json_schema_extra = {
            "example": {
                "action": "enrich",
                "lead_ids": ["3fa85f64-5717-4562-b3fc-2c963f66afa6"],
                "enrichment_level": "ENHANCED",
                "providers": ["CLEARBIT"]
            }
        }


class ScoreRequest(_BatchRequest):
    """Score a batch of leads."""
    action: Literal["score"]
    weights: ScoringWeights = Field(default_factory=ScoringWeights)

    class Config:
        json_schema_extra = {
            "example": {
                "action": "score",
                "lead_ids": ["3fa85f64-5717-4562-b3fc-2c963f66afa6"],
                "weights": {"fit": 0.4, "intent": 0.3}
            }
        }


PipelineRequest = Annotated[Union[EnrichRequest, ScoreRequest], Field(discriminator="action")]
_pipeline_request_adapter = TypeAdapter(PipelineRequest)


def parse_pipeline_request(body: Any) -> Union[EnrichRequest, ScoreRequest]:
    """
    Validate a raw JSON body into an EnrichRequest or ScoreRequest.

    Raises:
        InvalidActionError: action missing or not one of ACTIONS
        ValidationError: any other shape error, with every failing field listed
    """
    if not isinstance(body, dict):
        raise ValidationError(details=[{
            "loc": [],
            "msg": "Request body must be a JSON object",
            "type": "dict_type",
        }])

    action = body.get("action")
    if action not in ACTIONS:
        raise InvalidActionError(action)

    try:
        return _pipeline_request_adapter.validate_python(body)
    except PydanticValidationError as e:
        details = []
        for err in e.errors():
            loc = list(err["loc"])
            # Drop the union tag pydantic prefixes to each location
            if loc and loc[0] == action:
                loc = loc[1:]
            details.append({"loc": loc, "msg": err["msg"], "type": err["type"]})
        raise ValidationError(details=details)


class EnrichedFields(BaseModel):
    """Output of the enrichment stage. Unset fields leave the lead untouched."""
    sources: List[str]
    risk_flags: List[str] = []
    compliance: Dict[str, bool] = {}
    industry: Optional[str] = None
    revenue_band: Optional[str] = None
    employee_band: Optional[str] = None
    technographics: Optional[List[str]] = None
    installed_tools_hints: Optional[List[str]] = None
    intent_keywords: Optional[List[str]] = None


class ScoreBreakdown(BaseModel):
    """Output of the scoring stage."""
    fit: float
    intent: float
    engagement: float
    viability: float
    recency: float
    composite: float
    segment: str


class LeadItemResult(BaseModel):
    """Per-lead outcome within a batch."""
    lead_id: uuid.UUID
    ok: bool
    error: Optional[str] = None


class ScoredLead(BaseModel):
    lead: LeadResponse
    scores: LeadScoreResponse


class EnrichBatchResult(BaseModel):
    enriched_leads: List[LeadResponse]
    count: int
    enrichment_level: EnrichmentLevel
    results: List[LeadItemResult]


class ScoreBatchResult(BaseModel):
    scored_leads: List[ScoredLead]
    count: int
    weights: ScoringWeights
    results: List[LeadItemResult]


class PipelineResponse(BaseModel):
    success: bool = True
    data: Union[EnrichBatchResult, ScoreBatchResult]


class EnrichmentStatusResponse(BaseModel):
    """Enrichment state of a single lead."""
    lead_id: uuid.UUID
    status: str
    score: int
    sources: List[str]
    enriched_at: Optional[datetime] = None
    last_enrichment: Optional[dict] = None
