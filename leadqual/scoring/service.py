"""
Scoring stage.

Five sub-scores in [0, 1], each a base value plus fixed increments gated
on what the lead already carries, combined into a 0-100 composite with
caller-supplied weights. Weights are not renormalised.
"""
import math
from datetime import datetime
from typing import Optional

from leadqual.core.clock import as_naive_utc, utcnow
from leadqual.models.lead import EmailStatus, EntityType, Lead, LeadStatus, advance_status
from leadqual.models.scoring import LeadScore, Segment
from leadqual.schemas.enrichment import ScoreBreakdown, ScoringWeights

SECONDS_PER_DAY = 60 * 60 * 24

# (max age in days, score); anything older scores RECENCY_FLOOR
RECENCY_STEPS = [(1, 1.0), (7, 0.8), (30, 0.6), (90, 0.4)]
RECENCY_FLOOR = 0.2


def _clamp(score: float, upper: float = 1.0) -> float:
    # Rounding first keeps sums like 0.5 + 0.1 + 0.1 + 0.1 + 0.2 at exactly 1.0
    return max(0.0, min(round(score, 6), upper))


def calculate_fit_score(lead: Lead) -> float:
    """Firmographic completeness plus ICP linkage."""
    score = 0.5
    if lead.industry:
        score += 0.1
    if lead.revenue_band:
        score += 0.1
    if lead.employee_band:
        score += 0.1
    if lead.icp_profile_id:
        score += 0.2
    return _clamp(score)


def calculate_intent_score(lead: Lead) -> float:
    score = 0.3
    if lead.intent_keywords:
        score += min(len(lead.intent_keywords) * 0.1, 0.4)
    if lead.technographics:
        score += min(len(lead.technographics) * 0.05, 0.3)
    return _clamp(score)


def calculate_engagement_score(lead: Lead) -> float:
    """Reads the lead's primary contact; no contact means base score only."""
    score = 0.2
    contact = lead.contact
    if contact is None:
        return score

    if contact.email_status == EmailStatus.VERIFIED.value:
        score += 0.3
    if contact.linkedin_url:
        score += 0.2
    if contact.title and contact.dept:
        score += 0.3
    return _clamp(score)


def calculate_viability_score(lead: Lead) -> float:
    score = 0.4
    # A missing risk_flags column is not the same as "no risks found"
    if lead.risk_flags is not None and len(lead.risk_flags) == 0:
        score += 0.2
    if lead.compliance:
        score += 0.2
    if lead.entity_type == EntityType.PUBLIC.value:
        score += 0.2
    return _clamp(score)


def calculate_recency_score(created_at: datetime, now: Optional[datetime] = None) -> float:
    """Step function on lead age; boundaries are inclusive."""
    now = as_naive_utc(now or utcnow())
    age_days = (now - as_naive_utc(created_at)).total_seconds() / SECONDS_PER_DAY

    for max_days, score in RECENCY_STEPS:
        if age_days <= max_days:
            return score
    return RECENCY_FLOOR


def segment_for(composite: float) -> Segment:
    if composite >= 80:
        return Segment.HOT
    if composite >= 60:
        return Segment.WARM
    if composite >= 40:
        return Segment.LUKEWARM
    return Segment.COLD


def score_lead(
    lead: Lead,
    weights: Optional[ScoringWeights] = None,
    now: Optional[datetime] = None
) -> ScoreBreakdown:
    """Compute sub-scores, composite and segment. Pure."""
    weights = weights or ScoringWeights()

    fit = calculate_fit_score(lead)
    intent = calculate_intent_score(lead)
    engagement = calculate_engagement_score(lead)
    viability = calculate_viability_score(lead)
    recency = calculate_recency_score(lead.created_at, now)

    composite = (
        fit * weights.fit +
        intent * weights.intent +
        engagement * weights.engagement +
        viability * weights.viability +
        recency * weights.recency
    ) * 100
    composite = _clamp(composite, upper=100.0)

    return ScoreBreakdown(
        fit=fit,
        intent=intent,
        engagement=engagement,
        viability=viability,
        recency=recency,
        composite=composite,
        segment=segment_for(composite).value,
    )


def apply_score(lead: Lead, breakdown: ScoreBreakdown, weights: ScoringWeights) -> LeadScore:
    """
    Stamp the composite onto the lead and build the scoring event row.
    The caller persists both together.
    """
    lead.score = int(math.floor(breakdown.composite + 0.5))
    lead.status = advance_status(lead.status, LeadStatus.QUALIFIED)
    lead.updated_at = utcnow()

    return LeadScore(
        lead_id=lead.id,
        org_id=lead.org_id,
        fit=breakdown.fit,
        intent=breakdown.intent,
        engagement=breakdown.engagement,
        viability=breakdown.viability,
        recency=breakdown.recency,
        composite=breakdown.composite,
        weights=weights.model_dump(),
        segment=breakdown.segment,
    )
