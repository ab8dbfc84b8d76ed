"""
Scoring models - one immutable row per scoring event.
The weight vector is stored with the row so history survives later
re-scoring with different weights.
"""
import uuid
from datetime import datetime
from enum import Enum

from sqlmodel import SQLModel, Field
from sqlalchemy import Column

from leadqual.core.clock import utcnow
from leadqual.models.lead import JSONType


class Segment(str, Enum):
    HOT = "HOT"
    WARM = "WARM"
    LUKEWARM = "LUKEWARM"
    COLD = "COLD"


DEFAULT_WEIGHTS = {
    "fit": 0.3,
    "intent": 0.25,
    "engagement": 0.2,
    "viability": 0.15,
    "recency": 0.1,
}


class LeadScore(SQLModel, table=True):
    """
    Scoring event for a lead.
    Sub-scores are fractions in [0, 1]; composite is a percentage.
    """
    __tablename__ = "lead_score"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    lead_id: uuid.UUID = Field(foreign_key="lead.id", index=True)
    org_id: uuid.UUID = Field(foreign_key="organization.id", index=True)

    fit: float
    intent: float
    engagement: float
    viability: float
    recency: float
    composite: float

    weights: dict = Field(default_factory=lambda: dict(DEFAULT_WEIGHTS), sa_column=Column(JSONType))
    segment: str = Field(index=True)  # HOT, WARM, LUKEWARM, COLD

    created_at: datetime = Field(default_factory=utcnow)
