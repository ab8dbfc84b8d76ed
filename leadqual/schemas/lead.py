"""
Lead schemas.
"""
import uuid
from typing import Optional, List, Dict
from datetime import datetime
from pydantic import BaseModel


class ContactResponse(BaseModel):
    """Primary contact of a lead."""
    id: uuid.UUID
    full_name: str
    title: Optional[str]
    dept: Optional[str]
    linkedin_url: Optional[str]
    email_status: str

    class Config:
        from_attributes = True


class LeadResponse(BaseModel):
    """Lead response."""
    id: uuid.UUID
    org_id: uuid.UUID
    name: str
    industry: Optional[str]
    revenue_band: Optional[str]
    employee_band: Optional[str]
    entity_type: Optional[str]
    technographics: Optional[List[str]] = []
    installed_tools_hints: Optional[List[str]] = []
    intent_keywords: Optional[List[str]] = []
    risk_flags: Optional[List[str]] = []
    compliance: Optional[dict] = {}
    sources: Optional[List[str]] = []
    postprocessing: Optional[dict] = {}
    status: str
    score: int
    icp_profile_id: Optional[uuid.UUID]
    contact_id: Optional[uuid.UUID]
    created_at: datetime
    updated_at: datetime
    enriched_at: Optional[datetime]

    class Config:
        from_attributes = True


class LeadScoreResponse(BaseModel):
    """Scoring event response."""
    id: uuid.UUID
    lead_id: uuid.UUID
    org_id: uuid.UUID
    fit: float
    intent: float
    engagement: float
    viability: float
    recency: float
    composite: float
    weights: Dict[str, float]
    segment: str
    created_at: datetime

    class Config:
        from_attributes = True
