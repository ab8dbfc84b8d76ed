"""
Lead model - the record qualified by the enrichment and scoring pipeline.
Contacts and ICP profiles are referenced by leads but owned elsewhere.
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import Optional, List

from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON
from sqlalchemy.dialects.postgresql import JSONB

from leadqual.core.clock import utcnow

# JSONB on Postgres, plain JSON elsewhere (sqlite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class LeadStatus(str, Enum):
    NEW = "NEW"
    ENRICHED = "ENRICHED"
    QUALIFIED = "QUALIFIED"


# Status only ever moves forward along this order
STATUS_ORDER = [LeadStatus.NEW, LeadStatus.ENRICHED, LeadStatus.QUALIFIED]


class EntityType(str, Enum):
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"
    NONPROFIT = "NONPROFIT"
    OTHER = "OTHER"


class EmailStatus(str, Enum):
    UNVERIFIED = "UNVERIFIED"
    VERIFIED = "VERIFIED"
    UNKNOWN = "UNKNOWN"


REVENUE_BANDS = ["<$10M", "$10–50M", "$50–250M", "$250M–$1B", ">$1B"]
EMPLOYEE_BANDS = ["1–50", "51–200", "201–1k", "1k–5k", ">5k"]


class IcpProfile(SQLModel, table=True):
    """Ideal customer profile a lead can be matched against."""
    __tablename__ = "icp_profile"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(foreign_key="organization.id", index=True)
    name: str
    description: Optional[str] = None
    criteria: dict = Field(default_factory=dict, sa_column=Column(JSONType))
    created_at: datetime = Field(default_factory=utcnow)


class Contact(SQLModel, table=True):
    """Primary contact attached to a lead; read by engagement scoring."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(foreign_key="organization.id", index=True)
    full_name: str
    title: Optional[str] = None
    dept: Optional[str] = None
    linkedin_url: Optional[str] = None
    email_status: str = Field(default=EmailStatus.UNKNOWN.value)  # UNVERIFIED, VERIFIED, UNKNOWN
    created_at: datetime = Field(default_factory=utcnow)


class Lead(SQLModel, table=True):
    """
    Lead entity - a prospective account being qualified.
    Scoped to an organization (tenant).
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(foreign_key="organization.id", index=True)
    name: str = Field(index=True)

    # Firmographics
    industry: Optional[str] = None
    revenue_band: Optional[str] = None  # one of REVENUE_BANDS
    employee_band: Optional[str] = None  # one of EMPLOYEE_BANDS
    entity_type: Optional[str] = None  # PUBLIC, PRIVATE, NONPROFIT, OTHER

    # Enrichment payload
    technographics: List[str] = Field(default_factory=list, sa_column=Column(JSONType))
    installed_tools_hints: List[str] = Field(default_factory=list, sa_column=Column(JSONType))
    intent_keywords: List[str] = Field(default_factory=list, sa_column=Column(JSONType))
    risk_flags: List[str] = Field(default_factory=list, sa_column=Column(JSONType))
    compliance: dict = Field(default_factory=dict, sa_column=Column(JSONType))
    # Provenance tags, appended on every enrichment run
    sources: List[str] = Field(default_factory=list, sa_column=Column(JSONType))
    # Metadata of the last enrichment run: {"enrichment": {...}}
    postprocessing: dict = Field(default_factory=dict, sa_column=Column(JSONType))

    # Qualification
    status: str = Field(default=LeadStatus.NEW.value, index=True)
    score: int = Field(default=0, index=True)

    # References
    icp_profile_id: Optional[uuid.UUID] = Field(default=None, foreign_key="icp_profile.id")
    contact_id: Optional[uuid.UUID] = Field(default=None, foreign_key="contact.id")
    contact: Optional[Contact] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    enriched_at: Optional[datetime] = None


def advance_status(current: Optional[str], target: LeadStatus) -> str:
    """Return target if it is ahead of current, else keep current."""
    try:
        current_rank = STATUS_ORDER.index(LeadStatus(current))
    except ValueError:
        current_rank = -1
    if STATUS_ORDER.index(target) > current_rank:
        return target.value
    return current
