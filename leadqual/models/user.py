"""
User and Organization models.
The organization is the tenant boundary; a user's current_org_id is the
tenant profile every lead read and write is scoped by.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from leadqual.core.clock import utcnow


class Organization(SQLModel, table=True):
    """
    Organization/Tenant model.
    All leads are scoped to an organization.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True)
    created_at: datetime = Field(default_factory=utcnow)


class User(SQLModel, table=True):
    """Authenticated caller."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # Current active organization (for API scoping)
    current_org_id: Optional[uuid.UUID] = Field(default=None, foreign_key="organization.id", index=True)

    email: str = Field(unique=True, index=True)
    full_name: Optional[str] = None
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utcnow)
