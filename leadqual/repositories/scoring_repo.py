"""
Lead score repository. Score rows are append-only.
"""
import uuid
from typing import List

from sqlmodel.ext.asyncio.session import AsyncSession

from leadqual.models.scoring import LeadScore
from leadqual.repositories.base import BaseRepository


class LeadScoreRepository(BaseRepository[LeadScore]):
    """Repository for LeadScore operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(LeadScore, session)

    async def list_for_lead(self, org_id: uuid.UUID, lead_id: uuid.UUID) -> List[LeadScore]:
        """Scoring history of a lead, newest first."""
        return await self.list(org_id, filters={"lead_id": lead_id})
