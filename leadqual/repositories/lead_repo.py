"""
Lead repository - tenant-scoped batch reads.
"""
import uuid
from typing import List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from leadqual.models.lead import Lead
from leadqual.repositories.base import BaseRepository


class LeadRepository(BaseRepository[Lead]):
    """Repository for Lead operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Lead, session)

    async def get_many_for_org(self, org_id: uuid.UUID, lead_ids: List[uuid.UUID]) -> List[Lead]:
        """
        Fetch the given leads, restricted to the organization.
        Ids outside the organization are silently absent from the result.
        """
        if not lead_ids:
            return []
        query = select(Lead).where(
            Lead.org_id == org_id,
            Lead.id.in_(lead_ids)
        )
        result = await self.session.exec(query)
        return result.all()
