"""
User repository.
"""
from sqlmodel.ext.asyncio.session import AsyncSession

from leadqual.models.user import User
from leadqual.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)
