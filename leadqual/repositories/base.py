"""
Base repository with generic CRUD operations.
Repositories are the only code that touches the session; services get
them injected so tests can hand in in-memory fakes.
"""
import uuid
from typing import TypeVar, Generic, Type, Optional, List

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from leadqual.core.exceptions import PersistenceError

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository with CRUD operations.
    Inherit and specify the model class.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def get(self, id: uuid.UUID) -> Optional[ModelType]:
        """Get a record by ID."""
        return await self.session.get(self.model, id)

    async def get_for_org(self, org_id: uuid.UUID, id: uuid.UUID) -> Optional[ModelType]:
        """Get a record by ID, only if it belongs to the organization."""
        query = select(self.model).where(
            self.model.id == id,
            self.model.org_id == org_id
        )
        result = await self.session.exec(query)
        return result.first()

    async def save(self, db_obj: ModelType, *related: SQLModel) -> ModelType:
        """
        Persist a record together with related new rows in one commit.
        Rolls back and raises PersistenceError if the write fails.
        """
        record_id = getattr(db_obj, "id", None)
        try:
            self.session.add(db_obj)
            for obj in related:
                self.session.add(obj)
            await self.session.commit()
            await self.session.refresh(db_obj)
            for obj in related:
                await self.session.refresh(obj)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError(record_id) from e
        return db_obj

    async def refresh(self, db_obj: ModelType) -> ModelType:
        """Reload a record whose state was expired by a rollback."""
        await self.session.refresh(db_obj)
        return db_obj

    async def list(
        self,
        org_id: Optional[uuid.UUID] = None,
        filters: Optional[dict] = None,
        order_by: str = "created_at",
        order_desc: bool = True
    ) -> List[ModelType]:
        """List all records with optional filters."""
        query = select(self.model)

        # Filter by organization if model has org_id
        if org_id and hasattr(self.model, 'org_id'):
            query = query.where(self.model.org_id == org_id)

        # Apply additional filters
        if filters:
            for field, value in filters.items():
                if hasattr(self.model, field) and value is not None:
                    query = query.where(getattr(self.model, field) == value)

        # Apply ordering
        if hasattr(self.model, order_by):
            order_column = getattr(self.model, order_by)
            query = query.order_by(order_column.desc() if order_desc else order_column)

        result = await self.session.exec(query)
        return result.all()
