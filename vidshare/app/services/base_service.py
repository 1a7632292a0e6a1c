"""
Common plumbing for database-backed services.
"""
import uuid
from typing import Any, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import NotFound

T = TypeVar("T")


class BaseService:
    """Holds the request-scoped session; services never share state across requests."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_or_404(self, model: Type[T], entity_id: uuid.UUID, noun: str) -> T:
        entity = await self.db.get(model, entity_id)
        if entity is None:
            raise NotFound(f"{noun.capitalize()} not found")
        return entity

    async def save(self, instance: Any) -> Any:
        self.db.add(instance)
        await self.db.commit()
        await self.db.refresh(instance)
        return instance
