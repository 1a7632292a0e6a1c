"""
Toggle-state resolver for relationship rows whose existence is the state
(likes, subscriptions).
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError

from ..exceptions import ConflictError
from .base_service import BaseService

logger = logging.getLogger(__name__)


class ToggleState(str, enum.Enum):
    added = "added"
    removed = "removed"


@dataclass
class ToggleResult:
    state: ToggleState
    record: Optional[Any] = None

    @property
    def added(self) -> bool:
        return self.state == ToggleState.added


class ToggleService(BaseService):

    async def toggle(self, model, **key) -> ToggleResult:
        """
        Flip the presence of the ``model`` row identified by ``key``.

        The delete is a single conditional statement, so only one of two
        concurrent toggles can observe the row; the insert relies on the
        table's unique constraint to reject a concurrent duplicate.
        """
        conditions = [getattr(model, column) == value for column, value in key.items()]
        result = await self.db.execute(delete(model).where(*conditions))
        if result.rowcount:
            await self.db.commit()
            logger.info(f"Removed {model.__tablename__} row {key}")
            return ToggleResult(ToggleState.removed)

        record = model(**key)
        self.db.add(record)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.warning(f"Concurrent toggle on {model.__tablename__} {key}")
            raise ConflictError("Another request changed this state, please retry")

        await self.db.refresh(record)
        logger.info(f"Created {model.__tablename__} row {record.id}")
        return ToggleResult(ToggleState.added, record)
