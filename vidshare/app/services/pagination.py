"""
Pagination engine: executes a ``ViewPipeline`` and windows the result.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from .view_pipeline import ViewPipeline

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


def coerce_positive_int(value: Any, default: int) -> int:
    """Permissive parsing: anything that is not a positive integer becomes ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


@dataclass
class Page:
    items: List[Dict[str, Any]] = field(default_factory=list)
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    total_items: int = 0

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.limit) if self.total_items else 0

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": self.items,
            "page": self.page,
            "limit": self.limit,
            "total_items": self.total_items,
            "total_pages": self.total_pages,
            "has_next_page": self.has_next_page,
            "has_prev_page": self.has_prev_page,
        }


async def paginate(
    db: AsyncSession,
    pipeline: ViewPipeline,
    page: Any = None,
    limit: Any = None
) -> Page:
    """Run ``pipeline`` and return one page of reshaped documents."""
    page = coerce_positive_int(page, DEFAULT_PAGE)
    limit = coerce_positive_int(limit, DEFAULT_LIMIT)

    total_result = await db.execute(pipeline.count_statement())
    total_items = total_result.scalar() or 0

    items = []
    if total_items and (page - 1) * limit < total_items:
        result = await db.execute(
            pipeline.statement().offset((page - 1) * limit).limit(limit)
        )
        items = [pipeline.reshape(row) for row in result.mappings()]

    return Page(items=items, page=page, limit=limit, total_items=total_items)


async def fetch_all(db: AsyncSession, pipeline: ViewPipeline) -> List[Dict[str, Any]]:
    """Run ``pipeline`` without windowing."""
    result = await db.execute(pipeline.statement())
    return [pipeline.reshape(row) for row in result.mappings()]


async def fetch_one(db: AsyncSession, pipeline: ViewPipeline) -> Optional[Dict[str, Any]]:
    """Run ``pipeline`` and return the first document, or None."""
    result = await db.execute(pipeline.statement().limit(1))
    row = result.mappings().first()
    return pipeline.reshape(row) if row is not None else None
