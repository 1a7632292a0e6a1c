"""
Channel dashboard API endpoints for the acting user.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..middleware.permissions import get_current_user
from ..models import User
from ..responses import api_response
from ..services.dashboard_service import DashboardService

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("/stats")
async def channel_stats(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    stats = await DashboardService(db).get_channel_stats(current_user.id)
    return api_response(200, stats, "Channel stats fetched successfully")


@router.get("/videos")
async def channel_videos(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await DashboardService(db).get_channel_videos(current_user.id, page, limit)
    return api_response(200, result.to_dict(), "Channel videos fetched successfully")
