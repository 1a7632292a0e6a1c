"""
Channel subscription API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..middleware.permissions import get_current_user
from ..models import User
from ..responses import api_response
from ..services.subscription_service import SubscriptionService
from ..services.view_pipeline import parse_id

router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


@router.post("/c/{channel_id}")
async def toggle_subscription(
    channel_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await SubscriptionService(db).toggle_subscription(current_user.id, parse_id(channel_id, "channel"))
    return api_response(200, result["subscription"], result["message"])


@router.get("/c/{channel_id}")
async def channel_subscribers(
    channel_id: str,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    result = await SubscriptionService(db).get_channel_subscribers(parse_id(channel_id, "channel"), page, limit)
    return api_response(200, result.to_dict(), "Subscribers fetched successfully")


@router.get("/u/{subscriber_id}")
async def subscribed_channels(
    subscriber_id: str,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    result = await SubscriptionService(db).get_subscribed_channels(
        parse_id(subscriber_id, "subscriber"), page, limit
    )
    return api_response(200, result.to_dict(), "Subscribed channels fetched successfully")
