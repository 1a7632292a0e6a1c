"""
Tweet API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..middleware.permissions import get_current_user
from ..models import User
from ..responses import api_response
from ..schemas import TweetRequest
from ..services.tweet_service import TweetService
from ..services.view_pipeline import parse_id

router = APIRouter(prefix="/api/v1/tweets", tags=["tweets"])


@router.post("/")
async def create_tweet(
    payload: TweetRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    tweet = await TweetService(db).create_tweet(current_user.id, payload.content)
    return api_response(201, tweet, "Tweet created successfully")


@router.get("/user/{user_id}")
async def user_tweets(
    user_id: str,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    result = await TweetService(db).get_user_tweets(parse_id(user_id, "user"), page, limit)
    return api_response(200, result.to_dict(), "User tweets fetched successfully")


@router.patch("/{tweet_id}")
async def update_tweet(
    tweet_id: str,
    payload: TweetRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    tweet = await TweetService(db).update_tweet(current_user.id, parse_id(tweet_id, "tweet"), payload.content)
    return api_response(200, tweet, "Tweet updated successfully")


@router.delete("/{tweet_id}")
async def delete_tweet(
    tweet_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await TweetService(db).delete_tweet(current_user.id, parse_id(tweet_id, "tweet"))
    return api_response(200, {}, "Tweet deleted successfully")
