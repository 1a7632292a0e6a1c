"""
Like toggling API endpoints for videos, comments and tweets.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..middleware.permissions import get_current_user
from ..models import User
from ..responses import api_response
from ..services.like_service import CommentTarget, LikeService, TargetRef, TweetTarget, VideoTarget
from ..services.view_pipeline import parse_id

router = APIRouter(prefix="/api/v1/likes", tags=["likes"])


async def _toggle(db: AsyncSession, user: User, target: TargetRef):
    result = await LikeService(db).toggle_like(user.id, target)
    return api_response(200, result["like"], result["message"])


@router.post("/toggle/v/{video_id}")
async def toggle_video_like(
    video_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await _toggle(db, current_user, VideoTarget(parse_id(video_id, "video")))


@router.post("/toggle/c/{comment_id}")
async def toggle_comment_like(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await _toggle(db, current_user, CommentTarget(parse_id(comment_id, "comment")))


@router.post("/toggle/t/{tweet_id}")
async def toggle_tweet_like(
    tweet_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await _toggle(db, current_user, TweetTarget(parse_id(tweet_id, "tweet")))


@router.get("/videos")
async def liked_videos(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await LikeService(db).get_liked_videos(current_user.id, page, limit)
    return api_response(200, result.to_dict(), "Liked videos fetched successfully")
