"""
Video comments API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..middleware.permissions import get_current_user
from ..models import User
from ..responses import api_response
from ..schemas import CommentRequest
from ..services.comment_service import CommentService
from ..services.view_pipeline import parse_id

router = APIRouter(prefix="/api/v1/comments", tags=["comments"])


@router.get("/{video_id}")
async def list_video_comments(
    video_id: str,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    result = await CommentService(db).list_video_comments(parse_id(video_id, "video"), page, limit)
    return api_response(200, result.to_dict(), "Comments fetched successfully")


@router.post("/{video_id}")
async def add_comment(
    video_id: str,
    payload: CommentRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    comment = await CommentService(db).add_comment(current_user.id, parse_id(video_id, "video"), payload.content)
    return api_response(201, comment, "Comment added successfully")


@router.patch("/c/{comment_id}")
async def update_comment(
    comment_id: str,
    payload: CommentRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    comment = await CommentService(db).update_comment(
        current_user.id, parse_id(comment_id, "comment"), payload.content
    )
    return api_response(200, comment, "Comment updated successfully")


@router.delete("/c/{comment_id}")
async def delete_comment(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await CommentService(db).delete_comment(current_user.id, parse_id(comment_id, "comment"))
    return api_response(200, {}, "Comment deleted successfully")
