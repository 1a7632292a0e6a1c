"""
Video API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from shared_lib.s3 import BlobStorage
from ..db import get_db
from ..dependencies import discard_uploads, get_blob_storage, save_upload
from ..middleware.permissions import get_current_user, get_optional_user
from ..models import User
from ..responses import api_response
from ..schemas import PublishVideoForm, UpdateVideoForm
from ..services.video_service import VideoService
from ..services.view_pipeline import parse_id

router = APIRouter(prefix="/api/v1/videos", tags=["videos"])


@router.get("/")
async def list_videos(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    query: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_type: Optional[str] = Query(None, alias="sortType"),
    user_id: Optional[str] = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db)
):
    """Published videos, searchable and sortable."""
    result = await VideoService(db).list_videos(
        query=query, sort_by=sort_by, sort_type=sort_type, user_id=user_id, page=page, limit=limit
    )
    return api_response(200, result.to_dict(), "Videos fetched successfully")


@router.post("/")
async def publish_video(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    video_file: Optional[UploadFile] = File(None, alias="videoFile"),
    thumbnail: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage)
):
    form = PublishVideoForm(title=title, description=description)
    video_path = thumbnail_path = None
    try:
        video_path = await save_upload(video_file)
        thumbnail_path = await save_upload(thumbnail)
        video = await VideoService(db).publish_video(
            current_user.id,
            title=form.title,
            description=form.description,
            video_file_path=video_path,
            thumbnail_path=thumbnail_path,
            storage=storage,
        )
    finally:
        discard_uploads(video_path, thumbnail_path)
    return api_response(201, video, "Video published successfully")


@router.get("/{video_id}")
async def get_video(
    video_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    video = await VideoService(db).get_video_by_id(
        parse_id(video_id, "video"), viewer.id if viewer else None
    )
    return api_response(200, video, "Video fetched successfully")


@router.patch("/{video_id}")
async def update_video(
    video_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage)
):
    video_uuid = parse_id(video_id, "video")
    form = UpdateVideoForm(title=title, description=description)
    thumbnail_path = None
    try:
        thumbnail_path = await save_upload(thumbnail)
        video = await VideoService(db).update_video(
            current_user.id,
            video_uuid,
            title=form.title,
            description=form.description,
            thumbnail_path=thumbnail_path,
            storage=storage,
        )
    finally:
        discard_uploads(thumbnail_path)
    return api_response(200, video, "Video updated successfully")


@router.delete("/{video_id}")
async def delete_video(
    video_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await VideoService(db).delete_video(current_user.id, parse_id(video_id, "video"))
    return api_response(200, {}, "Video deleted successfully")


@router.patch("/toggle/publish/{video_id}")
async def toggle_publish_status(
    video_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    video = await VideoService(db).toggle_publish_status(current_user.id, parse_id(video_id, "video"))
    state = "published" if video["is_published"] else "unpublished"
    return api_response(200, video, f"Video {state} successfully")
