"""
Video publishing and browsing service.
"""
import logging
import uuid
from typing import Any, Dict, Optional

from sqlalchemy import delete, select, update

from shared_lib.s3 import BlobStorage, UploadFailed
from ..exceptions import NotFound, UploadError, ValidationError
from ..models import Comment, Like, LikeTargetType, PlaylistVideo, User, Video, WatchHistoryEntry
from .base_service import BaseService
from .ownership import ensure_can_mutate
from .pagination import Page, fetch_one, paginate
from .view_pipeline import Lookup, ViewPipeline, parse_id, public_profile

logger = logging.getLogger(__name__)

VIDEO_FIELDS = (
    "id", "video_file", "thumbnail", "title", "description", "duration",
    "views", "is_published", "created_at", "updated_at",
)
VIDEO_SUMMARY_FIELDS = (
    "id", "title", "description", "thumbnail", "duration", "views",
    "is_published", "created_at",
)
VIDEO_SORTABLE = ("created_at", "updated_at", "title", "views", "duration")


def owner_lookup(local_key: str = "owner_id", name: str = "owner") -> Lookup:
    return Lookup(name, User, local_key)


def video_view() -> ViewPipeline:
    return ViewPipeline(Video, VIDEO_FIELDS, sortable=VIDEO_SORTABLE).lookup(owner_lookup())


def video_to_dict(video: Video, owner: Optional[User] = None) -> Dict[str, Any]:
    document = {name: getattr(video, name) for name in VIDEO_FIELDS}
    document["owner"] = public_profile(owner)
    return document


class VideoService(BaseService):
    """Service for publishing, browsing and managing videos."""

    async def list_videos(
        self,
        query: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_type: Optional[str] = None,
        user_id: Optional[str] = None,
        page: Any = None,
        limit: Any = None
    ) -> Page:
        """Published videos, optionally restricted to one owner and a text query."""
        pipeline = video_view().where(Video.is_published.is_(True))
        if user_id:
            pipeline.where(Video.owner_id == parse_id(user_id, "user"))
        pipeline.search(query).sort(sort_by, sort_type)
        return await paginate(self.db, pipeline, page, limit)

    async def publish_video(
        self,
        actor_id: uuid.UUID,
        title: str,
        description: str,
        video_file_path: str,
        thumbnail_path: str,
        storage: BlobStorage
    ) -> Dict[str, Any]:
        """Upload media and create a published video owned by the actor."""
        if not video_file_path:
            raise ValidationError("Video file is required")
        if not thumbnail_path:
            raise ValidationError("Thumbnail is required")

        # Uploads that succeed before a later failure are not rolled back
        try:
            video_file = await storage.upload(video_file_path, folder="videos")
        except UploadFailed:
            raise UploadError("Failed to upload video file")
        try:
            thumbnail = await storage.upload(thumbnail_path, folder="thumbnails")
        except UploadFailed:
            raise UploadError("Failed to upload thumbnail")

        video = Video(
            owner_id=actor_id,
            video_file=video_file.url,
            thumbnail=thumbnail.url,
            title=title,
            description=description,
            duration=round(video_file.duration or 0),
            is_published=True,
        )
        await self.save(video)
        logger.info(f"User {actor_id} published video {video.id}")

        owner = await self.db.get(User, actor_id)
        return video_to_dict(video, owner)

    async def get_video_by_id(self, video_id: uuid.UUID, viewer_id: Optional[uuid.UUID] = None) -> Dict[str, Any]:
        """Fetch a published video, counting the view and recording watch history."""
        pipeline = video_view().where(Video.id == video_id, Video.is_published.is_(True))
        document = await fetch_one(self.db, pipeline)
        if document is None:
            raise NotFound("Video not found")

        await self.db.execute(
            update(Video).where(Video.id == video_id).values(views=Video.views + 1)
        )
        if viewer_id is not None:
            self.db.add(WatchHistoryEntry(user_id=viewer_id, video_id=video_id))
        await self.db.commit()

        document["views"] += 1
        return document

    async def update_video(
        self,
        actor_id: uuid.UUID,
        video_id: uuid.UUID,
        title: Optional[str] = None,
        description: Optional[str] = None,
        thumbnail_path: Optional[str] = None,
        storage: Optional[BlobStorage] = None
    ) -> Dict[str, Any]:
        video = ensure_can_mutate(actor_id, await self.db.get(Video, video_id), "video", "update")

        if title is None and description is None and not thumbnail_path:
            raise ValidationError("No valid fields to update")

        if thumbnail_path:
            try:
                thumbnail = await storage.upload(thumbnail_path, folder="thumbnails")
            except UploadFailed:
                raise UploadError("Failed to upload thumbnail")
            video.thumbnail = thumbnail.url
        if title is not None:
            video.title = title
        if description is not None:
            video.description = description

        await self.save(video)
        owner = await self.db.get(User, video.owner_id)
        return video_to_dict(video, owner)

    async def delete_video(self, actor_id: uuid.UUID, video_id: uuid.UUID) -> None:
        video = ensure_can_mutate(actor_id, await self.db.get(Video, video_id), "video", "delete")

        # Rows that reference the video without an ORM cascade
        await self.db.execute(
            delete(Like).where(Like.target_type == LikeTargetType.video, Like.target_id == video_id)
        )
        await self.db.execute(
            delete(Like).where(
                Like.target_type == LikeTargetType.comment,
                Like.target_id.in_(select(Comment.id).where(Comment.video_id == video_id))
            )
        )
        await self.db.execute(delete(PlaylistVideo).where(PlaylistVideo.video_id == video_id))
        await self.db.execute(delete(WatchHistoryEntry).where(WatchHistoryEntry.video_id == video_id))
        await self.db.execute(delete(Comment).where(Comment.video_id == video_id))
        await self.db.delete(video)
        await self.db.commit()
        logger.info(f"User {actor_id} deleted video {video_id}")

    async def toggle_publish_status(self, actor_id: uuid.UUID, video_id: uuid.UUID) -> Dict[str, Any]:
        video = ensure_can_mutate(actor_id, await self.db.get(Video, video_id), "video", "update")
        video.is_published = not video.is_published
        await self.save(video)
        logger.info(f"Video {video_id} is_published={video.is_published}")
        owner = await self.db.get(User, video.owner_id)
        return video_to_dict(video, owner)
