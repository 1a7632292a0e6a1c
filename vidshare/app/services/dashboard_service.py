"""
Channel dashboard: aggregate statistics and the owner's full video list.
"""
import uuid
from typing import Any, Dict

from sqlalchemy import func, select

from ..models import Like, LikeTargetType, Subscription, Video
from .base_service import BaseService
from .pagination import Page, paginate
from .video_service import VIDEO_SORTABLE, VIDEO_FIELDS, owner_lookup
from .view_pipeline import ViewPipeline


def video_likes_count():
    return (
        select(func.count(Like.id))
        .where(Like.target_type == LikeTargetType.video, Like.target_id == Video.id)
        .scalar_subquery()
    )


class DashboardService(BaseService):

    async def get_channel_stats(self, channel_id: uuid.UUID) -> Dict[str, int]:
        """Each figure is an independent aggregate; an empty channel is all zeros."""
        total_videos = await self.db.execute(
            select(func.count(Video.id)).where(Video.owner_id == channel_id)
        )
        total_views = await self.db.execute(
            select(func.coalesce(func.sum(Video.views), 0)).where(Video.owner_id == channel_id)
        )
        total_subscribers = await self.db.execute(
            select(func.count(Subscription.id)).where(Subscription.channel_id == channel_id)
        )
        total_likes = await self.db.execute(
            select(func.count(Like.id))
            .join(Video, Like.target_id == Video.id)
            .where(Like.target_type == LikeTargetType.video, Video.owner_id == channel_id)
        )
        return {
            "total_videos": total_videos.scalar_one(),
            "total_views": int(total_views.scalar_one()),
            "total_subscribers": total_subscribers.scalar_one(),
            "total_likes": total_likes.scalar_one(),
        }

    async def get_channel_videos(self, channel_id: uuid.UUID, page: Any = None, limit: Any = None) -> Page:
        """All of the channel's videos, published or not, with like counts."""
        pipeline = (
            ViewPipeline(Video, VIDEO_FIELDS, sortable=VIDEO_SORTABLE)
            .where(Video.owner_id == channel_id)
            .lookup(owner_lookup())
            .add_field("likes_count", video_likes_count(), int)
        )
        return await paginate(self.db, pipeline, page, limit)
