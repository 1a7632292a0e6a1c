"""
Likes on videos, comments and tweets.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional

from ..models import Comment, Like, LikeTargetType, Tweet, Video
from .base_service import BaseService
from .pagination import Page, paginate
from .toggle_service import ToggleService
from .video_service import VIDEO_SUMMARY_FIELDS, owner_lookup
from .view_pipeline import Lookup, ViewPipeline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetRef:
    """A likeable entity: exactly one of video, comment or tweet."""
    id: uuid.UUID

    kind: ClassVar[LikeTargetType]
    model: ClassVar[Any]

    @property
    def noun(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class VideoTarget(TargetRef):
    kind: ClassVar[LikeTargetType] = LikeTargetType.video
    model: ClassVar[Any] = Video


@dataclass(frozen=True)
class CommentTarget(TargetRef):
    kind: ClassVar[LikeTargetType] = LikeTargetType.comment
    model: ClassVar[Any] = Comment


@dataclass(frozen=True)
class TweetTarget(TargetRef):
    kind: ClassVar[LikeTargetType] = LikeTargetType.tweet
    model: ClassVar[Any] = Tweet


def like_to_dict(like: Optional[Like]) -> Optional[Dict[str, Any]]:
    if like is None:
        return None
    return {
        "id": like.id,
        "liked_by": like.liked_by_id,
        "target_type": like.target_type.value,
        "target_id": like.target_id,
        "created_at": like.created_at,
    }


class LikeService(BaseService):
    """Service for toggling and listing likes."""

    async def toggle_like(self, actor_id: uuid.UUID, target: TargetRef) -> Dict[str, Any]:
        await self.get_or_404(target.model, target.id, target.noun)

        result = await ToggleService(self.db).toggle(
            Like, liked_by_id=actor_id, target_type=target.kind, target_id=target.id
        )
        logger.info(f"User {actor_id} {result.state.value} like on {target.noun} {target.id}")
        return {
            "like": like_to_dict(result.record),
            "is_liked": result.added,
            "message": f"{target.noun.capitalize()} {'liked' if result.added else 'unliked'} successfully",
        }

    async def get_liked_videos(self, actor_id: uuid.UUID, page: Any = None, limit: Any = None) -> Page:
        """Videos the actor has liked, most recently liked first."""
        pipeline = (
            ViewPipeline(Like, [("created_at", "liked_at")])
            .where(Like.liked_by_id == actor_id, Like.target_type == LikeTargetType.video)
            .lookup(Lookup(
                "video", Video, "target_id", VIDEO_SUMMARY_FIELDS,
                required=True, lookups=[owner_lookup()]
            ))
        )
        return await paginate(self.db, pipeline, page, limit)
