"""
Video comments service.
"""
import uuid
from typing import Any, Dict

from sqlalchemy import delete

from ..models import Comment, Like, LikeTargetType, User, Video
from .base_service import BaseService
from .ownership import ensure_can_mutate
from .pagination import Page, paginate
from .view_pipeline import ViewPipeline, public_profile
from .video_service import owner_lookup

COMMENT_FIELDS = ("id", "content", "video_id", "created_at", "updated_at")


def comment_to_dict(comment: Comment, owner: User) -> Dict[str, Any]:
    document = {name: getattr(comment, name) for name in COMMENT_FIELDS}
    document["owner"] = public_profile(owner)
    return document


class CommentService(BaseService):
    """Service for managing video comments."""

    async def list_video_comments(self, video_id: uuid.UUID, page: Any = None, limit: Any = None) -> Page:
        pipeline = (
            ViewPipeline(Comment, COMMENT_FIELDS, sortable=("created_at", "updated_at"))
            .where(Comment.video_id == video_id)
            .lookup(owner_lookup())
        )
        return await paginate(self.db, pipeline, page, limit)

    async def add_comment(self, actor_id: uuid.UUID, video_id: uuid.UUID, content: str) -> Dict[str, Any]:
        await self.get_or_404(Video, video_id, "video")

        comment = Comment(video_id=video_id, owner_id=actor_id, content=content)
        await self.save(comment)
        return comment_to_dict(comment, await self.db.get(User, actor_id))

    async def update_comment(self, actor_id: uuid.UUID, comment_id: uuid.UUID, content: str) -> Dict[str, Any]:
        comment = ensure_can_mutate(actor_id, await self.db.get(Comment, comment_id), "comment", "update")
        comment.content = content
        await self.save(comment)
        return comment_to_dict(comment, await self.db.get(User, actor_id))

    async def delete_comment(self, actor_id: uuid.UUID, comment_id: uuid.UUID) -> None:
        comment = ensure_can_mutate(actor_id, await self.db.get(Comment, comment_id), "comment", "delete")
        await self.db.execute(
            delete(Like).where(Like.target_type == LikeTargetType.comment, Like.target_id == comment_id)
        )
        await self.db.delete(comment)
        await self.db.commit()
