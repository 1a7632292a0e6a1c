"""
Playlist service for managing user playlists.
"""
import logging
import uuid
from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from ..exceptions import NotFound, ValidationError
from ..models import Playlist, PlaylistVideo, User, Video
from .base_service import BaseService
from .ownership import ensure_can_mutate
from .pagination import Page, fetch_all, fetch_one, paginate
from .video_service import VIDEO_SUMMARY_FIELDS, owner_lookup
from .view_pipeline import Lookup, ViewPipeline

logger = logging.getLogger(__name__)

PLAYLIST_FIELDS = ("id", "name", "description", "created_at", "updated_at")


def _videos_count():
    return (
        select(func.count(PlaylistVideo.id))
        .where(PlaylistVideo.playlist_id == Playlist.id)
        .scalar_subquery()
    )


def playlist_view() -> ViewPipeline:
    return (
        ViewPipeline(Playlist, PLAYLIST_FIELDS, sortable=("created_at", "updated_at", "name"))
        .lookup(owner_lookup())
        .add_field("videos_count", _videos_count(), int)
    )


def playlist_items_view(playlist_ids: Sequence[uuid.UUID], with_owner: bool) -> ViewPipeline:
    """The videos of ``playlist_ids`` in playlist order."""
    video_lookup = Lookup(
        "video", Video, "video_id", VIDEO_SUMMARY_FIELDS,
        required=True, lookups=[owner_lookup()] if with_owner else (),
    )
    return (
        ViewPipeline(PlaylistVideo, ("playlist_id", "position"), sortable=("position",), default_sort="position")
        .where(PlaylistVideo.playlist_id.in_(list(playlist_ids)))
        .lookup(video_lookup)
        .sort("position", "asc")
    )


class PlaylistService(BaseService):
    """Service for managing playlists."""

    async def _attach_videos(self, playlists: List[Dict[str, Any]], with_owner: bool = False) -> None:
        if not playlists:
            return
        rows = await fetch_all(self.db, playlist_items_view([p["id"] for p in playlists], with_owner))
        grouped = defaultdict(list)
        for row in rows:
            grouped[row["playlist_id"]].append(row["video"])
        for playlist in playlists:
            playlist["videos"] = grouped.get(playlist["id"], [])

    async def create_playlist(self, actor_id: uuid.UUID, name: str, description: str) -> Dict[str, Any]:
        playlist = await self.save(Playlist(owner_id=actor_id, name=name, description=description))
        logger.info(f"User {actor_id} created playlist {playlist.id}")
        return await self.get_playlist_by_id(playlist.id)

    async def get_user_playlists(self, user_id: uuid.UUID, page: Any = None, limit: Any = None) -> Page:
        """A user's playlists, each with video summaries and a video count."""
        await self.get_or_404(User, user_id, "user")
        pipeline = playlist_view().where(Playlist.owner_id == user_id)
        result = await paginate(self.db, pipeline, page, limit)
        await self._attach_videos(result.items)
        return result

    async def get_playlist_by_id(self, playlist_id: uuid.UUID) -> Dict[str, Any]:
        document = await fetch_one(self.db, playlist_view().where(Playlist.id == playlist_id))
        if document is None:
            raise NotFound("Playlist not found")
        await self._attach_videos([document], with_owner=True)
        return document

    async def add_video(self, actor_id: uuid.UUID, playlist_id: uuid.UUID, video_id: uuid.UUID) -> Dict[str, Any]:
        ensure_can_mutate(actor_id, await self.db.get(Playlist, playlist_id), "playlist", "modify")
        await self.get_or_404(Video, video_id, "video")

        existing = await self.db.execute(
            select(PlaylistVideo.id).where(
                PlaylistVideo.playlist_id == playlist_id, PlaylistVideo.video_id == video_id
            )
        )
        if existing.first() is not None:
            raise ValidationError("Video already exists in playlist")

        position = await self.db.execute(
            select(func.max(PlaylistVideo.position)).where(PlaylistVideo.playlist_id == playlist_id)
        )
        last = position.scalar()
        self.db.add(PlaylistVideo(
            playlist_id=playlist_id,
            video_id=video_id,
            position=0 if last is None else last + 1,
        ))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ValidationError("Video already exists in playlist")

        logger.info(f"Added video {video_id} to playlist {playlist_id}")
        return await self.get_playlist_by_id(playlist_id)

    async def remove_video(self, actor_id: uuid.UUID, playlist_id: uuid.UUID, video_id: uuid.UUID) -> Dict[str, Any]:
        ensure_can_mutate(actor_id, await self.db.get(Playlist, playlist_id), "playlist", "modify")

        result = await self.db.execute(
            delete(PlaylistVideo).where(
                PlaylistVideo.playlist_id == playlist_id, PlaylistVideo.video_id == video_id
            )
        )
        if not result.rowcount:
            await self.db.rollback()
            raise ValidationError("Video not found in playlist")
        await self.db.commit()

        logger.info(f"Removed video {video_id} from playlist {playlist_id}")
        return await self.get_playlist_by_id(playlist_id)

    async def update_playlist(
        self,
        actor_id: uuid.UUID,
        playlist_id: uuid.UUID,
        name: Optional[str] = None,
        description: Optional[str] = None
    ) -> Dict[str, Any]:
        playlist = ensure_can_mutate(actor_id, await self.db.get(Playlist, playlist_id), "playlist", "update")
        if name is None and description is None:
            raise ValidationError("No valid fields to update")

        if name is not None:
            playlist.name = name
        if description is not None:
            playlist.description = description
        await self.save(playlist)
        return await self.get_playlist_by_id(playlist_id)

    async def delete_playlist(self, actor_id: uuid.UUID, playlist_id: uuid.UUID) -> None:
        playlist = ensure_can_mutate(actor_id, await self.db.get(Playlist, playlist_id), "playlist", "delete")
        await self.db.execute(delete(PlaylistVideo).where(PlaylistVideo.playlist_id == playlist_id))
        await self.db.delete(playlist)
        await self.db.commit()
        logger.info(f"User {actor_id} deleted playlist {playlist_id}")
