import uuid

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tests.fixtures import count_likes
from tests.mocks import MockBlobStorage
from vidshare.app.exceptions import NotFound, UploadError, ValidationError
from vidshare.app.models import Like, Video, WatchHistoryEntry
from vidshare.app.services.comment_service import CommentService
from vidshare.app.services.like_service import CommentTarget, LikeService, VideoTarget
from vidshare.app.services.video_service import VideoService


@pytest.fixture
def media_files(tmp_path):
    video_path = tmp_path / "clip.mp4"
    video_path.write_bytes(b"\x00\x00\x00\x18ftypmp42")
    thumbnail_path = tmp_path / "thumb.png"
    thumbnail_path.write_bytes(b"\x89PNG\r\n")
    return str(video_path), str(thumbnail_path)


class TestListVideos:

    async def test_search_excludes_unpublished(self, db_session: AsyncSession, user, make_video):
        await make_video(user, "Learning Python", age=1)
        await make_video(user, "python tricks", age=2)
        await make_video(user, "Python drafts", age=3, is_published=False)
        await make_video(user, "Rust basics", age=4)

        page = await VideoService(db_session).list_videos(query="PYTHON")

        assert [item["title"] for item in page.items] == ["Learning Python", "python tricks"]
        assert page.total_items == 2

    async def test_filter_by_owner(self, db_session: AsyncSession, user, other_user, make_video):
        await make_video(user, "Alice's video")
        await make_video(other_user, "Bob's video")

        page = await VideoService(db_session).list_videos(user_id=str(other_user.id))

        assert [item["title"] for item in page.items] == ["Bob's video"]
        assert page.items[0]["owner"]["username"] == "bob"

    async def test_malformed_owner_id(self, db_session: AsyncSession):
        with pytest.raises(ValidationError):
            await VideoService(db_session).list_videos(user_id="nope")

    async def test_sort_by_views(self, db_session: AsyncSession, user, make_video):
        await make_video(user, "Quiet", views=3)
        await make_video(user, "Popular", views=300)

        page = await VideoService(db_session).list_videos(sort_by="views", sort_type="desc")

        assert [item["title"] for item in page.items] == ["Popular", "Quiet"]


class TestPublishVideo:

    async def test_publish_video(self, db_session: AsyncSession, user, media_files):
        storage = MockBlobStorage(video_duration=42.6)
        video_path, thumbnail_path = media_files

        video = await VideoService(db_session).publish_video(
            user.id, "My clip", "A short clip", video_path, thumbnail_path, storage
        )

        assert video["title"] == "My clip"
        assert video["duration"] == 43
        assert video["is_published"] is True
        assert video["video_file"].startswith("https://cdn.test/videos/")
        assert video["thumbnail"].startswith("https://cdn.test/thumbnails/")
        assert video["owner"]["username"] == "alice"

    async def test_missing_files(self, db_session: AsyncSession, user, media_files):
        _, thumbnail_path = media_files
        with pytest.raises(ValidationError) as exc_info:
            await VideoService(db_session).publish_video(
                user.id, "t", "d", None, thumbnail_path, MockBlobStorage()
            )
        assert exc_info.value.message == "Video file is required"

    async def test_upload_failure(self, db_session: AsyncSession, user, media_files):
        video_path, thumbnail_path = media_files
        storage = MockBlobStorage(fail_folders=("thumbnails",))

        with pytest.raises(UploadError) as exc_info:
            await VideoService(db_session).publish_video(
                user.id, "t", "d", video_path, thumbnail_path, storage
            )

        assert exc_info.value.status_code == 500
        result = await db_session.execute(select(Video))
        assert result.scalars().all() == []


class TestGetVideo:

    async def test_view_is_counted_and_history_recorded(self, db_session: AsyncSession, user, other_user, video):
        service = VideoService(db_session)

        first = await service.get_video_by_id(video.id, viewer_id=other_user.id)
        second = await service.get_video_by_id(video.id)

        assert first["views"] == 1
        assert second["views"] == 2
        result = await db_session.execute(select(WatchHistoryEntry))
        entries = result.scalars().all()
        assert [(e.user_id, e.video_id) for e in entries] == [(other_user.id, video.id)]

    async def test_unpublished_video_is_not_found(self, db_session: AsyncSession, user, make_video):
        draft = await make_video(user, "Draft", is_published=False)
        with pytest.raises(NotFound):
            await VideoService(db_session).get_video_by_id(draft.id)

    async def test_unknown_video(self, db_session: AsyncSession):
        with pytest.raises(NotFound):
            await VideoService(db_session).get_video_by_id(uuid.uuid4())


class TestUpdateVideo:

    async def test_update_requires_a_field(self, db_session: AsyncSession, user, video):
        with pytest.raises(ValidationError) as exc_info:
            await VideoService(db_session).update_video(user.id, video.id)
        assert exc_info.value.message == "No valid fields to update"

    async def test_update_title_and_thumbnail(self, db_session: AsyncSession, user, video, media_files):
        _, thumbnail_path = media_files

        updated = await VideoService(db_session).update_video(
            user.id, video.id, title="Cooking risotto", thumbnail_path=thumbnail_path, storage=MockBlobStorage()
        )

        assert updated["title"] == "Cooking risotto"
        assert updated["description"] == "About Cooking pasta"
        assert updated["thumbnail"] == "https://cdn.test/thumbnails/thumb.png"

    async def test_toggle_publish_status(self, db_session: AsyncSession, user, video):
        service = VideoService(db_session)

        hidden = await service.toggle_publish_status(user.id, video.id)
        assert hidden["is_published"] is False
        assert (await service.list_videos()).total_items == 0

        shown = await service.toggle_publish_status(user.id, video.id)
        assert shown["is_published"] is True

    async def test_delete_video_removes_dependent_rows(self, db_session: AsyncSession, user, other_user, video):
        comment = await CommentService(db_session).add_comment(other_user.id, video.id, "Nice")
        likes = LikeService(db_session)
        await likes.toggle_like(other_user.id, VideoTarget(video.id))
        await likes.toggle_like(user.id, CommentTarget(comment["id"]))

        await VideoService(db_session).delete_video(user.id, video.id)

        assert await db_session.get(Video, video.id) is None
        assert await count_likes(db_session, VideoTarget(video.id)) == 0
        assert await count_likes(db_session, CommentTarget(comment["id"])) == 0
        remaining = await db_session.execute(select(Like))
        assert remaining.scalars().all() == []
