import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from tests.fixtures import count_likes
from vidshare.app.exceptions import NotFound
from vidshare.app.services.comment_service import CommentService
from vidshare.app.services.dashboard_service import DashboardService
from vidshare.app.services.like_service import CommentTarget, LikeService, TweetTarget, VideoTarget
from vidshare.app.services.tweet_service import TweetService


class TestLikeService:

    async def test_toggle_video_like(self, db_session: AsyncSession, other_user, video):
        service = LikeService(db_session)

        liked = await service.toggle_like(other_user.id, VideoTarget(video.id))
        assert liked["is_liked"] is True
        assert liked["message"] == "Video liked successfully"
        assert liked["like"]["liked_by"] == other_user.id
        assert liked["like"]["target_type"] == "video"
        assert liked["like"]["target_id"] == video.id
        assert await count_likes(db_session, VideoTarget(video.id)) == 1

        unliked = await service.toggle_like(other_user.id, VideoTarget(video.id))
        assert unliked == {"like": None, "is_liked": False, "message": "Video unliked successfully"}
        assert await count_likes(db_session, VideoTarget(video.id)) == 0

    async def test_targets_are_independent(self, db_session: AsyncSession, user, video):
        """A comment and a tweet can be liked alongside the video without interfering."""
        comment = await CommentService(db_session).add_comment(user.id, video.id, "Great")
        tweet = await TweetService(db_session).create_tweet(user.id, "Hello")
        service = LikeService(db_session)

        comment_result = await service.toggle_like(user.id, CommentTarget(comment["id"]))
        tweet_result = await service.toggle_like(user.id, TweetTarget(tweet["id"]))

        assert comment_result["message"] == "Comment liked successfully"
        assert tweet_result["message"] == "Tweet liked successfully"
        assert await count_likes(db_session, VideoTarget(video.id)) == 0
        assert await count_likes(db_session, CommentTarget(comment["id"])) == 1

    async def test_missing_target_is_not_found(self, db_session: AsyncSession, user):
        with pytest.raises(NotFound) as exc_info:
            await LikeService(db_session).toggle_like(user.id, TweetTarget(uuid.uuid4()))
        assert exc_info.value.message == "Tweet not found"

    async def test_liked_videos_expose_liked_at_and_nested_owner(
        self, db_session: AsyncSession, user, other_user, make_video
    ):
        first = await make_video(user, "First")
        second = await make_video(user, "Second")
        service = LikeService(db_session)
        await service.toggle_like(other_user.id, VideoTarget(first.id))
        await service.toggle_like(other_user.id, VideoTarget(second.id))

        page = await service.get_liked_videos(other_user.id)

        assert page.total_items == 2
        item = page.items[0]
        assert set(item) == {"liked_at", "video"}
        assert item["video"]["owner"]["username"] == "alice"
        assert "password_hash" not in item["video"]["owner"]

    async def test_like_moves_channel_stats(self, db_session: AsyncSession, user, other_user, video):
        """Liking a video shows up in the owner's dashboard, and unliking reverts it."""
        dashboard = DashboardService(db_session)
        likes = LikeService(db_session)

        await likes.toggle_like(other_user.id, VideoTarget(video.id))
        assert (await dashboard.get_channel_stats(user.id))["total_likes"] == 1

        await likes.toggle_like(other_user.id, VideoTarget(video.id))
        assert (await dashboard.get_channel_stats(user.id))["total_likes"] == 0
