import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.app.exceptions import ValidationError
from vidshare.app.models import Like, LikeTargetType, User, Video
from vidshare.app.services.pagination import fetch_all, paginate
from vidshare.app.services.video_service import VIDEO_SUMMARY_FIELDS, owner_lookup, video_view
from vidshare.app.services.view_pipeline import Lookup, ViewPipeline, parse_id


class TestProjection:

    def test_credentials_are_never_selectable(self):
        with pytest.raises(ValueError):
            ViewPipeline(User, ("id", "password_hash"))
        with pytest.raises(ValueError):
            Lookup("owner", User, "owner_id", fields=("id", "refresh_token"))

    def test_unknown_field_is_rejected(self):
        with pytest.raises(ValueError):
            ViewPipeline(Video, ("id", "no_such_column"))

    def test_lookups_nest_one_level(self):
        inner = Lookup("owner", User, "owner_id", lookups=[owner_lookup()])
        with pytest.raises(ValueError):
            Lookup("video", Video, "target_id", VIDEO_SUMMARY_FIELDS, lookups=[inner])

    async def test_owner_is_projected_to_public_fields(self, db_session: AsyncSession, video):
        items = await fetch_all(db_session, video_view())

        assert set(items[0]["owner"]) == {"id", "username", "full_name", "avatar"}
        assert items[0]["owner"]["username"] == "alice"

    async def test_missing_lookup_target_is_none(self, db_session: AsyncSession, make_video, user):
        orphan = await make_video(user, "Orphaned")
        orphan.owner_id = uuid.uuid4()
        await db_session.commit()

        items = await fetch_all(db_session, video_view())

        assert items[0]["owner"] is None


class TestSorting:

    async def test_unknown_sort_key_falls_back_to_created_at(self, db_session: AsyncSession, user, make_video):
        await make_video(user, "Older", age=10)
        await make_video(user, "Newer", age=1)

        items = await fetch_all(db_session, video_view().sort("bogus", "sideways"))

        assert [item["title"] for item in items] == ["Newer", "Older"]

    async def test_camel_case_sort_key(self, db_session: AsyncSession, user, make_video):
        await make_video(user, "b", age=1)
        await make_video(user, "a", age=2)
        await make_video(user, "c", age=3)

        items = await fetch_all(db_session, video_view().sort("title", "asc"))
        assert [item["title"] for item in items] == ["a", "b", "c"]

        items = await fetch_all(db_session, video_view().sort("createdAt", "asc"))
        assert [item["title"] for item in items] == ["c", "a", "b"]


class TestSearch:

    async def test_search_is_case_insensitive_over_title_or_description(
        self, db_session: AsyncSession, user, make_video
    ):
        await make_video(user, "Cooking PASTA tonight")
        await make_video(user, "Gardening", description="Growing pasta herbs")
        await make_video(user, "Unrelated")

        items = await fetch_all(db_session, video_view().search("pasta"))

        assert {item["title"] for item in items} == {"Cooking PASTA tonight", "Gardening"}

    async def test_wildcards_are_matched_literally(self, db_session: AsyncSession, user, make_video):
        await make_video(user, "100% fun")
        await make_video(user, "1000 things")

        items = await fetch_all(db_session, video_view().search("100%"))

        assert [item["title"] for item in items] == ["100% fun"]

    async def test_blank_query_matches_everything(self, db_session: AsyncSession, user, make_video):
        await make_video(user, "One")
        await make_video(user, "Two")

        items = await fetch_all(db_session, video_view().search("   "))
        assert len(items) == 2


class TestRequiredLookup:

    async def test_rows_without_match_are_dropped_and_not_counted(self, db_session: AsyncSession, user, video):
        db_session.add_all([
            Like(liked_by_id=user.id, target_type=LikeTargetType.video, target_id=video.id),
            Like(liked_by_id=user.id, target_type=LikeTargetType.video, target_id=uuid.uuid4()),
        ])
        await db_session.commit()

        pipeline = (
            ViewPipeline(Like, [("created_at", "liked_at")])
            .lookup(Lookup("video", Video, "target_id", VIDEO_SUMMARY_FIELDS, required=True))
        )
        page = await paginate(db_session, pipeline)

        assert page.total_items == 1
        assert page.items[0]["video"]["id"] == video.id
        assert "liked_at" in page.items[0]


class TestParseId:

    def test_valid_id(self):
        value = uuid.uuid4()
        assert parse_id(str(value), "video") == value

    def test_malformed_id(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_id("not-a-uuid", "video")
        assert exc_info.value.message == "Invalid video ID"
