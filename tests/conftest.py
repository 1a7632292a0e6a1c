import uuid
from datetime import datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from shared_lib.security import hash_password
from vidshare.app.models import Base, User, Video

from tests.fixtures import TEST_PASSWORD


@pytest.fixture(scope="function")
async def db_session() -> AsyncSession:
    """
    Provide an in-memory database session for each test function.
    The database schema is created from scratch for each test.
    """
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    TestingSessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with TestingSessionLocal() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory for persisted users."""
    async def _make_user(username: str, **overrides) -> User:
        user = User(
            username=username,
            email=overrides.pop("email", f"{username}@example.com"),
            full_name=overrides.pop("full_name", username.title()),
            avatar=overrides.pop("avatar", f"https://cdn.test/avatars/{username}.png"),
            password_hash=hash_password(TEST_PASSWORD, rounds=4),
            **overrides,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_video(db_session: AsyncSession):
    """Factory for persisted videos; ``age`` orders them by created_at."""
    async def _make_video(owner: User, title: str = "A video", age: int = 0, **overrides) -> Video:
        created_at = datetime(2024, 1, 1) - timedelta(minutes=age)
        video = Video(
            owner_id=owner.id,
            video_file=f"https://cdn.test/videos/{uuid.uuid4().hex}.mp4",
            thumbnail=f"https://cdn.test/thumbnails/{uuid.uuid4().hex}.png",
            title=title,
            description=overrides.pop("description", f"About {title}"),
            duration=overrides.pop("duration", 60),
            created_at=created_at,
            updated_at=created_at,
            **overrides,
        )
        db_session.add(video)
        await db_session.commit()
        await db_session.refresh(video)
        return video
    return _make_video


@pytest.fixture
async def user(make_user) -> User:
    return await make_user("alice")


@pytest.fixture
async def other_user(make_user) -> User:
    return await make_user("bob")


@pytest.fixture
async def video(make_video, user) -> Video:
    return await make_video(user, "Cooking pasta")
