from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from vidshare.app.config import get_settings
from vidshare.app.models import Base

engine = create_async_engine(get_settings().DATABASE_URL, pool_pre_ping=True)
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def init_models() -> None:
    """Create tables that don't exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
