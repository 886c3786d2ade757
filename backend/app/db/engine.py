"""Database engine helpers."""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from backend.app.config import Settings
from backend.app.db.models import Base


def create_async_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Create async SQLAlchemy engine from settings.

    Raises:
        ValueError: If DATABASE_URL is unset or empty.
    """
    database_url = settings.database_url

    if not database_url:
        raise ValueError(
            "DATABASE_URL must be set to a valid connection string. "
            "Please configure the database_url setting."
        )

    # Convert postgresql:// to postgresql+asyncpg://
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif database_url.startswith("sqlite://"):
        database_url = database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)

    return create_async_engine(database_url, pool_pre_ping=True, echo=False)


async def create_all_tables(engine: AsyncEngine) -> None:
    """Create tables that do not exist yet (dev and test convenience)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
