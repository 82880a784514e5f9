import structlog
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from app.core.config import settings

logger = structlog.get_logger(__name__)


def build_engine(database_url: str) -> AsyncEngine:
    """Create an async engine with pool options suited to the backend."""
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        options = {}
        if url.database in (None, "", ":memory:"):
            # One shared connection, otherwise every checkout sees an empty db
            options["poolclass"] = StaticPool
        return create_async_engine(database_url, echo=False, **options)

    return create_async_engine(
        database_url,
        echo=False,  # Disabled to prevent SQLAlchemy engine logs
        pool_pre_ping=True,
        pool_recycle=300,
    )


engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

Base = declarative_base()


async def init_db(create_tables: bool = False):
    """Check the database connection and optionally create missing tables."""
    # Register every model on Base.metadata
    import app.models  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if create_tables:
                await conn.run_sync(Base.metadata.create_all)

        logger.info(
            "Database connection initialized successfully",
            backend=engine.url.get_backend_name(),
            tables_created=create_tables,
        )
    except Exception as e:
        logger.error("Failed to initialize database", exc_info=e)
        raise


async def get_db() -> AsyncSession:
    """Dependency to get database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.error("Database session error", exc_info=e)
            raise
        finally:
            await session.close()
