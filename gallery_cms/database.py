"""
Database connection and session management for SQLAlchemy 2.0.
Configured for async operations against SQLite (aiosqlite) or PostgreSQL (asyncpg).
"""
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from sqlalchemy import event, text
from pathlib import Path
import logging

from gallery_cms.config import settings
from gallery_cms.errors import ServiceError

logger = logging.getLogger(__name__)

# Create declarative base for models
Base = declarative_base()

_url = make_url(settings.DATABASE_URL)
_is_sqlite = _url.drivername.startswith("sqlite")

_engine_args = {
    "echo": False,  # Set to True for SQL query logging in development
}

if _is_sqlite:
    # One short-lived connection per session; the pragma below runs on each connect
    _engine_args["poolclass"] = NullPool
    if _url.database and _url.database != ":memory:":
        Path(_url.database).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)
else:
    _engine_args.update({
        "pool_size": 10,  # Number of connections to maintain in pool
        "max_overflow": 20,  # Additional connections allowed beyond pool_size
        "pool_pre_ping": True,  # Verify connections before using (handles stale connections)
        "pool_recycle": 3600,  # Recycle connections after 1 hour
    })

engine = create_async_engine(settings.DATABASE_URL, **_engine_args)


if _is_sqlite:
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        """Paintings rely on ON DELETE CASCADE, which SQLite only honours with this pragma."""
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncSession:
    """
    FastAPI dependency for database sessions.
    Provides async database session with automatic commit/rollback.

    Usage:
        @router.get("/endpoint")
        async def my_endpoint(db: AsyncSession = Depends(get_db)):
            # Use db session here
            pass
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except ServiceError:
            # Reported to the client by the exception handler
            await session.rollback()
            raise
        except Exception as e:
            await session.rollback()
            logger.error(f"Database session error: {str(e)}")
            raise
        finally:
            await session.close()


async def create_tables():
    """Create all tables that do not exist yet."""
    import gallery_cms.models  # noqa: F401  (register models on Base.metadata)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables():
    """Drop every table. Used by tests to start from a clean schema."""
    import gallery_cms.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def init_db():
    """
    Initialize database connection and schema.
    Used by the startup event to verify connectivity and create missing tables.
    """
    logger.info(f"Connecting to database backend: {_url.get_backend_name()}")

    try:
        await create_tables()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection initialized successfully")
    except Exception as e:
        logger.error(
            f"Database connection failed ({type(e).__name__}): {str(e)}\n"
            f"Check DATABASE_URL ({_url.render_as_string(hide_password=True)})"
        )
        raise


async def close_db():
    """
    Close database connections.
    Can be used for shutdown events.
    """
    await engine.dispose()
    logger.info("Database connections closed")
