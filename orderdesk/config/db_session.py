from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from orderdesk.config.logger import get_logger
from orderdesk.config.settings import PostgresSettings

logger = get_logger("DB_Session_Init")

# ----------------------------
# Base declarative class
# ----------------------------
Base = declarative_base()

# ----------------------------
# Global engine & session
# ----------------------------
engine: Optional[AsyncEngine] = None
async_session: Optional[sessionmaker] = None


# ----------------------------
# Engine factory
# ----------------------------
def get_engine(database_url: str, pg: Optional[PostgresSettings] = None) -> AsyncEngine:
    """
    Initialize or return the global SQLAlchemy async engine with pooling options.
    The first call wins; later calls return the same engine.
    """
    global engine
    if engine is None:
        pg = pg or PostgresSettings()
        engine = create_async_engine(
            str(database_url),
            echo=pg.echo,
            pool_size=pg.pool_size,
            max_overflow=pg.max_overflow,
            pool_timeout=pg.pool_timeout,
            pool_recycle=pg.pool_recycle,
            pool_pre_ping=True,
        )
        logger.info("Async engine created", extra={"pool_size": pg.pool_size})
    return engine


# ----------------------------
# Async session factory
# ----------------------------
def get_sessionmaker(database_url: str, pg: Optional[PostgresSettings] = None) -> sessionmaker:
    """
    Return the async SQLAlchemy session factory (singleton).
    Sessions keep attribute values after commit so returned rows stay readable.
    """
    global async_session
    if async_session is None:
        async_session = sessionmaker(
            bind=get_engine(database_url, pg),
            expire_on_commit=False,
            class_=AsyncSession,
        )
        logger.info("AsyncSession factory created")
    return async_session


# ----------------------------
# Database initialization
# ----------------------------
async def init_db(database_url: str, pg: Optional[PostgresSettings] = None):
    """Create every table registered on Base."""
    # registers the orders table on Base.metadata
    import orderdesk.orders.models  # noqa: F401

    logger.info("Starting database initialization...")
    db_engine = get_engine(database_url, pg)
    try:
        async with db_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created or already exist")
    except Exception as e:
        logger.exception("Failed to initialize database", extra={"error": str(e)})
        raise


async def drop_db(database_url: str, pg: Optional[PostgresSettings] = None):
    """Drop all tables (test and reset scripts only)."""
    logger.warning("Dropping all database tables...")
    db_engine = get_engine(database_url, pg)
    try:
        async with db_engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("All tables dropped successfully")
    except Exception as e:
        logger.exception("Failed to drop tables", extra={"error": str(e)})
        raise


async def dispose_engine():
    """Close pooled connections and forget the singletons."""
    global engine, async_session
    if engine is not None:
        await engine.dispose()
        logger.info("Async engine disposed")
    engine = None
    async_session = None
