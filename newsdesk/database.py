from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from newsdesk.config import settings
from newsdesk.middleware import install_query_counter

# Module-level engine variable allows tests to override with a test engine.
# SQL echo goes through the "sqlalchemy.engine" logger configured in logging_config.
engine = create_async_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
)

# Register the per-request SQL query counter on the production engine.
install_query_counter(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def get_db():
    """
    Yield one session per request.

    The session commits when the handler returns normally and rolls back on
    any exception, so a failed operation never leaves a partial write.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
