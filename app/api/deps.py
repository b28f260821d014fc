from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import get_settings

settings = get_settings()

# Ensure we have a valid URL or fallback to memory for dev/test if not set
DB_URL = settings.database_url or "sqlite+aiosqlite:///:memory:"

# pool_pre_ping solo para bases remotas.
engine_options = {} if DB_URL.startswith("sqlite") else {"pool_pre_ping": True}
engine = create_async_engine(DB_URL, echo=settings.sql_echo, **engine_options)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session
