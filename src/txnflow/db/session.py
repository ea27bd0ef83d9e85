"""Async engine, session factory and the `get_db` request dependency."""
from collections.abc import AsyncIterator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from txnflow.config import settings


def engine_options(database_url: str) -> dict[str, Any]:
    """Engine keyword arguments for the configured backend.

    SQLite (used in tests) runs without a sized pool; server databases get
    a pre-pinged pool sized from settings.
    """
    # Statement parameters are descriptions and amounts, i.e. personal
    # financial data. DB_ECHO is honored in development only.
    options: dict[str, Any] = {
        "echo": settings.db_echo if settings.app_env.lower() == "development" else False,
    }
    if database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(
            pool_pre_ping=True,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )
    return options


async_engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

AsyncSessionLocal = async_sessionmaker(
    async_engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        yield session
