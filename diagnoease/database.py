from contextlib import asynccontextmanager
from typing import AsyncIterator

from diagnoease.config import get_settings
from diagnoease.utils.logger import get_logger
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorClientSession
from beanie import init_beanie

settings = get_settings()
logger = get_logger("database")

_mongo_client: AsyncIOMotorClient | None = None


def database_name() -> str:
    """Database name from the URI path, falling back to MONGODB_DB_NAME."""
    db_name = settings.MONGODB_URI.rsplit("/", 1)[-1].split("?")[0]  # Remove query params
    if not db_name or "@" in db_name or ":" in db_name:
        db_name = settings.MONGODB_DB_NAME
    return db_name


async def init_db(client: AsyncIOMotorClient | None = None) -> None:
    """Create the process-wide client and register document models with Beanie.

    A pre-built client (e.g. an in-memory mock) may be passed in.
    """
    global _mongo_client
    _mongo_client = client or AsyncIOMotorClient(settings.MONGODB_URI)
    from diagnoease.models import DOCUMENT_MODELS

    await init_beanie(
        database=_mongo_client.get_database(database_name()),
        document_models=DOCUMENT_MODELS,
    )
    logger.info(f"Beanie initialized on database '{database_name()}'")


def close_db() -> None:
    global _mongo_client
    if _mongo_client is not None:
        _mongo_client.close()
        _mongo_client = None


async def ping_db() -> bool:
    """Check MongoDB connectivity."""
    if not _mongo_client:
        return False
    try:
        await _mongo_client.admin.command("ping")
        return True
    except Exception as e:
        logger.warning(f"Database ping failed: {e}")
        return False


@asynccontextmanager
async def store_transaction() -> AsyncIterator[AsyncIOMotorClientSession | None]:
    """Yield a session bound to an open transaction, or None when disabled.

    Callers pass the yielded value as `session=` to every write; with None the
    writes run individually and the caller is responsible for compensation.
    """
    if not settings.MONGODB_TRANSACTIONS or _mongo_client is None:
        yield None
        return
    async with await _mongo_client.start_session() as session:
        async with session.start_transaction():
            yield session
