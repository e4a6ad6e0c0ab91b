"""MongoDB connection management.

Provides the connection handle shared by the document store and the
repositories. The handle is created explicitly and passed to its users;
there is no module-level client.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from pymongo import AsyncMongoClient

from tagboard.config import Settings
from tagboard.persistence.errors import mongo_errors


class MongoConnection:
    """Owns a client and the database it is bound to.

    ``db`` behaves like ``pymongo.asynchronous.database.AsyncDatabase``; tests
    substitute the in-memory database, which has no client.
    """

    def __init__(self, db: Any, client: Optional[AsyncMongoClient] = None) -> None:
        """Initialize connection.

        Args:
            db: Database handle
            client: Client owning the connection pool, closed with the connection
        """
        self.db = db
        self.client = client

    @property
    def database_name(self) -> str:
        return self.db.name

    def collection(self, name: str) -> Any:
        """Get a collection handle (no round-trip)."""
        return self.db[name]

    async def ping(self) -> None:
        """Round-trip the ``ping`` command."""
        with mongo_errors("ping"):
            await self.db.command("ping")

    async def close(self) -> None:
        """Release the connection pool."""
        if self.client is not None:
            await self.client.close()


def create_client(settings: Settings) -> AsyncMongoClient:
    """Create async MongoDB client.

    The client connects lazily: the first operation selects a server.

    Args:
        settings: Application settings with MongoDB URL

    Returns:
        Configured async client
    """
    with mongo_errors("connect"):
        return AsyncMongoClient(
            settings.mongo.url,
            appname=settings.mongo.app_name,
            serverSelectionTimeoutMS=settings.mongo.server_selection_timeout_ms,
        )


def create_connection(settings: Settings) -> MongoConnection:
    """Create a connection bound to the configured database.

    Args:
        settings: Application settings

    Returns:
        Connection handle
    """
    client = create_client(settings)
    return MongoConnection(client[settings.mongo.database], client=client)


@asynccontextmanager
async def open_connection(
    settings: Settings,
) -> AsyncGenerator[MongoConnection, None]:
    """Get a connection with automatic cleanup.

    Args:
        settings: Application settings

    Yields:
        Connection handle
    """
    connection = create_connection(settings)
    try:
        yield connection
    finally:
        await connection.close()
