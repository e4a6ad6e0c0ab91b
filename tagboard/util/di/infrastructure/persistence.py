"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire

from tagboard.config import PostCollectionSettings, Settings
from tagboard.domain.repository import DocumentStore, PostRepository
from tagboard.persistence.database import MongoConnection, open_connection
from tagboard.persistence.repository import MongoDocumentStore, MongoPostRepository
from tagboard.util.di.base import ProviderBase
from tagboard.util.observability import instrument_pymongo


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider using MongoDB."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    async def get_connection(self, settings: Settings) -> AsyncIterator[MongoConnection]:
        """Provide the MongoDB connection, closed with the container."""
        # Instrument before the client exists so its commands are traced
        instrument_pymongo()
        async with open_connection(settings) as connection:
            logfire.info(
                "MongoDB connection created", database=connection.database_name
            )
            yield connection
        logfire.info("MongoDB connection closed")

    @provide(scope=Scope.REQUEST)
    def get_document_store(self, connection: MongoConnection) -> DocumentStore:
        """Provide document store."""
        return MongoDocumentStore(connection)

    @provide(scope=Scope.REQUEST)
    def get_post_repository(
        self, connection: MongoConnection, settings: PostCollectionSettings
    ) -> PostRepository:
        """Provide Post repository."""
        return MongoPostRepository(connection, settings.name)
