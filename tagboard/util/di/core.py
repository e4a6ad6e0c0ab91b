"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from tagboard.config import MongoSettings, PostCollectionSettings, Settings
from tagboard.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide(scope=Scope.APP)
    def provide_mongo_settings(self, settings: Settings) -> MongoSettings:
        """Provide MongoDB settings."""
        return settings.mongo

    @provide(scope=Scope.APP)
    def provide_post_collection_settings(
        self, settings: Settings
    ) -> PostCollectionSettings:
        """Provide posts collection settings."""
        return settings.posts
