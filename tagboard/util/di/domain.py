"""Domain layer DI providers."""

from dishka import Scope, provide

from tagboard.config import PostCollectionSettings
from tagboard.domain.repository import DocumentStore, PostRepository
from tagboard.domain.service import PostService
from tagboard.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with the repository lifecycle.
    """

    scope = Scope.REQUEST

    @provide
    def get_post_service(
        self,
        post_repository: PostRepository,
        document_store: DocumentStore,
        collection_settings: PostCollectionSettings,
    ) -> PostService:
        """Provide post domain service."""
        return PostService(
            post_repository=post_repository,
            document_store=document_store,
            collection_settings=collection_settings,
        )
