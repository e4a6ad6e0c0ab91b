"""Application layer DI providers."""

from dishka import Scope, provide

from tagboard.application.usecase.post import (
    BootstrapCollectionUseCase,
    DeletePostsUseCase,
    GetPostUseCase,
    GroupPostsUseCase,
    ListPostsUseCase,
    PublishPostsUseCase,
    RetitlePostsUseCase,
)
from tagboard.config import PostCollectionSettings
from tagboard.domain.service import PostService
from tagboard.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    @provide(scope=Scope.REQUEST)
    def get_bootstrap_collection_use_case(
        self, post_service: PostService, collection_settings: PostCollectionSettings
    ) -> BootstrapCollectionUseCase:
        """Provide bootstrap collection use case."""
        return BootstrapCollectionUseCase(
            post_service=post_service, collection_settings=collection_settings
        )

    @provide(scope=Scope.REQUEST)
    def get_publish_posts_use_case(
        self, post_service: PostService
    ) -> PublishPostsUseCase:
        """Provide publish posts use case."""
        return PublishPostsUseCase(post_service=post_service)

    @provide(scope=Scope.REQUEST)
    def get_get_post_use_case(self, post_service: PostService) -> GetPostUseCase:
        """Provide get post use case."""
        return GetPostUseCase(post_service=post_service)

    @provide(scope=Scope.REQUEST)
    def get_list_posts_use_case(self, post_service: PostService) -> ListPostsUseCase:
        """Provide list posts use case."""
        return ListPostsUseCase(post_service=post_service)

    @provide(scope=Scope.REQUEST)
    def get_retitle_posts_use_case(
        self, post_service: PostService
    ) -> RetitlePostsUseCase:
        """Provide retitle posts use case."""
        return RetitlePostsUseCase(post_service=post_service)

    @provide(scope=Scope.REQUEST)
    def get_delete_posts_use_case(
        self, post_service: PostService
    ) -> DeletePostsUseCase:
        """Provide delete posts use case."""
        return DeletePostsUseCase(post_service=post_service)

    @provide(scope=Scope.REQUEST)
    def get_group_posts_use_case(self, post_service: PostService) -> GroupPostsUseCase:
        """Provide group posts use case."""
        return GroupPostsUseCase(post_service=post_service)
