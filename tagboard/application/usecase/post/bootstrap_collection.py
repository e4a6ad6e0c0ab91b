"""Bootstrap posts collection use case."""

from pydantic import BaseModel

from tagboard.application.usecase.base import BaseUseCase
from tagboard.config import PostCollectionSettings
from tagboard.domain.service import PostService


class BootstrapCollectionRequest(BaseModel):
    """Bootstrap collection request."""

    recreate: bool | None = None  # Defaults to the configured behaviour


class BootstrapCollectionResponse(BaseModel):
    """Bootstrap collection response."""

    collection: str
    index_name: str


class BootstrapCollectionUseCase(BaseUseCase):
    """Use case for creating the validated posts collection and its tag index."""

    def __init__(
        self, post_service: PostService, collection_settings: PostCollectionSettings
    ) -> None:
        """Initialize bootstrap collection use case.

        Args:
            post_service: Post domain service
            collection_settings: Posts collection configuration
        """
        self.post_service = post_service
        self.collection_settings = collection_settings

    async def execute(
        self, request: BootstrapCollectionRequest
    ) -> BootstrapCollectionResponse:
        """Execute bootstrap flow.

        Args:
            request: Bootstrap request

        Returns:
            Collection and index names
        """
        index_name = await self.post_service.prepare_collection(
            recreate=request.recreate
        )
        return BootstrapCollectionResponse(
            collection=self.collection_settings.name,
            index_name=index_name,
        )
