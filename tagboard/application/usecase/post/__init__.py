"""Post use cases."""

from .bootstrap_collection import (
    BootstrapCollectionRequest,
    BootstrapCollectionResponse,
    BootstrapCollectionUseCase,
)
from .delete_posts import DeletePostsRequest, DeletePostsResponse, DeletePostsUseCase
from .get_post import GetPostRequest, GetPostUseCase
from .group_posts import (
    GroupPostsRequest,
    GroupPostsResponse,
    GroupPostsUseCase,
    TagGroupItem,
)
from .items import PostItem
from .list_posts import ListPostsRequest, ListPostsResponse, ListPostsUseCase
from .publish_posts import (
    NewPost,
    PublishPostsRequest,
    PublishPostsResponse,
    PublishPostsUseCase,
    RejectedPost,
)
from .retitle_posts import (
    RetitlePostsRequest,
    RetitlePostsResponse,
    RetitlePostsUseCase,
)

__all__ = [
    "BootstrapCollectionRequest",
    "BootstrapCollectionResponse",
    "BootstrapCollectionUseCase",
    "DeletePostsRequest",
    "DeletePostsResponse",
    "DeletePostsUseCase",
    "GetPostRequest",
    "GetPostUseCase",
    "GroupPostsRequest",
    "GroupPostsResponse",
    "GroupPostsUseCase",
    "ListPostsRequest",
    "ListPostsResponse",
    "ListPostsUseCase",
    "NewPost",
    "PostItem",
    "PublishPostsRequest",
    "PublishPostsResponse",
    "PublishPostsUseCase",
    "RejectedPost",
    "RetitlePostsRequest",
    "RetitlePostsResponse",
    "RetitlePostsUseCase",
    "TagGroupItem",
]
