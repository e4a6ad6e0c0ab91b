"""Test configuration and fixtures."""

import logfire

from tagboard.domain.model import Post
from tagboard.domain.value import PostId


def pytest_configure(config):
    """Keep Logfire local and quiet during tests."""
    logfire.configure(send_to_logfire=False, console=False)


def make_post(
    title: str = "Post 1",
    message: str = "This is post 1",
    tags: list[str] | None = None,
    post_id: PostId | None = None,
) -> Post:
    """Helper function to build test posts.

    Args:
        title: Post title
        message: Post body
        tags: Post tags (defaults to ``["tag1"]``)
        post_id: Optional identifier; the repository assigns one when None

    Returns:
        Post domain model
    """
    return Post(
        id=post_id,
        title=title,
        message=message,
        tags=["tag1"] if tags is None else tags,
    )


def sample_posts() -> list[Post]:
    """The three posts used throughout the walkthrough."""
    return [
        make_post("Post 1", "This is post 1", ["tag1"]),
        make_post("Post 2", "This is post 2", ["tag1", "tag2"]),
        make_post("Hello", "World", ["tag1", "tag3"]),
    ]
