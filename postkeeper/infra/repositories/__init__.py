"""Repository layer for Postkeeper.

- post: PostRepository, a file-system collection of post documents
"""

from .post import SLUG_PATTERN, PostRepository

__all__ = ["PostRepository", "SLUG_PATTERN"]
