"""Custom exceptions for Postkeeper."""

from __future__ import annotations


class PostkeeperError(Exception):
    """Base exception for Postkeeper."""

    pass


class ValidationError(PostkeeperError):
    """Raised when a post record or user input fails validation."""

    def __init__(
        self, message: str, field_errors: dict[str, list[str]] | None = None
    ) -> None:
        self.field_errors = field_errors or {}
        super().__init__(message)


class FrontMatterError(ValidationError):
    """Raised when the front-matter block itself cannot be read."""

    pass


class PostNotFoundError(PostkeeperError):
    """Raised when a post is not found in the collection."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"Post '{slug}' not found")


class DuplicatePostError(PostkeeperError):
    """Raised when creating a post whose slug is already taken."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"Post '{slug}' already exists")


class StorageError(PostkeeperError):
    """Raised when reading or writing the collection fails."""

    pass
