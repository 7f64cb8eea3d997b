"""File-system repository for post documents.

Each post lives in ``<content_dir>/<slug><extension>``. Writes go to a
temporary file that replaces the target, under a per-post file lock, so a
concurrent reader never sees a half-written document.
"""

from __future__ import annotations

import contextlib
import logging
import os
import re
import tempfile
from collections.abc import Callable
from pathlib import Path

from filelock import FileLock, Timeout

from ...domain.exceptions import (
    DuplicatePostError,
    PostkeeperError,
    PostNotFoundError,
    StorageError,
    ValidationError,
)
from ...domain.models import Post
from ..frontmatter import parse_post, serialize_post

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class PostRepository:
    """Reads and writes posts in a content directory."""

    def __init__(
        self, content_dir: Path, extension: str = ".md", lock_timeout: float = 10.0
    ) -> None:
        """Initialize the repository.

        Args:
            content_dir: Directory holding the post documents.
            extension: File extension of post documents.
            lock_timeout: Seconds to wait for a post's write lock.
        """
        self._content_dir = Path(content_dir)
        self._extension = extension if extension.startswith(".") else f".{extension}"
        self._lock_timeout = lock_timeout

    @property
    def content_dir(self) -> Path:
        return self._content_dir

    def path_for(self, slug: str) -> Path:
        """Get the document path for a slug.

        Existing files may have any stem; only path traversal is refused here.
        """
        if not slug or "/" in slug or "\\" in slug or slug.startswith("."):
            raise ValidationError(f"Invalid slug '{slug}'", {"slug": ["invalid slug"]})
        return self._content_dir / f"{slug}{self._extension}"

    def _lock_for(self, path: Path) -> FileLock:
        return FileLock(
            str(path.with_name(f".{path.name}.lock")), timeout=self._lock_timeout
        )

    def iter_slugs(self) -> list[str]:
        """List the slugs of all documents, sorted."""
        if not self._content_dir.is_dir():
            return []
        return sorted(
            p.stem
            for p in self._content_dir.glob(f"*{self._extension}")
            if p.is_file() and not p.name.startswith(".")
        )

    def exists(self, slug: str) -> bool:
        return self.path_for(slug).is_file()

    def read_text(self, slug: str) -> str:
        """Read the raw document text.

        Raises:
            PostNotFoundError: If there is no document for the slug.
            StorageError: If the file cannot be read.
        """
        path = self.path_for(slug)
        if not path.is_file():
            raise PostNotFoundError(slug)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def get(self, slug: str) -> Post:
        """Load and parse a post.

        Raises:
            PostNotFoundError: If there is no document for the slug.
            ValidationError: If the document is not a valid post record.
        """
        return parse_post(self.read_text(slug), slug=slug)

    def load_all(self) -> list[tuple[str, Post | PostkeeperError]]:
        """Load every post, pairing broken documents with their error."""
        loaded: list[tuple[str, Post | PostkeeperError]] = []
        for slug in self.iter_slugs():
            try:
                loaded.append((slug, self.get(slug)))
            except (ValidationError, StorageError) as e:
                logger.warning(f"Skipping invalid post '{slug}': {e}")
                loaded.append((slug, e))
        return loaded

    def save(self, post: Post, overwrite: bool = True) -> Path:
        """Write a post to its document.

        Args:
            post: The post to write. Its ``slug`` selects the file.
            overwrite: If False, refuse to replace an existing document.

        Returns:
            Path of the written document.

        Raises:
            ValidationError: If the post has no slug or the slug is malformed.
            DuplicatePostError: If overwrite is False and the slug is taken.
            StorageError: If the lock cannot be acquired or the write fails.
        """
        if post.slug is None:
            raise ValidationError("Post has no slug", {"slug": ["slug is required"]})
        if not SLUG_PATTERN.match(post.slug):
            raise ValidationError(
                f"Invalid slug '{post.slug}': use lowercase letters, digits "
                "and single hyphens",
                {"slug": ["invalid slug"]},
            )

        path = self.path_for(post.slug)
        text = serialize_post(post)

        try:
            self._content_dir.mkdir(parents=True, exist_ok=True)
            with self._lock_for(path):
                if not overwrite and path.exists():
                    raise DuplicatePostError(post.slug)
                self._write_atomic(path, text)
        except Timeout as e:
            raise StorageError(
                f"Timed out after {self._lock_timeout}s waiting for lock on {path}"
            ) from e
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e

        logger.info(f"Saved post '{post.slug}' to {path}")
        return path

    def _write_atomic(self, path: Path, text: str) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise

    def update(self, slug: str, change: Callable[[Post], Post]) -> Post:
        """Read, change and write back a post while holding its lock.

        Args:
            slug: The post to change.
            change: Receives the current post and returns the new one.
                Returning the same object leaves the file untouched.

        Returns:
            The post as stored after the change.

        Raises:
            PostNotFoundError: If there is no document for the slug.
            ValidationError: If the document, or the changed post, is invalid.
            StorageError: If the lock cannot be acquired or the write fails.
        """
        path = self.path_for(slug)
        if not path.is_file():
            raise PostNotFoundError(slug)

        try:
            with self._lock_for(path):
                current = self.get(slug)
                updated = change(current)
                if updated is current:
                    return current
                self._write_atomic(path, serialize_post(updated))
        except Timeout as e:
            raise StorageError(
                f"Timed out after {self._lock_timeout}s waiting for lock on {path}"
            ) from e
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e

        logger.info(f"Saved post '{slug}' to {path}")
        return updated
