"""Post Service - Core business logic for Postkeeper.

Coordinates the collection queries and edits. Reading and writing documents
is delegated to PostRepository; record checks to PostValidator.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from collections import Counter
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from ...infra.frontmatter import build_post, field_errors_from
from ..exceptions import DuplicatePostError, StorageError, ValidationError
from ..models import (
    CollectionReport,
    CollectionStats,
    IssueSeverity,
    ListPostsResult,
    Post,
    TagSummary,
    ValidationIssue,
    ValidationReport,
)
from .validator import PostValidator

if TYPE_CHECKING:
    from ...infra.repositories import PostRepository

logger = logging.getLogger(__name__)


def slugify(title: str) -> str:
    """Turn a title into a file-name slug.

    Example:
        >>> slugify("Casting Pitfalls: int -> char")
        'casting-pitfalls-int-char'
    """
    normalized = unicodedata.normalize("NFKD", title)
    ascii_title = normalized.encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_title.lower()).strip("-")
    if not slug:
        raise ValidationError(
            f"Cannot derive a slug from title '{title}'",
            {"slug": ["title has no usable characters"]},
        )
    return slug


class PostService:
    """Service for post-related business logic."""

    def __init__(
        self,
        repository: PostRepository,
        validator: PostValidator | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            repository: Post repository for document access.
            validator: Validator applied to every write and to collection checks.
        """
        self._repo = repository
        self._validator = validator or PostValidator()

    # =========================================================================
    # Queries
    # =========================================================================

    def _valid_posts(self) -> list[Post]:
        return [post for _, post in self._repo.load_all() if isinstance(post, Post)]

    def list_posts(
        self,
        tag: str | None = None,
        include_drafts: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> ListPostsResult:
        """List posts, newest first.

        Args:
            tag: Only include posts carrying this tag (case-insensitive).
            include_drafts: Whether drafts are listed.
            limit: Maximum number of posts to return.
            offset: Number of posts to skip.

        Returns:
            The requested page of posts and pagination info.
        """
        posts = self._valid_posts()
        if not include_drafts:
            posts = [p for p in posts if not p.draft]
        if tag:
            posts = [p for p in posts if p.has_tag(tag)]
        posts.sort(key=lambda p: (p.date, p.slug or ""), reverse=True)

        total_count = len(posts)
        page = posts[offset : offset + limit]
        return ListPostsResult(
            posts=page,
            total_count=total_count,
            has_more=offset + len(page) < total_count,
        )

    def get_post(self, slug: str) -> Post:
        """Get a post by slug.

        Raises:
            PostNotFoundError: If the post does not exist.
        """
        return self._repo.get(slug)

    def list_tags(self, include_drafts: bool = True) -> list[TagSummary]:
        """Count posts per tag, most used first."""
        counts: Counter[str] = Counter()
        for post in self._valid_posts():
            if post.draft and not include_drafts:
                continue
            counts.update(post.tag_set)
        return [
            TagSummary(name=name, count=count)
            for name, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
        ]

    def get_stats(self) -> CollectionStats:
        """Get statistics about the collection."""
        loaded = self._repo.load_all()
        posts = [post for _, post in loaded if isinstance(post, Post)]
        drafts = sum(1 for p in posts if p.draft)
        tags = self.list_tags()
        return CollectionStats(
            total_posts=len(posts),
            published=len(posts) - drafts,
            drafts=drafts,
            invalid=len(loaded) - len(posts),
            total_tags=len(tags),
            top_tags=tags[:10],
            latest_date=max((p.date for p in posts), default=None),
        )

    def validate_collection(self) -> CollectionReport:
        """Validate every document in the collection."""
        reports = []
        for slug in self._repo.iter_slugs():
            try:
                text = self._repo.read_text(slug)
            except StorageError as e:
                reports.append(
                    ValidationReport(
                        source=slug,
                        issues=[
                            ValidationIssue(
                                severity=IssueSeverity.ERROR, message=str(e)
                            )
                        ],
                    )
                )
                continue
            reports.append(self._validator.validate_text(text, source=slug, slug=slug))
        report = CollectionReport(reports=reports)
        logger.info(
            f"Validated {report.total} posts: {report.valid_count} valid, "
            f"{report.invalid_count} invalid"
        )
        return report

    # =========================================================================
    # Edits
    # =========================================================================

    def create_post(
        self,
        title: str,
        tags: list[str] | None = None,
        body: str = "",
        summary: str | None = None,
        date: datetime | str | None = None,
        slug: str | None = None,
    ) -> Post:
        """Create a new draft post.

        Args:
            title: Headline of the post.
            tags: Topical labels.
            body: Markdown body.
            summary: Optional teaser.
            date: Publication date (datetime or ISO-8601 text); defaults to
                now in UTC.
            slug: File slug; derived from the title if omitted.

        Returns:
            The stored post.

        Raises:
            ValidationError: If the input does not form a valid post.
            DuplicatePostError: If the slug is already taken.
        """
        if not title or not title.strip():
            raise ValidationError("Title cannot be empty", {"title": ["required"]})

        slug = slug or slugify(title)
        if self._repo.exists(slug):
            raise DuplicatePostError(slug)

        post = build_post(
            {
                "title": title,
                "date": date or datetime.now(timezone.utc).replace(microsecond=0),
                "tags": tags or [],
                "draft": True,
                "summary": summary,
            },
            body=body,
            slug=slug,
        )
        self._validator.ensure_valid(post)
        self._repo.save(post, overwrite=False)
        logger.info(f"Created draft '{slug}'")
        return post

    def update_post(
        self,
        slug: str,
        title: str | None = None,
        tags: list[str] | None = None,
        summary: str | None = None,
        body: str | None = None,
    ) -> Post:
        """Edit fields of an existing post; None leaves a field unchanged.

        Raises:
            PostNotFoundError: If the post does not exist.
            ValidationError: If the edited post is invalid.
        """
        changes = {
            key: value
            for key, value in {
                "title": title,
                "tags": tags,
                "summary": summary,
                "body": body,
            }.items()
            if value is not None
        }
        if not changes:
            return self._repo.get(slug)
        return self._repo.update(slug, lambda post: self._apply(post, **changes))

    def publish_post(self, slug: str) -> Post:
        """Mark a post as published (draft: false)."""
        return self._set_draft(slug, False)

    def unpublish_post(self, slug: str) -> Post:
        """Mark a post as a draft again."""
        return self._set_draft(slug, True)

    def _set_draft(self, slug: str, draft: bool) -> Post:
        def change(post: Post) -> Post:
            if post.draft == draft:
                logger.debug(f"Post '{slug}' already has draft={draft}")
                return post
            return self._apply(post, draft=draft)

        return self._repo.update(slug, change)

    def _apply(self, post: Post, **changes) -> Post:
        try:
            updated = post.with_changes(**changes)
        except PydanticValidationError as e:
            field_errors = field_errors_from(e)
            details = "; ".join(
                f"{key}: {', '.join(messages)}" for key, messages in field_errors.items()
            )
            raise ValidationError(
                f"invalid edit of '{post.slug}': {details}", field_errors=field_errors
            ) from e
        self._validator.ensure_valid(updated)
        logger.info(f"Updated post '{post.slug}': {sorted(changes)}")
        return updated
