"""Domain models for Postkeeper.

This package provides all domain models, organized by concern:
- enums: IssueSeverity, PostStatus
- post: Post
- results: ValidationIssue, ValidationReport, CollectionReport, etc.
"""

from .enums import IssueSeverity, PostStatus
from .post import RECOGNIZED_KEYS, Post
from .results import (
    CollectionReport,
    CollectionStats,
    ListPostsResult,
    TagSummary,
    ValidationIssue,
    ValidationReport,
)

__all__ = [
    # Enums
    "IssueSeverity",
    "PostStatus",
    # Core models
    "Post",
    "RECOGNIZED_KEYS",
    # Result models
    "ValidationIssue",
    "ValidationReport",
    "CollectionReport",
    "TagSummary",
    "CollectionStats",
    "ListPostsResult",
]
