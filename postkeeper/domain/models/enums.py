"""Enumeration types for Postkeeper domain models."""

from enum import Enum


class PostStatus(str, Enum):
    """Publication status of a post, derived from its draft flag."""

    PUBLISHED = "published"
    DRAFT = "draft"


class IssueSeverity(str, Enum):
    """Severity of a validation issue.

    ERROR: The record is malformed and must be fixed.
    WARNING: The record is usable but something looks off.
    """

    ERROR = "error"
    WARNING = "warning"
