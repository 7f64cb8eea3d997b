"""Post validation.

Unlike ``parse_post``, which stops at the first malformed record, the
validator collects every problem it can find so a whole collection can be
reported on in one pass.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any

from ...infra.frontmatter import build_post, split_front_matter
from ..exceptions import FrontMatterError, ValidationError
from ..models import (
    RECOGNIZED_KEYS,
    IssueSeverity,
    Post,
    ValidationIssue,
    ValidationReport,
)

logger = logging.getLogger(__name__)


def _error(field: str | None, message: str) -> ValidationIssue:
    return ValidationIssue(severity=IssueSeverity.ERROR, field=field, message=message)


def _warning(field: str | None, message: str) -> ValidationIssue:
    return ValidationIssue(
        severity=IssueSeverity.WARNING, field=field, message=message
    )


class PostValidator:
    """Checks post records against the record invariants and configured limits."""

    def __init__(self, max_tags: int = 20, max_summary_length: int = 200) -> None:
        """Initialize the validator.

        Args:
            max_tags: Maximum allowed tags per post.
            max_summary_length: Summary length above which a warning is issued.
        """
        self._max_tags = max_tags
        self._max_summary_length = max_summary_length

    def validate_text(
        self, text: str, source: str, slug: str | None = None
    ) -> ValidationReport:
        """Validate a full document.

        Args:
            text: Document text including the front-matter block.
            source: Label used in the report (slug or path).
            slug: Slug to attach to the parsed post.

        Returns:
            A report listing every issue; ``post`` is set when there are no errors.
        """
        try:
            metadata, body = split_front_matter(text)
        except FrontMatterError as e:
            return ValidationReport(source=source, issues=[_error(None, str(e))])

        issues = self._inspect_metadata(metadata)

        try:
            post = build_post(metadata, body=body, slug=slug)
        except ValidationError as e:
            for field, messages in e.field_errors.items():
                issues.extend(_error(field, message) for message in messages)
            return ValidationReport(source=source, issues=issues)

        issues.extend(self._check_limits(post))
        report = ValidationReport(source=source, issues=issues)
        if report.is_valid:
            report.post = post
        else:
            logger.debug(f"{source}: {len(report.errors)} error(s)")
        return report

    def validate_post(self, post: Post) -> ValidationReport:
        """Validate an already constructed post against the configured limits."""
        issues = self._check_limits(post)
        report = ValidationReport(source=post.slug or post.title, issues=issues)
        if report.is_valid:
            report.post = post
        return report

    def ensure_valid(self, post: Post) -> Post:
        """Return the post, or raise ValidationError listing its errors."""
        report = self.validate_post(post)
        if not report.is_valid:
            field_errors: dict[str, list[str]] = {}
            for issue in report.errors:
                field_errors.setdefault(issue.field or "post", []).append(
                    issue.message
                )
            raise ValidationError(
                "; ".join(str(i) for i in report.errors), field_errors=field_errors
            )
        return post

    def _inspect_metadata(self, metadata: dict[str, Any]) -> list[ValidationIssue]:
        """Find problems visible only in the raw mapping."""
        issues = [
            _warning(str(key), f"unrecognized front-matter key '{key}' is kept as-is")
            for key in metadata
            if key not in RECOGNIZED_KEYS
        ]

        raw_tags = metadata.get("tags")
        if isinstance(raw_tags, (list, tuple)):
            counts = Counter(t.strip() for t in raw_tags if isinstance(t, str))
            issues.extend(
                _warning("tags", f"duplicate tag '{name}' ignored")
                for name, count in counts.items()
                if name and count > 1
            )
        return issues

    def _check_limits(self, post: Post) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        if len(post.tags) > self._max_tags:
            issues.append(
                _error(
                    "tags",
                    f"too many tags ({len(post.tags)}), maximum is {self._max_tags}",
                )
            )
        if post.summary is not None and len(post.summary) > self._max_summary_length:
            issues.append(
                _warning(
                    "summary",
                    f"summary is {len(post.summary)} characters, "
                    f"longer than {self._max_summary_length}",
                )
            )
        if not post.draft and not post.body.strip():
            issues.append(_warning("body", "published post has an empty body"))
        return issues
