"""Result models for validation and collection queries."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import IssueSeverity
from .post import Post


class ValidationIssue(BaseModel):
    """A single problem found in a post."""

    severity: IssueSeverity
    field: str | None = Field(None, description="Front-matter key, if any")
    message: str = Field(..., description="Human-readable description")

    def __str__(self) -> str:
        where = f"{self.field}: " if self.field else ""
        return f"[{self.severity.value}] {where}{self.message}"


class ValidationReport(BaseModel):
    """Validation outcome for one post."""

    source: str = Field(..., description="Slug or path the text came from")
    issues: list[ValidationIssue] = Field(default_factory=list)
    post: Post | None = Field(None, description="Parsed post when error-free")

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == IssueSeverity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == IssueSeverity.WARNING]

    @property
    def is_valid(self) -> bool:
        return not self.errors


class CollectionReport(BaseModel):
    """Validation outcome for a whole collection."""

    reports: list[ValidationReport] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.reports)

    @property
    def valid_count(self) -> int:
        return sum(1 for r in self.reports if r.is_valid)

    @property
    def invalid_count(self) -> int:
        return self.total - self.valid_count

    @property
    def is_valid(self) -> bool:
        return self.invalid_count == 0


class TagSummary(BaseModel):
    """A tag and the number of posts carrying it."""

    name: str
    count: int


class CollectionStats(BaseModel):
    """Statistics about the collection."""

    total_posts: int
    published: int
    drafts: int
    invalid: int = 0
    total_tags: int
    top_tags: list[TagSummary] = Field(default_factory=list)
    latest_date: datetime | None = None


class ListPostsResult(BaseModel):
    """Result of listing posts."""

    posts: list[Post]
    total_count: int
    has_more: bool
