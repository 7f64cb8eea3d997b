"""Core post domain model."""

from __future__ import annotations

from datetime import date as date_type
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from .enums import PostStatus

# Front-matter keys with a dedicated field, in serialization order
RECOGNIZED_KEYS = ("title", "date", "tags", "draft", "summary")


class Post(BaseModel):
    """A blog post: front-matter metadata plus a Markdown body.

    Tags behave as a set: duplicates are dropped on construction (first
    occurrence wins) and ``same_record`` compares them without order.
    Front-matter keys that have no dedicated field are kept in ``extra``
    so that rewriting a post never loses metadata.
    """

    title: str = Field(..., description="Human-readable headline")
    date: datetime = Field(..., description="Publication date with UTC offset")
    tags: list[str] = Field(default_factory=list, description="Topical labels")
    draft: bool = Field(default=False, description="True while unpublished")
    summary: str | None = Field(default=None, description="Optional teaser text")
    body: str = Field(default="", description="Markdown body, stored verbatim")
    extra: dict[str, Any] = Field(
        default_factory=dict, description="Unrecognized front-matter keys"
    )
    slug: str | None = Field(
        default=None, description="File stem within a collection"
    )

    @field_validator("title", mode="before")
    @classmethod
    def _check_title(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("title must be text")
        title = value.strip()
        if not title:
            raise ValueError("title must not be empty")
        return title

    @field_validator("date", mode="before")
    @classmethod
    def _check_date(cls, value: Any) -> datetime:
        if isinstance(value, str):
            try:
                value = datetime.fromisoformat(value.strip())
            except ValueError:
                raise ValueError(
                    f"date {value!r} is not an ISO-8601 timestamp"
                ) from None
        if isinstance(value, datetime):
            if value.tzinfo is None or value.utcoffset() is None:
                raise ValueError("date is missing a UTC offset")
            return value
        if isinstance(value, date_type):
            raise ValueError("date has no time of day or UTC offset")
        raise ValueError("date must be a timestamp")

    @field_validator("tags", mode="before")
    @classmethod
    def _check_tags(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        elif isinstance(value, (set, frozenset)):
            value = sorted(value, key=str)
        elif not isinstance(value, (list, tuple)):
            raise ValueError("tags must be a list of text values")

        tags: list[str] = []
        for item in value:
            if not isinstance(item, str):
                raise ValueError(f"tag {item!r} is not text")
            name = item.strip()
            if not name:
                raise ValueError("tags must not be empty")
            if name not in tags:
                tags.append(name)
        return tags

    @field_validator("draft", mode="before")
    @classmethod
    def _check_draft(cls, value: Any) -> bool:
        if value is None:
            return False
        if not isinstance(value, bool):
            raise ValueError("draft must be true or false")
        return value

    @field_validator("summary", mode="before")
    @classmethod
    def _check_summary(cls, value: Any) -> str | None:
        if value is None or isinstance(value, str):
            return value
        raise ValueError("summary must be text")

    @model_validator(mode="after")
    def _check_extra(self) -> Post:
        clash = sorted(set(self.extra) & set(RECOGNIZED_KEYS))
        if clash:
            raise ValueError(f"extra keys shadow recognized fields: {clash}")
        return self

    @classmethod
    def from_front_matter(
        cls, metadata: dict[str, Any], body: str = "", slug: str | None = None
    ) -> Post:
        """Build a post from a parsed front-matter mapping.

        Raises:
            pydantic.ValidationError: If a recognized field is malformed.
        """
        known = {key: metadata[key] for key in RECOGNIZED_KEYS if key in metadata}
        extra = {
            str(key): value
            for key, value in metadata.items()
            if key not in RECOGNIZED_KEYS
        }
        return cls(**known, body=body, extra=extra, slug=slug)

    @property
    def status(self) -> PostStatus:
        """Publication status."""
        return PostStatus.DRAFT if self.draft else PostStatus.PUBLISHED

    @property
    def tag_set(self) -> frozenset[str]:
        """Tags as an unordered set."""
        return frozenset(self.tags)

    def has_tag(self, tag: str) -> bool:
        """Check for a tag, ignoring case and surrounding whitespace."""
        wanted = tag.strip().casefold()
        return any(t.casefold() == wanted for t in self.tags)

    def metadata(self) -> dict[str, Any]:
        """Front-matter mapping in canonical key order."""
        meta: dict[str, Any] = {
            "title": self.title,
            "date": self.date,
            "tags": list(self.tags),
            "draft": self.draft,
        }
        if self.summary is not None:
            meta["summary"] = self.summary
        meta.update(self.extra)
        return meta

    def with_changes(self, **changes: Any) -> Post:
        """Return a re-validated copy with the given fields replaced."""
        return type(self).model_validate({**self.model_dump(), **changes})

    def same_record(self, other: Post) -> bool:
        """Compare field values, treating tags as a set.

        Dates must agree on both the instant and the UTC offset.
        """
        return (
            self.title == other.title
            and self.date == other.date
            and self.date.utcoffset() == other.date.utcoffset()
            and self.tag_set == other.tag_set
            and self.draft == other.draft
            and self.summary == other.summary
            and self.extra == other.extra
            and self.body == other.body
        )
