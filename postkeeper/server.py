"""MCP Server for Postkeeper."""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .container import get_container
from .domain.exceptions import PostkeeperError
from .domain.models import Post, ValidationReport

logger = logging.getLogger(__name__)


# =============================================================================
# Helper Functions
# =============================================================================


def _normalize_content(content: str) -> str:
    """Normalize content that may be wrapped in MCP TextContent format.

    Some MCP clients send content as JSON array: [{"text": "...", "type": "text"}]
    This function extracts the actual text content.

    Only an array in which every element is exactly a TextContent object
    (``type`` of ``"text"`` and a string ``text``) is unwrapped; the texts
    are joined in order. Anything else, including a Markdown body that
    happens to be some other JSON array, is returned unchanged.

    Args:
        content: The content string, possibly JSON-encoded.

    Returns:
        The normalized plain text content.
    """
    if not content:
        return content

    stripped = content.strip()
    if not (stripped.startswith("[") and stripped.endswith("]")):
        return content

    try:
        data = json.loads(stripped)
    except json.JSONDecodeError:
        return content

    if not isinstance(data, list) or not data:
        return content
    for item in data:
        if not (
            isinstance(item, dict)
            and set(item) <= {"type", "text", "annotations", "_meta"}
            and item.get("type") == "text"
            and isinstance(item.get("text"), str)
        ):
            return content

    return _normalize_content("".join(item["text"] for item in data))


def _format_post_brief(post: Post) -> dict[str, Any]:
    """Format a post's front-matter for list responses."""
    result = {
        "slug": post.slug,
        "title": post.title,
        "date": post.date.isoformat(),
        "tags": post.tags,
        "draft": post.draft,
    }
    if post.summary is not None:
        result["summary"] = post.summary
    return result


def _format_post_full(post: Post) -> dict[str, Any]:
    """Format a post with its body and extra front-matter keys."""
    return {
        **_format_post_brief(post),
        "status": post.status.value,
        "extra": {key: str(value) for key, value in post.extra.items()},
        "body": post.body,
    }


def _format_report(report: ValidationReport) -> dict[str, Any]:
    return {
        "source": report.source,
        "valid": report.is_valid,
        "issues": [
            {
                "severity": issue.severity.value,
                "field": issue.field,
                "message": issue.message,
            }
            for issue in report.issues
        ],
    }


# =============================================================================
# Server Setup
# =============================================================================

SERVER_INSTRUCTIONS = """\
Postkeeper manages a collection of Markdown blog posts with YAML front-matter.

Every post starts with a block like:

```
---
title: Integer casting pitfalls
date: 2024-03-01T09:30:00+01:00
tags: [c, integers]
draft: true
---
```

- `title` must be non-empty text.
- `date` must be a timestamp with an explicit UTC offset.
- `tags` is a set of non-empty labels; duplicates are ignored.
- `draft` is true or false and defaults to false.

New posts are always created as drafts. Use `posts_publish` once a draft
is ready, and `posts_validate` to check the whole collection.
"""

mcp = FastMCP(
    "postkeeper",
    instructions=SERVER_INSTRUCTIONS,
)


# =============================================================================
# Prompts
# =============================================================================


@mcp.prompt()
def front_matter_guide() -> str:
    """Guide for writing front-matter that validates."""
    return """\
# Writing Front-Matter

## Required
- `title`: plain text headline, not empty
- `date`: `2024-03-01T09:30:00+01:00` or `2024-03-01T08:30:00Z`
  (a bare `2024-03-01` is rejected: it has no UTC offset)

## Optional
- `tags`: `[c, casting]`; an empty list is fine
- `draft`: `true` or `false` (unquoted); absent means published
- `summary`: one or two sentences

Any other key is kept as-is but reported as a warning.
"""


# =============================================================================
# Health Check Tools
# =============================================================================


@mcp.tool(name="posts_ping")
def ping() -> dict[str, Any]:
    """Health check - verify Postkeeper is running."""
    container = get_container()
    return {
        "status": "ok",
        "message": "Postkeeper is operational",
        "content_dir": str(container.config.content_dir),
    }


# =============================================================================
# Query Tools
# =============================================================================


@mcp.tool(name="posts_list")
def list_posts(
    tag: str | None = None,
    include_drafts: bool = False,
    limit: int = 20,
    offset: int = 0,
) -> dict[str, Any]:
    """List posts, newest first.

    Args:
        tag: Optional tag filter (case-insensitive).
        include_drafts: Whether to include unpublished drafts.
        limit: Maximum number of posts to return (1-100).
        offset: Offset for pagination.

    Returns:
        Posts (front-matter only), total count, and pagination info.
    """
    limit = min(max(1, limit), 100)
    offset = max(0, offset)

    container = get_container()
    result = container.post_service.list_posts(
        tag=tag, include_drafts=include_drafts, limit=limit, offset=offset
    )

    return {
        "posts": [_format_post_brief(p) for p in result.posts],
        "total_count": result.total_count,
        "has_more": result.has_more,
        "limit": limit,
        "offset": offset,
    }


@mcp.tool(name="posts_get")
def get_post(slug: str) -> dict[str, Any]:
    """Get a post, including its Markdown body.

    Args:
        slug: The post's slug (file name without extension).

    Returns:
        Full post details or error.
    """
    container = get_container()
    try:
        post = container.post_service.get_post(slug)
    except PostkeeperError as e:
        return {"success": False, "error": str(e)}

    return {"success": True, "post": _format_post_full(post)}


@mcp.tool(name="posts_tags")
def list_tags(include_drafts: bool = True) -> dict[str, Any]:
    """List tags with the number of posts carrying each.

    Args:
        include_drafts: Whether drafts count towards tag totals.
    """
    container = get_container()
    tags = container.post_service.list_tags(include_drafts=include_drafts)
    return {
        "tags": [{"name": t.name, "count": t.count} for t in tags],
        "total_tags": len(tags),
    }


@mcp.tool(name="posts_stats")
def get_stats() -> dict[str, Any]:
    """Get statistics about the post collection."""
    container = get_container()
    stats = container.post_service.get_stats()
    return {
        "total_posts": stats.total_posts,
        "published": stats.published,
        "drafts": stats.drafts,
        "invalid": stats.invalid,
        "total_tags": stats.total_tags,
        "top_tags": [{"name": t.name, "count": t.count} for t in stats.top_tags],
        "latest_date": stats.latest_date.isoformat() if stats.latest_date else None,
    }


@mcp.tool(name="posts_validate")
def validate_posts(only_invalid: bool = True) -> dict[str, Any]:
    """Validate the front-matter of every post.

    Args:
        only_invalid: Only report posts that have errors.

    Returns:
        Totals and per-post issues.
    """
    container = get_container()
    report = container.post_service.validate_collection()
    reports = [r for r in report.reports if not (only_invalid and r.is_valid)]
    return {
        "valid": report.is_valid,
        "total": report.total,
        "valid_count": report.valid_count,
        "invalid_count": report.invalid_count,
        "reports": [_format_report(r) for r in reports],
    }


# =============================================================================
# Edit Tools
# =============================================================================


@mcp.tool(name="posts_create")
def create_post(
    title: str,
    tags: list[str] | None = None,
    body: str = "",
    summary: str | None = None,
    date: str | None = None,
    slug: str | None = None,
) -> dict[str, Any]:
    """Create a new draft post.

    Args:
        title: Headline of the post.
        tags: Topical labels.
        body: Markdown body.
        summary: Optional teaser.
        date: ISO-8601 timestamp with UTC offset; defaults to now.
        slug: File slug; derived from the title if omitted.

    Returns:
        Success status and the created post.
    """
    container = get_container()
    try:
        post = container.post_service.create_post(
            title=title,
            tags=tags,
            body=_normalize_content(body),
            summary=summary,
            date=date,
            slug=slug,
        )
    except PostkeeperError as e:
        return {"success": False, "error": str(e)}

    return {"success": True, "post": _format_post_brief(post)}


@mcp.tool(name="posts_update")
def update_post(
    slug: str,
    title: str | None = None,
    tags: list[str] | None = None,
    summary: str | None = None,
    body: str | None = None,
) -> dict[str, Any]:
    """Edit an existing post. Omitted fields stay unchanged.

    Args:
        slug: The post to edit.
        title: New headline.
        tags: New tag list (replaces the old one).
        summary: New teaser.
        body: New Markdown body.
    """
    container = get_container()
    try:
        post = container.post_service.update_post(
            slug,
            title=title,
            tags=tags,
            summary=summary,
            body=_normalize_content(body) if body is not None else None,
        )
    except PostkeeperError as e:
        return {"success": False, "error": str(e)}

    return {"success": True, "post": _format_post_brief(post)}


@mcp.tool(name="posts_publish")
def publish_post(slug: str) -> dict[str, Any]:
    """Publish a draft (sets draft: false)."""
    container = get_container()
    try:
        post = container.post_service.publish_post(slug)
    except PostkeeperError as e:
        return {"success": False, "error": str(e)}

    return {"success": True, "post": _format_post_brief(post)}


@mcp.tool(name="posts_unpublish")
def unpublish_post(slug: str) -> dict[str, Any]:
    """Turn a published post back into a draft (sets draft: true)."""
    container = get_container()
    try:
        post = container.post_service.unpublish_post(slug)
    except PostkeeperError as e:
        return {"success": False, "error": str(e)}

    return {"success": True, "post": _format_post_brief(post)}
