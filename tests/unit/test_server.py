"""Unit tests for server helpers."""

from __future__ import annotations

import json
from datetime import datetime, timezone

from postkeeper.domain.models import Post
from postkeeper.server import _format_post_brief, _format_post_full, _normalize_content


class TestNormalizeContent:
    """Tests for _normalize_content helper function."""

    def test_plain_text_unchanged(self):
        content = "# Hello World\n\nThis is plain markdown."
        assert _normalize_content(content) == content

    def test_empty_string_unchanged(self):
        assert _normalize_content("") == ""

    def test_single_layer_json_extraction(self):
        content = '[{"text": "# Hello\\nWorld", "type": "text"}]'
        assert _normalize_content(content) == "# Hello\nWorld"

    def test_double_layer_json_extraction(self):
        actual_content = "# Hello\nWorld"
        inner_json = json.dumps([{"text": actual_content, "type": "text"}])
        outer_json = json.dumps([{"text": inner_json, "type": "text"}])

        assert _normalize_content(outer_json) == actual_content

    def test_markdown_with_brackets_unchanged(self):
        content = "int a[3] = {1, 2, 3}; see [1, 2, 3]"
        assert _normalize_content(content) == content

    def test_invalid_json_unchanged(self):
        content = "[not valid json]"
        assert _normalize_content(content) == content

    def test_multiple_text_items_joined(self):
        content = json.dumps(
            [{"type": "text", "text": "# Title\n"}, {"type": "text", "text": "Body"}]
        )
        assert _normalize_content(content) == "# Title\nBody"

    def test_json_array_body_unchanged(self):
        content = json.dumps([{"text": "a"}, {"text": "b"}])
        assert _normalize_content(content) == content

    def test_mixed_item_types_unchanged(self):
        content = json.dumps(
            [{"type": "text", "text": "a"}, {"type": "image", "data": "..."}]
        )
        assert _normalize_content(content) == content

    def test_unknown_keys_unchanged(self):
        content = json.dumps([{"type": "text", "text": "a", "id": 1}])
        assert _normalize_content(content) == content

    def test_empty_array_unchanged(self):
        assert _normalize_content("[]") == "[]"


class TestFormatPost:
    """Tests for post formatting helpers."""

    def make_post(self, **overrides) -> Post:
        fields = {
            "title": "Hello",
            "date": datetime(2024, 1, 1, tzinfo=timezone.utc),
            "tags": ["c"],
            "slug": "hello",
            "body": "Body",
        }
        fields.update(overrides)
        return Post(**fields)

    def test_brief(self):
        brief = _format_post_brief(self.make_post())

        assert brief == {
            "slug": "hello",
            "title": "Hello",
            "date": "2024-01-01T00:00:00+00:00",
            "tags": ["c"],
            "draft": False,
        }

    def test_brief_includes_summary(self):
        assert _format_post_brief(self.make_post(summary="S"))["summary"] == "S"

    def test_full(self):
        full = _format_post_full(self.make_post(extra={"author": "me"}))

        assert full["body"] == "Body"
        assert full["status"] == "published"
        assert full["extra"] == {"author": "me"}
