"""Unit tests for the front-matter codec."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from postkeeper.domain.exceptions import FrontMatterError, ValidationError
from postkeeper.domain.models import Post
from postkeeper.infra.frontmatter import (
    dump_front_matter,
    parse_post,
    serialize_post,
    split_front_matter,
)


class TestSplitFrontMatter:
    """Tests for split_front_matter."""

    def test_split(self):
        metadata, body = split_front_matter("---\ntitle: Hello\n---\nBody\n")

        assert metadata == {"title": "Hello"}
        assert body == "Body\n"

    def test_body_kept_verbatim(self):
        text = "---\ntitle: Hello\n---\n\n# Heading\n\n---\n\nmore\n"
        _, body = split_front_matter(text)
        assert body == "\n# Heading\n\n---\n\nmore\n"

    def test_empty_block(self):
        metadata, body = split_front_matter("---\n---\nBody")
        assert metadata == {}
        assert body == "Body"

    def test_crlf_and_bom(self):
        metadata, body = split_front_matter("\ufeff---\r\ntitle: Hi\r\n---\r\nBody\r\n")
        assert metadata == {"title": "Hi"}
        assert body == "Body\r\n"

    def test_missing_opening_delimiter(self):
        with pytest.raises(FrontMatterError) as exc_info:
            split_front_matter("title: Hello\n---\nBody\n")
        assert "opening" in str(exc_info.value)

    def test_empty_document(self):
        with pytest.raises(FrontMatterError):
            split_front_matter("")

    def test_missing_closing_delimiter(self):
        with pytest.raises(FrontMatterError) as exc_info:
            split_front_matter("---\ntitle: Hello\nBody\n")
        assert "closing" in str(exc_info.value)

    def test_invalid_yaml(self):
        with pytest.raises(FrontMatterError) as exc_info:
            split_front_matter("---\ntitle: [unclosed\n---\n")
        assert "YAML" in str(exc_info.value)

    def test_non_mapping_block(self):
        with pytest.raises(FrontMatterError) as exc_info:
            split_front_matter("---\n- a\n- b\n---\n")
        assert "mapping" in str(exc_info.value)


class TestParsePost:
    """Tests for parse_post."""

    def test_parse_sample(self, sample_text):
        post = parse_post(sample_text, slug="integer-casting")

        assert post.title == "Integer casting pitfalls"
        assert post.date == datetime(
            2024, 3, 1, 9, 30, tzinfo=timezone(timedelta(hours=1))
        )
        assert post.date.utcoffset() == timedelta(hours=1)
        assert post.tags == ["c", "integers", "casting"]
        assert post.draft is False
        assert post.summary == "Why (unsigned char)-1 is not what you think."
        assert post.slug == "integer-casting"
        assert "```c" in post.body

    def test_parse_zulu_date(self, draft_text):
        post = parse_post(draft_text)
        assert post.date.utcoffset() == timedelta(0)
        assert post.draft is True

    def test_quoted_date_string(self):
        post = parse_post(
            "---\ntitle: Hi\ndate: '2024-03-01T09:30:00-05:00'\n---\n"
        )
        assert post.date.utcoffset() == timedelta(hours=-5)

    def test_draft_absent_defaults_false(self):
        post = parse_post("---\ntitle: Hi\ndate: 2024-03-01T09:30:00Z\n---\n")
        assert post.draft is False
        assert post.tags == []

    def test_field_errors_collected(self, broken_text):
        with pytest.raises(ValidationError) as exc_info:
            parse_post(broken_text)

        error = exc_info.value
        assert not isinstance(error, FrontMatterError)
        assert set(error.field_errors) == {"title", "date", "draft"}

    def test_missing_required_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_post("---\ntags: [c]\n---\n")

        assert exc_info.value.field_errors["title"] == ["title is required"]
        assert exc_info.value.field_errors["date"] == ["date is required"]

    def test_date_without_offset(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_post("---\ntitle: Hi\ndate: 2024-03-01 09:30:00\n---\n")
        assert "UTC offset" in exc_info.value.field_errors["date"][0]


class TestSerializePost:
    """Tests for serialize_post."""

    def test_serialize_layout(self):
        post = Post(
            title="Hello",
            date=datetime(2024, 3, 1, 9, 30, tzinfo=timezone(timedelta(hours=1))),
            tags=["c", "casting"],
            body="Body\n",
        )

        assert serialize_post(post) == (
            "---\n"
            "title: Hello\n"
            "date: 2024-03-01T09:30:00+01:00\n"
            "tags: [c, casting]\n"
            "draft: false\n"
            "---\n"
            "Body\n"
        )

    def test_empty_tags_serialized(self):
        post = Post(
            title="Hello",
            date=datetime(2024, 3, 1, tzinfo=timezone.utc),
            tags=[],
        )
        assert "tags: []\n" in serialize_post(post)

    def test_round_trip_sample(self, sample_text):
        """Serializing and re-parsing keeps every field value."""
        post = parse_post(sample_text)
        again = parse_post(serialize_post(post))

        assert again.same_record(post)

    def test_round_trip_preserves_extra_and_awkward_text(self):
        post = Post(
            title="Casting: (int) vs 'static_cast'",
            date=datetime(2023, 12, 31, 23, 59, 59, 500, tzinfo=timezone.utc),
            tags=["c", "c++", "yes", "123"],
            draft=True,
            summary="# not a comment",
            extra={"author": "someone", "series": {"part": 2}},
            body="---\nnot front-matter\n",
        )
        again = parse_post(serialize_post(post))

        assert again.same_record(post)
        assert again.tags == ["c", "c++", "yes", "123"]

    def test_dump_front_matter_delimiters(self):
        text = dump_front_matter({"title": "Hi"})
        assert text == "---\ntitle: Hi\n---\n"


class TestBooleanSpellings:
    """Only `true` and `false` are read as booleans."""

    @pytest.mark.parametrize("spelling", ["yes", "no", "on", "off", "True", "FALSE"])
    def test_draft_must_be_true_or_false(self, spelling):
        text = f"---\ntitle: Hi\ndate: 2024-03-01T09:30:00Z\ndraft: {spelling}\n---\nx\n"

        with pytest.raises(ValidationError) as exc_info:
            parse_post(text)

        assert exc_info.value.field_errors["draft"] == ["draft must be true or false"]

    @pytest.mark.parametrize("spelling, expected", [("true", True), ("false", False)])
    def test_draft_true_and_false(self, spelling, expected):
        text = f"---\ntitle: Hi\ndate: 2024-03-01T09:30:00Z\ndraft: {spelling}\n---\n"
        assert parse_post(text).draft is expected

    def test_yaml11_words_stay_text(self):
        metadata, _ = split_front_matter("---\ntitle: no\ntags: [c, on, yes]\n---\n")

        assert metadata == {"title": "no", "tags": ["c", "on", "yes"]}

    def test_other_scalars_still_resolve(self):
        metadata, _ = split_front_matter("---\nweight: 3\nratio: 0.5\nnote: ~\n---\n")

        assert metadata == {"weight": 3, "ratio": 0.5, "note": None}
