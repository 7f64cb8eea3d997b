"""Front-matter codec.

Reads and writes the record format shared by every post in a collection::

    ---
    title: Casting pitfalls
    date: 2024-03-01T09:30:00+01:00
    tags: [c, integers]
    draft: false
    ---
    Markdown body...

The YAML between the delimiters is handled by PyYAML. The body is never
interpreted and is carried through verbatim.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from ..domain.exceptions import FrontMatterError, ValidationError
from ..domain.models import Post

logger = logging.getLogger(__name__)

DELIMITER = "---"
_BOM = "\ufeff"


class _FrontMatterDumper(yaml.SafeDumper):
    """SafeDumper for front-matter.

    Timestamps are written as plain ISO-8601 scalars and lists of scalars in
    flow style (`tags: [c, casting]`).
    """


def _represent_datetime(dumper: yaml.SafeDumper, value: datetime) -> yaml.Node:
    return dumper.represent_scalar("tag:yaml.org,2002:timestamp", value.isoformat())


def _represent_list(dumper: yaml.SafeDumper, value: list) -> yaml.Node:
    scalars_only = all(
        isinstance(item, (str, int, float, bool)) or item is None for item in value
    )
    return dumper.represent_sequence(
        "tag:yaml.org,2002:seq", value, flow_style=scalars_only
    )


_FrontMatterDumper.add_representer(datetime, _represent_datetime)
_FrontMatterDumper.add_representer(list, _represent_list)


class _FrontMatterLoader(yaml.SafeLoader):
    """SafeLoader that only reads `true` and `false` as booleans.

    YAML 1.1 also turns `yes`, `no`, `on`, `off` and their capitalized forms
    into booleans, which would let `draft: yes` through and turn `title: no`
    into False.
    """


_FrontMatterLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag != "tag:yaml.org,2002:bool"
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
_FrontMatterLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool", re.compile(r"^(?:true|false)$"), list("tf")
)


def _is_delimiter(line: str) -> bool:
    return line.rstrip() == DELIMITER


def split_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Split a document into its front-matter mapping and body.

    Args:
        text: The full document text.

    Returns:
        Tuple of (front-matter mapping, body). The body is everything after
        the closing delimiter line, unchanged.

    Raises:
        FrontMatterError: If a delimiter is missing, the YAML is invalid,
            or the block is not a mapping.
    """
    if text.startswith(_BOM):
        text = text[len(_BOM) :]

    lines = text.splitlines(keepends=True)
    if not lines or not _is_delimiter(lines[0]):
        raise FrontMatterError("missing opening '---' front-matter delimiter")

    for index in range(1, len(lines)):
        if _is_delimiter(lines[index]):
            block = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            break
    else:
        raise FrontMatterError("missing closing '---' front-matter delimiter")

    try:
        metadata = yaml.load(block, Loader=_FrontMatterLoader)
    except yaml.YAMLError as e:
        raise FrontMatterError(f"invalid YAML in front-matter: {e}") from e

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise FrontMatterError(
            f"front-matter must be a mapping, got {type(metadata).__name__}"
        )
    return metadata, body


def field_errors_from(error: PydanticValidationError) -> dict[str, list[str]]:
    """Group pydantic error messages by front-matter key."""
    grouped: dict[str, list[str]] = {}
    for item in error.errors():
        loc = item.get("loc") or ("post",)
        key = str(loc[0])
        if item.get("type") == "missing":
            message = f"{key} is required"
        else:
            message = str(item.get("msg", "invalid value"))
            message = message.removeprefix("Value error, ")
        grouped.setdefault(key, []).append(message)
    return grouped


def build_post(
    metadata: dict[str, Any], body: str = "", slug: str | None = None
) -> Post:
    """Build a Post from a parsed mapping, raising domain errors.

    Raises:
        ValidationError: With ``field_errors`` set per front-matter key.
    """
    try:
        return Post.from_front_matter(metadata, body=body, slug=slug)
    except PydanticValidationError as e:
        field_errors = field_errors_from(e)
        details = "; ".join(
            f"{key}: {', '.join(messages)}" for key, messages in field_errors.items()
        )
        raise ValidationError(
            f"invalid post record: {details}", field_errors=field_errors
        ) from e


def parse_post(text: str, slug: str | None = None) -> Post:
    """Parse a full document into a Post.

    Raises:
        FrontMatterError: If the front-matter block cannot be read.
        ValidationError: If a field is malformed.
    """
    metadata, body = split_front_matter(text)
    return build_post(metadata, body=body, slug=slug)


def dump_front_matter(metadata: dict[str, Any]) -> str:
    """Render a mapping as a delimited front-matter block."""
    block = yaml.dump(
        metadata,
        Dumper=_FrontMatterDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=1000,
    )
    if block.strip() == "{}":
        block = ""
    return f"{DELIMITER}\n{block}{DELIMITER}\n"


def serialize_post(post: Post) -> str:
    """Render a Post as a full document."""
    return dump_front_matter(post.metadata()) + post.body
