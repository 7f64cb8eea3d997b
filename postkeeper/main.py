"""Command line entry point for Postkeeper."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import Config, get_config
from .container import Container
from .domain.exceptions import PostkeeperError
from .domain.models import CollectionReport, Post


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="postkeeper",
        description="Postkeeper - front-matter tooling for Markdown blog posts",
    )
    parser.add_argument(
        "--content-dir",
        type=Path,
        default=None,
        help="Directory holding the posts (default: from env or ./content)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    validate = commands.add_parser("validate", help="Validate every post")
    validate.add_argument(
        "--strict",
        action="store_true",
        help="Treat warnings as failures",
    )

    listing = commands.add_parser("list", help="List posts, newest first")
    listing.add_argument("--tag", default=None, help="Only posts with this tag")
    listing.add_argument(
        "--drafts", action="store_true", help="Include unpublished drafts"
    )
    listing.add_argument("--limit", type=int, default=20)
    listing.add_argument("--offset", type=int, default=0)

    show = commands.add_parser("show", help="Print a post")
    show.add_argument("slug")

    commands.add_parser("tags", help="List tags with post counts")
    commands.add_parser("stats", help="Show collection statistics")

    new = commands.add_parser("new", help="Create a new draft")
    new.add_argument("title")
    new.add_argument("--tag", dest="tags", action="append", default=[])
    new.add_argument("--summary", default=None)
    new.add_argument("--date", default=None, help="ISO-8601 timestamp with offset")
    new.add_argument("--slug", default=None)

    publish = commands.add_parser("publish", help="Set draft: false")
    publish.add_argument("slug")

    unpublish = commands.add_parser("unpublish", help="Set draft: true")
    unpublish.add_argument("slug")

    serve = commands.add_parser("serve", help="Run the MCP server")
    serve.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default=None,
        help="Transport mode (default: from env or stdio)",
    )
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    return parser


def _print_post_line(post: Post) -> None:
    marker = " [draft]" if post.draft else ""
    tags = ", ".join(post.tags)
    print(
        f"{post.date.date().isoformat()}  {post.slug}  {post.title}{marker}  ({tags})"
    )


def _print_report(report: CollectionReport, strict: bool) -> None:
    for item in report.reports:
        if not item.issues:
            continue
        print(item.source)
        for issue in item.issues:
            print(f"  {issue}")
    print(
        f"{report.total} posts: {report.valid_count} valid, "
        f"{report.invalid_count} invalid"
    )
    if strict:
        warnings = sum(len(r.warnings) for r in report.reports)
        print(f"{warnings} warning(s)")


def run_validate(container: Container, strict: bool) -> int:
    """Validate the collection; return the process exit code."""
    report = container.post_service.validate_collection()
    _print_report(report, strict)
    if not report.is_valid:
        return 1
    if strict and any(r.warnings for r in report.reports):
        return 1
    return 0


def run_server_mode(
    args: argparse.Namespace, config: Config, logger: logging.Logger
) -> int:
    """Run the MCP server."""
    from .server import mcp

    transport = args.transport or config.server_transport
    mcp.settings.host = args.host or config.server_host
    mcp.settings.port = args.port or config.server_port

    logger.info(f"Transport: {transport}")
    if transport in ("sse", "streamable-http"):
        logger.info(f"MCP URL: http://{mcp.settings.host}:{mcp.settings.port}")
    mcp.run(transport=transport)
    return 0


def run_command(args: argparse.Namespace, container: Container) -> int:
    """Dispatch a parsed command."""
    service = container.post_service

    if args.command == "validate":
        return run_validate(container, args.strict)

    if args.command == "list":
        limit = max(1, args.limit)
        offset = max(0, args.offset)
        result = service.list_posts(
            tag=args.tag,
            include_drafts=args.drafts,
            limit=limit,
            offset=offset,
        )
        for post in result.posts:
            _print_post_line(post)
        if result.has_more:
            print(f"... {result.total_count - offset - len(result.posts)} more")
        return 0

    if args.command == "show":
        text = container.repository.read_text(args.slug)
        sys.stdout.write(text)
        return 0

    if args.command == "tags":
        for tag in service.list_tags():
            print(f"{tag.count:4d}  {tag.name}")
        return 0

    if args.command == "stats":
        stats = service.get_stats()
        print(f"posts:     {stats.total_posts}")
        print(f"published: {stats.published}")
        print(f"drafts:    {stats.drafts}")
        print(f"invalid:   {stats.invalid}")
        print(f"tags:      {stats.total_tags}")
        if stats.latest_date is not None:
            print(f"latest:    {stats.latest_date.isoformat()}")
        return 0

    if args.command == "new":
        post = service.create_post(
            title=args.title,
            tags=args.tags,
            summary=args.summary,
            date=args.date,
            slug=args.slug,
        )
        print(container.repository.path_for(post.slug))
        return 0

    if args.command == "publish":
        post = service.publish_post(args.slug)
        print(f"{post.slug}: published")
        return 0

    if args.command == "unpublish":
        post = service.unpublish_post(args.slug)
        print(f"{post.slug}: draft")
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    """Run the Postkeeper command line."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    config = get_config()
    if args.content_dir is not None:
        config.content_dir = args.content_dir

    logger.debug(f"Content directory: {config.content_dir}")

    if args.command == "serve":
        return run_server_mode(args, config, logger)

    container = Container.create(config)
    try:
        return run_command(args, container)
    except PostkeeperError as e:
        logger.error(str(e))
        return 1
    finally:
        container.close()


if __name__ == "__main__":
    sys.exit(main())
