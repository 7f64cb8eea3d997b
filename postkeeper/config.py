"""Configuration settings for Postkeeper."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class Config:
    """Postkeeper configuration."""

    # Collection storage
    content_dir: Path = field(default_factory=lambda: Path.cwd() / "content")
    extension: str = ".md"
    lock_timeout: float = 10.0

    # Validation limits
    max_tags_per_post: int = 20
    max_summary_length: int = 200

    # MCP server
    server_transport: str = "stdio"
    server_host: str = "127.0.0.1"
    server_port: int = 8765

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables."""
        content_dir_str = os.environ.get("POSTKEEPER_CONTENT_DIR")
        content_dir = (
            Path(content_dir_str) if content_dir_str else Path.cwd() / "content"
        )

        return cls(
            content_dir=content_dir,
            extension=os.environ.get("POSTKEEPER_EXTENSION", ".md"),
            lock_timeout=float(os.environ.get("POSTKEEPER_LOCK_TIMEOUT", "10")),
            max_tags_per_post=int(os.environ.get("POSTKEEPER_MAX_TAGS", "20")),
            max_summary_length=int(
                os.environ.get("POSTKEEPER_MAX_SUMMARY_LENGTH", "200")
            ),
            server_transport=os.environ.get("POSTKEEPER_TRANSPORT", "stdio"),
            server_host=os.environ.get("POSTKEEPER_HOST", "127.0.0.1"),
            server_port=int(os.environ.get("POSTKEEPER_PORT", "8765")),
        )


_config: Config | None = None


def get_config() -> Config:
    """Get the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the config (for testing)."""
    global _config
    _config = None
