"""Dependency injection container for Postkeeper."""

from __future__ import annotations

from dataclasses import dataclass

from .config import Config, get_config
from .domain.services import PostService, PostValidator
from .infra.repositories import PostRepository


@dataclass
class Container:
    """Dependency injection container.

    Builds the repository, validator and service lazily from one Config.
    """

    config: Config
    _repository: PostRepository | None = None
    _validator: PostValidator | None = None
    _service: PostService | None = None

    @classmethod
    def create(cls, config: Config | None = None) -> Container:
        """Create a new container with the given config.

        Args:
            config: Optional config. Uses global config if not provided.

        Returns:
            A new Container instance.
        """
        return cls(config=config or get_config())

    @property
    def repository(self) -> PostRepository:
        """Get the post repository (lazy initialization)."""
        if self._repository is None:
            self._repository = PostRepository(
                content_dir=self.config.content_dir,
                extension=self.config.extension,
                lock_timeout=self.config.lock_timeout,
            )
        return self._repository

    @property
    def validator(self) -> PostValidator:
        """Get the post validator (lazy initialization)."""
        if self._validator is None:
            self._validator = PostValidator(
                max_tags=self.config.max_tags_per_post,
                max_summary_length=self.config.max_summary_length,
            )
        return self._validator

    @property
    def post_service(self) -> PostService:
        """Get the post service (lazy initialization)."""
        if self._service is None:
            self._service = PostService(
                repository=self.repository,
                validator=self.validator,
            )
        return self._service

    def close(self) -> None:
        """Drop all components."""
        self._repository = None
        self._validator = None
        self._service = None


_container: Container | None = None


def get_container() -> Container:
    """Get the global container instance."""
    global _container
    if _container is None:
        _container = Container.create()
    return _container


def reset_container() -> None:
    """Reset the container (for testing)."""
    global _container
    if _container is not None:
        _container.close()
    _container = None
