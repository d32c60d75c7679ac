"""
repository-pattern

Repository / Service base classes over SQLAlchemy asyncio, plus a
``make:repository`` generator for the boilerplate around them.

Usage:
    from repository_pattern import BaseRepository, BaseService, RepositoryResponse
"""

from repository_pattern.common.exceptions import (
    BindingResolutionError,
    DuplicateEntity,
    EntityNotFound,
    InvalidModel,
    RepositoryError,
    RepositoryException,
    RepositoryFailure,
)
from repository_pattern.common.models import Base
from repository_pattern.container import Container, bind, default_container
from repository_pattern.repositories import BaseRepository, Page
from repository_pattern.response import RepositoryResponse
from repository_pattern.services import BaseService


__version__ = "1.0.0"

__all__ = [
    # Core
    "BaseRepository",
    "BaseService",
    "RepositoryResponse",
    "Page",
    "Base",
    # Container
    "Container",
    "bind",
    "default_container",
    # Exceptions
    "RepositoryException",
    "InvalidModel",
    "RepositoryFailure",
    "EntityNotFound",
    "DuplicateEntity",
    "RepositoryError",
    "BindingResolutionError",
]
