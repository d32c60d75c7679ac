"""
Repository layer

Usage:
    from repository_pattern.repositories import BaseRepository

    class UserRepository(BaseRepository[User]):
        def __init__(self, session: AsyncSession) -> None:
            super().__init__(User, session)
"""

from repository_pattern.repositories.base_repository import BaseRepository
from repository_pattern.repositories.pagination import Page


__all__ = ["BaseRepository", "Page"]
