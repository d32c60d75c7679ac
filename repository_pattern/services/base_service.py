"""
BaseService

Thin layer over one repository: wraps caller input in a RepositoryResponse,
forwards to the matching repository verb and turns empty results into
domain failures.
"""

import logging
from typing import Any, Generic, TypeVar

from repository_pattern.common.exceptions import EntityNotFound, RepositoryFailure
from repository_pattern.response import RepositoryResponse


logger = logging.getLogger(__name__)

R = TypeVar("R")


class BaseService(Generic[R]):
    def __init__(self, repository: R) -> None:
        if repository is None:
            raise ValueError("Repository cannot be None")
        self._repository: R = repository

    @property
    def repository(self) -> R:
        return self._repository

    async def all(self, data: Any = None, options: Any = None) -> Any:
        return await self._repository.all(self.response(data, options))

    async def count(self, data: Any = None, options: Any = None) -> int:
        return await self._repository.count(self.response(data, options))

    async def get_list(self, data: Any = None, options: Any = None) -> Any:
        """Paginated list; pass ``per_page`` / ``page`` in options."""
        return await self._repository.get_list(self.response(data, options))

    async def show(self, data: Any = None, options: Any = None) -> Any:
        """
        Fetch a single record by ``id``.

        Raises:
            EntityNotFound: no id given, or no record with that id
        """
        response = self.response(data, options)

        if not response.get("id"):
            raise EntityNotFound("Record ID is required.")

        item = await self._repository.find(response)

        if item is None:
            logger.debug(f"{self.__class__.__name__}: record {response.get('id')} not found")
            raise EntityNotFound("Record not found.")

        return item

    async def get_first_by(self, data: Any = None, options: Any = None) -> Any:
        return await self._repository.first(self.response(data, options))

    async def store(self, data: Any = None, options: Any = None) -> Any:
        """
        Raises:
            RepositoryFailure: the repository returned nothing
        """
        created = await self._repository.create(self.response(data, options))

        if not created:
            raise RepositoryFailure("Failed to create record.")

        return created

    async def insert(self, data: Any = None, options: Any = None) -> bool:
        return await self._repository.insert(self.response(data, options))

    async def update(self, data: Any = None, options: Any = None) -> int:
        """
        Raises:
            RepositoryFailure: no WHERE condition, or zero rows affected
        """
        updated = await self._repository.update(self.response(data, options))

        if updated == 0:
            raise RepositoryFailure("No record updated.")

        return updated

    async def update_or_create(self, data: Any = None, options: Any = None) -> Any:
        return await self._repository.update_or_create(self.response(data, options))

    async def upsert(self, data: Any = None, options: Any = None) -> int:
        return await self._repository.upsert(self.response(data, options))

    async def destroy(self, data: Any = None, options: Any = None) -> int:
        """
        Raises:
            RepositoryFailure: no WHERE condition, or zero rows deleted
        """
        deleted = await self._repository.destroy(self.response(data, options))

        if deleted == 0:
            raise RepositoryFailure("No record deleted.")

        return deleted

    def response(self, data: Any = None, options: Any = None) -> RepositoryResponse:
        return RepositoryResponse(data, options)
