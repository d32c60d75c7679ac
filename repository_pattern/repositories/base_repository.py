import logging
from abc import ABC
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, insert, select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapper

from repository_pattern.common.config import REPOSITORY_CONFIG
from repository_pattern.common.exceptions import DuplicateEntity, InvalidModel, RepositoryError, RepositoryFailure
from repository_pattern.repositories.pagination import Page
from repository_pattern.response import RepositoryResponse


logger = logging.getLogger(__name__)

# Type variable for model classes
T = TypeVar("T")


class BaseRepository(ABC, Generic[T]):
    """
    Base repository over a SQLAlchemy async session.

    Every read/write verb that goes through a hook starts from a fresh
    ``select(model)`` (``reset_model``), lets ``filter`` or ``mask`` narrow it,
    then executes it. Subclasses override the hooks to turn
    ``RepositoryResponse`` fields into predicates:

        class UserRepository(BaseRepository[User]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(User, session)

            def filter(self, params):
                self.where_equals(email=params.get("email"))
                if params.option("with_profile"):
                    self.options(selectinload(User.profile))
                return self

    ``update`` and ``destroy`` refuse to run without at least one WHERE
    condition.
    """

    def __init__(self, model: type[T], session: AsyncSession) -> None:
        if session is None:
            raise ValueError("AsyncSession cannot be None")

        self.model: type[T] = model
        self.session: AsyncSession = session
        self.query: Select = self.make_model()
        self.table: str = self.get_table()
        logger.debug(f"Initialized {self.__class__.__name__} for model {self.model.__name__}")

    # ------------------------------------------------------------------
    # Query handle
    # ------------------------------------------------------------------
    def make_model(self) -> Select:
        """Validate the model and build a new ``select`` for it."""
        mapper = sa_inspect(self.model, raiseerr=False) if isinstance(self.model, type) else None
        if not isinstance(mapper, Mapper):
            raise InvalidModel(f"Class {self.model!r} must be a mapped SQLAlchemy model")

        self.query = select(self.model)
        return self.query

    def reset_model(self) -> Select:
        return self.make_model()

    def get_model(self) -> type[T]:
        return self.model

    def get_table(self) -> str:
        return sa_inspect(self.model).local_table.name

    def get_query(self) -> Select:
        return self.query

    def has_conditions(self) -> bool:
        return self.query.whereclause is not None

    # ------------------------------------------------------------------
    # Helpers for filter / mask hooks
    # ------------------------------------------------------------------
    def where(self, *criteria: Any) -> "BaseRepository[T]":
        self.query = self.query.where(*criteria)
        return self

    def where_equals(self, **columns: Any) -> "BaseRepository[T]":
        """Add ``column == value`` for every non-None value."""
        for name, value in columns.items():
            if value is not None:
                self.query = self.query.where(getattr(self.model, name) == value)
        return self

    def options(self, *loader_options: Any) -> "BaseRepository[T]":
        self.query = self.query.options(*loader_options)
        return self

    def order_by(self, *clauses: Any) -> "BaseRepository[T]":
        self.query = self.query.order_by(*clauses)
        return self

    def get_limit_paginate(self, params: RepositoryResponse) -> int:
        """Options ``per_page`` when it is a positive integer, else the configured default."""
        return _positive_int(params.option("per_page"), int(REPOSITORY_CONFIG["limit_paginate"]))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def all(self, params: RepositoryResponse) -> Sequence[T]:
        self.reset_model()
        self.filter(params)

        try:
            result = await self.session.execute(self.query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing {self.model.__name__}: {e}")
            raise RepositoryError(f"Failed to list entities: {e}") from e

    async def count(self, params: RepositoryResponse) -> int:
        self.reset_model()
        self.filter(params)

        return await self._count_query()

    async def get_list(self, params: RepositoryResponse) -> Page[T]:
        """Paginate the filtered query. ``per_page`` and ``page`` are read from options."""
        self.reset_model()
        self.filter(params)

        per_page = self.get_limit_paginate(params)
        page = _positive_int(params.option("page"), 1)

        total = await self._count_query()
        stmt = self.query.limit(per_page).offset((page - 1) * per_page)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Error paginating {self.model.__name__}: {e}")
            raise RepositoryError(f"Failed to paginate entities: {e}") from e

        return Page(items=list(result.scalars().all()), total=total, per_page=per_page, current_page=page)

    async def find(self, params: RepositoryResponse) -> T | None:
        id = params.get("id")
        if id is None:
            return None

        try:
            return await self.session.get(self.model, id)
        except SQLAlchemyError as e:
            logger.error(f"Error getting {self.model.__name__} by id {id}: {e}")
            raise RepositoryError(f"Failed to get entity: {e}") from e

    async def first(self, params: RepositoryResponse) -> T | None:
        self.reset_model()
        self.filter(params)

        try:
            result = await self.session.execute(self.query.limit(1))
            return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(f"Error getting first {self.model.__name__}: {e}")
            raise RepositoryError(f"Failed to get entity: {e}") from e

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def create(self, params: RepositoryResponse) -> T:
        db_obj = self.model(**(params.get() or {}))
        self.session.add(db_obj)

        try:
            await self.session.flush()
            await self.session.refresh(db_obj)
            return db_obj

        except IntegrityError as e:
            pgcode = getattr(e.orig, "pgcode", None) or getattr(e.orig, "sqlstate", None)

            if pgcode == "23505" or "unique" in str(e).lower():
                logger.warning(f"Duplicate entity detected: {e}")
                raise DuplicateEntity(f"{self.model.__name__} already exists.") from e

            logger.error(f"Integrity Error creating {self.model.__name__}: {e}")
            raise RepositoryError(f"Database integrity error: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Unexpected error creating {self.model.__name__}: {e}")
            raise RepositoryError(f"Failed to create entity: {e}") from e

    async def insert(self, params: RepositoryResponse) -> bool:
        """
        Bulk insert. Rows come from data ``rows`` (mappings, plain objects or
        pydantic models), or the whole data dict is one row.

        Raises:
            RepositoryFailure: a row is empty or not a record (400)
        """
        rows = self._rows(params)
        if not rows:
            return True

        try:
            await self.session.execute(insert(self.model), rows)
            return True
        except SQLAlchemyError as e:
            logger.error(f"Error bulk inserting {self.model.__name__}: {e}")
            raise RepositoryError(f"Failed to insert entities: {e}") from e

    async def update(self, params: RepositoryResponse) -> int:
        """
        Apply ``params.get()`` to every row matched by ``mask``.

        Returns:
            Number of affected rows

        Raises:
            RepositoryFailure: the mask hook produced no WHERE condition
        """
        self.reset_model()
        self.mask(params)

        if not self.has_conditions():
            logger.warning(f"Refused unconditional update on {self.table}")
            raise RepositoryFailure("Update operation requires at least one WHERE condition.")

        values = params.get() or {}
        if not values:
            return 0

        try:
            result = await self.session.execute(self.query)
            db_objs = list(result.scalars().all())

            for db_obj in db_objs:
                for key, value in values.items():
                    if hasattr(db_obj, key):
                        setattr(db_obj, key, value)

            await self.session.flush()
            return len(db_objs)

        except SQLAlchemyError as e:
            logger.error(f"Error updating {self.model.__name__}: {e}")
            raise RepositoryError(f"Failed to update entity: {e}") from e

    async def update_or_create(self, params: RepositoryResponse) -> T:
        """Match on ``params.option()`` attributes, then apply ``params.get()`` values."""
        attributes = params.option() or {}
        values = params.get() or {}

        try:
            result = await self.session.execute(select(self.model).filter_by(**attributes).limit(1))
            db_obj = result.scalars().first()

            if db_obj is None:
                db_obj = self.model(**{**attributes, **values})
                self.session.add(db_obj)
            else:
                for key, value in values.items():
                    if hasattr(db_obj, key):
                        setattr(db_obj, key, value)

            await self.session.flush()
            await self.session.refresh(db_obj)
            return db_obj

        except SQLAlchemyError as e:
            logger.error(f"Error in update_or_create for {self.model.__name__}: {e}")
            raise RepositoryError(f"Failed to update or create entity: {e}") from e

    async def upsert(self, params: RepositoryResponse) -> int:
        """
        ``INSERT ... ON CONFLICT DO UPDATE`` for PostgreSQL and SQLite.

        Options:
            unique_by: conflict column name(s)
            update: columns to overwrite on conflict (default: every other inserted column)
        """
        rows = self._rows(params)
        if not rows:
            return 0

        unique_by = params.option("unique_by") or [c.name for c in sa_inspect(self.model).primary_key]
        if isinstance(unique_by, str):
            unique_by = [unique_by]
        update_columns = params.option("update")
        if update_columns is None:
            update_columns = [c for c in rows[0] if c not in unique_by]
        elif isinstance(update_columns, str):
            update_columns = [update_columns]

        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert as dialect_insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert as dialect_insert
        else:
            raise RepositoryFailure(f"Upsert is not supported for dialect '{dialect}'.")

        stmt = dialect_insert(self.model).values(rows)
        if update_columns:
            stmt = stmt.on_conflict_do_update(
                index_elements=unique_by, set_={column: stmt.excluded[column] for column in update_columns}
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=unique_by)

        try:
            result = await self.session.execute(stmt)
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"Error upserting {self.model.__name__}: {e}")
            raise RepositoryError(f"Failed to upsert entities: {e}") from e

    async def destroy(self, params: RepositoryResponse) -> int:
        """
        Delete every row matched by ``filter``.

        Returns:
            Number of deleted rows

        Raises:
            RepositoryFailure: the filter hook produced no WHERE condition
        """
        self.reset_model()
        self.filter(params)

        if not self.has_conditions():
            logger.warning(f"Refused unconditional delete on {self.table}")
            raise RepositoryFailure("Delete operation requires at least one WHERE condition.")

        try:
            result = await self.session.execute(self.query)
            db_objs = list(result.scalars().all())

            for db_obj in db_objs:
                await self.session.delete(db_obj)

            await self.session.flush()
            return len(db_objs)

        except SQLAlchemyError as e:
            logger.error(f"Error deleting {self.model.__name__}: {e}")
            raise RepositoryError(f"Failed to delete entity: {e}") from e

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    def filter(self, params: RepositoryResponse) -> "BaseRepository[T]":
        """Narrow reads and deletes. Override in child repositories."""
        return self

    def mask(self, params: RepositoryResponse) -> "BaseRepository[T]":
        """Narrow updates. Override in child repositories."""
        return self

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    async def _count_query(self) -> int:
        stmt = select(func.count()).select_from(self.query.order_by(None).subquery())
        try:
            result = await self.session.execute(stmt)
            return int(result.scalar_one())
        except SQLAlchemyError as e:
            logger.error(f"Error counting {self.model.__name__}: {e}")
            raise RepositoryError(f"Failed to count entities: {e}") from e

    @staticmethod
    def _rows(params: RepositoryResponse) -> list[dict[str, Any]]:
        rows = params.get("rows")
        if rows is None:
            data = params.get()
            return [data] if data else []
        if isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Iterable):
            raise RepositoryFailure('Data "rows" must be a list of records.', 400)

        normalized = []
        for index, row in enumerate(rows):
            values = RepositoryResponse(row).get()
            if not values:
                raise RepositoryFailure(f"Row {index} is empty or not a record.", 400)
            normalized.append(values)
        return normalized


def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default
