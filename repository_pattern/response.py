"""
RepositoryResponse

Data carrier passed from the service layer to the repository layer.
Normalizes whatever the caller hands in (mapping, plain object, pydantic
model or nothing) into two dicts, ``data`` and ``options``.
"""

from collections.abc import Iterable, Mapping
from typing import Any


def _normalize(param: Any) -> dict[str, Any]:
    if param is None:
        return {}
    if isinstance(param, Mapping):
        return dict(param)
    if isinstance(param, type):
        return {}
    if hasattr(param, "model_dump"):
        return dict(param.model_dump())
    if hasattr(param, "__dict__"):
        return {k: v for k, v in vars(param).items() if not k.startswith("_")}
    return {}


class RepositoryResponse:
    """
    Standardized payload between Service and Repository.

    ``data`` holds the main payload (columns to write, filter values, the id),
    ``options`` holds metadata such as ``per_page``, ``page`` or ``unique_by``.
    Both are always dicts after construction. Accessors hand out copies;
    change the payload through ``set`` / ``set_option``.
    """

    __slots__ = ("_data", "_options")

    def __init__(self, data: Any = None, options: Any = None) -> None:
        self._data: dict[str, Any] = _normalize(data)
        self._options: dict[str, Any] = _normalize(options)

    def get(self, key: str | None = None) -> Any:
        """
        Return one value from ``data``, or the whole dict when ``key`` is None.

        An empty ``data`` dict is returned as ``None``.
        """
        if key is not None:
            return self._data.get(key)
        return dict(self._data) if self._data else None

    def option(self, key: str | None = None) -> Any:
        """Same as ``get`` but reads from ``options``."""
        if key is not None:
            return self._options.get(key)
        return dict(self._options) if self._options else None

    def all(self) -> dict[str, Any]:
        return {"data": self.get(), "options": self.option()}

    def only(self, keys: Iterable[str] | None = None) -> dict[str, Any] | None:
        """Pick the given keys from ``data``; missing keys map to None."""
        keys = list(keys or [])
        if not keys:
            return self.get()
        return {key: self.get(key) for key in keys}

    def set(self, key: str | Mapping[str, Any], value: Any = None) -> dict[str, Any]:
        """Set a single key, or merge a mapping into ``data``."""
        if isinstance(key, Mapping):
            self._data.update(key)
        else:
            self._data[key] = value
        return dict(self._data)

    def set_option(self, key: str | Mapping[str, Any], value: Any = None) -> dict[str, Any]:
        """Set a single key, or merge a mapping into ``options``."""
        if isinstance(key, Mapping):
            self._options.update(key)
        else:
            self._options[key] = value
        return dict(self._options)

    def __repr__(self) -> str:
        return f"<RepositoryResponse data={self._data!r} options={self._options!r}>"
