from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Optional declarative base for models managed through BaseRepository."""

    type_annotation_map = {}

    def to_dict(self) -> dict[str, Any]:
        """Return the column values as a plain dict."""
        return {c.name: getattr(self, c.name) for c in self.__table__.columns}

    def __repr__(self) -> str:
        cols = []
        for col in self.__table__.columns:
            val = getattr(self, col.name)
            if isinstance(val, datetime):
                val = val.isoformat()
            if isinstance(val, str) and len(val) > 20:
                val = val[:17] + "..."

            cols.append(f"{col.name}={val}")

        return f"<{self.__class__.__name__} {', '.join(cols)}>"
