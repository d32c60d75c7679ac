import math
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar


T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of results returned by ``BaseRepository.get_list``."""

    items: list[T] = field(default_factory=list)
    total: int = 0
    per_page: int = 20
    current_page: int = 1

    @property
    def last_page(self) -> int:
        return max(math.ceil(self.total / self.per_page), 1) if self.per_page > 0 else 1

    @property
    def has_more(self) -> bool:
        return self.current_page < self.last_page

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": [item.to_dict() if hasattr(item, "to_dict") else item for item in self.items],
            "total": self.total,
            "per_page": self.per_page,
            "current_page": self.current_page,
            "last_page": self.last_page,
        }
