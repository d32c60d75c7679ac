from repository_pattern.common.models.base import Base


__all__ = ["Base"]
