from repository_pattern.services.base_service import BaseService


__all__ = ["BaseService"]
