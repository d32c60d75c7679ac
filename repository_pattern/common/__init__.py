from repository_pattern.common.config import DB_CONFIG, REPOSITORY_CONFIG, get_env


__all__ = ["DB_CONFIG", "REPOSITORY_CONFIG", "get_env"]
