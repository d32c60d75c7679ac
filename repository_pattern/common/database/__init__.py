from repository_pattern.common.database.connection import AsyncDatabaseEngine, build_database_url, get_db


__all__ = ["AsyncDatabaseEngine", "build_database_url", "get_db"]
