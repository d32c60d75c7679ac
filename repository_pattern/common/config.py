import os
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv


# =============================================================================
# 1. Environment Loading
# =============================================================================
def get_project_root() -> Path:
    """
    Walk up from the working directory looking for a ``.env`` or ``.git``
    marker and return the first directory that has one.
    """
    current_path = Path.cwd().resolve()
    for parent in (current_path, *current_path.parents):
        if (parent / ".env").exists() or (parent / ".git").exists():
            return parent
    return current_path


PROJECT_ROOT = get_project_root()
ENV_PATH = PROJECT_ROOT / ".env"

if ENV_PATH.exists():
    load_dotenv(ENV_PATH)
else:
    load_dotenv()


# =============================================================================
# 2. Helper Functions
# =============================================================================
def get_env(key: str, default: Any = None, cast_to: type = str) -> Any:
    """Read an environment variable and cast it, falling back to ``default``."""
    value = os.getenv(key)
    if value is None:
        return default

    if cast_to is bool:
        return value.lower() in ("true", "1", "yes", "on")
    if cast_to is list:
        return [x.strip() for x in value.split(",") if x.strip()]
    try:
        return cast_to(value)
    except (ValueError, TypeError):
        return default


# =============================================================================
# 3. Database Configuration
# =============================================================================
DB_CONFIG = {
    "driver": get_env("DB_DRIVER", "postgresql+asyncpg"),
    "host": get_env("DB_HOST", "localhost"),
    "port": get_env("DB_PORT", "5432"),
    "user": get_env("DB_USER", "postgres"),
    "password": get_env("DB_PASSWORD", ""),
    "database": get_env("DB_NAME", "postgres"),
    "echo": get_env("DB_ECHO", False, bool),
}


# =============================================================================
# 4. Repository / Scaffolding Configuration
# =============================================================================
BINDING_MODES = ["provider", "attribute"]


def default_dump_auto_load_command(app_path: str) -> list[str]:
    """Byte-compile the generated package so new modules are importable right away."""
    return [sys.executable, "-m", "compileall", "-q", app_path]


REPOSITORY_CONFIG = {
    # Base folders (relative to app_path) for generated classes
    "path_repository": get_env("REPOSITORY_PATH_REPOSITORY", "repositories"),
    "path_service": get_env("REPOSITORY_PATH_SERVICE", "services"),
    # Root package of the host application
    "app_path": get_env("REPOSITORY_APP_PATH", "app"),
    "app_namespace": get_env("REPOSITORY_APP_NAMESPACE", "app"),
    "models_namespace": get_env("REPOSITORY_MODELS_NAMESPACE", "app.models"),
    # Records per page for BaseRepository.get_list
    "limit_paginate": get_env("REPOSITORY_LIMIT_PAGINATE", 20, int),
    # dump_auto_load=True        -> always refresh after generation
    # dump_auto_load=False + ask -> prompt the user
    # both False                 -> skip
    "dump_auto_load": get_env("REPOSITORY_DUMP_AUTO_LOAD", True, bool),
    "ask_dump_auto_load": get_env("REPOSITORY_ASK_DUMP_AUTO_LOAD", False, bool),
    "dump_auto_load_command": get_env("REPOSITORY_DUMP_AUTO_LOAD_COMMAND"),
    "binding_mode": get_env("REPOSITORY_BINDING_MODE", "provider"),
}

if REPOSITORY_CONFIG["binding_mode"] not in BINDING_MODES:
    raise RuntimeError(f"Invalid REPOSITORY_BINDING_MODE: {REPOSITORY_CONFIG['binding_mode']}. Allowed: {BINDING_MODES}")


# Keys written by ``repository-pattern publish:config``
PUBLISHABLE_ENV = {
    "REPOSITORY_PATH_REPOSITORY": "repositories",
    "REPOSITORY_PATH_SERVICE": "services",
    "REPOSITORY_APP_PATH": "app",
    "REPOSITORY_APP_NAMESPACE": "app",
    "REPOSITORY_MODELS_NAMESPACE": "app.models",
    "REPOSITORY_LIMIT_PAGINATE": "20",
    "REPOSITORY_DUMP_AUTO_LOAD": "true",
    "REPOSITORY_ASK_DUMP_AUTO_LOAD": "false",
    "REPOSITORY_BINDING_MODE": "provider",
}
