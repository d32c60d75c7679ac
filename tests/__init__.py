"""
Test Suite for repository-pattern

Test Structure:
    tests/
    ├── conftest.py           - Shared fixtures (in-memory SQLite engine & session)
    ├── models.py             - Article model and the repositories/services built on it
    ├── unit/                 - No database: RepositoryResponse, Container, config
    ├── integration/          - BaseRepository / BaseService against SQLite
    └── console/              - make:repository and publish:config

Usage:
    pytest tests/ -v
    pytest tests/integration/ -v
"""
