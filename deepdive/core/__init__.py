"""
Core infrastructure package for the Deep Dive backend.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL connectivity via asyncpg (team membership tables)
- The engine's error taxonomy
- FastAPI dependency injection utilities

Simplified imports:

    from deepdive.core import get_settings, init_db, AdapterFailure

Components Re-exported:
    Settings / get_settings: configuration singleton
    init_db / close_db / get_db_pool / execute_query: asyncpg pool lifecycle
    DeepDiveError / InvalidPerspective / InvalidTierFilter / InvalidParentId /
    AdapterFailure: errors

The FastAPI dependencies live in deepdive.core.dependencies and are imported
from there directly, since they pull in the adapter implementations.
"""

# =============================================================================
# Re-exports from deepdive.core.config
# =============================================================================
from deepdive.core.config import Settings, get_settings

# =============================================================================
# Re-exports from deepdive.core.database
# =============================================================================
from deepdive.core.database import init_db, close_db, get_db_pool, execute_query

# =============================================================================
# Re-exports from deepdive.core.exceptions
# =============================================================================
from deepdive.core.exceptions import (
    DeepDiveError,
    InvalidPerspective,
    InvalidTierFilter,
    InvalidParentId,
    AdapterFailure,
)


__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
    'execute_query',
    # Errors (from exceptions.py)
    'DeepDiveError',
    'InvalidPerspective',
    'InvalidTierFilter',
    'InvalidParentId',
    'AdapterFailure',
]
