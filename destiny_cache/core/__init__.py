"""Core functionality for destiny_cache.

This module provides the pieces of a sync run:
- Configuration management
- Type definitions and JSON codecs
- Content API client
- Filter and merge stages
- Redis cache writer
"""

from destiny_cache.core.errors import (
    CacheError,
    DeadlineExceededError,
    DecodeError,
    FetchError,
    SyncError,
)
from destiny_cache.core.pipeline import filter_by_mode, merge
from destiny_cache.core.types import (
    ContentPaths,
    DefinitionType,
    DisplayProperties,
    EntityDictionary,
    EntityRecord,
    Manifest,
)

__all__ = [
    # Errors
    "SyncError",
    "FetchError",
    "DecodeError",
    "CacheError",
    "DeadlineExceededError",
    # Types
    "ContentPaths",
    "DefinitionType",
    "DisplayProperties",
    "EntityDictionary",
    "EntityRecord",
    "Manifest",
    # Stages
    "filter_by_mode",
    "merge",
]
