"""Destiny Cache - sync game content definitions into Redis.

Fetches the content manifest, downloads the race, class, gender and
activity definition tables it lists, filters activities by mode, merges
the tables and replaces the contents of a Redis keyspace with the result.

Key modules:
- core: Config, types, API client, pipeline stages, cache writer
- commands: CLI command implementations
"""

__version__ = "0.1.0"
__author__ = "Destiny Cache Team"

# Re-export commonly used types and functions
from destiny_cache.core.types import (  # noqa: E402
    DefinitionType,
    EntityRecord,
)

__all__ = [
    "__version__",
    "__author__",
    "DefinitionType",
    "EntityRecord",
]
