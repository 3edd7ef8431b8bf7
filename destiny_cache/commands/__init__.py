"""CLI command implementations for destiny-cache."""

from destiny_cache.commands.cache import cache_group
from destiny_cache.commands.sync import manifest, sync

__all__ = ["cache_group", "manifest", "sync"]
