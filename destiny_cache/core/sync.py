"""Full manifest sync: clear, fetch, filter, merge, persist."""

from __future__ import annotations

from dataclasses import dataclass, field

import redis
import structlog

from destiny_cache.core.api import ManifestClient
from destiny_cache.core.config import AppConfig
from destiny_cache.core.pipeline import filter_by_mode, merge
from destiny_cache.core.store import CacheWriter, create_redis_client
from destiny_cache.core.types import DefinitionType
from destiny_cache.core.utils import Deadline

logger = structlog.get_logger()

# Later sources win on shared keys; activities are merged after filtering.
MERGE_ORDER = (
    DefinitionType.RACE,
    DefinitionType.CLASS,
    DefinitionType.GENDER,
    DefinitionType.ACTIVITY,
)


@dataclass
class SyncResult:
    """Summary of a completed sync run."""

    counts: dict[DefinitionType, int] = field(default_factory=dict)
    activity_mode: int = 0
    filtered_activities: int = 0
    merged: int = 0
    written: int = 0
    elapsed: float = 0.0

    def to_dict(self) -> dict[str, object]:
        return {
            "counts": {definition.value: count for definition, count in self.counts.items()},
            "activity_mode": self.activity_mode,
            "filtered_activities": self.filtered_activities,
            "merged": self.merged,
            "written": self.written,
            "elapsed": round(self.elapsed, 3),
        }


def run_sync(
    config: AppConfig | None = None,
    client: ManifestClient | None = None,
    store: redis.Redis | None = None,
) -> SyncResult:
    """Run one sync from the content API into the cache.

    The cache is flushed first, then the manifest and the four definition
    tables are fetched, activities are filtered by ``config.activity_mode``
    and the merge result is written. Any failure stops the run where it
    happens.

    Args:
        config: Application configuration, defaults if None
        client: Optional manifest client, built from config if None
        store: Optional Redis client, built from config if None

    Returns:
        Run summary

    Raises:
        SyncError: From whichever stage failed
    """
    config = config or AppConfig()
    deadline = Deadline(config.deadline)

    if client is None:
        client = ManifestClient(config.api, deadline=deadline)
    else:
        client.deadline = deadline

    owns_store = store is None
    if store is None:
        store = create_redis_client(config.redis, deadline)
    writer = CacheWriter(store, deadline)

    logger.info("sync_started", base_url=config.api.base_url, language=config.api.language)

    try:
        with client:
            writer.clear_cache()
            paths = client.resolve_manifest()
            definitions = client.fetch_definitions(paths, max_workers=config.max_workers)

        activities = filter_by_mode(definitions[DefinitionType.ACTIVITY], config.activity_mode)
        staged = {**definitions, DefinitionType.ACTIVITY: activities}
        merged = merge(*(staged[definition] for definition in MERGE_ORDER))

        written = writer.persist(merged)
    finally:
        if owns_store:
            store.close()

    result = SyncResult(
        counts={definition: len(definitions[definition]) for definition in MERGE_ORDER},
        activity_mode=config.activity_mode,
        filtered_activities=len(activities),
        merged=len(merged),
        written=written,
        elapsed=deadline.elapsed,
    )
    logger.info("sync_finished", merged=result.merged, elapsed=round(result.elapsed, 3))
    return result
