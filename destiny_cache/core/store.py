"""Redis-backed cache writer for merged definitions."""

from __future__ import annotations

from collections.abc import Mapping

import redis
import structlog

from destiny_cache.core.config import RedisConfig
from destiny_cache.core.errors import CacheError
from destiny_cache.core.types import EntityRecord, decode_entity, encode_entity
from destiny_cache.core.utils import Deadline

logger = structlog.get_logger()


def create_redis_client(config: RedisConfig | None = None, deadline: Deadline | None = None) -> redis.Redis:
    """Create a Redis client from configuration.

    The connection is opened lazily on the first command. With a deadline,
    the socket timeouts are clipped to the time left so a single command
    cannot outlive the run.
    """
    config = config or RedisConfig()
    socket_timeout = config.socket_timeout
    remaining = deadline.remaining() if deadline is not None else None
    if remaining is not None:
        socket_timeout = remaining if socket_timeout is None else min(socket_timeout, remaining)

    return redis.Redis(
        host=config.host,
        port=config.port,
        password=config.password or None,
        db=config.db,
        protocol=config.protocol,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_timeout,
    )


class CacheWriter:
    """Replaces the store contents with a merged definition set.

    The store client is passed in rather than looked up globally. A write
    failure aborts at the offending key; keys after it are not attempted.
    """

    def __init__(self, client: redis.Redis, deadline: Deadline | None = None):
        """Initialize cache writer.

        Args:
            client: Redis client (or anything with flushall/set/get/dbsize)
            deadline: Optional run deadline shared with other stages
        """
        self.client = client
        self.deadline = deadline or Deadline()

    def clear_cache(self) -> None:
        """Flush the whole keyspace.

        Raises:
            CacheError: If the flush fails
        """
        self.deadline.check("cache:flush")
        try:
            result = self.client.flushall()
        except redis.RedisError as e:
            raise CacheError(f"Failed to flush the cache: {e}", stage="cache:flush") from e

        logger.info("cache_cleared", result=result)

    def persist(self, merged: Mapping[str, EntityRecord]) -> int:
        """Write every record under its key with no expiry.

        Args:
            merged: Merged definitions keyed by hash

        Returns:
            Number of keys written

        Raises:
            CacheError: On the first key that cannot be written
        """
        logger.info("cache_write_started", count=len(merged))

        written = 0
        for key, record in merged.items():
            self.deadline.check("cache:write")
            try:
                self.client.set(key, encode_entity(record))
            except redis.RedisError as e:
                logger.debug("cache_entry_failed", key=key, written=written)
                raise CacheError(
                    f"Failed to write key [{key}]: {e}",
                    key=key,
                    stage="cache:write",
                ) from e
            written += 1

        logger.info("cache_write_finished", count=written)
        return written

    def reset_and_persist(self, merged: Mapping[str, EntityRecord]) -> int:
        """Flush the store, then write the merged records.

        Nothing is written when the flush fails.
        """
        self.clear_cache()
        return self.persist(merged)

    def get(self, key: str) -> EntityRecord | None:
        """Read one record back from the store.

        Returns:
            Decoded record, or None if the key is absent
        """
        try:
            payload = self.client.get(key)
        except redis.RedisError as e:
            raise CacheError(f"Failed to read key [{key}]: {e}", key=key, stage="cache:read") from e

        if payload is None:
            return None
        return decode_entity(payload)

    def count(self) -> int:
        """Number of keys in the store."""
        try:
            return int(self.client.dbsize())
        except redis.RedisError as e:
            raise CacheError(f"Failed to count keys: {e}", stage="cache:read") from e
