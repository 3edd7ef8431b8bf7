"""Error taxonomy for a manifest sync run.

Every stage raises one of these at the point of failure. Nothing in the
pipeline retries or recovers; the caller reports the error once and stops.
"""

from __future__ import annotations


class SyncError(Exception):
    """Base class for failures that abort a sync run.

    Attributes:
        stage: Pipeline stage that failed (manifest, entities, cache, ...)
    """

    def __init__(self, message: str, *, stage: str):
        self.stage = stage
        super().__init__(message)


class FetchError(SyncError):
    """Transport or HTTP status failure talking to the content API.

    Attributes:
        url: URL that was requested
        status_code: HTTP status, None for transport failures
    """

    def __init__(
        self,
        message: str,
        *,
        url: str,
        status_code: int | None = None,
        stage: str = "fetch",
    ):
        self.url = url
        self.status_code = status_code
        super().__init__(message, stage=stage)


class DecodeError(SyncError):
    """Response body is not JSON or does not have the expected shape."""

    def __init__(self, message: str, *, url: str | None = None, stage: str = "decode"):
        self.url = url
        super().__init__(message, stage=stage)


class CacheError(SyncError):
    """Flush or write failure against the key-value store.

    Attributes:
        key: Key being written, None when the flush failed
    """

    def __init__(self, message: str, *, key: str | None = None, stage: str = "cache"):
        self.key = key
        super().__init__(message, stage=stage)


class DeadlineExceededError(SyncError):
    """The overall run deadline was spent before a call could start."""

    def __init__(self, message: str, *, stage: str):
        super().__init__(message, stage=stage)
