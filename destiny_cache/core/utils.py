"""Shared utilities for destiny-cache."""

from __future__ import annotations

import time

from destiny_cache.core.errors import DeadlineExceededError


def join_url(base_url: str, path: str) -> str:
    """Join an API host and a path with exactly one slash between them.

    Args:
        base_url: Scheme and host, with or without a trailing slash
        path: Path taken verbatim from the manifest

    Returns:
        Absolute URL

    Example:
        >>> join_url("https://www.bungie.net", "/foo")
        'https://www.bungie.net/foo'
        >>> join_url("https://www.bungie.net/", "foo")
        'https://www.bungie.net/foo'
    """
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def format_duration(seconds: float) -> str:
    """Format a duration for display.

    Example:
        >>> format_duration(0.25)
        '250ms'
        >>> format_duration(75.5)
        '1m 15.5s'
    """
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, rest = divmod(seconds, 60)
    return f"{int(minutes)}m {rest:.1f}s"


class Deadline:
    """Overall time budget shared by every call in a run.

    A deadline of None never expires.
    """

    def __init__(self, seconds: float | None = None):
        self.seconds = seconds
        self._started = time.monotonic()
        self._expires_at = None if seconds is None else self._started + seconds

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self._started

    def remaining(self) -> float | None:
        """Seconds left, None when unbounded. Never negative."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    def check(self, stage: str) -> float | None:
        """Raise if the budget is spent, otherwise return what is left.

        Raises:
            DeadlineExceededError: If no time is left
        """
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise DeadlineExceededError(
                f"Deadline of {self.seconds}s exceeded during {stage}",
                stage=stage,
            )
        return remaining

    def timeout(self, default: float, stage: str) -> float:
        """Clip a per-call timeout to the remaining budget.

        Raises:
            DeadlineExceededError: If no time is left
        """
        remaining = self.check(stage)
        if remaining is None:
            return default
        return min(default, remaining)
