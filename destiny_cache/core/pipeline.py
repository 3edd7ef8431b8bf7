"""Filter and merge stages applied to decoded definition tables."""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from destiny_cache.core.types import EntityDictionary, EntityRecord

logger = structlog.get_logger()


def filter_by_mode(
    dictionary: Mapping[str, EntityRecord],
    target_mode: int,
) -> EntityDictionary:
    """Keep the records whose mode is set and equals ``target_mode``.

    Args:
        dictionary: Decoded definition table, left untouched
        target_mode: Mode value to keep

    Returns:
        New dictionary with the matching entries
    """
    filtered = {
        key: record
        for key, record in dictionary.items()
        if record.mode is not None and record.mode == target_mode
    }

    logger.info(
        "entities_filtered",
        target_mode=target_mode,
        before=len(dictionary),
        after=len(filtered),
    )
    return filtered


def merge(*dictionaries: Mapping[str, EntityRecord]) -> EntityDictionary:
    """Combine dictionaries in order, later ones winning on shared keys."""
    merged: EntityDictionary = {}
    for dictionary in dictionaries:
        merged.update(dictionary)

    logger.info("entities_merged", sources=len(dictionaries), count=len(merged))
    return merged
