"""Pytest configuration and shared fixtures for destiny_cache tests."""

from __future__ import annotations

import json
import re
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from destiny_cache.core.config import AppConfig
from destiny_cache.core.types import DisplayProperties, EntityRecord

BASE_URL = "https://www.bungie.net"

CONTENT_PATHS = {
    "DestinyActivityDefinition": "/common/destiny2_content/json/en/DestinyActivityDefinition-abc.json",
    "DestinyClassDefinition": "/common/destiny2_content/json/en/DestinyClassDefinition-abc.json",
    "DestinyGenderDefinition": "/common/destiny2_content/json/en/DestinyGenderDefinition-abc.json",
    "DestinyRaceDefinition": "/common/destiny2_content/json/en/DestinyRaceDefinition-abc.json",
}


def strip_ansi(output: str) -> str:
    """Remove terminal color codes from CLI output."""
    return re.sub(r"\x1b\[[0-9;]*m", "", output)


def make_response(payload: Any = None, status_code: int = 200, content: bytes | None = None) -> MagicMock:
    """Build a mock streamed httpx response carrying a JSON payload."""
    response = MagicMock()
    response.status_code = status_code
    response.content = content if content is not None else json.dumps(payload).encode()
    response.iter_bytes.return_value = [response.content]
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    if status_code >= 400:
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            f"{status_code} Error",
            request=MagicMock(),
            response=response,
        )
    else:
        response.raise_for_status.return_value = None
    return response


def entity_payload(name: str, mode: int | None = None, **extra: Any) -> dict[str, Any]:
    """Raw definition as the API publishes it."""
    payload: dict[str, Any] = {
        "displayProperties": {
            "description": f"{name} description",
            "name": name,
            "icon": f"/common/destiny2_content/icons/{name.lower()}.png",
            "hasIcon": True,
        },
        "originalDisplayProperties": {
            "description": f"{name} description",
            "name": name,
            "icon": "",
            "hasIcon": False,
        },
        "releaseIcon": "",
        "releaseTime": 0,
        "hash": 0,
        "index": 0,
        "redacted": False,
    }
    if mode is not None:
        payload["directActivityModeType"] = mode
    payload.update(extra)
    return payload


@pytest.fixture
def manifest_payload() -> dict[str, Any]:
    """Manifest envelope with English and French content paths."""
    french = {key: value.replace("/en/", "/fr/") for key, value in CONTENT_PATHS.items()}
    return {
        "Response": {
            "version": "227000.24.10.01.1730-1-bnet.57104",
            "jsonWorldComponentContentPaths": {
                "en": CONTENT_PATHS,
                "fr": french,
            },
        },
        "ErrorCode": 1,
        "ThrottleSeconds": 0,
        "ErrorStatus": "Success",
        "Message": "Ok",
    }


@pytest.fixture
def race_payload() -> dict[str, Any]:
    return {
        "898834093": entity_payload("Exo"),
        "2803282938": entity_payload("Awoken"),
        "3887404748": entity_payload("Human"),
    }


@pytest.fixture
def class_payload() -> dict[str, Any]:
    return {
        "671679327": entity_payload("Hunter"),
        "2271682572": entity_payload("Warlock"),
        "3655393761": entity_payload("Titan"),
    }


@pytest.fixture
def gender_payload() -> dict[str, Any]:
    return {
        "2204441813": entity_payload("Female"),
        "3111576190": entity_payload("Male"),
    }


@pytest.fixture
def activity_payload() -> dict[str, Any]:
    return {
        "1": entity_payload("Crucible Match", mode=4, releaseIcon="/img/release.png", releaseTime=1600000000),
        "2": entity_payload("Strike", mode=3),
        "3": entity_payload("Orbit"),
        "4": entity_payload("Iron Banner", mode=4),
        "5": entity_payload("Patrol", mode=None, directActivityModeType=None),
    }


@pytest.fixture
def api_responses(
    manifest_payload: dict[str, Any],
    race_payload: dict[str, Any],
    class_payload: dict[str, Any],
    gender_payload: dict[str, Any],
    activity_payload: dict[str, Any],
) -> dict[str, MagicMock]:
    """Mock responses keyed by absolute URL."""
    return {
        f"{BASE_URL}/Platform/Destiny2/Manifest": make_response(manifest_payload),
        BASE_URL + CONTENT_PATHS["DestinyRaceDefinition"]: make_response(race_payload),
        BASE_URL + CONTENT_PATHS["DestinyClassDefinition"]: make_response(class_payload),
        BASE_URL + CONTENT_PATHS["DestinyGenderDefinition"]: make_response(gender_payload),
        BASE_URL + CONTENT_PATHS["DestinyActivityDefinition"]: make_response(activity_payload),
    }


@pytest.fixture
def routed_stream(api_responses: dict[str, MagicMock]):
    """Side effect for a patched httpx.Client.stream that routes by URL."""
    def route(method: str, url: str, **kwargs: Any) -> MagicMock:
        if url not in api_responses:
            return make_response({"error": "not found"}, status_code=404)
        return api_responses[url]

    return route


@pytest.fixture
def mock_redis() -> MagicMock:
    """Redis client double recording flushall/set calls."""
    client = MagicMock()
    client.flushall.return_value = True
    client.set.return_value = True
    client.get.return_value = None
    client.dbsize.return_value = 0
    return client


@pytest.fixture
def app_config() -> AppConfig:
    """Default configuration pointed at the public API host."""
    return AppConfig()


@pytest.fixture
def sample_record() -> EntityRecord:
    return EntityRecord(
        mode=4,
        display_properties=DisplayProperties(
            name="Crucible Match",
            description="Compete against other Guardians.",
            icon="/common/destiny2_content/icons/crucible.png",
            has_icon=True,
        ),
        original_display_properties=DisplayProperties(name="Crucible Match"),
        release_icon="/img/release.png",
        release_time=1600000000,
    )


def record(name: str, mode: int | None = None) -> EntityRecord:
    """Small record for pipeline tests."""
    return EntityRecord(mode=mode, display_properties=DisplayProperties(name=name))


# Pytest configuration
def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest settings."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
