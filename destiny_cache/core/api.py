"""Content API client for the manifest and its definition tables."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed

import httpx
import structlog

from destiny_cache import __version__
from destiny_cache.core.config import ApiConfig
from destiny_cache.core.errors import FetchError
from destiny_cache.core.types import (
    ContentPaths,
    DefinitionType,
    EntityDictionary,
    Manifest,
    decode_entities,
    decode_manifest,
)
from destiny_cache.core.utils import Deadline, join_url

logger = structlog.get_logger()

MANIFEST_PATH = "/Platform/Destiny2/Manifest"


class ManifestClient:
    """Client for the manifest endpoint and the definition tables it lists.

    One GET per resource, no retries. Failures surface as FetchError or
    DecodeError and are never swallowed.
    """

    def __init__(self, config: ApiConfig | None = None, deadline: Deadline | None = None):
        """Initialize manifest client.

        Args:
            config: Optional API configuration
            deadline: Optional run deadline shared with other stages
        """
        self.config = config or ApiConfig()
        self.deadline = deadline or Deadline()
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            headers = {
                "User-Agent": f"destiny-cache/{__version__}",
                "Accept": "application/json",
            }
            if self.config.api_key:
                headers["X-API-Key"] = self.config.api_key
            self._client = httpx.Client(
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
                follow_redirects=True,
                headers=headers,
            )
        return self._client

    def build_url(self, path: str) -> str:
        """Build an absolute URL for a path published by the manifest."""
        return join_url(self.config.base_url, path)

    def _get(self, url: str, stage: str) -> bytes:
        """GET a URL and return the body.

        The body is streamed so the run deadline is checked between chunks,
        not only before the request starts.

        Raises:
            FetchError: On transport failure or a non-success status
            DeadlineExceededError: If the run deadline is spent
        """
        timeout = self.deadline.timeout(self.config.timeout, stage)
        try:
            with self.client.stream("GET", url, timeout=timeout) as response:
                response.raise_for_status()
                chunks: list[bytes] = []
                for chunk in response.iter_bytes():
                    chunks.append(chunk)
                    self.deadline.check(stage)
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"{url} returned HTTP {e.response.status_code}",
                url=url,
                status_code=e.response.status_code,
                stage=stage,
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(f"Request to {url} failed: {e}", url=url, stage=stage) from e

        return b"".join(chunks)

    def fetch_manifest(self) -> Manifest:
        """Fetch and decode the full manifest document."""
        url = self.build_url(MANIFEST_PATH)
        manifest = decode_manifest(self._get(url, "manifest"), url=url)
        logger.info("manifest_fetched", version=manifest.version, languages=len(manifest.languages))
        return manifest

    def resolve_manifest(self) -> ContentPaths:
        """Resolve the definition paths for the configured language.

        Returns:
            Content paths for race, class, gender and activity definitions

        Raises:
            FetchError: If the manifest cannot be fetched
            DecodeError: If the manifest is malformed or lacks the language
        """
        url = self.build_url(MANIFEST_PATH)
        paths = self.fetch_manifest().content_paths(self.config.language, url=url)
        logger.info(
            "manifest_resolved",
            language=self.config.language,
            activity=paths.activity,
            race=paths.race,
        )
        return paths

    def fetch_entities(self, url: str, stage: str = "entities") -> EntityDictionary:
        """Download and decode one definition table.

        Args:
            url: Absolute URL of the definition table
            stage: Stage name used in errors and logs

        Returns:
            Mapping of definition hash to record
        """
        entities = decode_entities(self._get(url, stage), url=url)
        logger.info("entities_fetched", stage=stage, url=url, count=len(entities))
        return entities

    def fetch_definitions(
        self,
        paths: ContentPaths,
        max_workers: int = 4,
    ) -> dict[DefinitionType, EntityDictionary]:
        """Fetch every definition table listed in the content paths.

        The downloads are independent and run concurrently; all of them must
        succeed. The first failure cancels downloads that have not started
        and is re-raised.

        Args:
            paths: Resolved content paths
            max_workers: Thread pool size, 1 downloads sequentially

        Returns:
            Entity dictionary per definition type
        """
        results: dict[DefinitionType, EntityDictionary] = {}

        # Workers share one client, create it before they start
        _ = self.client

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_definition: dict[Future[EntityDictionary], DefinitionType] = {
                executor.submit(
                    self.fetch_entities,
                    self.build_url(paths.path_for(definition)),
                    f"entities:{definition.value}",
                ): definition
                for definition in DefinitionType
            }

            for future in as_completed(future_to_definition):
                definition = future_to_definition[future]
                try:
                    results[definition] = future.result()
                except Exception:
                    for pending in future_to_definition:
                        pending.cancel()
                    logger.debug("definition_fetch_cancelled", definition=definition.value)
                    raise

        return results

    def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> ManifestClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()
