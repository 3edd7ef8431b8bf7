"""Core type definitions for destiny_cache."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from destiny_cache.core.errors import DecodeError


class DefinitionType(StrEnum):
    """Content definition categories synced into the cache."""
    RACE = "race"
    CLASS = "class"
    GENDER = "gender"
    ACTIVITY = "activity"

    @property
    def definition_name(self) -> str:
        """Name of the definition table in the manifest."""
        return f"Destiny{self.value.title()}Definition"


class DisplayProperties(BaseModel):
    """Display block shared by most content definitions."""
    name: str = Field(default="", description="Display name")
    description: str = Field(default="", description="Display description")
    icon: str = Field(default="", description="Icon path relative to the API host")
    has_icon: bool = Field(default=False, alias="hasIcon", description="Whether an icon exists")

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class EntityRecord(BaseModel):
    """One content definition as stored in the cache.

    Only the fields below are kept; everything else in the payload is dropped
    on decode. Records without an activity mode decode with ``mode=None``.
    """
    mode: int | None = Field(
        default=None,
        alias="directActivityModeType",
        description="Activity mode type, None when the definition has none",
    )
    display_properties: DisplayProperties = Field(
        default_factory=DisplayProperties,
        alias="displayProperties",
    )
    original_display_properties: DisplayProperties = Field(
        default_factory=DisplayProperties,
        alias="originalDisplayProperties",
    )
    release_icon: str = Field(default="", alias="releaseIcon")
    release_time: int = Field(default=0, alias="releaseTime")

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


EntityDictionary = dict[str, EntityRecord]

_entities_adapter: TypeAdapter[EntityDictionary] = TypeAdapter(EntityDictionary)


class ContentPaths(BaseModel):
    """Definition paths published for one language."""
    activity: str = Field(..., alias="DestinyActivityDefinition")
    class_: str = Field(..., alias="DestinyClassDefinition")
    gender: str = Field(..., alias="DestinyGenderDefinition")
    race: str = Field(..., alias="DestinyRaceDefinition")

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    def path_for(self, definition: DefinitionType) -> str:
        """Get the manifest path for a definition type."""
        return self.model_dump(by_alias=True)[definition.definition_name]


class ManifestBody(BaseModel):
    """The ``Response`` block of the manifest envelope."""
    version: str | None = Field(default=None, description="Manifest version")
    json_world_component_content_paths: dict[str, ContentPaths] = Field(
        ..., alias="jsonWorldComponentContentPaths"
    )

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class Manifest(BaseModel):
    """Decoded manifest document."""
    response: ManifestBody = Field(..., alias="Response")

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    @property
    def version(self) -> str | None:
        return self.response.version

    @property
    def languages(self) -> list[str]:
        return sorted(self.response.json_world_component_content_paths)

    def content_paths(self, language: str, url: str | None = None) -> ContentPaths:
        """Select the definition paths for a language.

        Args:
            language: Language code, e.g. "en"
            url: Manifest URL, reported if the language is missing

        Raises:
            DecodeError: If the manifest does not publish the language
        """
        paths = self.response.json_world_component_content_paths.get(language)
        if paths is None:
            raise DecodeError(
                f"Manifest has no content paths for language '{language}'",
                url=url,
                stage="manifest",
            )
        return paths


def decode_manifest(payload: bytes | str, url: str | None = None) -> Manifest:
    """Decode a manifest document.

    Raises:
        DecodeError: If the payload is not JSON or not a manifest
    """
    try:
        return Manifest.model_validate_json(payload)
    except ValidationError as e:
        raise DecodeError(f"Invalid manifest document: {e}", url=url, stage="manifest") from e


def decode_entities(payload: bytes | str, url: str | None = None) -> EntityDictionary:
    """Decode a definition table into an entity dictionary.

    Raises:
        DecodeError: If the payload is not a JSON object of entity records
    """
    try:
        return _entities_adapter.validate_json(payload)
    except ValidationError as e:
        raise DecodeError(f"Invalid entity dictionary: {e}", url=url, stage="entities") from e


def encode_entity(record: EntityRecord) -> str:
    """Serialize a record with its wire field names."""
    return record.model_dump_json(by_alias=True)


def decode_entity(payload: bytes | str) -> EntityRecord:
    """Decode a record written by ``encode_entity``."""
    try:
        return EntityRecord.model_validate_json(payload)
    except ValidationError as e:
        raise DecodeError(f"Invalid entity record: {e}", stage="cache") from e
