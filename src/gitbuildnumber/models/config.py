"""Configuration models."""

import keyword
import re
from pathlib import Path
from typing import Any, List, Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gitbuildnumber.models.build import AncestorBound, BoundKind, HeadState

DEFAULT_NAMESPACE = "git"
DEFAULT_SHORT_REVISION_LENGTH = 7
MAX_REVISION_LENGTH = 40

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def _to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub(r"_\1", name).lower()


def _is_qualified_name(value: str) -> bool:
    parts = value.split(".")
    return all(part.isidentifier() and not keyword.iskeyword(part) for part in parts)


class ExtractionConfig(BaseSettings):
    """Options for extracting Git metadata and composing the build number.

    Settings can be passed as keyword arguments, loaded from environment
    variables prefixed with GITBUILDNUMBER_ (e.g. GITBUILDNUMBER_DIRTY_VALUE)
    or from a .env file. Keyword arguments may also use the camelCase names
    known from the build tool plugins (``dirtyValue``, ``shortRevisionLength``).
    Omitted or unusable values fall back to their defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="GITBUILDNUMBER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    namespace: str = Field(
        default=DEFAULT_NAMESPACE,
        description="Prefix of the published property names",
    )
    dirty_value: str = Field(
        default="dirty",
        description="Value of the `dirty` property when the working tree is dirty",
    )
    short_revision_length: int = Field(
        default=DEFAULT_SHORT_REVISION_LENGTH,
        description="Length of abbreviated ids (shortRevision, shortParent), 0 to 40",
    )
    git_date_format: str = Field(
        default="yyyy-MM-dd",
        description="Pattern for authorDate and commitDate",
    )
    build_date_format: str = Field(
        default="yyyy-MM-dd HH:mm:ss",
        description="Pattern for buildDate",
    )
    date_format_time_zone: Optional[str] = Field(
        default=None,
        description="Time zone for both date patterns (None for the local zone)",
    )
    count_commits_since_inclusive: Optional[str] = Field(
        default=None,
        description="Tag or commit id to count commits since, counting it",
    )
    count_commits_since_exclusive: Optional[str] = Field(
        default=None,
        description="Tag or commit id to count commits since, not counting it",
    )
    build_number_format: Optional[str] = Field(
        default=None,
        description="Expression composing the buildNumber property",
    )
    build_number_engine: Literal["jinja", "node", "disabled"] = Field(
        default="jinja",
        description="Engine evaluating build_number_format",
    )
    repository_directory: Path = Field(
        default=Path("."),
        description="Directory to start searching the Git root from",
    )
    skip: bool = Field(False, description="Skip extraction entirely")
    verbose: bool = Field(False, description="Log parameters, properties and timings")

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {_to_snake(key): value for key, value in data.items()}
        return data

    @field_validator("namespace", mode="before")
    @classmethod
    def _default_namespace(cls, value: Any) -> Any:
        if not isinstance(value, str) or not _is_qualified_name(value):
            return DEFAULT_NAMESPACE
        return value

    @field_validator("dirty_value", mode="before")
    @classmethod
    def _default_dirty_value(cls, value: Any) -> Any:
        return "dirty" if value is None else value

    @field_validator("short_revision_length", mode="before")
    @classmethod
    def _default_short_revision_length(cls, value: Any) -> Any:
        return DEFAULT_SHORT_REVISION_LENGTH if value is None else value

    @field_validator("short_revision_length")
    @classmethod
    def _clamp_short_revision_length(cls, value: int) -> int:
        return max(0, min(MAX_REVISION_LENGTH, value))

    @field_validator(
        "date_format_time_zone",
        "count_commits_since_inclusive",
        "count_commits_since_exclusive",
        "build_number_format",
        mode="before",
    )
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def ancestor_bound(self) -> AncestorBound:
        """Bound for the commit count; the inclusive option wins if both are set."""
        if self.count_commits_since_inclusive:
            return AncestorBound(kind=BoundKind.INCLUSIVE, reference=self.count_commits_since_inclusive)
        if self.count_commits_since_exclusive:
            return AncestorBound(kind=BoundKind.EXCLUSIVE, reference=self.count_commits_since_exclusive)
        return AncestorBound.none()

    def cache_key(self, head: HeadState) -> List[Optional[str]]:
        """Inputs which fully determine an extraction result, apart from the build date."""
        return [
            head.head_id,
            head.branch,
            head.tags,
            self.dirty_value if head.dirty else None,
            str(self.short_revision_length),
            self.git_date_format,
            self.build_date_format,
            self.date_format_time_zone,
            self.count_commits_since_inclusive,
            self.count_commits_since_exclusive,
            self.build_number_format,
            self.build_number_engine,
        ]

    def as_string(self) -> str:
        return ", ".join(f"{name}={getattr(self, name)}" for name in type(self).model_fields)
