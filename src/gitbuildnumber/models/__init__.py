"""Data models for build number extraction."""

from gitbuildnumber.models.build import (
    FIELD_NAMES,
    SHALLOW_COUNT,
    UNKNOWN_VALUES,
    AncestorBound,
    BoundKind,
    CommitCount,
    HeadState,
)
from gitbuildnumber.models.config import ExtractionConfig

__all__ = [
    "FIELD_NAMES",
    "SHALLOW_COUNT",
    "UNKNOWN_VALUES",
    "AncestorBound",
    "BoundKind",
    "CommitCount",
    "HeadState",
    "ExtractionConfig",
]
