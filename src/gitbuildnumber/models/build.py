"""Data models for build number extraction."""

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

# Result keys, in publishing order
FIELD_NAMES: List[str] = [
    "revision",
    "shortRevision",
    "dirty",
    "branch",
    "tag",
    "nearestTag",
    "parent",
    "shortParent",
    "commitsCount",
    "authorDate",
    "commitDate",
    "describe",
    "buildDate",
    "buildNumber",
]

# Count reported when history is truncated by a shallow clone
SHALLOW_COUNT = -1

# Placeholders an integration may publish when extraction fails
UNKNOWN_VALUES: Dict[str, str] = {
    "revision": "UNKNOWN_REVISION",
    "shortRevision": "UNKNOWN_SHORT_REVISION",
    "dirty": "UNKNOWN_DIRTY",
    "branch": "UNKNOWN_BRANCH",
    "tag": "UNKNOWN_TAG",
    "nearestTag": "UNKNOWN_NEAREST_TAG",
    "parent": "UNKNOWN_PARENT",
    "shortParent": "UNKNOWN_SHORT_PARENT",
    "commitsCount": "UNKNOWN_COMMITS_COUNT",
    "authorDate": "UNKNOWN_AUTHOR_DATE",
    "commitDate": "UNKNOWN_COMMIT_DATE",
    "describe": "UNKNOWN_DESCRIBE",
    "buildDate": "UNKNOWN_BUILD_DATE",
    "buildNumber": "UNKNOWN_BUILDNUMBER",
}


class BoundKind(str, Enum):
    """How the ancestor bound takes part in the commit count."""

    NONE = "none"
    INCLUSIVE = "inclusive"
    EXCLUSIVE = "exclusive"


class AncestorBound(BaseModel):
    """Ancestor commit to count commits since."""

    kind: BoundKind = Field(BoundKind.NONE, description="Bound kind")
    reference: Optional[str] = Field(None, description="Tag name or full/abbreviated commit id")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def none(cls) -> "AncestorBound":
        return cls(kind=BoundKind.NONE)

    @property
    def is_set(self) -> bool:
        return self.kind is not BoundKind.NONE and bool(self.reference)


class CommitCount(BaseModel):
    """Result of walking the ancestry of HEAD."""

    count: int = Field(..., description="Number of commits counted, or -1 for shallow history")
    nearest_tag: Tuple[str, ...] = Field(
        default_factory=tuple, description="Tags on the closest tagged ancestor-or-self"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def is_shallow(self) -> bool:
        return self.count == SHALLOW_COUNT

    @property
    def nearest_tag_name(self) -> str:
        return ";".join(self.nearest_tag)


class HeadState(BaseModel):
    """Repository state an extraction result depends on, besides the options."""

    head_id: str = Field(..., description="Full id of the HEAD commit")
    branch: str = Field("", description="Current branch, empty when HEAD is detached")
    dirty: bool = Field(False, description="Whether the working tree is dirty")
    tags: str = Field("", description="Fingerprint of all tag names and the commits they point at")

    model_config = ConfigDict(frozen=True)
