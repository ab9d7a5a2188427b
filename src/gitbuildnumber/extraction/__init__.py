"""Git repository metadata extraction."""

from gitbuildnumber.extraction.ancestry import AncestryCounter
from gitbuildnumber.extraction.extractor import BuildNumberExtractor
from gitbuildnumber.extraction.session import RepositorySession, WorkingTreeStatus
from gitbuildnumber.extraction.tags import TagIndex

__all__ = [
    "AncestryCounter",
    "BuildNumberExtractor",
    "RepositorySession",
    "WorkingTreeStatus",
    "TagIndex",
]
