"""gitbuildnumber - build numbers derived from Git repository metadata."""

from gitbuildnumber.errors import (
    AncestorBoundNotFound,
    BuildNumberError,
    ConfigurationError,
    EmptyRepository,
    FormatEvaluationError,
    IncompleteResult,
    RepositoryNotFound,
    UnreadableHead,
)
from gitbuildnumber.extraction import BuildNumberExtractor
from gitbuildnumber.models import FIELD_NAMES, ExtractionConfig

__version__ = "0.1.0"

__all__ = [
    "AncestorBoundNotFound",
    "BuildNumberError",
    "ConfigurationError",
    "EmptyRepository",
    "FormatEvaluationError",
    "IncompleteResult",
    "RepositoryNotFound",
    "UnreadableHead",
    "BuildNumberExtractor",
    "FIELD_NAMES",
    "ExtractionConfig",
]
