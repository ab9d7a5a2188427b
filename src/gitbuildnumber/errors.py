"""Exceptions raised while extracting a build number."""


class BuildNumberError(Exception):
    """Base class for all build number extraction errors."""


class ConfigurationError(BuildNumberError):
    """An option value cannot be used (time zone, date pattern, engine)."""


class RepositoryNotFound(BuildNumberError):
    """No git repository at the given directory or any of its parents."""


class EmptyRepository(BuildNumberError):
    """HEAD does not point at a commit yet."""


class UnreadableHead(BuildNumberError):
    """The HEAD reference itself cannot be read."""


class AncestorBoundNotFound(BuildNumberError):
    """The ancestor configured to count commits since was never reached."""

    def __init__(self, reference: str, reason: str = "not reachable from HEAD") -> None:
        self.reference = reference
        super().__init__(f"Ancestor '{reference}' {reason}")


class FormatEvaluationError(BuildNumberError):
    """The build number expression could not be evaluated."""


class IncompleteResult(BuildNumberError):
    """A required result field was not produced."""

    def __init__(self, missing: list) -> None:
        self.missing = missing
        super().__init__(f"Required properties not set: {', '.join(missing)}")
