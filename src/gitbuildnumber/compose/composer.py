"""Composition of the buildNumber property."""

from typing import Mapping, Optional

import structlog

from gitbuildnumber.compose.evaluators import BaseExpressionEvaluator
from gitbuildnumber.errors import FormatEvaluationError
from gitbuildnumber.models.config import MAX_REVISION_LENGTH

logger = structlog.get_logger(__name__)


def abbreviate(sha: str, length: int) -> str:
    """First ``length`` characters of an id, with length clamped to 0..40."""
    return sha[: max(0, min(MAX_REVISION_LENGTH, length))]


def default_build_number(tag: str, branch: str, commits_count: str, short_revision: str, dirty: str) -> str:
    """<tag or branch or UNNAMED>.<commitsCount>.<shortRevision>[-<dirty>]"""
    name = tag or branch or "UNNAMED"
    suffix = f"-{dirty}" if dirty else ""
    return f"{name}.{commits_count}.{short_revision}{suffix}"


class BuildNumberComposer:
    """Produces the build number from the extracted properties.

    Without an expression the default format is used. With an expression,
    the evaluator's result is used and failures are raised, never replaced
    by the default.
    """

    def __init__(
        self,
        expression: Optional[str] = None,
        evaluator: Optional[BaseExpressionEvaluator] = None,
    ) -> None:
        self.expression = expression
        self.evaluator = evaluator

    def compose(self, fields: Mapping[str, str]) -> str:
        default = default_build_number(
            fields["tag"],
            fields["branch"],
            fields["commitsCount"],
            fields["shortRevision"],
            fields["dirty"],
        )
        if not self.expression:
            return default

        if self.evaluator is None:
            raise FormatEvaluationError("No expression engine available to evaluate the build number format")

        # the default is available to the expression as buildNumber
        bindings = dict(fields, buildNumber=default)
        result = self.evaluator.evaluate(self.expression, bindings)
        if not result:
            raise FormatEvaluationError(f"Build number expression yields no value: {self.expression!r}")
        logger.info("default_build_number_overwritten", default=default, build_number=result, engine=self.evaluator.name)
        return result
