"""Extraction of Git metadata and composition of the build number."""

import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Dict, Iterator, Mapping, Optional

import structlog

from gitbuildnumber.compose import (
    BaseExpressionEvaluator,
    BuildNumberComposer,
    EvaluatorWarmup,
    abbreviate,
    create_evaluator,
)
from gitbuildnumber.errors import IncompleteResult
from gitbuildnumber.extraction.ancestry import AncestryCounter
from gitbuildnumber.extraction.session import RepositorySession
from gitbuildnumber.extraction.tags import TagIndex
from gitbuildnumber.formatting import DateFormatter
from gitbuildnumber.models import FIELD_NAMES, ExtractionConfig, HeadState

logger = structlog.get_logger(__name__)


def to_properties(result: Mapping[str, str], namespace: str) -> Dict[str, str]:
    """Prefix every result key with the namespace, e.g. ``git.revision``."""
    return {f"{namespace}.{name}": value for name, value in result.items()}


def verify_result(fields: Mapping[str, Optional[str]]) -> Dict[str, str]:
    """Return the fields in publishing order.

    Raises:
        IncompleteResult: If a required field is missing or not a string
    """
    missing = [name for name in FIELD_NAMES if not isinstance(fields.get(name), str)]
    if missing:
        raise IncompleteResult(missing)
    return {name: fields[name] for name in FIELD_NAMES}


class BuildNumberExtractor:
    """Extracts Git metadata and creates the build number."""

    def __init__(
        self,
        config: ExtractionConfig,
        evaluator_factory: Optional[Callable[[], BaseExpressionEvaluator]] = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            config: Extraction options
            evaluator_factory: Creates the expression evaluator; defaults to
                the engine named by ``config.build_number_engine``
        """
        self.config = config
        self.evaluator_factory = evaluator_factory or (lambda: create_evaluator(config.build_number_engine))

    @contextmanager
    def _timed(self, step: str) -> Iterator[None]:
        start = time.perf_counter()
        yield
        if self.config.verbose:
            logger.info("step_finished", step=step, duration_ms=round((time.perf_counter() - start) * 1000))

    def head_summary(self) -> HeadState:
        """HEAD id, branch, dirty flag and tags, enough to tell if a cached result is stale."""
        with RepositorySession(self.config.repository_directory) as session:
            return HeadState(
                head_id=session.head_id(),
                branch=session.current_branch_name(),
                dirty=session.is_dirty(),
                tags=TagIndex.build(session.repo).fingerprint(),
            )

    def extract(self, now: Optional[datetime] = None) -> Dict[str, str]:
        """Read the repository and compose all properties.

        Args:
            now: Build timestamp (defaults to the current time)

        Returns:
            Mapping of every name in FIELD_NAMES to its string value

        Raises:
            BuildNumberError: Any of its subclasses; nothing is retried
        """
        config = self.config
        if config.verbose:
            logger.info("parameters", params=config.as_string())

        git_dates = DateFormatter(config.git_date_format, config.date_format_time_zone)
        build_dates = DateFormatter(config.build_date_format, config.date_format_time_zone)

        # evaluator start-up overlaps with reading the repository
        warmup = EvaluatorWarmup.start(self.evaluator_factory) if config.build_number_format else None

        try:
            with self._timed("read_repository"), RepositorySession(config.repository_directory) as session:
                head = session.head_commit()
                revision = session.head_id()
                tag_index = TagIndex.build(session.repo)
                with self._timed("count_commits"):
                    commit_count = AncestryCounter(session, tag_index).count(head, config.ancestor_bound())

                parents = [parent.hexsha for parent in head.parents]
                fields: Dict[str, Optional[str]] = {
                    "revision": revision,
                    "shortRevision": abbreviate(revision, config.short_revision_length),
                    "dirty": config.dirty_value if session.is_dirty() else "",
                    "branch": session.current_branch_name(),
                    "tag": tag_index.render(revision),
                    "nearestTag": commit_count.nearest_tag_name,
                    "parent": ";".join(parents),
                    "shortParent": ";".join(abbreviate(sha, config.short_revision_length) for sha in parents),
                    "commitsCount": str(commit_count.count),
                    "authorDate": git_dates.format(head.authored_datetime),
                    "commitDate": git_dates.format(head.committed_datetime),
                    "describe": session.describe(),
                }

            fields["buildDate"] = build_dates.format(now or datetime.now(timezone.utc))

            with self._timed("compose_build_number"):
                evaluator = warmup.join() if warmup is not None else None
                composer = BuildNumberComposer(config.build_number_format, evaluator)
                fields["buildNumber"] = composer.compose(fields)
        finally:
            # no-op once joined; releases the worker when reading failed
            if warmup is not None:
                warmup.cancel()

        result = verify_result(fields)
        logger.info("build_number_extracted", build_number=result["buildNumber"])
        if config.verbose:
            logger.info("properties_extracted", properties=to_properties(result, config.namespace))
        return result
