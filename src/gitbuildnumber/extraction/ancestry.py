"""Counting the commits in the ancestry of HEAD."""

import heapq
from typing import List, Optional, Tuple

import git
import structlog
from git import Commit

from gitbuildnumber.errors import AncestorBoundNotFound
from gitbuildnumber.extraction.session import RepositorySession
from gitbuildnumber.extraction.tags import TagIndex
from gitbuildnumber.models import SHALLOW_COUNT, AncestorBound, BoundKind, CommitCount

logger = structlog.get_logger(__name__)


class ShallowHistory(Exception):
    """Raised internally when the walk runs into a shallow clone boundary."""


class AncestryCounter:
    """Walks the history of a commit from child to parent.

    Commits of parallel branches are visited in reverse chronological order
    of their committed date (ties broken by id), each commit exactly once,
    which matches the order of a history view showing all merged branches.
    """

    def __init__(self, session: RepositorySession, tag_index: TagIndex) -> None:
        self.session = session
        self.tag_index = tag_index

    def count(self, head: Commit, bound: Optional[AncestorBound] = None) -> CommitCount:
        """Count the commits reachable from ``head``.

        Args:
            head: Commit to start from
            bound: Optional ancestor to stop at; an inclusive bound is
                counted itself, an exclusive one is not

        Returns:
            CommitCount with the number of commits (-1 if the history is
            shallow) and the tags of the nearest tagged commit

        Raises:
            AncestorBoundNotFound: If the bound does not resolve to a commit
                or is not an ancestor of ``head``
        """
        bound = bound or AncestorBound.none()
        stop_at = None
        if bound.is_set:
            stop_at = self.session.resolve_commit(bound.reference).hexsha
            logger.debug("ancestor_bound_resolved", reference=bound.reference, commit=stop_at, kind=bound.kind.value)

        shallow = self.session.shallow_commits()
        count = 0
        nearest: Tuple[str, ...] = ()

        try:
            for commit in self._walk(head, shallow):
                sha = commit.hexsha
                if not nearest and sha in self.tag_index:
                    nearest = self.tag_index.tags_for(sha)
                if sha == stop_at:
                    if bound.kind is BoundKind.INCLUSIVE:
                        count += 1
                    return CommitCount(count=count, nearest_tag=nearest)
                count += 1
        except ShallowHistory as e:
            logger.warning("shallow_history_detected", commit=str(e), counted=count)
            return CommitCount(count=SHALLOW_COUNT, nearest_tag=nearest)

        if stop_at is not None:
            raise AncestorBoundNotFound(bound.reference)
        return CommitCount(count=count, nearest_tag=nearest)

    def _walk(self, head: Commit, shallow):
        """Yield commits newest first, following every parent."""
        seen = {head.hexsha}
        queue: List[Tuple[int, str, Commit]] = [(-head.committed_date, head.hexsha, head)]

        while queue:
            _, sha, commit = heapq.heappop(queue)
            yield commit

            if sha in shallow and commit.parents:
                raise ShallowHistory(sha)

            for parent in commit.parents:
                if parent.hexsha in seen:
                    continue
                seen.add(parent.hexsha)
                try:
                    committed = parent.committed_date
                except (ValueError, git.exc.BadObject) as e:
                    raise ShallowHistory(parent.hexsha) from e
                heapq.heappush(queue, (-committed, parent.hexsha, parent))
