"""Read-only access to the Git repository being built."""

from pathlib import Path
from typing import FrozenSet, List, Union

import git
import structlog
from git import Commit, Repo
from pydantic import BaseModel, Field

from gitbuildnumber.errors import (
    AncestorBoundNotFound,
    EmptyRepository,
    RepositoryNotFound,
    UnreadableHead,
)

logger = structlog.get_logger(__name__)

_CONFLICT_CODES = {"DD", "AU", "UD", "UA", "DU", "AA", "UU"}


class WorkingTreeStatus(BaseModel):
    """Differences between HEAD, the index and the working tree, by category."""

    added: List[str] = Field(default_factory=list, description="New files staged in the index")
    changed: List[str] = Field(default_factory=list, description="Staged modifications")
    removed: List[str] = Field(default_factory=list, description="Staged deletions")
    modified: List[str] = Field(default_factory=list, description="Unstaged modifications of tracked files")
    missing: List[str] = Field(default_factory=list, description="Tracked files deleted from the working tree")
    conflicting: List[str] = Field(default_factory=list, description="Unmerged paths")
    untracked: List[str] = Field(default_factory=list, description="Untracked files, including files in untracked folders")

    @property
    def is_clean(self) -> bool:
        """True if no category holds a path.

        Ignored paths are never reported and empty untracked folders are
        invisible to git, so neither makes the tree dirty.
        """
        return not any(getattr(self, name) for name in type(self).model_fields)

    @classmethod
    def from_porcelain(cls, output: str) -> "WorkingTreeStatus":
        """Parse `git status --porcelain -z` output."""
        status = cls()
        entries = iter(output.split("\0"))
        for entry in entries:
            if len(entry) < 4:
                continue
            code, path = entry[:2], entry[3:]
            index, worktree = code[0], code[1]

            if code == "??":
                status.untracked.append(path)
                continue
            if code == "!!":
                continue
            if code in _CONFLICT_CODES:
                status.conflicting.append(path)
                continue

            if index in "RC":
                # rename and copy entries are followed by the source path
                next(entries, None)
            if index == "A" or index in "RC":
                status.added.append(path)
            elif index in "MT":
                status.changed.append(path)
            elif index == "D":
                status.removed.append(path)

            if worktree in "MT":
                status.modified.append(path)
            elif worktree == "D":
                status.missing.append(path)
        return status


class RepositorySession:
    """An opened repository, released with close() or by leaving a with block."""

    def __init__(self, path: Union[str, Path]) -> None:
        """Open the repository containing ``path`` and resolve HEAD.

        Args:
            path: Directory inside the working tree (or the .git directory)

        Raises:
            RepositoryNotFound: If path is not a directory inside a Git repository
            UnreadableHead: If the HEAD reference cannot be parsed
            EmptyRepository: If HEAD does not point at a commit yet
        """
        path = Path(path)
        if not path.is_dir():
            raise RepositoryNotFound(f"Invalid repository directory provided: {path.absolute()}")

        try:
            self.repo = Repo(path.resolve(), search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise RepositoryNotFound(f"No Git repository found at or above: {path.absolute()}") from e

        try:
            self._head_commit, self._branch = self._read_head()
            self._status = WorkingTreeStatus.from_porcelain(
                self.repo.git.status("--porcelain", "-z", "--untracked-files=all")
            )
        except Exception:
            self.repo.close()
            raise

        logger.debug(
            "repository_opened",
            git_dir=self.repo.git_dir,
            head=self._head_commit.hexsha,
            branch=self._branch,
            dirty=not self._status.is_clean,
        )

    @classmethod
    def open(cls, path: Union[str, Path]) -> "RepositorySession":
        return cls(path)

    def __enter__(self) -> "RepositorySession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _read_head(self):
        head = self.repo.head
        try:
            detached = head.is_detached
        except ValueError as e:
            raise UnreadableHead(f"Cannot read current revision from repository: {self.repo.git_dir}") from e

        if not head.is_valid():
            raise EmptyRepository(f"Repository has no commits yet: {self.repo.git_dir}")
        commit = head.commit

        branch = "" if detached else head.reference.name
        if branch == commit.hexsha:
            branch = ""
        return commit, branch

    def head_id(self) -> str:
        """Full 40 character id of the HEAD commit."""
        return self._head_commit.hexsha

    def head_commit(self) -> Commit:
        return self._head_commit

    def current_branch_name(self) -> str:
        """Short branch name, or an empty string when HEAD is detached."""
        return self._branch

    def status(self) -> WorkingTreeStatus:
        return self._status

    def is_dirty(self) -> bool:
        return not self._status.is_clean

    def describe(self) -> str:
        """Nearest annotated tag, distance and abbreviated id; the id alone when untagged."""
        return self.repo.git.describe("--long", "--always")

    def resolve_commit(self, reference: str) -> Commit:
        """Resolve a tag name or a full/abbreviated commit id to a commit.

        Raises:
            AncestorBoundNotFound: If the reference names no commit
        """
        for tag in self.repo.tags:
            if tag.name == reference:
                try:
                    return tag.commit
                except ValueError as e:
                    # tag points at a tree or blob
                    raise AncestorBoundNotFound(reference, "does not name a commit") from e
        try:
            return self.repo.commit(reference)
        except (git.exc.BadName, git.exc.BadObject, ValueError) as e:
            raise AncestorBoundNotFound(reference, "does not name a commit") from e

    def shallow_commits(self) -> FrozenSet[str]:
        """Ids of the commits at which a shallow clone's history was cut."""
        shallow_file = Path(self.repo.common_dir) / "shallow"
        if not shallow_file.exists():
            return frozenset()
        return frozenset(line.strip() for line in shallow_file.read_text().splitlines() if line.strip())

    def close(self) -> None:
        self.repo.close()
