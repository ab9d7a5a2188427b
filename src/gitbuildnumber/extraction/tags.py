"""Index of tag names by the commit they point at."""

import hashlib
from typing import Dict, Iterable, Mapping, Tuple

import structlog
from git import Repo

logger = structlog.get_logger(__name__)


class TagIndex:
    """Maps commit ids to the sorted names of the tags pointing at them.

    Annotated tags are peeled, so keys are always commit ids and never
    tag object ids.
    """

    def __init__(self, tags: Mapping[str, Iterable[str]]) -> None:
        self._tags: Dict[str, Tuple[str, ...]] = {
            sha: tuple(sorted(set(names))) for sha, names in tags.items()
        }

    @classmethod
    def build(cls, repo: Repo) -> "TagIndex":
        """Build the index from all tag references of a repository.

        Args:
            repo: GitPython repository

        Returns:
            TagIndex covering every tag that peels to a commit
        """
        tags: Dict[str, set] = {}
        for tag in repo.tags:
            try:
                sha = tag.commit.hexsha
            except ValueError:
                # tag points at a tree or blob
                logger.debug("tag_not_on_commit", tag=tag.name)
                continue
            tags.setdefault(sha, set()).add(tag.name)

        logger.debug("tag_index_built", tags=sum(len(names) for names in tags.values()), commits=len(tags))
        return cls(tags)

    def tags_for(self, sha: str) -> Tuple[str, ...]:
        return self._tags.get(sha, ())

    def render(self, sha: str) -> str:
        """Tag names of a commit joined with ';', or an empty string."""
        return ";".join(self.tags_for(sha))

    def __contains__(self, sha: object) -> bool:
        return sha in self._tags

    def __len__(self) -> int:
        return len(self._tags)

    def fingerprint(self) -> str:
        """Hash over every (tag name, commit id) pair; changes when any tag is added, moved or removed."""
        pairs = sorted((name, sha) for sha, names in self._tags.items() for name in names)
        return hashlib.sha256("\n".join(f"{name} {sha}" for name, sha in pairs).encode()).hexdigest()
