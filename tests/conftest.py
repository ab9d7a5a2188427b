"""Shared fixtures: throwaway Git repositories with a known history."""

import tempfile
from pathlib import Path
from types import SimpleNamespace

import git
import pytest
import structlog

# 2024-01-01T00:00:00Z
BASE_TIME = 1704067200
HOUR = 3600


def configure_identity(repo: git.Repo) -> None:
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()


def commit_file(repo, message, timestamp, filename="history.txt", parents=None, head=True):
    """Append a line to a file and commit it with fixed author and commit dates."""
    path = Path(repo.working_tree_dir) / filename
    with open(path, "a") as f:
        f.write(f"{message}\n")
    repo.index.add([filename])
    date = f"{timestamp} +0000"
    return repo.index.commit(
        message,
        parent_commits=parents,
        head=head,
        author_date=date,
        commit_date=date,
    )


@pytest.fixture(autouse=True)
def reset_structlog():
    """The CLI configures structlog globally; undo it after each test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def simple_repo():
    """Repository with a single commit and a .gitignore."""
    with tempfile.TemporaryDirectory() as tmpdir:
        repo_path = Path(tmpdir)
        repo = git.Repo.init(repo_path)
        configure_identity(repo)

        (repo_path / "README.md").write_text("# Test Project\n")
        (repo_path / ".gitignore").write_text("*.log\nbuild/\n")
        repo.index.add(["README.md", ".gitignore"])
        repo.index.commit("Initial commit")

        yield repo
        repo.close()


@pytest.fixture
def history_repo():
    """Repository with a merged feature branch and tags.

    History (newest first, committed dates one hour apart)::

        c4                      HEAD, branch tip
        m    merge of c3 and f1
        c3   tag v1.0 (annotated)
        f1   feature branch commit, parent c2
        c2
        c1   tag v0.1 (lightweight), root

    plus ``side``, a commit on c1 that is tagged ``side-tag`` but never
    merged, so it is not an ancestor of HEAD.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        repo_path = Path(tmpdir)
        repo = git.Repo.init(repo_path)
        configure_identity(repo)

        c1 = commit_file(repo, "c1", BASE_TIME)
        c2 = commit_file(repo, "c2", BASE_TIME + HOUR)
        f1 = commit_file(repo, "f1", BASE_TIME + 2 * HOUR, filename="feature.txt", parents=[c2], head=False)
        c3 = commit_file(repo, "c3", BASE_TIME + 3 * HOUR)
        m = commit_file(repo, "merge feature", BASE_TIME + 4 * HOUR, parents=[c3, f1])
        c4 = commit_file(repo, "c4", BASE_TIME + 5 * HOUR)
        side = repo.commit(repo.git.commit_tree(c1.tree.hexsha, "-p", c1.hexsha, "-m", "side"))

        repo.create_tag("v0.1", ref=c1)
        repo.create_tag("v1.0", ref=c3, message="Release 1.0")
        repo.create_tag("side-tag", ref=side)

        yield SimpleNamespace(
            path=repo_path,
            repo=repo,
            c1=c1,
            c2=c2,
            f1=f1,
            c3=c3,
            m=m,
            c4=c4,
            side=side,
        )
        repo.close()
