"""Shared pytest fixtures for git-support-utils tests."""

import os
import subprocess
from types import SimpleNamespace

import pytest

from git_support_utils.repository import clone_mirror

# Fixed committer dates keep ordering assertions independent of test speed
DAY_1 = "2024-01-01T10:00:00+00:00"
DAY_2 = "2024-01-02T10:00:00+00:00"
DAY_3 = "2024-01-03T10:00:00+00:00"
DAY_4 = "2024-01-04T10:00:00+00:00"
DAY_5 = "2024-01-05T10:00:00+00:00"


def _git(repo, *args, env=None):
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
        env={**os.environ, "LC_ALL": "C", **(env or {})},
    )
    return result.stdout.strip()


def _commit(repo, message, when, filename=None):
    filename = filename or f"{message.replace(' ', '-')}.txt"
    (repo / filename).write_text(f"{message}\n")
    _git(repo, "add", filename)
    _git(
        repo,
        "commit",
        "-m",
        message,
        env={"GIT_AUTHOR_DATE": when, "GIT_COMMITTER_DATE": when},
    )
    return _git(repo, "rev-parse", "HEAD")


@pytest.fixture
def git():
    """
    Run a git command in a repository.

    Returns:
        Callable: git(repo, *args) returning stripped stdout
    """
    return _git


@pytest.fixture
def make_commit():
    """
    Create a commit with a fixed date.

    Returns:
        Callable: make_commit(repo, message, when, filename=None) returning the hash
    """
    return _commit


@pytest.fixture
def git_repo(tmp_path):
    """
    Create a temporary git repository with a single commit on `main`.

    Returns:
        Path: Path to the temporary git repository
    """
    repo = tmp_path / "test-repo"
    repo.mkdir()

    _git(repo, "init", "-b", "main")
    _git(repo, "config", "user.email", "test@example.com")
    _git(repo, "config", "user.name", "Test User")

    (repo / "README.md").write_text("# Test Repo\n")
    _git(repo, "add", "README.md")
    _git(
        repo,
        "commit",
        "-m",
        "Initial commit",
        env={"GIT_AUTHOR_DATE": DAY_1, "GIT_COMMITTER_DATE": DAY_1},
    )

    return repo


@pytest.fixture
def not_a_repo(tmp_path):
    """Create a directory that is not a git repository."""
    plain = tmp_path / "plain"
    plain.mkdir()
    return plain


@pytest.fixture
def missing_path(tmp_path):
    """Path that does not exist."""
    return tmp_path / "does-not-exist"


@pytest.fixture
def branch_repo(git_repo):
    """
    Repository with `main` and `different-branch` one commit ahead of it.

    Returns:
        SimpleNamespace: path, base (the `main` commit), tip (the branch commit)
    """
    base = _git(git_repo, "rev-parse", "HEAD")
    _git(git_repo, "checkout", "-b", "different-branch")
    tip = _commit(git_repo, "different branch commit", DAY_2)
    _git(git_repo, "checkout", "main")

    return SimpleNamespace(path=git_repo, base=base, tip=tip)


@pytest.fixture
def big_branch_repo(git_repo):
    """
    Repository with a long-lived `big-branch` and `main` moving on after it.

    Returns:
        SimpleNamespace: path, base (where big-branch started), tip, main_tip
    """
    base = _git(git_repo, "rev-parse", "HEAD")
    _git(git_repo, "checkout", "-b", "big-branch")
    tip = None
    for number, when in enumerate([DAY_2, DAY_3, DAY_4]):
        tip = _commit(git_repo, f"big branch commit {number}", when)
    _git(git_repo, "checkout", "main")
    main_tip = _commit(git_repo, "main moves on", DAY_5)

    return SimpleNamespace(path=git_repo, base=base, tip=tip, main_tip=main_tip)


@pytest.fixture
def pull_request_repo(git_repo):
    """
    Repository with pull request refs whose source branches are gone.

    `refs/pull/5/head` has two commits on top of `main`, `refs/pull/9/head`
    one; `refs/pull/9/merge` points at the same commit as the 9 head.

    Returns:
        SimpleNamespace: path, base, pr5 (list of hashes), pr9
    """
    base = _git(git_repo, "rev-parse", "HEAD")

    _git(git_repo, "checkout", "-b", "fork-5")
    pr5 = [
        _commit(git_repo, "fork five first", DAY_3),
        _commit(git_repo, "fork five second", DAY_4),
    ]
    _git(git_repo, "update-ref", "refs/pull/5/head", pr5[-1])

    _git(git_repo, "checkout", "main")
    _git(git_repo, "checkout", "-b", "fork-9")
    pr9 = _commit(git_repo, "fork nine", DAY_5)
    _git(git_repo, "update-ref", "refs/pull/9/head", pr9)
    _git(git_repo, "update-ref", "refs/pull/9/merge", pr9)

    _git(git_repo, "checkout", "main")
    _git(git_repo, "branch", "-D", "fork-5", "fork-9")

    return SimpleNamespace(path=git_repo, base=base, pr5=pr5, pr9=pr9)


@pytest.fixture
def mirror_of(tmp_path):
    """
    Clone a mirror of a repository with `clone_mirror`.

    Returns:
        Callable: mirror_of(source) returning the mirror path
    """
    def clone(source):
        target = tmp_path / f"mirror-{source.name}"
        clone_mirror(source, target)
        return target

    return clone
