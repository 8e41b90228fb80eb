"""
Operations that change a repository on disk.

None of these are safe to run concurrently on the same path: they move HEAD
or rewrite the working tree. Callers sharing a repository between threads or
processes must serialize access themselves.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from . import refs
from .git import run_git
from .paths import git_dir_of, resolve_path

logger = logging.getLogger(__name__)


def clone_mirror(remote_path: str | Path, local_path: str | Path) -> bool:
    """
    Clone a mirror of a repository into a working copy.

    All refs of the source (including pull request refs) are copied
    verbatim into `<local_path>/.git`, and the copy is turned into a
    non-bare repository checked out to its head branch. A broken HEAD is
    repaired with `refs.ensure_head`.

    Args:
        remote_path: URL or path of the source repository.
        local_path: Directory to clone into.

    Returns:
        True once the repository is cloned.

    Raises:
        FailedShellCommand: If any of the git steps fail.

    Example:
        clone_mirror("https://github.com/org/app.git", Path("/srv/repos/app"))
    """
    local_path = resolve_path(local_path)
    logger.info("Cloning mirror of %s into %s", remote_path, local_path)

    run_git("clone", "--mirror", str(remote_path), f"{git_dir_of(local_path)}/")
    run_git("remote", "update", "--prune", repo=local_path)
    run_git("config", "--bool", "core.bare", "false", repo=local_path)
    run_git("checkout", "--force", refs.ensure_head(local_path), repo=local_path)

    return True


def checkout(path: str | Path, ref: str) -> None:
    """
    Check out a branch, pull request branch or commit.

    Example:
        checkout(Path("/path/to/repo"), "pull/42")
    """
    run_git("checkout", "--quiet", refs.expand_branch(ref), repo=path)


def current_ref(path: str | Path) -> str:
    """
    Get what HEAD points to: a branch name, or a commit hash when detached.
    """
    head = refs.head(path).stdout.strip()
    if head == "HEAD":
        return run_git("rev-parse", "HEAD", repo=path).stdout.strip()
    return head


@contextmanager
def checked_out(path: str | Path, ref: str) -> Iterator[str]:
    """
    Temporarily check out a ref.

    The previously checked out branch (or commit, for a detached HEAD) is
    restored when the block exits, whether it finished or raised. Not
    reentrant for the same path.

    Args:
        path: Path to the repository (must have a working tree).
        ref: Branch, pull request branch or commit to enter.

    Yields:
        Commit hash of the entered ref.

    Example:
        with checked_out(repo, "pull/42") as commit:
            run_git("merge-base", "HEAD", "main", repo=repo)
    """
    previous = current_ref(path)
    logger.debug("Entering %s in %s (was %s)", ref, path, previous)
    checkout(path, ref)
    try:
        yield refs.tip(path, "HEAD")
    finally:
        logger.debug("Restoring %s in %s", previous, path)
        run_git("checkout", "--quiet", previous, repo=path)


def prune(path: str | Path) -> bool:
    """
    Remove unreachable objects and compress the repository.

    Returns:
        True if everything went fine.

    """
    run_git("gc", "--prune", "-q", repo=path)
    return True


def reset(path: str | Path) -> bool:
    """
    Reset the working tree to HEAD and delete untracked files and directories.

    Warning: local changes are lost.

    Returns:
        True if everything went fine.

    """
    run_git("reset", "--hard", "HEAD", repo=path)
    run_git("clean", "-f", "-d", repo=path)
    return True


def introduced(path: str | Path) -> list[str]:
    """
    List new files that are neither committed nor ignored.

    Example:
        (repo / "notes.txt").touch()
        introduced(repo)  # Returns ["notes.txt"]
    """
    return run_git("ls-files", "-o", "--exclude-standard", repo=path).lines
