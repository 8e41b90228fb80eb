"""Detection of the commit a branch originated from."""

import logging
from pathlib import Path

from . import refs
from .branch import all_branches
from .errors import UnableToDetermineOriginatedFrom
from .git import fail_if_invalid, run_git
from .repository import checked_out

logger = logging.getLogger(__name__)


def merge_base(path: str | Path, first: str, second: str) -> str | None:
    """
    Get the best common ancestor of two refs.

    Returns:
        Commit hash, or None when the refs share no history.

    Raises:
        FailedShellCommand: If a ref does not exist or git fails otherwise.

    """
    result = run_git("merge-base", first, second, repo=path, check=False)
    # Exit status 1 without output means there is no common ancestor
    if result.exit_code == 1 and not result.stdout.strip() and not result.stderr.strip():
        return None
    return fail_if_invalid(result).stdout.strip() or None


def by_recency(path: str | Path, commits: list[str]) -> list[str]:
    """
    Sort commits by committer time, newest first.

    Commits with the same committer time are ordered by hash (descending).
    Duplicates are removed.

    """
    commits = list(dict.fromkeys(commits))
    if not commits:
        return []

    result = run_git("show", "-s", "--format=%ct %H", *commits, repo=path)

    dated = []
    for line in result.lines:
        if not line.strip():
            continue
        timestamp, commit = line.split()
        dated.append((int(timestamp), commit))

    return [commit for _, commit in sorted(set(dated), reverse=True)]


def originated_from(path: str | Path, branch: str, default_branch: str) -> str:
    """
    Figure out the commit a branch originated from.

    For the default branch itself there is no other merge-base than its own
    tip, so the tip is returned. Other parts of a system can treat that
    case differently.

    For a pull request branch (`pull/<N>`) the pull request head is checked
    out and its merge-base with the default branch is the answer.

    For any other branch, merge-bases against every branch of the
    repository are collected and the second most recent one is returned:
    the most recent one is usually the tip of the branch itself.

    Args:
        path: Path to the repository.
        branch: Branch we want to know the origin of.
        default_branch: Default branch of the repository.

    Returns:
        Commit hash the branch originated from.

    Raises:
        FailedShellCommand: If git fails (e.g. not a repository, unknown branch).
        UnableToDetermineOriginatedFrom: If no merge-base could be found.

    Example:
        originated_from(Path("/path/to/repo"), "feature", "main")  # Returns "1b2c..."
    """
    if branch == default_branch:
        return refs.tip(path, branch)

    if refs.is_pull_request_branch(branch):
        with checked_out(path, branch):
            base = merge_base(path, "HEAD", default_branch)
        if base is None:
            raise UnableToDetermineOriginatedFrom(
                f"{branch} shares no history with {default_branch}"
            )
        return base

    bases = [
        base
        for candidate in all_branches(path, exclude=[])
        if (base := merge_base(path, candidate, branch))
    ]

    candidates = by_recency(path, bases)[:2]
    if not candidates:
        raise UnableToDetermineOriginatedFrom(f"No merge-base found for {branch}")

    logger.debug("Merge-bases of %s by recency: %s", branch, candidates)
    return candidates[-1]
