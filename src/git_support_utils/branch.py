"""
Branch detection for commits.

Git does not record which branch a commit was made on. The owning branch is
inferred from the refs containing the commit, preferring the checked out
branch, then refs the commit is the tip of, then well-known branch names.
"""

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

import pathspec

from . import refs
from .config import PRIORITIZED_BRANCHES, get_exclude_patterns, get_prioritized_branches
from .errors import UnknownBranch
from .git import run_git
from .models import RefKind, RefRecord

logger = logging.getLogger(__name__)

# Ref name prefixes removed to get branch names, most specific first
UNWANTED_PREFIXES = (
    "refs/remotes/origin/",
    "refs/remotes/",
    "refs/heads/",
    "refs/",
)

# Refs pointing at the head branch of the repository
HEAD_POINTERS = ("origin/HEAD", "refs/remotes/origin/HEAD")


def sanitize_branch(branch: str | None) -> str:
    """
    Remove ref prefixes from a branch name.

    Pull request head refs are shortened to their display form.

    Args:
        branch: Raw ref or branch name.

    Returns:
        Branch name without any `refs/` prefix.

    Raises:
        UnknownBranch: If there is no branch name, or it cannot be sanitized.

    >>> sanitize_branch("refs/remotes/origin/develop")
    'develop'
    >>> sanitize_branch("refs/pull/42/head")
    'pull/42'

    """
    if not branch:
        raise UnknownBranch("No branch to sanitize")

    for prefix in UNWANTED_PREFIXES:
        if branch.startswith(prefix):
            branch = branch.removeprefix(prefix)
            break

    if branch.startswith("pull/") and branch.endswith("/head"):
        branch = branch.removesuffix("/head")

    if not branch or branch.startswith("refs/"):
        raise UnknownBranch(f"Ambiguous branch name: {branch!r}")

    return branch


def _prioritized(candidates: Sequence[RefRecord], prioritized: Iterable[str]) -> RefRecord:
    """Pick the candidate with the most important name, or the first one."""
    for name in prioritized:
        for candidate in candidates:
            if name in sanitize_branch(candidate.raw_name):
                return candidate
    return candidates[0]


def _latest_pull_request(pull_refs: Sequence[RefRecord]) -> RefRecord | None:
    """Pick the head ref of the pull request with the highest number."""
    heads = [ref for ref in pull_refs if not ref.is_merge_ref]
    if not heads:
        return None
    return max(heads, key=lambda ref: ref.pull_request)


def resolve_branch(
    candidate_refs: Sequence[RefRecord],
    commit_hash: str,
    head_branch: str,
    prioritized: Iterable[str] = PRIORITIZED_BRANCHES,
) -> str:
    """
    Choose the branch that owns a commit.

    Resolution order:
    1. The head branch, if it (or `origin/HEAD`) contains the commit
    2. Refs whose tip is the commit, otherwise all branch refs
    3. Among those, the first match of `prioritized` names, else the first ref
    4. Without any branch ref, the newest pull request head ref

    Args:
        candidate_refs: Refs containing the commit (see `refs.contains`).
        commit_hash: The commit being resolved.
        head_branch: Sanitized branch the repository is checked out to.
        prioritized: Substrings of branch names that win ties, in order.

    Returns:
        Sanitized branch name.

    Raises:
        UnknownBranch: If no ref contains the commit.

    Example:
        resolve_branch([parse_ref_name("refs/heads/main", sha)], sha, "main")
        # Returns "main"
    """
    origin_refs = [ref for ref in candidate_refs if ref.kind is not RefKind.PULL_REQUEST]
    pull_refs = [ref for ref in candidate_refs if ref.kind is RefKind.PULL_REQUEST]

    head_ref = f"refs/heads/{head_branch}"
    if any(ref.raw_name in HEAD_POINTERS or ref.raw_name == head_ref for ref in origin_refs):
        return sanitize_branch(head_branch)

    winner = None
    if origin_refs:
        tips = [
            ref
            for ref in origin_refs
            if ref.points_to_commit and ref.points_to_commit.startswith(commit_hash)
        ]
        winner = _prioritized(tips or origin_refs, prioritized)
    elif pull_refs:
        winner = _latest_pull_request(pull_refs)

    if winner is None:
        raise UnknownBranch(f"No branch contains {commit_hash}")

    logger.debug("Commit %s resolved to %s", commit_hash, winner.raw_name)
    return sanitize_branch(winner.raw_name)


def head_branch(path: str | Path) -> str:
    """
    Get the head branch of a repository.

    In a detached state the first ref of the repository is used instead.

    Args:
        path: Path to the repository.

    Returns:
        Sanitized branch name.

    Example:
        head_branch(Path("/path/to/repo"))  # Returns "main"
    """
    head = refs.head(path).stdout.strip()
    if head == "HEAD":
        return sanitize_branch(refs.latest(path))
    return head


def commit_branch(path: str | Path, commit_hash: str) -> str:
    """
    Detect the branch of a commit.

    Args:
        path: Path to the repository.
        commit_hash: Commit for which we want the branch.

    Returns:
        Sanitized branch name.

    Raises:
        FailedShellCommand: If the path is not a repository or git fails.
        UnknownBranch: If no branch contains the commit.

    Example:
        commit_branch(Path("/path/to/repo"), "7a4c...")  # Returns "feature"
    """
    candidates = refs.contains(path, commit_hash)
    return resolve_branch(
        candidates,
        commit_hash,
        head_branch(path),
        get_prioritized_branches(repo=path),
    )


def filter_branches(branches: Iterable[str], patterns: Sequence[str]) -> list[str]:
    """
    Drop branches matching gitignore-style patterns.

    Args:
        branches: Branch names.
        patterns: Patterns such as "archive/*" or "*/wip-*".

    Returns:
        Branches not matching any pattern, in the original order.

    """
    branches = list(branches)
    if not patterns:
        return branches

    spec = pathspec.PathSpec.from_lines("gitwildmatch", patterns)
    return [branch for branch in branches if not spec.match_file(branch)]


def all_branches(path: str | Path, exclude: Sequence[str] | None = None) -> list[str]:
    """
    List local and remote branches of a repository.

    The current branch marker and detached HEAD entries are removed;
    symbolic entries (`remotes/origin/HEAD -> origin/main`) keep their name.

    Args:
        path: Path to the repository.
        exclude: Gitignore-style patterns of branches to leave out.
                 Defaults to `support.branches.exclude` from git config.

    Returns:
        Branch names as `git branch -a` prints them.

    Example:
        all_branches(Path("/path/to/repo"))  # Returns ["feature", "main"]
    """
    result = run_git("branch", "-a", repo=path)

    branches = []
    for line in result.lines:
        # "*" marks the current branch, "+" a branch checked out in another worktree
        branch = line.strip().removeprefix("* ").removeprefix("+ ")
        if not branch or refs.DETACH_STRING in branch:
            continue
        branches.append(branch.split(" -> ", 1)[0])

    if exclude is None:
        exclude = get_exclude_patterns(repo=path)

    return filter_branches(branches, exclude)
