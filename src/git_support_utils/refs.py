"""
Listing and parsing of git refs.

Terminology:
    ref: A named pointer to a commit, as git prints it, e.g. "refs/heads/main",
         "refs/remotes/origin/main" or "refs/pull/42/head".

    tip: The commit a ref currently points to.

    pull request branch: The display form of a pull request head ref,
         e.g. "pull/42" for "refs/pull/42/head".

"""

import logging
import re
from pathlib import Path

from .errors import FailedShellCommand
from .git import fail_if_invalid, run_git
from .models import RefKind, RefRecord
from .shell import ShellResult

logger = logging.getLogger(__name__)

# '^' cannot appear in ref names, so it is safe as a field delimiter.
DELIMITER = "^"
REF_FORMAT = f"%(objectname){DELIMITER}%(refname)"

# Namespaces that can own a commit
BRANCH_NAMESPACES = ("refs/heads", "refs/remotes", "refs/pull")

# Marker `git branch` prints for a detached HEAD entry
DETACH_STRING = "HEAD detached"

# stderr of `rev-parse --abbrev-ref HEAD` when HEAD points to a missing ref
BROKEN_HEAD_MESSAGE = (
    "fatal: ambiguous argument 'HEAD': "
    "unknown revision or path not in the working tree"
)

_PULL_REF_RE = re.compile(r"^refs/pull/(\d+)/(head|merge)$")
_PULL_BRANCH_RE = re.compile(r"^pull/(\d+)$")


def parse_ref_name(name: str, points_to_commit: str | None = None) -> RefRecord:
    """
    Classify a raw ref name.

    Args:
        name: Ref as printed by git (e.g. "refs/pull/7/merge").
        points_to_commit: Commit the ref points to, if known.

    Returns:
        RefRecord with the kind-specific fields filled in.

    Raises:
        ValueError: If the ref is outside the branch namespaces.

    >>> parse_ref_name("refs/pull/7/merge").pull_request
    7
    >>> parse_ref_name("refs/remotes/upstream/main").remote
    'upstream'

    """
    if name == "HEAD" or DETACH_STRING in name:
        return RefRecord(name, RefKind.DETACHED, points_to_commit)

    if match := _PULL_REF_RE.match(name):
        return RefRecord(
            name,
            RefKind.PULL_REQUEST,
            points_to_commit,
            pull_request=int(match.group(1)),
            is_merge_ref=match.group(2) == "merge",
        )

    if name.startswith("refs/heads/"):
        return RefRecord(name, RefKind.HEAD, points_to_commit)

    if name.startswith("refs/remotes/"):
        remote = name.removeprefix("refs/remotes/").split("/", 1)[0]
        return RefRecord(name, RefKind.REMOTE, points_to_commit, remote=remote)

    raise ValueError(f"Unsupported ref: {name!r}")


def parse_ref_line(line: str) -> RefRecord:
    """
    Parse one line of `for-each-ref --format=REF_FORMAT` output.

    Raises:
        ValueError: If the line is not in `<objectname>^<refname>` form.

    """
    objectname, separator, refname = line.strip().partition(DELIMITER)
    if not separator or not objectname or not refname:
        raise ValueError(f"Malformed ref line: {line!r}")
    return parse_ref_name(refname, objectname)


def contains(path: str | Path, commit_hash: str) -> list[RefRecord]:
    """
    Get the branch, remote and pull request refs containing a commit.

    Args:
        path: Path to the repository.
        commit_hash: Commit to look for.

    Returns:
        Refs in the order git lists them (by ref name).

    Raises:
        FailedShellCommand: If git fails or prints something unparsable.

    """
    result = run_git(
        "for-each-ref",
        f"--format={REF_FORMAT}",
        "--contains",
        commit_hash,
        *BRANCH_NAMESPACES,
        repo=path,
    )

    try:
        return [parse_ref_line(line) for line in result.lines if line.strip()]
    except ValueError as error:
        raise FailedShellCommand(str(error), result) from error


def head(path: str | Path, check: bool = True) -> ShellResult:
    """
    Run `rev-parse --abbrev-ref HEAD`.

    The stdout is the checked out branch, or "HEAD" in a detached state.

    Args:
        path: Path to the repository.
        check: Raise on failure (default: True). Use False to inspect a
               broken HEAD with `has_head`.

    """
    return run_git("rev-parse", "--abbrev-ref", "HEAD", repo=path, check=check)


def has_head(result: ShellResult) -> bool:
    """Check whether a `head` result found a valid HEAD."""
    return not result.stderr or BROKEN_HEAD_MESSAGE not in result.stderr


def latest(path: str | Path) -> str:
    """
    Get the first ref of the repository.

    Returns:
        Raw ref name (e.g. "refs/heads/develop"), or an empty string when the
        repository has no refs.

    Example:
        latest(Path("/path/to/repo"))  # Returns "refs/heads/develop"

    """
    result = run_git("show-ref", repo=path, check=False)
    # show-ref exits with 1 when there are no refs at all
    if result.exit_code != 1:
        fail_if_invalid(result)

    for line in result.lines:
        if fields := line.split():
            return fields[-1]
    return ""


def ensure_head(path: str | Path) -> str:
    """
    Get the checked out branch, repairing HEAD first if it is broken.

    A HEAD pointing to a missing ref (common in mirrors of repositories
    whose default branch was deleted) is pointed at the `latest` ref.

    Returns:
        Branch name HEAD points to.

    """
    result = head(path, check=False)
    if has_head(result):
        return fail_if_invalid(result).stdout.strip()

    ref = latest(path)
    logger.debug("HEAD of %s is broken, pointing it to %s", path, ref)
    run_git("symbolic-ref", "HEAD", ref, repo=path)
    return head(path).stdout.strip()


def tip(path: str | Path, ref: str) -> str:
    """Get the commit hash a ref points to."""
    result = run_git("rev-parse", "--verify", f"{expand_branch(ref)}^{{commit}}", repo=path)
    return result.stdout.strip()


def is_pull_request_branch(branch: str) -> bool:
    """
    Check if a branch name is the display form of a pull request.

    >>> is_pull_request_branch("pull/42")
    True
    >>> is_pull_request_branch("feature/pull/42")
    False

    """
    return bool(_PULL_BRANCH_RE.match(branch))


def expand_branch(branch: str) -> str:
    """
    Expand a pull request branch into the ref git commands understand.

    Other branch names are returned unchanged.

    >>> expand_branch("pull/42")
    'refs/pull/42/head'
    >>> expand_branch("main")
    'main'

    """
    if match := _PULL_BRANCH_RE.match(branch):
        return f"refs/pull/{match.group(1)}/head"
    return branch
