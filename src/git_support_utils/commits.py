"""
Commit listings built from git log and ref output.

All orderings use the committer date: it changes whenever history is
rewritten (rebase, cherry-pick), unlike the author date.
"""

import logging
from collections.abc import Sequence
from datetime import date, datetime
from pathlib import Path

from . import refs
from .branch import filter_branches, head_branch, resolve_branch, sanitize_branch
from .config import get_exclude_patterns, get_prioritized_branches
from .errors import FailedShellCommand
from .git import run_git
from .models import CommitRecord, CommitSource, RefKind
from .shell import ShellResult

logger = logging.getLogger(__name__)

LOG_FORMAT = f"%cI{refs.DELIMITER}%H"
BRANCH_TIP_FORMAT = f"%(committerdate:iso-strict){refs.DELIMITER}{refs.REF_FORMAT}"

# Revision arguments covering every branch, remote branch and pull request
ALL_BRANCHES = ("--branches", "--remotes", "--glob=refs/pull/*")


def parse_timestamp(value: str) -> datetime:
    """
    Parse a strict ISO 8601 timestamp printed by git.

    >>> parse_timestamp("2024-03-01T10:00:00+01:00").isoformat()
    '2024-03-01T10:00:00+01:00'
    >>> parse_timestamp("2024-03-01T10:00:00Z").utcoffset()
    datetime.timedelta(0)

    """
    value = value.strip()
    if value.endswith("Z"):
        value = f"{value[:-1]}+00:00"
    return datetime.fromisoformat(value)


def format_since(since: str | date | datetime) -> str:
    """
    Format a `since` boundary the way git's date parser accepts it.

    A bare date means the start of that day in local time; git would
    otherwise fill in the current time of day.

    >>> format_since(date(2024, 1, 2))
    '2024-01-02 00:00:00'

    """
    if isinstance(since, datetime):
        if since.tzinfo is None:
            return since.strftime("%Y-%m-%d %H:%M:%S")
        return since.strftime("%Y-%m-%d %H:%M:%S %z")
    if isinstance(since, date):
        return f"{since.isoformat()} 00:00:00"
    return since


def _log(
    path: str | Path,
    branch: str | None,
    since: str | date | datetime | None,
    limit: int | None,
    *options: str,
) -> ShellResult:
    args = ["log", f"--format={LOG_FORMAT}", *options]

    if since is not None:
        args.append(f"--since={format_since(since)}")

    if limit:
        args.append(f"-n{limit}")

    if branch:
        args.append(refs.expand_branch(branch))
    else:
        args.extend(ALL_BRANCHES)

    return run_git(*args, "--", repo=path)


def _parse_log(result: ShellResult) -> list[tuple[datetime, str]]:
    """Parse `LOG_FORMAT` lines into (committed_at, commit_hash) pairs."""
    entries = []
    for line in result.lines:
        if not line.strip():
            continue
        committed_at, separator, commit_hash = line.partition(refs.DELIMITER)
        try:
            if not separator or not commit_hash:
                raise ValueError("missing commit hash")
            entries.append((parse_timestamp(committed_at), commit_hash.strip()))
        except ValueError as error:
            raise FailedShellCommand(f"Malformed log line {line!r}: {error}", result) from error
    return entries


def _newest_first(entries: list[tuple[datetime, str]]) -> list[tuple[datetime, str]]:
    """Deduplicate by commit hash and sort by committer date, newest first."""
    unique = {}
    for committed_at, commit_hash in entries:
        unique.setdefault(commit_hash, committed_at)
    return sorted(
        ((committed_at, commit_hash) for commit_hash, committed_at in unique.items()),
        key=lambda entry: entry[0],
        reverse=True,
    )


def _record(commit_hash: str, committed_at: datetime, branch: str | None) -> CommitRecord:
    external = branch is not None and refs.is_pull_request_branch(branch)
    return CommitRecord(
        commit_hash=commit_hash,
        committed_at=committed_at,
        branch=branch,
        source=CommitSource.PULL_REQUEST if external else CommitSource.ORIGIN,
        is_external_pull_request=external,
    )


def all_commits(
    path: str | Path,
    branch: str | None = None,
    since: str | date | datetime | None = None,
    limit: int | None = None,
    with_branches: bool = True,
) -> list[CommitRecord]:
    """
    Get all commits with their date and branch.

    Merge commits are left out.

    Args:
        path: Path to the repository.
        branch: Only commits reachable from this branch. Defaults to all
                branches, remote branches and pull requests.
        since: The earliest commit date (e.g. "2 weeks ago", a date or datetime).
        limit: Maximum number of commits.
        with_branches: Resolve the branch of each commit (default: True).
                       Branch resolution runs one git command per commit;
                       with False, `branch` of every record is None.

    Returns:
        Commits ordered by committer date, newest first.

    Raises:
        FailedShellCommand: If git fails.
        UnknownBranch: If a commit has no branch.

    Example:
        for commit in all_commits(Path("/path/to/repo"), since="1 month ago"):
            print(commit.commit_hash, commit.branch)
    """
    entries = _newest_first(_parse_log(_log(path, branch, since, limit, "--no-merges")))
    if not entries:
        return []

    if not with_branches:
        return [_record(commit_hash, committed_at, None) for committed_at, commit_hash in entries]

    # The checked out branch owns commits shared with other branches
    head = head_branch(path)
    prioritized = get_prioritized_branches(repo=path)

    return [
        _record(
            commit_hash,
            committed_at,
            resolve_branch(refs.contains(path, commit_hash), commit_hash, head, prioritized),
        )
        for committed_at, commit_hash in entries
    ]


def latest_by_day(
    path: str | Path,
    branch: str | None = None,
    since: str | date | datetime | None = None,
    limit: int | None = None,
) -> list[CommitRecord]:
    """
    Get the newest commit of each day.

    Days are calendar days in the committer's own timezone. Records carry
    no branch.

    Args:
        path: Path to the repository.
        branch: Only commits reachable from this branch. Defaults to all branches.
        since: The earliest commit date.
        limit: Maximum number of days.

    Returns:
        One commit per day, newest first.

    """
    newest_per_day = {}
    for committed_at, commit_hash in _newest_first(_parse_log(_log(path, branch, since, None))):
        newest_per_day.setdefault(committed_at.date(), (committed_at, commit_hash))

    days = sorted(newest_per_day.values(), key=lambda entry: entry[0], reverse=True)
    if limit:
        days = days[:limit]

    return [_record(commit_hash, committed_at, None) for committed_at, commit_hash in days]


def _branch_tips(path: str | Path, *patterns: str, sort: str | None = None):
    """Yield (committed_at, ref) for refs matching patterns, in git's order."""
    args = ["for-each-ref", f"--format={BRANCH_TIP_FORMAT}"]
    if sort:
        args.append(f"--sort={sort}")

    result = run_git(*args, *patterns, repo=path)
    for line in result.lines:
        if not line.strip():
            continue
        committed_at, separator, ref_line = line.partition(refs.DELIMITER)
        try:
            if not separator:
                raise ValueError("missing ref")
            yield parse_timestamp(committed_at), refs.parse_ref_line(ref_line)
        except ValueError as error:
            raise FailedShellCommand(f"Malformed ref line {line!r}: {error}", result) from error


def latest_by_branch(
    path: str | Path,
    exclude: Sequence[str] | None = None,
) -> list[CommitRecord]:
    """
    Get the newest commit of each branch in its current state.

    Local and remote-tracking branches are listed; `HEAD` pointers and pull
    requests are not. When several tips share the same committer date,
    only the first one git lists is kept.

    Args:
        path: Path to the repository.
        exclude: Gitignore-style patterns of branches to leave out.
                 Defaults to `support.branches.exclude` from git config.

    Returns:
        One commit per branch tip, in ref name order.

    """
    if exclude is None:
        exclude = get_exclude_patterns(repo=path)

    seen = set()
    records = []
    for committed_at, ref in _branch_tips(path, "refs/heads", "refs/remotes"):
        if ref.raw_name.endswith("/HEAD"):
            continue

        branch = sanitize_branch(ref.raw_name)
        if not filter_branches([branch], exclude) or committed_at in seen:
            continue

        seen.add(committed_at)
        records.append(_record(ref.points_to_commit, committed_at, branch))

    return records


def pull_requests(path: str | Path, limit: int | None = None) -> list[CommitRecord]:
    """
    Get the head commits of the newest pull requests.

    Only pull request head refs (`refs/pull/<N>/head`) are used, merge refs
    are ignored. A commit heading several pull requests is listed once.

    Args:
        path: Path to the repository (usually a mirror).
        limit: Maximum number of commits.

    Returns:
        Commits newest first, with `pull/<N>` branches.

    """
    seen = set()
    records = []
    for committed_at, ref in _branch_tips(path, "refs/pull", sort="-committerdate"):
        if ref.kind is not RefKind.PULL_REQUEST or ref.is_merge_ref:
            continue
        if ref.points_to_commit in seen:
            continue

        seen.add(ref.points_to_commit)
        records.append(_record(ref.points_to_commit, committed_at, sanitize_branch(ref.raw_name)))

        if limit and len(records) >= limit:
            break

    return records


def diff(path: str | Path, ref_a: str, ref_b: str) -> list[str]:
    """
    Get commits reachable from `ref_b` but not from `ref_a`.

    Args:
        path: Path to the repository.
        ref_a: Starting point (excluded).
        ref_b: End point (included).

    Returns:
        Commit hashes newest first; empty when `ref_b` has nothing new.

    Example:
        diff(Path("/path/to/repo"), "main", "feature")
    """
    result = run_git(
        "log",
        "--format=%H",
        f"{refs.expand_branch(ref_a)}..{refs.expand_branch(ref_b)}",
        "--",
        repo=path,
    )
    return [line.strip() for line in result.lines if line.strip()]
