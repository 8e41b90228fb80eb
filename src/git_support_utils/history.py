"""Log statistics and blame output."""

from datetime import date, datetime
from pathlib import Path

from .commits import format_since, parse_timestamp
from .git import run_git


def shortlog(path: str | Path) -> list[str]:
    """
    Get the committers of a project with their number of commits.

    Example:
        shortlog(Path("/path/to/repo"))
        # Returns ["    13\tJane Doe <jane@example.com>"]
    """
    # Without a revision shortlog reads a log from stdin
    return run_git("shortlog", "-sn", "-e", "--all", repo=path).lines


def file_last_committer(path: str | Path, location: str) -> list[str]:
    """
    Get the last commit that changed a file, with a porcelain word diff.

    Used to blame the person that created or last changed a file.

    Args:
        path: Path to the repository.
        location: File path relative to the repository root.

    Returns:
        Lines of `git log -n 1` output.

    """
    return run_git(
        "log", "-n", "1", "--word-diff=porcelain", "--date=raw", "--", location,
        repo=path,
    ).lines


def shortstat(
    path: str | Path,
    limit: int | None = None,
    since: str | date | datetime | None = None,
) -> list[str]:
    """
    Get `git log --shortstat` output in oneline format.

    Example:
        shortstat(Path("/path/to/repo"), limit=2)
        # Returns [
        #     "ab7928cc003e2306c9d7ec729fb1d87e808337c0 Fix parser",
        #     " 4 files changed, 13 insertions(+), 36 deletions(-)",
        #     ...
        # ]
    """
    args = ["log", "--shortstat", "--format=oneline"]
    if since is not None:
        args.append(f"--since={format_since(since)}")
    if limit:
        args.append(f"-n{limit}")

    return run_git(*args, repo=path).lines


def head_committed_at(path: str | Path) -> datetime:
    """Get the committer date of the HEAD commit."""
    return parse_timestamp(run_git("log", "-1", "--format=%cI", repo=path).stdout)


def blame_file(path: str | Path, location: str) -> list[str]:
    """
    Get porcelain blame details of a whole file.

    Example:
        blame_file(Path("/path/to/repo"), "README.md")
        # Returns ["68c066bd... 1 1 2", "author Jane Doe", ...]
    """
    return run_git("blame", "-t", "--porcelain", "--", location, repo=path).lines


def blame_line(path: str | Path, location: str, line: int) -> list[str]:
    """Get incremental porcelain blame details of a single line of a file."""
    return run_git(
        "blame", "-t", "-L", f"{line},{line}", "--incremental", "--porcelain", "--", location,
        repo=path,
    ).lines
