"""Shared utilities for inspecting git repositories.

This package wraps the git command line to answer questions git does not
track itself: which branch owns a commit, where a branch originated from,
and what the commit history of a repository looks like.
"""

# Re-export all public functions from submodules
from .branch import (
    all_branches,
    commit_branch,
    head_branch,
    resolve_branch,
    sanitize_branch,
)
from .commits import (
    all_commits,
    diff,
    latest_by_branch,
    latest_by_day,
    pull_requests,
)
from .errors import (
    FailedShellCommand,
    SupportError,
    UnableToDetermineOriginatedFrom,
    UnknownBranch,
)
from .git import run_git
from .history import (
    blame_file,
    blame_line,
    file_last_committer,
    head_committed_at,
    shortlog,
    shortstat,
)
from .models import (
    CommitRecord,
    CommitSource,
    RefKind,
    RefRecord,
)
from .origin import originated_from
from .repository import (
    checked_out,
    checkout,
    clone_mirror,
    current_ref,
    introduced,
    prune,
    reset,
)
from .shell import ShellResult, run

__all__ = (
    "CommitRecord",
    "CommitSource",
    "FailedShellCommand",
    "RefKind",
    "RefRecord",
    "ShellResult",
    "SupportError",
    "UnableToDetermineOriginatedFrom",
    "UnknownBranch",
    "all_branches",
    "all_commits",
    "blame_file",
    "blame_line",
    "checked_out",
    "checkout",
    "clone_mirror",
    "commit_branch",
    "current_ref",
    "diff",
    "file_last_committer",
    "head_branch",
    "head_committed_at",
    "introduced",
    "latest_by_branch",
    "latest_by_day",
    "originated_from",
    "prune",
    "pull_requests",
    "reset",
    "resolve_branch",
    "run",
    "run_git",
    "sanitize_branch",
    "shortlog",
    "shortstat",
)
