"""Core git invocation."""

import logging
from pathlib import Path

from .errors import FailedShellCommand
from .paths import resolve_path
from .shell import ShellResult, run

logger = logging.getLogger(__name__)

# Matched case-insensitively against stderr; git has no structured error channel.
NOT_A_REPOSITORY = "not a git repository"

# Keep git messages in English so stderr matching stays reliable.
GIT_ENV = {"LC_ALL": "C"}


def fail_if_invalid(result: ShellResult) -> ShellResult:
    """
    Raise if a git command result describes a failure.

    Args:
        result: Result of a finished git command.

    Returns:
        The same result, for chaining.

    Raises:
        FailedShellCommand: On a non-zero exit status, or when stderr reports
                            that the path is not a git repository.
    """
    if result.exit_code != 0:
        raise FailedShellCommand(result.stderr.strip() or str(result), result)
    if NOT_A_REPOSITORY in result.stderr.lower():
        raise FailedShellCommand(result.stderr.strip(), result)
    return result


def run_git(
    *args: str,
    repo: str | Path | None = None,
    check: bool = True,
    timeout: float | None = None,
) -> ShellResult:
    """
    Run a git command and return the result.

    Args:
        *args: Git command arguments (e.g., "for-each-ref", "--contains", sha)
        repo: Optional repository path. If None, runs in current directory.
        check: Whether to raise FailedShellCommand on failure (default: True)
        timeout: Seconds after which git is killed. None waits forever.

    Returns:
        ShellResult of the command

    Raises:
        FailedShellCommand: If git could not run, or `check` is set and the
                            command failed.

    Example:
        # Run in current directory
        run_git("status", "--short")

        # Run in specific repo, inspecting the exit code yourself
        run_git("merge-base", "a", "b", repo=Path("/path/to/repo"), check=False)
    """
    cmd = ["git", "-C", str(resolve_path(repo)), *args]

    result = run(cmd, check=False, timeout=timeout, env=GIT_ENV)

    if check:
        fail_if_invalid(result)

    return result


def git_config(
    key: str,
    repo: str | Path | None = None,
    default: str | None = None,
) -> str | None:
    """
    Get a git config value.

    Args:
        key: Config key to retrieve (e.g., "user.name", "support.branches.priority")
        repo: Optional repository path. If None, uses current directory.
        default: Default value if config key is not set.

    Returns:
        Config value if set, otherwise default.

    Example:
        priority = git_config("support.branches.priority", default="master")
        email = git_config("user.email")
    """
    result = run_git("config", key, repo=repo, check=False)
    if result.exit_code == 0 and result.stdout.strip():
        return result.stdout.strip()
    return default
