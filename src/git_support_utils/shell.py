"""Execution of external commands."""

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import FailedShellCommand

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShellResult:
    """Captured outcome of a finished command."""

    stdout: str
    stderr: str
    exit_code: int

    @property
    def lines(self) -> list[str]:
        """Stdout split into lines, without the line terminators."""
        return self.stdout.splitlines()

    def __str__(self) -> str:
        return f"{self.stdout}: {self.stderr}: {self.exit_code}"


def to_utf8(data: bytes) -> str:
    """
    Decode command output as UTF-8.

    Git prints commit metadata and ref names exactly as they were stored,
    so the output is not guaranteed to be valid UTF-8. Invalid byte
    sequences are replaced with U+FFFD.

    >>> to_utf8(b"caf\\xc3\\xa9")
    'café'
    >>> to_utf8(b"a\\xffb") == "a\\ufffdb"
    True

    """
    return data.decode("utf-8", errors="replace")


def run(
    command: Sequence[str],
    cwd: str | Path | None = None,
    check: bool = True,
    timeout: float | None = None,
    env: Mapping[str, str] | None = None,
) -> ShellResult:
    """
    Run a command and capture its output.

    Args:
        command: Program and its arguments (no shell is involved).
        cwd: Working directory. If None, uses current directory.
        check: Raise `FailedShellCommand` on non-zero exit (default: True)
        timeout: Seconds after which the command is killed. None waits forever.
        env: Extra environment variables merged over `os.environ`.

    Returns:
        ShellResult with UTF-8 stdout and stderr.

    Raises:
        FailedShellCommand: If the program is missing, the timeout expired,
                            or (with `check`) the exit status is not zero.

    Example:
        run(["ls", "-a"], cwd=Path("/tmp"))
        run(["git", "--version"], check=False)
    """
    command = [str(part) for part in command]
    logger.debug("Running %s (cwd=%s)", command, cwd)

    run_env = None
    if env:
        run_env = {**os.environ, **env}

    try:
        completed = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            timeout=timeout,
            env=run_env,
        )
    except OSError as error:
        # Missing executable or missing working directory
        raise FailedShellCommand(
            f"{error.filename or command[0]}: {error.strerror}"
        ) from error
    except subprocess.TimeoutExpired as error:
        raise FailedShellCommand(
            f"{' '.join(command)}: timed out after {timeout} seconds"
        ) from error

    result = ShellResult(
        stdout=to_utf8(completed.stdout),
        stderr=to_utf8(completed.stderr),
        exit_code=completed.returncode,
    )

    if result.exit_code != 0:
        logger.debug("%s exited with %d: %s", command, result.exit_code, result.stderr.strip())
        if check:
            raise FailedShellCommand(str(result), result)

    return result
