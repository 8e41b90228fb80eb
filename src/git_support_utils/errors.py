"""Exceptions raised by git-support-utils."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .shell import ShellResult


class SupportError(Exception):
    """Base class for all errors raised by this package."""


class FailedShellCommand(SupportError):
    """
    A shell command could not run or finished unsuccessfully.

    Raised for a non-zero exit status, for git reporting that the path is
    not a git repository, for a missing executable and for a timeout.

    Attributes:
        result: The `ShellResult` of the failed command, or None when the
                process could not be started or was killed by the timeout.
    """

    def __init__(self, message: str, result: ShellResult | None = None):
        super().__init__(message)
        self.result = result


class UnknownBranch(SupportError):
    """No branch could be determined for a commit."""


class UnableToDetermineOriginatedFrom(SupportError):
    """No merge-base could be found to tell where a branch started."""
