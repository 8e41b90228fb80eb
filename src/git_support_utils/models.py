"""Records produced while inspecting a repository."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class RefKind(Enum):
    """What a ref points from."""

    HEAD = "head"
    REMOTE = "remote"
    PULL_REQUEST = "pull_request"
    DETACHED = "detached"


class CommitSource(Enum):
    """Where a commit was found."""

    ORIGIN = "origin"
    PULL_REQUEST = "pull_request"


@dataclass(frozen=True)
class RefRecord:
    """
    A single parsed ref.

    `raw_name` is the ref exactly as git printed it (e.g.
    `refs/remotes/origin/main`). Kind-specific details are filled in by the
    parser: `remote` for remote-tracking refs, `pull_request` and
    `is_merge_ref` for pull request refs.

    """

    raw_name: str
    kind: RefKind
    points_to_commit: str | None = None
    remote: str | None = None
    pull_request: int | None = None
    is_merge_ref: bool = False


@dataclass(frozen=True)
class CommitRecord:
    """A commit with the details reporting needs."""

    commit_hash: str
    committed_at: datetime
    branch: str | None = None
    source: CommitSource = CommitSource.ORIGIN
    is_external_pull_request: bool = False
