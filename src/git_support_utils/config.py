"""Library configuration read from git config."""

from pathlib import Path

from .git import git_config

# When a commit is present in multiple branches, these win as its owner (in order).
PRIORITIZED_BRANCHES = ("master", "main", "develop", "release")


def get_support_config(
    key: str,
    repo: str | Path | None = None,
    default: str | None = None,
) -> str | None:
    """
    Get a git-support-utils configuration value.

    Reads from git config under the `support.*` namespace.

    Args:
        key: Config key without the "support." prefix (e.g., "branches.priority").
        repo: Optional repository path. If None, uses current directory.
        default: Default value if config key is not set.

    Returns:
        Config value if set, otherwise default.

    Example:
        priority = get_support_config("branches.priority", default="master")

    """
    return git_config(f"support.{key}", repo=repo, default=default)


def _parse_csv_config(value: str) -> list[str]:
    """
    Parse a comma-separated config value into a list.

    Splits on commas, strips whitespace, and filters out empty strings.

    """
    return [stripped for item in value.split(",") if (stripped := item.strip())]


def get_prioritized_branches(repo: str | Path | None = None) -> list[str]:
    """
    Get branch names that own a commit shared by several branches.

    Reads from `support.branches.priority` (comma-separated).
    Default: `["master", "main", "develop", "release"]`

    """
    if config := get_support_config("branches.priority", repo=repo):
        return _parse_csv_config(config)
    return list(PRIORITIZED_BRANCHES)


def get_exclude_patterns(repo: str | Path | None = None) -> list[str]:
    """
    Get gitignore-style patterns of branches to leave out of branch listings.

    Reads from `support.branches.exclude` (comma-separated).
    Default: `[]`

    """
    if config := get_support_config("branches.exclude", repo=repo):
        return _parse_csv_config(config)
    return []
