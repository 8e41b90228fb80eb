"""Path resolution utilities."""

from pathlib import Path


def resolve_path(path: str | Path | None = None) -> Path:
    """
    Resolve a path to an absolute Path object.

    The path does not need to exist; git reports missing directories itself.

    Args:
        path: Path to resolve. If None or empty string, returns current directory.

    Returns:
        Absolute Path object

    Example:
        resolve_path("~/projects")  # Returns /home/user/projects
        resolve_path(None)           # Returns current directory
    """
    if not path:
        return Path.cwd()

    return Path(path).expanduser().resolve()


def git_dir_of(local_path: str | Path) -> Path:
    """
    Location of the `.git` directory inside a working copy.

    Mirrors cloned with `clone_mirror` keep their refs and objects here.

    Example:
        git_dir_of("/srv/repos/app")  # Returns /srv/repos/app/.git
    """
    return resolve_path(local_path) / ".git"
