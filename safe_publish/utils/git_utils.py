"""Git operation utilities"""

import subprocess
from pathlib import Path
from typing import List, Optional, Set

from ..models.repository import RepositoryStatus
from .file_utils import scan_directory


def is_git_repository(path: Path) -> bool:
    """
    Check if directory is a Git repository

    Args:
        path: Directory path

    Returns:
        True if it's a Git repository
    """
    try:
        result = subprocess.run(
            ['git', 'rev-parse', '--is-inside-work-tree'],
            cwd=path,
            capture_output=True,
            text=True
        )
        return result.returncode == 0
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False


def get_git_root(path: Path) -> Optional[Path]:
    """
    Get the top-level directory of the repository containing a path

    Args:
        path: Directory path

    Returns:
        Repository root or None when not inside a repository
    """
    try:
        result = subprocess.run(
            ['git', 'rev-parse', '--show-toplevel'],
            cwd=path,
            capture_output=True,
            text=True,
            check=True
        )
        return Path(result.stdout.strip()).resolve()
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None


def list_files(path: Path, *args: str) -> List[str]:
    """
    Run ``git ls-files -z`` with extra arguments

    Paths are relative to ``path`` and limited to its subtree.

    Args:
        path: Directory to list from
        *args: Extra ls-files arguments

    Returns:
        List of POSIX relative paths
    """
    result = subprocess.run(
        ['git', 'ls-files', '-z', *args],
        cwd=path,
        capture_output=True,
        text=True,
        check=True
    )
    return _split_nul(result.stdout)


def get_modified_files(path: Path) -> Set[str]:
    """
    Get tracked files with staged or unstaged changes

    Args:
        path: Directory path

    Returns:
        Set of paths relative to ``path``
    """
    files = set(list_files(path, '--modified'))

    result = subprocess.run(
        ['git', 'diff', '--cached', '--name-only', '--relative', '-z'],
        cwd=path,
        capture_output=True,
        text=True
    )
    # No commits yet: nothing can be staged relative to HEAD
    if result.returncode == 0:
        files.update(_split_nul(result.stdout))

    return files


def expand_submodules(changed: Set[str], tracked: Set[str]) -> Set[str]:
    """
    Map changed paths onto tracked files

    Git reports a changed submodule as its gitlink path, while the tracked
    list holds the files checked out inside it. Every tracked file below
    such a gitlink counts as changed.

    Args:
        changed: Paths reported as changed
        tracked: Tracked files, submodules expanded

    Returns:
        Subset of ``tracked``
    """
    files = changed & tracked
    for gitlink in changed - tracked:
        prefix = gitlink.rstrip('/') + '/'
        files.update(p for p in tracked if p.startswith(prefix))
    return files


def get_repository_status(path: Path) -> RepositoryStatus:
    """
    Capture tracked, untracked and ignored files below a directory

    Outside of a Git repository every file is reported as untracked and
    the status carries no VCS root.

    Args:
        path: Package root directory

    Returns:
        RepositoryStatus snapshot relative to ``path``
    """
    path = Path(path).resolve()
    git_root = get_git_root(path)

    if git_root is None:
        return RepositoryStatus.create(
            root=path,
            untracked=scan_directory(path, exclude_dirs=('.git', 'target'))
        )

    try:
        tracked = set(list_files(path, '--recurse-submodules'))
        untracked = set(list_files(path, '--others', '--exclude-standard'))
        ignored = set(list_files(path, '--others', '--ignored', '--exclude-standard'))
        modified = expand_submodules(get_modified_files(path), tracked)
    except subprocess.CalledProcessError as e:
        raise RuntimeError(f"Failed to query git status in {path}: {e.stderr}") from e

    return RepositoryStatus.create(
        root=path,
        tracked=tracked,
        untracked=untracked - tracked,
        ignored=ignored - tracked - untracked,
        modified=modified,
        vcs_root=git_root
    )


def _split_nul(output: str) -> List[str]:
    return [p for p in output.split('\0') if p]
