"""File operation utilities"""

import os
from pathlib import Path
from typing import List, Sequence


def scan_directory(root: Path, exclude_dirs: Sequence[str] = ()) -> List[str]:
    """
    Recursively list files below a directory

    Args:
        root: Directory to scan
        exclude_dirs: Directory names skipped at any depth

    Returns:
        Sorted POSIX paths relative to ``root``
    """
    root = Path(root)
    files = []

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if d not in exclude_dirs]
        for filename in filenames:
            full_path = Path(dirpath) / filename
            files.append(full_path.relative_to(root).as_posix())

    return sorted(files)


def read_local_file(root: Path, relative_path: str) -> bytes:
    """
    Read a package file by its relative path

    Args:
        root: Package root
        relative_path: POSIX path relative to root

    Returns:
        File content
    """
    return (Path(root) / Path(*relative_path.split('/'))).read_bytes()


def decode_text(content: bytes):
    """Decode UTF-8 content, None for binary data"""
    try:
        return content.decode('utf-8')
    except UnicodeDecodeError:
        return None
