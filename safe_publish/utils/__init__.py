"""Utility functions for safe-publish"""

from .file_utils import (
    scan_directory,
    read_local_file,
    decode_text,
)

from .git_utils import (
    is_git_repository,
    get_git_root,
    list_files,
    get_modified_files,
    get_repository_status,
)

from .process_utils import run_command

__all__ = [
    # File utilities
    "scan_directory",
    "read_local_file",
    "decode_text",

    # Git utilities
    "is_git_repository",
    "get_git_root",
    "list_files",
    "get_modified_files",
    "get_repository_status",

    # Process utilities
    "run_command",
]
