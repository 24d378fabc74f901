"""Post-publish content verification"""

import difflib
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

from ..api.exceptions import PostPublishMismatch
from ..constants import (
    CompareMode,
    GENERATED_FILES,
    REMAP_FILES,
    MSG_YANK_HINT,
    MSG_LOCAL_READ_FAILED,
)
from ..models.manifest import PackageManifest
from ..models.result import DiffKind, DiffReport, PublishedPackage
from ..utils.file_utils import read_local_file, decode_text
from .archive_reader import ArchiveFormatError, read_package_archive
from .registry_client import RegistryClient


def _normalize_whitespace(text: str) -> list:
    lines = (' '.join(line.split()) for line in text.splitlines())
    return [line for line in lines if line]


def contents_match(local: bytes, remote: bytes, mode: CompareMode = CompareMode.EXACT) -> bool:
    """
    Compare two file contents

    In whitespace mode, runs of whitespace collapse to one space and blank
    lines and line endings are ignored. Binary content is always compared
    byte for byte.
    """
    if local == remote:
        return True
    if mode != CompareMode.WHITESPACE:
        return False

    local_text, remote_text = decode_text(local), decode_text(remote)
    if local_text is None or remote_text is None:
        return False
    return _normalize_whitespace(local_text) == _normalize_whitespace(remote_text)


def render_diff(path: str, local: bytes, remote: bytes) -> Optional[str]:
    """Unified diff between local and uploaded text, None for binary files"""
    local_text, remote_text = decode_text(local), decode_text(remote)
    if local_text is None or remote_text is None:
        return None

    lines = difflib.unified_diff(
        local_text.splitlines(keepends=True),
        remote_text.splitlines(keepends=True),
        fromfile=f"Local version/{path}",
        tofile=f"Uploaded version/{path}"
    )
    return ''.join(lines)


def comparable_remote_files(published: PublishedPackage) -> Dict[str, bytes]:
    """
    Map archive entries onto the local files they stand for

    Generated files are dropped; files the build tool rewrites are compared
    through the untouched copy it keeps (``Cargo.toml.orig``).
    """
    remote = {}
    for path, content in published.files.items():
        if path in REMAP_FILES:
            remote[REMAP_FILES[path]] = content
        elif path not in GENERATED_FILES:
            remote[path] = content
    return remote


def diff_package(published: PublishedPackage,
                 expected_files: Iterable[str],
                 root: Path,
                 mode: CompareMode = CompareMode.EXACT) -> DiffReport:
    """
    Diff a downloaded package against the local package files

    Args:
        published: Downloaded package contents
        expected_files: Package-relative paths that should be published
        root: Local package root
        mode: Content comparison mode

    Returns:
        DiffReport ordered by path
    """
    remote = comparable_remote_files(published)
    remapped = set(REMAP_FILES.values())
    expected = {
        p for p in expected_files
        if p not in GENERATED_FILES or p in remapped
    }
    report = DiffReport()

    for path in sorted(expected | set(remote)):
        if path not in expected:
            report.add(path, DiffKind.UNEXPECTED_REMOTE_FILE)
            continue
        if path not in remote:
            report.add(path, DiffKind.MISSING_REMOTELY)
            continue

        try:
            local_content = read_local_file(root, path)
        except FileNotFoundError:
            report.add(path, DiffKind.MISSING_LOCALLY)
            continue

        if not contents_match(local_content, remote[path], mode):
            report.add(path, DiffKind.CONTENT_MISMATCH, render_diff(path, local_content, remote[path]))

    return report


class PostPublishVerifier:
    """Confirms the registry serves what was verified locally"""

    def __init__(self,
                 registry_client: RegistryClient,
                 compare_mode: CompareMode = CompareMode.EXACT):
        self.registry_client = registry_client
        self.compare_mode = compare_mode
        self.logger = logging.getLogger(self.__class__.__name__)

    def verify(self, manifest: PackageManifest, expected_files: Iterable[str]) -> DiffReport:
        """
        Download the published version and diff it against local files

        Publication already happened, so a mismatch cannot be rolled back;
        it is raised for the caller to report.

        Args:
            manifest: Package manifest
            expected_files: Files that should have been published

        Returns:
            Empty DiffReport

        Raises:
            RegistryUnavailable: If the download keeps failing
            PostPublishMismatch: If the archive is unreadable, a local file
                cannot be read or the contents differ
        """
        data = self.registry_client.download(manifest.name, manifest.version)
        self.logger.info(f"Downloaded {len(data)} bytes for {manifest.package_id}")

        try:
            published = read_package_archive(data, manifest.name, manifest.version)
        except ArchiveFormatError as e:
            raise PostPublishMismatch(str(e)) from e

        try:
            report = diff_package(published, expected_files, manifest.root, self.compare_mode)
        except OSError as e:
            raise PostPublishMismatch(MSG_LOCAL_READ_FAILED.format(
                error=e, name=manifest.name, version=manifest.version
            )) from e
        if not report.is_empty:
            raise PostPublishMismatch(
                MSG_YANK_HINT.format(name=manifest.name, version=manifest.version),
                report
            )
        return report
