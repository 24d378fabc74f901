"""Reader for published package archives"""

import io
import tarfile
from pathlib import PurePosixPath

from ..constants import ARCHIVE_PREFIX_PATTERN
from ..models.result import PublishedPackage


class ArchiveFormatError(ValueError):
    """Archive is unreadable or laid out unexpectedly"""
    pass


def read_package_archive(data: bytes, name: str, version: str) -> PublishedPackage:
    """
    Decompress a gzip'd package tarball into memory

    Every entry must live below the ``<name>-<version>/`` directory; the
    prefix is stripped from the returned paths.

    Args:
        data: Raw archive bytes
        name: Package name
        version: Package version

    Returns:
        PublishedPackage keyed by package-relative POSIX path

    Raises:
        ArchiveFormatError: If the archive cannot be read or an entry
            escapes the package directory
    """
    prefix = ARCHIVE_PREFIX_PATTERN.format(name=name, version=version)
    package = PublishedPackage(name=name, version=version)

    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as archive:
            for member in archive:
                if member.isdir():
                    continue
                if not member.isfile():
                    raise ArchiveFormatError(f"Unsupported archive entry type: {member.name}")

                relative = _strip_prefix(member.name, prefix)
                handle = archive.extractfile(member)
                if handle is None:
                    raise ArchiveFormatError(f"Cannot read archive entry: {member.name}")
                with handle:
                    package.files[relative] = handle.read()
    except (tarfile.TarError, EOFError, OSError) as e:
        raise ArchiveFormatError(f"Could not open uploaded package archive: {e}") from e

    return package


def _strip_prefix(entry_name: str, prefix: str) -> str:
    path = PurePosixPath(entry_name)
    if path.is_absolute() or '..' in path.parts:
        raise ArchiveFormatError(f"Archive entry escapes the package directory: {entry_name}")
    if not path.parts or path.parts[0] != prefix or len(path.parts) < 2:
        raise ArchiveFormatError(f"Archive entry outside of `{prefix}/`: {entry_name}")
    return PurePosixPath(*path.parts[1:]).as_posix()
