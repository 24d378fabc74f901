"""Package manifest reader for Cargo packages"""

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..api.exceptions import ManifestError
from ..constants import (
    MANIFEST_FILE,
    ALWAYS_INCLUDED_FILES,
    VERSION_PATTERN,
)
from ..models.manifest import PackageManifest, IncludeRule
from .build_tool import CargoBuildTool
from .matcher import validate_patterns

GLOB_CHARS = set('*?[')


@dataclass(frozen=True)
class LoadedPackage:
    """A manifest plus the build directory the build tool writes into"""
    manifest: PackageManifest
    target_directory: Path


def is_literal_path(pattern: str) -> bool:
    """Whether a pattern names exactly one file or directory"""
    return (
        not pattern.startswith(('!', '#'))
        and not pattern.endswith('/')
        and not (GLOB_CHARS & set(pattern))
    )


def build_manifest(name: str,
                   version: str,
                   root: Path,
                   include: Optional[Sequence[str]] = None,
                   exclude: Optional[Sequence[str]] = None,
                   warnings: Optional[List[str]] = None) -> PackageManifest:
    """
    Build an immutable manifest from declared include/exclude lists

    Cargo ignores ``exclude`` when ``include`` is set; the exclusion list is
    dropped in that case and a warning is recorded.

    Args:
        name: Package name
        version: Package version
        root: Package directory
        include: ``package.include`` patterns
        exclude: ``package.exclude`` patterns
        warnings: Optional list collecting warnings

    Returns:
        PackageManifest

    Raises:
        ManifestError: On an invalid version or pattern
    """
    if not VERSION_PATTERN.match(version):
        raise ManifestError(f"Invalid package version: {version!r}")

    if include is not None and exclude is not None:
        message = (
            "both `package.include` and `package.exclude` are set. "
            "Cargo will ignore `package.exclude` in this case"
        )
        if warnings is not None:
            warnings.append(message)
        exclude = None

    errors = validate_patterns(list(include or []) + list(exclude or []))
    if errors:
        raise ManifestError("; ".join(errors))

    rules = [IncludeRule(p, include=True) for p in include or []]
    rules += [IncludeRule(p, include=False) for p in exclude or []]

    return PackageManifest(
        name=name,
        version=version,
        root=Path(root),
        include_rules=tuple(rules),
        declared_includes=tuple(p.lstrip('/') for p in include or [] if is_literal_path(p)),
        declared_excludes=tuple(p.lstrip('/') for p in exclude or [] if is_literal_path(p)),
        include_all_by_default=include is None,
        always_included=ALWAYS_INCLUDED_FILES,
    )


class CargoManifestReader:
    """Reads package metadata through cargo and the manifest file"""

    def __init__(self, build_tool: Optional[CargoBuildTool] = None):
        self.build_tool = build_tool or CargoBuildTool()
        self.logger = logging.getLogger(self.__class__.__name__)
        self.warnings: List[str] = []

    def load(self,
             cwd: Path,
             manifest_path: Optional[Path] = None,
             package: Optional[str] = None) -> LoadedPackage:
        """
        Load the package to publish

        Args:
            cwd: Current working directory
            manifest_path: Optional explicit Cargo.toml path
            package: Optional package name for workspaces

        Returns:
            LoadedPackage

        Raises:
            ManifestError: If the package cannot be identified or read
        """
        self.warnings = []
        metadata = self.build_tool.metadata(cwd, manifest_path)
        selected = self.select_package(metadata, cwd, manifest_path, package)

        root = Path(selected['manifest_path']).parent.resolve()
        document = self._read_toml(root / MANIFEST_FILE)
        include, exclude = self._include_exclude(document, metadata)

        manifest = build_manifest(
            name=selected['name'],
            version=selected['version'],
            root=root,
            include=include,
            exclude=exclude,
            warnings=self.warnings,
        )
        for warning in self.warnings:
            self.logger.warning(warning)

        return LoadedPackage(
            manifest=manifest,
            target_directory=Path(metadata['target_directory'])
        )

    @staticmethod
    def select_package(metadata: Dict[str, Any],
                       cwd: Path,
                       manifest_path: Optional[Path] = None,
                       package: Optional[str] = None) -> Dict[str, Any]:
        """Pick the package by name, by uniqueness, or by directory"""
        packages = metadata.get('packages') or []

        if package:
            for candidate in packages:
                if candidate['name'] == package:
                    return candidate
            raise ManifestError(f"No package with name `{package}` found")

        if len(packages) == 1:
            return packages[0]

        check_path = Path(manifest_path).parent if manifest_path else Path(cwd)
        check_path = check_path.resolve()
        for candidate in packages:
            if Path(candidate['manifest_path']).parent.resolve() == check_path:
                return candidate

        raise ManifestError("Could not identify package to publish, use --package")

    def _read_toml(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, 'rb') as f:
                return tomllib.load(f)
        except FileNotFoundError as e:
            raise ManifestError(f"Manifest not found: {path}") from e
        except tomllib.TOMLDecodeError as e:
            raise ManifestError(f"Failed to parse `{path}`: {e}") from e

    def _include_exclude(self,
                         document: Dict[str, Any],
                         metadata: Dict[str, Any]) -> Tuple[Optional[List[str]], Optional[List[str]]]:
        package_table = document.get('package') or {}
        workspace_package = None
        values = []

        for key in ('include', 'exclude'):
            value = package_table.get(key)
            if isinstance(value, dict) and value.get('workspace'):
                if workspace_package is None:
                    workspace_root = Path(metadata['workspace_root'])
                    workspace_doc = self._read_toml(workspace_root / MANIFEST_FILE)
                    workspace_package = (workspace_doc.get('workspace') or {}).get('package') or {}
                value = workspace_package.get(key)
            if value is not None and not isinstance(value, list):
                raise ManifestError(f"`package.{key}` must be a list of patterns")
            values.append(value)

        return values[0], values[1]
