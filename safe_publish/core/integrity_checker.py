"""Repository integrity checker"""

import logging
from pathlib import Path
from typing import FrozenSet, List, Optional

from ..api.exceptions import ConfigError, IntegrityViolation
from ..constants import MANIFEST_FILE, TARGET_DIR
from ..models.manifest import PackageManifest
from ..models.repository import RepositoryStatus
from ..models.result import IntegrityReport, Violation, ViolationKind
from .matcher import PatternMatcher, LastMatchMatcher, compile_pattern


def package_boundaries(paths: FrozenSet[str]) -> FrozenSet[str]:
    """
    Directories the build tool never descends into

    These are the root ``target`` directory and every subdirectory holding
    its own manifest, which is a separate package.

    Args:
        paths: Every known path below the package root

    Returns:
        Set of directory prefixes ending with ``/``
    """
    boundaries = {TARGET_DIR + '/'}
    for path in paths:
        directory, _, name = path.rpartition('/')
        if directory and name == MANIFEST_FILE:
            boundaries.add(directory + '/')
    return frozenset(boundaries)


def _outside(path: str, boundaries: FrozenSet[str]) -> bool:
    return not any(path.startswith(prefix) for prefix in boundaries)


def _declared_include_found(declared: str, expected: FrozenSet[str]) -> bool:
    # A literal include may name a directory; any selected file below it counts
    pattern = compile_pattern(declared)
    return any(pattern.matches(path) for path in expected)


def compute_expected_files(manifest: PackageManifest,
                           status: RepositoryStatus,
                           matcher: Optional[PatternMatcher] = None) -> FrozenSet[str]:
    """
    Apply manifest inclusion rules to the repository status

    Files inside nested packages and the root ``target`` directory are
    never candidates. Inclusion rules are applied in declaration order,
    exclusion rules afterwards. Without an include list every path not
    ignored by version control starts out selected.

    Args:
        manifest: Package manifest
        status: Repository status snapshot
        matcher: Precedence rule between overlapping patterns

    Returns:
        Set of package-relative paths
    """
    matcher = matcher or LastMatchMatcher()
    rules = manifest.inclusion_rules + manifest.exclusion_rules
    selected = set()
    boundaries = package_boundaries(status.all_paths)
    candidates = {p for p in status.all_paths if _outside(p, boundaries)}

    for path in candidates:
        default = manifest.include_all_by_default and path not in status.ignored
        if matcher.is_selected(path, rules, default):
            selected.add(path)

    for path in manifest.always_included:
        if path in candidates:
            selected.add(path)

    return frozenset(selected)


def check_integrity(manifest: PackageManifest,
                    status: RepositoryStatus,
                    matcher: Optional[PatternMatcher] = None) -> IntegrityReport:
    """
    Cross-check the expected package files against version control

    Args:
        manifest: Package manifest
        status: Repository status captured from the manifest's root
        matcher: Precedence rule between overlapping patterns

    Returns:
        IntegrityReport with violations sorted by path and kind

    Raises:
        ConfigError: If manifest and status describe different directories
    """
    if Path(manifest.root).resolve() != Path(status.root).resolve():
        raise ConfigError(
            f"Repository status was captured from {status.root}, "
            f"but the manifest belongs to {manifest.root}"
        )

    expected = compute_expected_files(manifest, status, matcher)
    violations: List[Violation] = []

    for path in expected:
        classification = status.classify(path)
        if classification in ("untracked", "ignored"):
            violations.append(Violation(path, ViolationKind.UNEXPECTED_FILE, classification))
        elif classification == "modified":
            violations.append(Violation(path, ViolationKind.UNCOMMITTED_CHANGE, "modified"))

    for path in manifest.declared_includes:
        if not _declared_include_found(path, expected):
            violations.append(
                Violation(path, ViolationKind.MISSING_EXPECTED_FILE, status.classify(path))
            )

    violations.sort(key=lambda v: (v.path, v.kind.value))
    return IntegrityReport(expected_files=expected, violations=tuple(violations))


class IntegrityChecker:
    """Runs the integrity check and turns violations into a hard failure"""

    def __init__(self, matcher: Optional[PatternMatcher] = None):
        self.matcher = matcher or LastMatchMatcher()
        self.logger = logging.getLogger(self.__class__.__name__)

    def check(self, manifest: PackageManifest, status: RepositoryStatus) -> IntegrityReport:
        """
        Check the repository, raising on any violation

        Raises:
            IntegrityViolation: If any violation was found
        """
        report = check_integrity(manifest, status, self.matcher)
        self.logger.info(
            f"{len(report.expected_files)} file(s) expected in package, "
            f"{len(report.violations)} violation(s)"
        )
        if not report.is_clean:
            raise IntegrityViolation(report)
        return report

    def expected_only(self, manifest: PackageManifest, status: RepositoryStatus) -> IntegrityReport:
        """Compute the expected files without enforcing the check"""
        report = check_integrity(manifest, status, self.matcher)
        return IntegrityReport(
            expected_files=report.expected_files,
            violations=report.violations,
            checked=False
        )
