"""Core functionality for safe-publish"""

from .matcher import (
    PatternMatcher,
    LastMatchMatcher,
    MostSpecificMatcher,
    compile_pattern,
    get_matcher,
)
from .integrity_checker import IntegrityChecker, check_integrity, compute_expected_files
from .build_tool import BuildTool, CargoBuildTool
from .manifest_reader import CargoManifestReader, LoadedPackage, build_manifest
from .build_verifier import BuildVerifier
from .artifact_guard import ArtifactGuard
from .registry_client import RegistryClient
from .archive_reader import read_package_archive, ArchiveFormatError
from .post_publish_verifier import PostPublishVerifier, diff_package, contents_match

__all__ = [
    "PatternMatcher",
    "LastMatchMatcher",
    "MostSpecificMatcher",
    "compile_pattern",
    "get_matcher",
    "IntegrityChecker",
    "check_integrity",
    "compute_expected_files",
    "BuildTool",
    "CargoBuildTool",
    "CargoManifestReader",
    "LoadedPackage",
    "build_manifest",
    "BuildVerifier",
    "ArtifactGuard",
    "RegistryClient",
    "read_package_archive",
    "ArchiveFormatError",
    "PostPublishVerifier",
    "diff_package",
    "contents_match",
]
