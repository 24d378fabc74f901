"""Data models for safe-publish"""

from .manifest import PackageManifest, IncludeRule
from .repository import RepositoryStatus
from .artifact import BuildArtifact, ArtifactState
from .result import (
    Violation,
    ViolationKind,
    IntegrityReport,
    DiffEntry,
    DiffKind,
    DiffReport,
    CommandResult,
    PublishedPackage,
    PipelineState,
    PipelineResult,
)
from .config import Config, RegistryConfig, RetryConfig, VerificationConfig, BuildConfig

__all__ = [
    # Manifest models
    "PackageManifest",
    "IncludeRule",

    # Repository models
    "RepositoryStatus",
    "BuildArtifact",
    "ArtifactState",

    # Result models
    "Violation",
    "ViolationKind",
    "IntegrityReport",
    "DiffEntry",
    "DiffKind",
    "DiffReport",
    "CommandResult",
    "PublishedPackage",
    "PipelineState",
    "PipelineResult",

    # Config models
    "Config",
    "RegistryConfig",
    "RetryConfig",
    "VerificationConfig",
    "BuildConfig",
]
