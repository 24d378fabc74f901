"""Safe Publish - Publish crates that are exactly what version control holds.

This tool wraps ``cargo publish`` with a repository integrity check before
the upload and a comparison of the published crate against the local
files after it.
"""

from .__version__ import __version__, __version_info__, __author__, __email__, __license__

# Core API
from .api.publisher import Publisher, publish

# Data models
from .models.manifest import PackageManifest, IncludeRule
from .models.repository import RepositoryStatus
from .models.result import (
    IntegrityReport,
    DiffReport,
    PipelineResult,
    PipelineState,
)
from .models.config import Config

# Exceptions
from .api.exceptions import (
    SafePublishError,
    ConfigError,
    ManifestError,
    IntegrityViolation,
    BuildVerificationFailed,
    ArtifactGuardFailed,
    UploadFailed,
    PostPublishMismatch,
    RegistryUnavailable,
)

# Pure checks
from .core.integrity_checker import check_integrity, compute_expected_files
from .core.post_publish_verifier import diff_package

__all__ = [
    # Version information
    "__version__",
    "__version_info__",
    "__author__",
    "__email__",
    "__license__",

    # Main classes
    "Publisher",

    # Core API functions
    "publish",
    "check_integrity",
    "compute_expected_files",
    "diff_package",

    # Data models
    "PackageManifest",
    "IncludeRule",
    "RepositoryStatus",
    "IntegrityReport",
    "DiffReport",
    "PipelineResult",
    "PipelineState",
    "Config",

    # Exceptions
    "SafePublishError",
    "ConfigError",
    "ManifestError",
    "IntegrityViolation",
    "BuildVerificationFailed",
    "ArtifactGuardFailed",
    "UploadFailed",
    "PostPublishMismatch",
    "RegistryUnavailable",
]
