"""API layer for safe-publish"""

from .publisher import Publisher, publish
from .exceptions import (
    SafePublishError,
    ConfigError,
    ManifestError,
    IntegrityViolation,
    CommandFailedError,
    BuildVerificationFailed,
    ArtifactGuardFailed,
    UploadFailed,
    PostPublishMismatch,
    RegistryUnavailable,
    RegistryNotFound,
)

__all__ = [
    # Main classes
    "Publisher",

    # Convenience functions
    "publish",

    # Exceptions
    "SafePublishError",
    "ConfigError",
    "ManifestError",
    "IntegrityViolation",
    "CommandFailedError",
    "BuildVerificationFailed",
    "ArtifactGuardFailed",
    "UploadFailed",
    "PostPublishMismatch",
    "RegistryUnavailable",
    "RegistryNotFound",
]
