"""Exception definitions for safe-publish API"""

from ..constants import ErrorCode


class SafePublishError(Exception):
    """Base exception for safe-publish"""

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.error_code = error_code


class ConfigError(SafePublishError):
    """Configuration error"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFIG_ERROR)


class ManifestError(SafePublishError):
    """Package manifest or metadata could not be read"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.MANIFEST_ERROR)


class IntegrityViolation(SafePublishError):
    """Files selected for packaging disagree with version control"""

    def __init__(self, report):
        count = len(report.violations)
        message = (
            f"{count} file(s) in the working directory would be packaged "
            "but are not committed into version control"
        )
        super().__init__(message, ErrorCode.INTEGRITY_VIOLATION)
        self.report = report


class CommandFailedError(SafePublishError):
    """Base for failures of an external build tool invocation"""

    def __init__(self, message: str, error_code: str, command_result=None):
        super().__init__(message, error_code)
        self.command_result = command_result

    @property
    def output(self) -> str:
        """Captured stdout and stderr of the failed command"""
        if self.command_result is None:
            return ""
        return self.command_result.output


class BuildVerificationFailed(CommandFailedError):
    """Dry-run verification build failed"""

    def __init__(self, message: str, command_result=None):
        super().__init__(message, ErrorCode.BUILD_VERIFICATION_FAILED, command_result)


class ArtifactGuardFailed(SafePublishError):
    """The verified archive could not be proven deleted before upload"""

    def __init__(self, message: str, artifact_path=None):
        super().__init__(message, ErrorCode.ARTIFACT_GUARD_FAILED)
        self.artifact_path = artifact_path


class UploadFailed(CommandFailedError):
    """Upload command failed"""

    def __init__(self, message: str, command_result=None):
        super().__init__(message, ErrorCode.UPLOAD_FAILED, command_result)


class PostPublishMismatch(SafePublishError):
    """Published package differs from the local sources"""

    def __init__(self, message: str, diff_report=None):
        super().__init__(message, ErrorCode.POST_PUBLISH_MISMATCH)
        self.diff_report = diff_report


class RegistryUnavailable(SafePublishError):
    """Registry download kept failing after all retries"""

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message, ErrorCode.REGISTRY_UNAVAILABLE)
        self.attempts = attempts


class RegistryNotFound(SafePublishError):
    """Registry answered that the requested version does not exist"""

    def __init__(self, name: str, version: str):
        super().__init__(
            f"Package not found in registry: {name} {version}",
            ErrorCode.REGISTRY_UNAVAILABLE,
        )
        self.name = name
        self.version = version
