"""Global constants for safe-publish"""

from enum import Enum
import re

from .__version__ import __version__

APP_NAME = "safe-publish"
LOG_FORMAT = "%(message)s"

# Project configuration
PROJECT_CONFIG_FILE = ".safe-publish.yaml"
MANIFEST_FILE = "Cargo.toml"
TARGET_DIR = "target"

# Build tool
DEFAULT_BUILD_TOOL = "cargo"
DRY_RUN_FLAG = "--dry-run"
NO_VERIFY_FLAG = "--no-verify"
ALLOW_DIRTY_FLAG = "--allow-dirty"

# Archive layout
PACKAGE_DIR = "package"
ARCHIVE_FILE_PATTERN = "{name}-{version}.crate"
ARCHIVE_PREFIX_PATTERN = "{name}-{version}"

# Files the build tool always packages, whatever the include rules say
ALWAYS_INCLUDED_FILES = ("Cargo.toml",)

# Files the build tool generates into the archive; never compared
GENERATED_FILES = (".cargo_vcs_info.json", "Cargo.toml", "Cargo.lock")

# Archive entries that stand in for a local file under another name
REMAP_FILES = {"Cargo.toml.orig": "Cargo.toml"}

# Registry
DEFAULT_REGISTRY_URL = "https://crates.io/api/v1/crates/{name}/{version}/download"
DEFAULT_USER_AGENT = f"{APP_NAME}/{__version__}"
DEFAULT_HTTP_TIMEOUT = 30  # seconds

# Retry defaults for the post-publish download
DEFAULT_RETRY_COUNT = 3
DEFAULT_RETRY_DELAY = 2  # seconds
DEFAULT_BACKOFF_MULTIPLIER = 2.0
DEFAULT_MAX_RETRY_DELAY = 60  # seconds

# Environment variables
ENV_CONFIG_PATH = "SAFE_PUBLISH_CONFIG"
ENV_LOG_LEVEL = "SAFE_PUBLISH_LOG_LEVEL"
ENV_REGISTRY_URL = "SAFE_PUBLISH_REGISTRY_URL"
ENV_BUILD_TOOL = "SAFE_PUBLISH_BUILD_TOOL"

# Validation patterns
VERSION_PATTERN = re.compile(
    r"^(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"$"
)
PACKAGE_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")


class CompareMode(Enum):
    """How local and published file contents are compared"""
    EXACT = "exact"
    WHITESPACE = "whitespace"


class MatcherKind(Enum):
    """Precedence rule between overlapping include/exclude patterns"""
    LAST_MATCH = "last-match"
    MOST_SPECIFIC = "most-specific"


class PipelineStep(Enum):
    """Pipeline steps, named after the component that runs them"""
    INTEGRITY = "integrity"
    BUILD = "build"
    GUARD = "guard"
    UPLOAD = "upload"
    VERIFY = "verify"


# Error codes
class ErrorCode:
    CONFIG_ERROR = "SP001"
    MANIFEST_ERROR = "SP002"
    INTEGRITY_VIOLATION = "SP010"
    BUILD_VERIFICATION_FAILED = "SP020"
    ARTIFACT_GUARD_FAILED = "SP030"
    UPLOAD_FAILED = "SP040"
    POST_PUBLISH_MISMATCH = "SP050"
    REGISTRY_UNAVAILABLE = "SP060"


# Process exit codes per failure class
EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_CODES = {
    ErrorCode.CONFIG_ERROR: 1,
    ErrorCode.MANIFEST_ERROR: 1,
    ErrorCode.INTEGRITY_VIOLATION: 2,
    ErrorCode.BUILD_VERIFICATION_FAILED: 3,
    ErrorCode.ARTIFACT_GUARD_FAILED: 4,
    ErrorCode.UPLOAD_FAILED: 5,
    ErrorCode.POST_PUBLISH_MISMATCH: 6,
    ErrorCode.REGISTRY_UNAVAILABLE: 7,
}

# Display constants
EMOJI_SUCCESS = "✓"
EMOJI_ERROR = "✗"
EMOJI_WARNING = "⚠"
EMOJI_ARROW = "→"

# Messages templates
MSG_PUBLISH_START = "Run safe-publish for the crate `{name} {version} ({root})`"
MSG_PUBLISH_SUCCESS = f"{EMOJI_SUCCESS} Successfully published and verified `{{name}}` ({{version}})"
MSG_DRY_RUN_SUCCESS = f"{EMOJI_SUCCESS} Dry run passed for `{{name}}` ({{version}}), nothing was uploaded"
MSG_YANK_HINT = (
    "Found a difference between the uploaded and the local version. "
    "Double check if that is desired, otherwise please yank "
    "version {version} of `{name}`"
)
MSG_LOCAL_READ_FAILED = (
    "Could not read the local files to compare with the upload: {error}. "
    "Check version {version} of `{name}` by hand and yank it if it differs"
)
