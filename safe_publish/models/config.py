"""Configuration data models"""

from dataclasses import dataclass, field
from typing import Dict, Any

from ..constants import (
    CompareMode,
    MatcherKind,
    DEFAULT_BUILD_TOOL,
    DEFAULT_REGISTRY_URL,
    DEFAULT_USER_AGENT,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_RETRY_COUNT,
    DEFAULT_RETRY_DELAY,
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_MAX_RETRY_DELAY,
)


@dataclass
class RetryConfig:
    """Retry configuration for registry downloads"""

    retry_count: int = DEFAULT_RETRY_COUNT
    retry_delay: float = DEFAULT_RETRY_DELAY
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER
    max_retry_delay: float = DEFAULT_MAX_RETRY_DELAY

    def __post_init__(self):
        if self.retry_count < 0:
            raise ValueError("retry_count must not be negative")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must not be negative")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be at least 1")

    @property
    def max_attempts(self) -> int:
        """First attempt plus retries"""
        return self.retry_count + 1

    def get_retry_delay(self, attempt: int) -> float:
        """Calculate retry delay for given attempt with exponential backoff"""
        delay = self.retry_delay * (self.backoff_multiplier ** (attempt - 1))
        return min(delay, self.max_retry_delay)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "retry_count": self.retry_count,
            "retry_delay": self.retry_delay,
            "backoff_multiplier": self.backoff_multiplier,
            "max_retry_delay": self.max_retry_delay
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RetryConfig':
        """Create from dictionary"""
        return cls(**data)


@dataclass
class RegistryConfig:
    """Registry download configuration"""

    url: str = DEFAULT_REGISTRY_URL  # Template with {name} and {version}
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = DEFAULT_HTTP_TIMEOUT

    def __post_init__(self):
        if "{name}" not in self.url or "{version}" not in self.url:
            raise ValueError("Registry url must contain {name} and {version} placeholders")

    def download_url(self, name: str, version: str) -> str:
        return self.url.format(name=name, version=version)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "url": self.url,
            "user_agent": self.user_agent,
            "timeout": self.timeout
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RegistryConfig':
        """Create from dictionary"""
        return cls(**data)


@dataclass
class VerificationConfig:
    """Integrity and post-publish comparison settings"""

    compare_mode: CompareMode = CompareMode.EXACT
    matcher: MatcherKind = MatcherKind.LAST_MATCH

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "compare_mode": self.compare_mode.value,
            "matcher": self.matcher.value
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VerificationConfig':
        """Create from dictionary"""
        return cls(
            compare_mode=CompareMode(data.get("compare_mode", CompareMode.EXACT.value)),
            matcher=MatcherKind(data.get("matcher", MatcherKind.LAST_MATCH.value))
        )


@dataclass
class BuildConfig:
    """External build tool settings"""

    command: str = DEFAULT_BUILD_TOOL

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {"command": self.command}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BuildConfig':
        """Create from dictionary"""
        return cls(**data)


@dataclass
class Config:
    """Complete safe-publish configuration"""

    registry: RegistryConfig = field(default_factory=RegistryConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    verification: VerificationConfig = field(default_factory=VerificationConfig)
    build: BuildConfig = field(default_factory=BuildConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "registry": self.registry.to_dict(),
            "retry": self.retry.to_dict(),
            "verification": self.verification.to_dict(),
            "build": self.build.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary"""
        data = data or {}
        return cls(
            registry=RegistryConfig.from_dict(data.get("registry") or {}),
            retry=RetryConfig.from_dict(data.get("retry") or {}),
            verification=VerificationConfig.from_dict(data.get("verification") or {}),
            build=BuildConfig.from_dict(data.get("build") or {})
        )
