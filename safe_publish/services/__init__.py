"""Business logic services for safe-publish"""

from .config_service import ConfigService
from .publish_service import PublishService, PublishOptions

__all__ = [
    "ConfigService",
    "PublishService",
    "PublishOptions",
]
