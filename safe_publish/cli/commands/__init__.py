"""CLI commands"""

from . import publish

__all__ = [
    "publish",
]
