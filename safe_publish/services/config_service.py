"""Configuration loading service"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from ..api.exceptions import ConfigError
from ..models.config import Config
from ..constants import (
    PROJECT_CONFIG_FILE,
    ENV_CONFIG_PATH,
    ENV_REGISTRY_URL,
    ENV_BUILD_TOOL,
)


class ConfigService:
    """Service for loading safe-publish configuration"""

    def __init__(self, project_root: Path, config_path: Optional[Path] = None):
        """Initialize config service

        Args:
            project_root: Package directory searched for the config file
            config_path: Explicit config file, must exist when given
        """
        self.project_root = Path(project_root)
        env_path = os.environ.get(ENV_CONFIG_PATH)

        if config_path:
            self.config_path = Path(config_path)
            self.explicit = True
        elif env_path:
            self.config_path = Path(env_path)
            self.explicit = True
        else:
            self.config_path = self.project_root / PROJECT_CONFIG_FILE
            self.explicit = False

        self._config: Optional[Config] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def config(self) -> Config:
        """Get current configuration (lazy load)"""
        if self._config is None:
            self.load_config()
        return self._config

    def load_config(self) -> Config:
        """Load configuration from file, falling back to defaults

        Returns:
            Loaded configuration

        Raises:
            ConfigError: If the file is invalid, or missing while explicit
        """
        data = {}

        if self.config_path.exists():
            with open(self.config_path, 'r') as f:
                content = f.read()

            # Simple environment variable expansion
            content = os.path.expandvars(content)

            try:
                data = yaml.safe_load(content) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

            if not isinstance(data, dict):
                raise ConfigError(f"Configuration root must be a mapping: {self.config_path}")

            self.logger.debug(f"Loaded configuration from {self.config_path}")

        elif self.explicit:
            raise ConfigError(f"Configuration file not found: {self.config_path}")

        self._apply_env_overrides(data)

        try:
            self._config = Config.from_dict(data)
        except (ValueError, TypeError, KeyError) as e:
            raise ConfigError(f"Invalid configuration in {self.config_path}: {e}") from e

        return self._config

    @staticmethod
    def _apply_env_overrides(data: dict) -> None:
        registry_url = os.environ.get(ENV_REGISTRY_URL)
        if registry_url:
            data.setdefault('registry', {})
            data['registry'] = dict(data['registry'] or {}, url=registry_url)

        build_tool = os.environ.get(ENV_BUILD_TOOL)
        if build_tool:
            data.setdefault('build', {})
            data['build'] = dict(data['build'] or {}, command=build_tool)
