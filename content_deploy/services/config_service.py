"""Configuration loading service"""

import logging
import os
from pathlib import Path
from typing import Dict, Optional, Any, Union

import yaml

from ..api.exceptions import ConfigError
from ..constants import ENV_SERVER_CONFIG, DEFAULT_CONFIG_FILE
from ..models.config import DeployConfig, strip_quotes

logger = logging.getLogger(__name__)

YAML_SUFFIXES = ('.yaml', '.yml')


def parse_properties(content: str) -> Dict[str, str]:
    """Parse `key=value` properties text

    Blank lines, `#` comments and lines without `=` are skipped. Whitespace
    is removed from keys, values are trimmed and unquoted.
    """
    props = {}

    for line in content.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith('#'):
            continue
        if '=' not in stripped:
            continue

        key, _, value = stripped.partition('=')
        key = ''.join(key.split())
        if not key:
            continue
        props[key] = strip_quotes(value.strip())

    return props


class ConfigService:
    """Service for loading deployment configuration"""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize config service

        Args:
            config_path: Explicit configuration file; falls back to the
                SERVER_CONFIG environment variable, then the default location
        """
        self.config_path = self.locate_config(config_path)
        self._config: Optional[DeployConfig] = None

    @staticmethod
    def locate_config(config_path: Optional[Union[str, Path]] = None) -> Path:
        """Resolve which configuration file to use"""
        if config_path:
            return Path(config_path)
        return Path(os.environ.get(ENV_SERVER_CONFIG) or DEFAULT_CONFIG_FILE)

    @property
    def config(self) -> DeployConfig:
        """Get current configuration (lazy load)"""
        if self._config is None:
            self.load_config()
        return self._config

    def load_config(self) -> DeployConfig:
        """Load configuration from file

        Returns:
            Loaded configuration

        Raises:
            ConfigError: If the file is unreadable or invalid
        """
        if not self.config_path.is_file():
            raise ConfigError(f"Config file not found: {self.config_path}")

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot read config file {self.config_path}: {e}")

        # Simple environment variable expansion
        content = os.path.expandvars(content)

        data = self._parse(content)
        self._config = DeployConfig.from_dict(data, source=str(self.config_path))

        logger.debug(f"Loaded configuration from {self.config_path}")
        return self._config

    def _parse(self, content: str) -> Dict[str, Any]:
        if self.config_path.suffix.lower() not in YAML_SUFFIXES:
            return parse_properties(content)

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {self.config_path} must contain a mapping")
        return data


def load_config(config_path: Optional[Union[str, Path]] = None) -> DeployConfig:
    """Load deployment configuration"""
    return ConfigService(config_path).load_config()
