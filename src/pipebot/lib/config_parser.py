"""Configuration parser for the chat bot.

Parses and validates config.yaml.
"""

from __future__ import annotations

import logging
import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class StoreConfig(BaseModel):
    """Key-value store configuration."""
    backend: str = "memory"
    path: Optional[Path] = None

    @field_validator('backend')
    @classmethod
    def validate_backend(cls, v: str) -> str:
        """Ensure backend is valid."""
        valid_backends = ['memory', 'json']
        if v not in valid_backends:
            raise ValueError(f"Backend must be one of {valid_backends}, got '{v}'")
        return v

    @model_validator(mode='after')
    def require_path(self) -> 'StoreConfig':
        """The json backend needs a file to write to."""
        if self.backend == 'json' and self.path is None:
            raise ValueError("The json store backend requires 'path'")
        return self


class Config(BaseModel):
    """Top-level configuration."""
    leader: str = "#"
    nickname: str = "pipebot"
    channels: List[str] = Field(default_factory=list)
    channels_file: Optional[Path] = None
    store: StoreConfig = Field(default_factory=StoreConfig)

    @field_validator('leader')
    @classmethod
    def validate_leader(cls, v: str) -> str:
        """Leader must be a non-empty prefix."""
        if not v:
            raise ValueError("leader must not be empty")
        return v

    def get_channels(self) -> List[str]:
        """Conversation targets to join at startup.

        Inline ``channels`` come first, followed by the non-empty lines of
        ``channels_file``, without duplicates. The file is read on each call.

        Raises:
            FileNotFoundError: If ``channels_file`` does not exist
        """
        channels = list(self.channels)
        if self.channels_file is not None:
            with open(self.channels_file) as f:
                for line in f:
                    line = line.strip()
                    if line:
                        channels.append(line)
        return list(dict.fromkeys(channels))


class ConfigParser:
    """Parse and validate bot configuration."""

    def __init__(self, config_path: Union[str, Path]):
        """Initialize parser with config file path.

        Args:
            config_path: Path to config.yaml file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        self.config: Optional[Config] = None
        self._raw_config: Optional[Dict[str, Any]] = None

    def parse(self) -> Config:
        """Parse and validate configuration.

        Relative ``channels_file`` and ``store.path`` are resolved against
        the directory of the config file.

        Returns:
            Validated configuration object

        Raises:
            yaml.YAMLError: If YAML parsing fails
            pydantic.ValidationError: If validation fails
        """
        with open(self.config_path) as f:
            self._raw_config = yaml.safe_load(f) or {}

        config = Config(**self._raw_config)
        base_dir = self.config_path.parent
        if config.channels_file is not None and not config.channels_file.is_absolute():
            config.channels_file = base_dir / config.channels_file
        if config.store.path is not None and not config.store.path.is_absolute():
            config.store.path = base_dir / config.store.path

        self.config = config
        logger.debug(f"Loaded configuration from {self.config_path}")
        return self.config

    def get_config(self) -> Config:
        """Get the parsed configuration.

        Raises:
            ValueError: If ``parse()`` has not been called
        """
        if self.config is None:
            raise ValueError("Configuration not parsed. Call parse() first.")
        return self.config


def load_config(config_path: Union[str, Path]) -> ConfigParser:
    """Load and parse configuration file.

    Args:
        config_path: Path to config.yaml

    Returns:
        Parsed configuration

    Example:
        >>> parser = load_config("config.yaml")
        >>> parser.get_config().leader
        '#'
    """
    parser = ConfigParser(config_path)
    parser.parse()
    return parser
