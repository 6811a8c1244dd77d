"""
Configuration Management

Handles loading configuration from environment variables and config files.
"""

import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional
import json

from dotenv import load_dotenv

from pushpull.transfer.protocol import DEFAULT_BUFFER_SIZE


@dataclass
class Config:
    """
    Transfer Configuration.

    Configuration priority (highest to lowest):
    1. Environment variables (PUSHPULL_*)
    2. Config file (config.json)
    3. Default values
    """
    # Network
    host: str = '127.0.0.1'
    port: int = 8470

    # Performance
    buffer_size: int = DEFAULT_BUFFER_SIZE

    # Timeouts (seconds)
    connect_timeout: float = 10.0

    # Logging
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls) -> 'Config':
        """Load configuration from environment variables."""
        load_dotenv()

        config = cls()

        # Network
        config.host = os.getenv('PUSHPULL_HOST', config.host)
        config.port = int(os.getenv('PUSHPULL_PORT', config.port))

        # Performance
        config.buffer_size = int(os.getenv('PUSHPULL_BUFFER_SIZE', config.buffer_size))

        # Timeouts
        config.connect_timeout = float(
            os.getenv('PUSHPULL_CONNECT_TIMEOUT', config.connect_timeout)
        )

        # Logging
        config.log_level = os.getenv('PUSHPULL_LOG_LEVEL', config.log_level)

        return config

    @classmethod
    def from_file(cls, path: Path) -> 'Config':
        """Load configuration from a JSON file."""
        if not path.exists():
            return cls()

        with open(path) as f:
            data = json.load(f)

        config = cls()
        config.host = data.get('host', config.host)
        config.port = data.get('port', config.port)
        config.buffer_size = data.get('buffer_size', config.buffer_size)
        config.connect_timeout = data.get('connect_timeout', config.connect_timeout)
        config.log_level = data.get('log_level', config.log_level)

        return config

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'host': self.host,
            'port': self.port,
            'buffer_size': self.buffer_size,
            'connect_timeout': self.connect_timeout,
            'log_level': self.log_level,
        }

    def save(self, path: Path):
        """Save configuration to a JSON file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from file and environment.

    Environment variables override file settings.
    """
    config = Config()

    if config_path and config_path.exists():
        config = Config.from_file(config_path)

    env_config = Config.from_env()

    # Merge (env takes precedence for non-default values)
    defaults = Config()
    for key in ['host', 'port', 'buffer_size', 'connect_timeout', 'log_level']:
        env_val = getattr(env_config, key)
        if env_val != getattr(defaults, key):
            setattr(config, key, env_val)

    if config.buffer_size <= 0:
        raise ValueError(f"buffer_size must be positive, got {config.buffer_size}")

    return config


# Example config file template
EXAMPLE_CONFIG = """
{
  "host": "127.0.0.1",
  "port": 8470,
  "buffer_size": 65536,
  "connect_timeout": 10.0,
  "log_level": "INFO"
}
"""


if __name__ == "__main__":
    print("Example configuration file (config.json):")
    print(EXAMPLE_CONFIG)
