"""
Configuration module for SFTP connections.

This module provides the Pydantic settings model and loaders that build
it from YAML files, dictionaries or environment variables.
"""

from sftp_fetch.config.models import (
    HostKeyPolicy,
    SFTPConfig,
)
from sftp_fetch.config.loader import (
    ConfigError,
    load_config_from_dict,
    load_config_from_env,
    load_sftp_config,
)

__all__ = [
    # Models
    "HostKeyPolicy",
    "SFTPConfig",
    # Loader
    "ConfigError",
    "load_config_from_dict",
    "load_config_from_env",
    "load_sftp_config",
]
