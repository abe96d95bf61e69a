"""
Configuration loaders for SFTP connection settings.

Settings come from a YAML file in the config/ directory, from a plain
dictionary, or from SFTP_* environment variables (a .env file is honoured).
"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from sftp_fetch.config.models import SFTPConfig

logger = logging.getLogger(__name__)

# Default config directory relative to project root
DEFAULT_CONFIG_DIR = "config"

# Environment variable suffix -> SFTPConfig field
ENV_FIELDS = {
    "HOST": "host",
    "PORT": "port",
    "USERNAME": "username",
    "PRIVATE_KEY": "private_key",
    "PRIVATE_KEY_PATH": "private_key_path",
    "KEY_PASSPHRASE": "passphrase",
    "REMOTE_PATH": "remote_path",
    "HOST_KEY_POLICY": "host_key_policy",
    "KNOWN_HOSTS": "known_hosts_path",
    "CHUNK_SIZE": "chunk_size",
}


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""
    pass


def _format_validation_error(e: ValidationError) -> str:
    error_messages = []
    for error in e.errors():
        location = " -> ".join(str(loc) for loc in error["loc"]) or "config"
        error_messages.append(f"  {location}: {error['msg']}")
    return "\n".join(error_messages)


def get_config_path(name: str, config_dir: Optional[str] = None) -> Path:
    """
    Get the path to a named configuration file.

    Args:
        name: Name of the configuration (without .yaml extension)
        config_dir: Optional custom config directory path

    Returns:
        Path to the configuration file

    Raises:
        ConfigError: If config file doesn't exist
    """
    if config_dir is None:
        config_dir = os.getenv("CONFIG_DIR", DEFAULT_CONFIG_DIR)

    config_path = Path(config_dir) / f"{name}.yaml"

    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}. "
            f"Please create {name}.yaml in the config directory."
        )

    return config_path


def load_yaml_file(file_path: Path) -> dict:
    """
    Load and parse a YAML file.

    Raises:
        ConfigError: If file cannot be read or parsed
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML in {file_path}: {e}") from e
    except IOError as e:
        raise ConfigError(f"Failed to read configuration file {file_path}: {e}") from e

    if content is None:
        raise ConfigError(f"Empty configuration file: {file_path}")

    if not isinstance(content, dict):
        raise ConfigError(
            f"Invalid configuration format in {file_path}. "
            "Expected a YAML mapping (dictionary)."
        )

    return content


def load_sftp_config(name: str, config_dir: Optional[str] = None) -> SFTPConfig:
    """
    Load and validate a named SFTP configuration.

    The YAML file may either hold the SFTP settings at the top level or
    nest them under an ``sftp:`` key.

    Example YAML:
        ```yaml
        sftp:
          host: sftp.example.com
          username: reports
          private_key_path: ~/.ssh/reports_rsa
          remote_path: /exports/daily
          host_key_policy: strict
        ```

    Raises:
        ConfigError: If file not found, invalid YAML, or validation fails
    """
    config_path = get_config_path(name, config_dir)
    logger.info(f"Loading configuration from: {config_path}")

    raw_config = load_yaml_file(config_path)
    if isinstance(raw_config.get("sftp"), dict):
        raw_config = raw_config["sftp"]

    try:
        config = SFTPConfig(**raw_config)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid configuration in {config_path}:\n" + _format_validation_error(e)
        ) from e

    logger.info(f"Loaded SFTP configuration for {config.username}@{config.address}")
    return config


def load_config_from_dict(config_dict: dict) -> SFTPConfig:
    """
    Create an SFTPConfig from a dictionary.

    Useful for testing or when configuration is provided programmatically.

    Raises:
        ConfigError: If validation fails
    """
    try:
        return SFTPConfig(**config_dict)
    except ValidationError as e:
        raise ConfigError(
            "Invalid configuration:\n" + _format_validation_error(e)
        ) from e


def load_config_from_env(prefix: str = "SFTP_") -> SFTPConfig:
    """
    Build an SFTPConfig from environment variables.

    Reads ``<prefix>HOST``, ``<prefix>PORT``, ``<prefix>USERNAME``,
    ``<prefix>PRIVATE_KEY`` or ``<prefix>PRIVATE_KEY_PATH``,
    ``<prefix>KEY_PASSPHRASE``, ``<prefix>REMOTE_PATH``,
    ``<prefix>HOST_KEY_POLICY``, ``<prefix>KNOWN_HOSTS`` and
    ``<prefix>CHUNK_SIZE``. Unset variables fall back to model defaults.

    Raises:
        ConfigError: If required variables are missing or invalid
    """
    load_dotenv()

    values = {}
    for suffix, field_name in ENV_FIELDS.items():
        value = os.getenv(f"{prefix}{suffix}")
        if value:
            values[field_name] = value

    # Keys passed through env files usually have escaped newlines
    if "private_key" in values:
        values["private_key"] = values["private_key"].replace("\\n", "\n")

    try:
        return SFTPConfig(**values)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid {prefix}* environment configuration:\n"
            + _format_validation_error(e)
        ) from e
