"""
Pydantic models for SFTP connection configuration.

These models define the structure of YAML configuration files and of
environment-based settings used to open an SFTP session.
"""

import os
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_KNOWN_HOSTS = "~/.ssh/known_hosts"
DEFAULT_CHUNK_SIZE = 32768


class HostKeyPolicy(str, Enum):
    """
    How the server's host key is checked during the SSH handshake.

    ACCEPT is the default: any host key is accepted without lookup, which
    is only appropriate on a closed network. WARN logs unknown or changed
    keys and continues. STRICT refuses to authenticate unless the key is
    present in known_hosts and matches.
    """
    ACCEPT = "accept"
    WARN = "warn"
    STRICT = "strict"


class SFTPConfig(BaseModel):
    """
    SFTP connection configuration.

    Attributes:
        host: SFTP server hostname
        port: SFTP server port (default: 22)
        username: SSH username
        private_key: PEM-encoded private key text (use this OR private_key_path)
        private_key_path: Path to a PEM private key file
        passphrase: Optional passphrase for an encrypted key
        remote_path: Default remote directory for listing and fetching
        host_key_policy: Host key verification policy (default: accept)
        known_hosts_path: known_hosts file used by warn/strict policies
        chunk_size: Read size used by the bounded copy
    """
    host: str
    port: int = Field(default=22, ge=1, le=65535)
    username: str
    private_key: Optional[str] = Field(default=None, repr=False)
    private_key_path: Optional[str] = None
    passphrase: Optional[str] = Field(default=None, repr=False)
    remote_path: str = "/"
    host_key_policy: HostKeyPolicy = HostKeyPolicy.ACCEPT
    known_hosts_path: str = DEFAULT_KNOWN_HOSTS
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0)

    @field_validator("host", "username")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("host_key_policy", mode="before")
    @classmethod
    def normalize_policy(cls, v):
        """Accept policy names in any case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @model_validator(mode="after")
    def check_key_source(self) -> "SFTPConfig":
        """Exactly one of private_key / private_key_path must be set."""
        if bool(self.private_key) == bool(self.private_key_path):
            raise ValueError(
                "Set exactly one of 'private_key' or 'private_key_path'"
            )
        return self

    @property
    def address(self) -> str:
        """host:port string used in log messages."""
        return f"{self.host}:{self.port}"

    def resolved_known_hosts(self) -> str:
        """known_hosts path with ~ expanded."""
        return os.path.expanduser(self.known_hosts_path)
