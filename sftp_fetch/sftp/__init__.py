"""
SFTP module for listing and downloading files from remote servers.

This module provides:
- SFTPClient: Context-managed client adapter for SFTP operations
- RemoteFilesystem: Abstract remote filesystem the client runs against
- open_session: Key-authenticated paramiko session opener
- The SFTPError exception hierarchy
"""

from sftp_fetch.sftp.backend import (
    ParamikoFilesystem,
    RemoteFile,
    RemoteFilesystem,
)
from sftp_fetch.sftp.client import (
    DownloadResult,
    SFTPClient,
)
from sftp_fetch.sftp.errors import (
    ConnectError,
    CopyIncompleteError,
    CreateLocalError,
    DownloadError,
    HostKeyVerificationError,
    KeyParseError,
    ListError,
    NotConnectedError,
    OpenRemoteError,
    ProtocolNegotiationError,
    SFTPError,
    StatError,
)
from sftp_fetch.sftp.session import open_session, parse_private_key

__all__ = [
    "SFTPClient",
    "DownloadResult",
    "RemoteFile",
    "RemoteFilesystem",
    "ParamikoFilesystem",
    "open_session",
    "parse_private_key",
    # Errors
    "SFTPError",
    "KeyParseError",
    "ConnectError",
    "HostKeyVerificationError",
    "ProtocolNegotiationError",
    "NotConnectedError",
    "ListError",
    "DownloadError",
    "OpenRemoteError",
    "CreateLocalError",
    "StatError",
    "CopyIncompleteError",
]
