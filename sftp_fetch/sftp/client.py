"""
SFTP client adapter for listing and downloading remote files.

This module provides a context-managed SFTP client that:
- Connects with SSH private key authentication
- Lists remote directories
- Downloads single files with byte-count verification
"""

import logging
import os
import posixpath
from dataclasses import dataclass
from typing import Callable, List, Optional

import paramiko

from sftp_fetch.config.models import SFTPConfig
from sftp_fetch.sftp.backend import RemoteFile, RemoteFilesystem
from sftp_fetch.sftp.errors import (
    CopyIncompleteError,
    CreateLocalError,
    ListError,
    NotConnectedError,
    OpenRemoteError,
    StatError,
)
from sftp_fetch.sftp.session import NETWORK_ERRORS, open_session

logger = logging.getLogger(__name__)

Connector = Callable[[SFTPConfig, logging.Logger], RemoteFilesystem]


@dataclass
class DownloadResult:
    """
    Result of downloading one file.

    Attributes:
        remote_path: Path that was read on the server
        local_path: Path of the written local file
        size: Remote size at stat time
        bytes_copied: Bytes written locally (equal to size on success)
    """
    remote_path: str
    local_path: str
    size: int
    bytes_copied: int


class SFTPClient:
    """
    SFTP client for pulling files from a remote server.

    Authenticates with a private key. Use as a context manager to ensure
    the session is closed. A single instance is not safe to share between
    threads; open one client per thread instead.

    Example:
        ```python
        config = SFTPConfig(
            host="sftp.example.com",
            username="user",
            private_key=pem_text,
        )

        with SFTPClient(config) as sftp:
            entries = sftp.list_directory("/data/reports")
            sftp.download("/data/reports/q3.csv", "/tmp/out", label="reports")
        ```
    """

    def __init__(
        self,
        config: SFTPConfig,
        log: Optional[logging.Logger] = None,
        connector: Optional[Connector] = None,
    ):
        """
        Initialize SFTP client with configuration.

        Args:
            config: SFTPConfig with connection details
            log: Logger for this client (module logger by default)
            connector: Callable opening the session (open_session by default)
        """
        self.config = config
        self.logger = log or logger
        self._connector = connector or open_session
        self._fs: Optional[RemoteFilesystem] = None

    def __enter__(self) -> "SFTPClient":
        """Connect to SFTP server."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Disconnect."""
        self.close()

    @property
    def connected(self) -> bool:
        return self._fs is not None

    def connect(self) -> None:
        """
        Establish the SFTP session.

        Raises:
            KeyParseError: If the private key cannot be parsed
            ConnectError: If the SSH connection or authentication fails
            ProtocolNegotiationError: If the SFTP session cannot be opened
        """
        if self._fs is not None:
            return
        self._fs = self._connector(self.config, self.logger)

    def close(self) -> None:
        """Close the session; no-op when not connected."""
        if self._fs is None:
            return

        try:
            self._fs.close()
        except Exception as e:
            self.logger.warning(f"Error closing SFTP session: {e}")
        self._fs = None
        self.logger.debug("SFTP connection closed")

    def _ensure_connected(self) -> RemoteFilesystem:
        """Raise error if not connected."""
        if self._fs is None:
            raise NotConnectedError("Not connected to SFTP server. Call connect() first.")
        return self._fs

    def list_directory(self, path: str) -> List[paramiko.SFTPAttributes]:
        """
        List entries of a remote directory.

        Entries are returned in server order with whatever metadata the
        server reports (filename, st_size, st_mode, st_mtime).

        Raises:
            ListError: If listing fails; ``cause`` is the server error
        """
        fs = self._ensure_connected()

        try:
            entries = fs.listdir_attr(path)
        except NETWORK_ERRORS as e:
            self.logger.error(f"Failed to list {path}: {e}", extra={"remote_path": path})
            raise ListError(f"Failed to list files in {path}: {e}", cause=e) from e

        self.logger.debug(f"Listed {len(entries)} entries in {path}")
        return entries

    def download(self, remote_path: str, destination: str, label: str = "") -> DownloadResult:
        """
        Download one remote file into a local directory.

        The file is written to ``destination/basename(remote_path)``,
        replacing any existing file. Success means exactly as many bytes
        were copied as the remote file reported at stat time.

        Args:
            remote_path: Path of the file on the server
            destination: Local directory (created if missing)
            label: Free-form tag added to log records

        Returns:
            DownloadResult describing the written file

        Raises:
            OpenRemoteError: Remote file could not be opened
            CreateLocalError: Local file could not be created
            StatError: Remote file size could not be read
            CopyIncompleteError: Copy failed or came up short; the partial
                local file is left in place
        """
        fs = self._ensure_connected()
        context = {"label": label, "remote_path": remote_path}

        try:
            remote = fs.open(remote_path)
        except NETWORK_ERRORS as e:
            self.logger.error(
                f"[{label}] Could not open {remote_path} on SFTP server: {e}", extra=context
            )
            raise OpenRemoteError(f"Could not open {remote_path}: {e}", cause=e) from e

        try:
            return self._save(remote, remote_path, destination, label)
        finally:
            try:
                remote.close()
            except Exception as e:
                self.logger.warning(
                    f"[{label}] Error closing remote file {remote_path}: {e}", extra=context
                )

    def _save(
        self,
        remote: RemoteFile,
        remote_path: str,
        destination: str,
        label: str,
    ) -> DownloadResult:
        context = {"label": label, "remote_path": remote_path}

        try:
            os.makedirs(destination, mode=0o700, exist_ok=True)
        except OSError as e:
            # Reported by the create step below
            self.logger.debug(f"[{label}] Could not create {destination}: {e}", extra=context)

        file_name = posixpath.basename(remote_path)
        local_path = os.path.join(destination, file_name)

        try:
            local = open(local_path, "wb")
        except OSError as e:
            self.logger.error(f"[{label}] Could not create file {local_path}: {e}", extra=context)
            raise CreateLocalError(f"Could not create file {local_path}: {e}", cause=e) from e

        with local:
            try:
                size = remote.stat().st_size
            except NETWORK_ERRORS as e:
                self.logger.error(
                    f"[{label}] Could not get file stats for {remote_path}: {e}", extra=context
                )
                raise StatError(f"Could not stat {remote_path}: {e}", cause=e) from e
            size = size or 0

            copied = 0
            error: Optional[Exception] = None
            try:
                while copied < size:
                    chunk = remote.read(min(self.config.chunk_size, size - copied))
                    if not chunk:
                        break
                    local.write(chunk)
                    copied += len(chunk)
            except NETWORK_ERRORS as e:
                error = e

            if copied != size or error is not None:
                self.logger.error(
                    f"[{label}] Download stopped at [{copied}] of {size} bytes when "
                    f"copying {remote_path} to {local_path}"
                    + (f": {error}" if error else ""),
                    extra={**context, "bytes_copied": copied},
                )
                raise CopyIncompleteError(
                    f"Copied {copied} of {size} bytes from {remote_path}",
                    expected=size,
                    bytes_copied=copied,
                    cause=error,
                ) from error

        self.logger.info(
            f"[{label}] Downloaded {remote_path} -> {local_path} ({copied} bytes)", extra=context
        )
        return DownloadResult(
            remote_path=remote_path,
            local_path=local_path,
            size=size,
            bytes_copied=copied,
        )
