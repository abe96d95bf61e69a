"""
Remote filesystem capability used by the SFTP adapter.

The adapter talks to a RemoteFilesystem rather than to paramiko directly,
so tests can substitute an in-memory fake. ParamikoFilesystem is the
production implementation wrapping an SFTPClient and its Transport.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import paramiko

logger = logging.getLogger(__name__)


class RemoteFile(ABC):
    """Open handle to a remote file."""

    @abstractmethod
    def stat(self) -> paramiko.SFTPAttributes:
        """Return attributes of the open file; ``st_size`` is required."""
        raise NotImplementedError

    @abstractmethod
    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes; ``b""`` at end of file."""
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError


class RemoteFilesystem(ABC):
    """Directory listing and file access over a live session."""

    @abstractmethod
    def listdir_attr(self, path: str) -> List[paramiko.SFTPAttributes]:
        """Return entries of ``path`` in server order."""
        raise NotImplementedError

    @abstractmethod
    def open(self, path: str) -> RemoteFile:
        """Open ``path`` for reading."""
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        """Release the session."""
        raise NotImplementedError


class ParamikoFile(RemoteFile):
    """RemoteFile backed by ``paramiko.SFTPFile``."""

    def __init__(self, handle: paramiko.SFTPFile):
        self._handle = handle

    def stat(self) -> paramiko.SFTPAttributes:
        return self._handle.stat()

    def read(self, size: int) -> bytes:
        return self._handle.read(size)

    def close(self) -> None:
        self._handle.close()


class ParamikoFilesystem(RemoteFilesystem):
    """
    RemoteFilesystem backed by a paramiko SFTP session.

    Owns both the SFTP channel and the transport beneath it; close()
    releases them in that order.
    """

    def __init__(
        self,
        sftp: paramiko.SFTPClient,
        transport: Optional[paramiko.Transport] = None,
    ):
        self._sftp = sftp
        self._transport = transport

    def listdir_attr(self, path: str) -> List[paramiko.SFTPAttributes]:
        return self._sftp.listdir_attr(path)

    def open(self, path: str) -> RemoteFile:
        return ParamikoFile(self._sftp.open(path, "rb"))

    def close(self) -> None:
        if self._sftp:
            try:
                self._sftp.close()
            except Exception as e:
                logger.warning(f"Error closing SFTP client: {e}")
            self._sftp = None

        if self._transport:
            try:
                self._transport.close()
            except Exception as e:
                logger.warning(f"Error closing transport: {e}")
            self._transport = None
