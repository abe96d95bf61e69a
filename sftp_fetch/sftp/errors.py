"""
Exceptions raised by the SFTP adapter.

Every error keeps the underlying library exception as ``cause`` (and as
``__cause__`` when raised with ``from``), so callers can inspect the original
condition, e.g. ``err.errno == errno.ENOENT`` for a missing remote path.
"""

from typing import Optional


class SFTPError(Exception):
    """Raised when SFTP operations fail."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    @property
    def errno(self) -> Optional[int]:
        """errno of the underlying error, if it has one."""
        return getattr(self.cause, "errno", None)


class KeyParseError(SFTPError):
    """The private key could not be parsed."""
    pass


class ConnectError(SFTPError):
    """TCP connection, SSH handshake or authentication failed."""
    pass


class HostKeyVerificationError(SFTPError):
    """Server host key is unknown or does not match known_hosts."""
    pass


class ProtocolNegotiationError(SFTPError):
    """The SFTP subsystem could not be opened on the SSH session."""
    pass


class NotConnectedError(SFTPError):
    """Operation attempted without a live session."""
    pass


class ListError(SFTPError):
    """Listing a remote directory failed."""
    pass


class DownloadError(SFTPError):
    """Base class for failures while downloading a single file."""
    pass


class OpenRemoteError(DownloadError):
    pass


class CreateLocalError(DownloadError):
    pass


class StatError(DownloadError):
    pass


class CopyIncompleteError(DownloadError):
    """
    Fewer bytes were copied than the remote file's stat size.

    Attributes:
        expected: Remote size at stat time
        bytes_copied: Bytes written to the local file before the copy stopped
    """

    def __init__(
        self,
        message: str,
        expected: int,
        bytes_copied: int,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause)
        self.expected = expected
        self.bytes_copied = bytes_copied
