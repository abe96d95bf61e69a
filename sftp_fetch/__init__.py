"""
Key-authenticated SFTP client adapter.

Lists remote directories and downloads single files with byte-count
verification over a paramiko SSH session.
"""

from sftp_fetch.config import HostKeyPolicy, SFTPConfig
from sftp_fetch.sftp import DownloadResult, SFTPClient, SFTPError

__version__ = "0.1.0"

__all__ = [
    "DownloadResult",
    "HostKeyPolicy",
    "SFTPClient",
    "SFTPConfig",
    "SFTPError",
]
