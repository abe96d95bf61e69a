"""
Convenience workflows built on SFTPClient.

- test_connection: open a session and list the configured directory
- fetch_matching: download every regular file whose name matches a glob
"""

import fnmatch
import logging
import stat
from dataclasses import dataclass, field
from typing import List, Optional

from sftp_fetch.config.models import SFTPConfig
from sftp_fetch.sftp import DownloadError, DownloadResult, SFTPClient, SFTPError

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """
    Result of fetching a batch of files.

    Attributes:
        downloaded: Results for files that were copied completely
        errors: Error messages for files that failed
    """
    downloaded: List[DownloadResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        """Number of successfully downloaded files."""
        return len(self.downloaded)

    @property
    def has_errors(self) -> bool:
        """Check if any downloads failed."""
        return len(self.errors) > 0


def test_connection(config: SFTPConfig, log: Optional[logging.Logger] = None) -> bool:
    """
    Test SFTP connection without downloading files.

    Args:
        config: SFTPConfig with connection details
        log: Optional logger passed to the client

    Returns:
        True if connection successful, False otherwise
    """
    log = log or logger
    try:
        with SFTPClient(config, log=log) as sftp:
            entries = sftp.list_directory(config.remote_path)
            log.info(f"Connection test successful. Found {len(entries)} entries.")
            return True
    except SFTPError as e:
        log.error(f"Connection test failed: {e}")
        return False


def fetch_matching(
    config: SFTPConfig,
    destination: str,
    pattern: str = "*",
    label: str = "",
    log: Optional[logging.Logger] = None,
) -> FetchResult:
    """
    Download all regular files in ``config.remote_path`` matching a glob.

    A failed file is recorded in ``errors`` and the batch carries on.
    Connection and listing failures are raised.

    Args:
        config: SFTPConfig with connection details and remote_path
        destination: Local directory receiving the files
        pattern: Glob matched against entry names (e.g. "*.csv")
        label: Tag passed to each download for log records
        log: Optional logger passed to the client

    Returns:
        FetchResult with downloaded files and errors

    Raises:
        SFTPError: If the session cannot be opened or the listing fails
    """
    log = log or logger
    result = FetchResult()

    with SFTPClient(config, log=log) as sftp:
        entries = sftp.list_directory(config.remote_path)
        names = [
            entry.filename for entry in entries
            if fnmatch.fnmatch(entry.filename, pattern)
            and (entry.st_mode is None or stat.S_ISREG(entry.st_mode))
        ]

        if not names:
            log.warning(f"No files found matching '{pattern}' in {config.remote_path}")
            return result

        log.info(f"Downloading {len(names)} files to {destination}")

        for name in names:
            remote_path = f"{config.remote_path.rstrip('/')}/{name}"
            try:
                result.downloaded.append(sftp.download(remote_path, destination, label))
            except DownloadError as e:
                result.errors.append(f"Failed to download {name}: {e}")

    log.info(
        f"Downloaded {result.success_count}/{len(names)} files"
        + (f" ({len(result.errors)} errors)" if result.errors else "")
    )
    return result
