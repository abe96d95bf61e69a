"""
Example usage of the SFTP fetch module.

This script demonstrates how to connect with a private key, list a remote
directory and download files with size verification.

Prerequisites:
1. Create a .env file with SFTP_HOST, SFTP_USERNAME and either
   SFTP_PRIVATE_KEY or SFTP_PRIVATE_KEY_PATH
2. Optionally set SFTP_REMOTE_PATH, SFTP_HOST_KEY_POLICY, LOCAL_DIR

Usage:
    python example_usage.py
"""

import logging
import os
import stat

from sftp_fetch.config import ConfigError, load_config_from_env
from sftp_fetch.services import fetch_matching, test_connection
from sftp_fetch.sftp import DownloadError, SFTPClient, SFTPError

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def example_list_and_download(config, local_dir):
    """List the remote directory and download its first regular file."""
    logger.info("\n--- List and Download Example ---")

    with SFTPClient(config) as sftp:
        entries = sftp.list_directory(config.remote_path)
        for entry in entries:
            logger.info(f"  {entry.filename} ({entry.st_size} bytes)")

        files = [e for e in entries if e.st_mode and stat.S_ISREG(e.st_mode)]
        if not files:
            logger.warning(f"No regular files in {config.remote_path}")
            return

        remote_path = f"{config.remote_path.rstrip('/')}/{files[0].filename}"
        try:
            result = sftp.download(remote_path, local_dir, label="example")
            logger.info(f"Saved {result.local_path} ({result.bytes_copied} bytes)")
        except DownloadError as e:
            logger.error(f"Download failed: {e}")


def example_fetch_matching(config, local_dir):
    """Download every CSV file in the remote directory."""
    logger.info("\n--- Fetch Matching Example ---")

    result = fetch_matching(config, local_dir, pattern="*.csv", label="example")
    logger.info(f"Fetched {result.success_count} files")
    for error in result.errors:
        logger.error(error)


def main():
    """Run all examples."""
    logger.info("=== SFTP Fetch - Example Usage ===\n")

    try:
        config = load_config_from_env()
    except ConfigError as e:
        logger.error(f"Cannot load SFTP configuration: {e}")
        return

    local_dir = os.getenv("LOCAL_DIR", "downloads")

    if not test_connection(config):
        logger.error("Cannot proceed without SFTP connection")
        return

    try:
        example_list_and_download(config, local_dir)
        example_fetch_matching(config, local_dir)
    except SFTPError as e:
        logger.error(f"Example failed: {e}")


if __name__ == "__main__":
    main()
