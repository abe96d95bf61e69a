"""
Workflows composed from the SFTP client adapter.
"""

from sftp_fetch.services.fetch import FetchResult, fetch_matching, test_connection

__all__ = [
    "FetchResult",
    "fetch_matching",
    "test_connection",
]
