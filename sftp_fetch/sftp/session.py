"""
Opening an authenticated SFTP session.

open_session() runs the three connection steps in order and reports which
one failed:

1. parse the private key           -> KeyParseError
2. dial, handshake, authenticate   -> ConnectError
3. open the SFTP subsystem         -> ProtocolNegotiationError

The key is parsed before any socket is opened, so bad credentials never
reach the network.
"""

import io
import logging
import os
from typing import Optional, Union

import paramiko
from paramiko.hostkeys import InvalidHostKey

from sftp_fetch.config.models import HostKeyPolicy, SFTPConfig
from sftp_fetch.sftp.backend import ParamikoFilesystem
from sftp_fetch.sftp.errors import (
    ConnectError,
    HostKeyVerificationError,
    KeyParseError,
    ProtocolNegotiationError,
)

logger = logging.getLogger(__name__)

# paramiko 4 dropped DSA support, so DSSKey is not tried
KEY_CLASSES = (
    paramiko.RSAKey,
    paramiko.Ed25519Key,
    paramiko.ECDSAKey,
)

NETWORK_ERRORS = (paramiko.SSHException, OSError, EOFError)


def parse_private_key(
    key_data: Union[str, bytes],
    passphrase: Optional[str] = None,
) -> paramiko.PKey:
    """
    Parse PEM private key text, trying each supported key type.

    Args:
        key_data: PEM-encoded key (str or bytes)
        passphrase: Optional passphrase for an encrypted key

    Returns:
        Loaded private key

    Raises:
        KeyParseError: If no key type accepts the data
    """
    if isinstance(key_data, bytes):
        try:
            key_data = key_data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise KeyParseError(f"Could not parse SSH key: {e}", cause=e) from e

    last_error: Optional[Exception] = None
    for key_class in KEY_CLASSES:
        try:
            return key_class.from_private_key(io.StringIO(key_data), password=passphrase)
        except (paramiko.SSHException, ValueError) as e:
            last_error = e
            continue

    raise KeyParseError(f"Could not parse SSH key: {last_error}", cause=last_error) from last_error


def _read_key_data(config: SFTPConfig) -> str:
    if config.private_key:
        return config.private_key

    key_path = os.path.expanduser(config.private_key_path)
    try:
        with open(key_path, "r", encoding="utf-8") as f:
            return f.read()
    except (IOError, UnicodeDecodeError) as e:
        raise KeyParseError(f"Could not read SSH key file {key_path}: {e}", cause=e) from e


def _known_hosts_name(host: str, port: int) -> str:
    if port == 22:
        return host
    return f"[{host}]:{port}"


def verify_host_key(
    transport: paramiko.Transport,
    config: SFTPConfig,
    log: logging.Logger = logger,
) -> None:
    """
    Check the server key of a started transport against known_hosts.

    Does nothing under HostKeyPolicy.ACCEPT. Under WARN a problem is
    logged and the handshake continues; under STRICT it is raised.

    Raises:
        HostKeyVerificationError: Unknown or mismatched key with STRICT policy
    """
    if config.host_key_policy == HostKeyPolicy.ACCEPT:
        return

    server_key = transport.get_remote_server_key()
    lookup_name = _known_hosts_name(config.host, config.port)

    host_keys = paramiko.HostKeys()
    known_hosts = config.resolved_known_hosts()
    if os.path.exists(known_hosts):
        try:
            host_keys.load(known_hosts)
        except (IOError, ValueError, InvalidHostKey, paramiko.SSHException) as e:
            raise HostKeyVerificationError(
                f"Could not load known_hosts file {known_hosts}: {e}", cause=e
            ) from e

    known = host_keys.lookup(lookup_name)
    expected = known.get(server_key.get_name()) if known else None

    if expected is None:
        problem = f"Unknown {server_key.get_name()} host key for {lookup_name}"
    elif expected.asbytes() != server_key.asbytes():
        problem = f"Host key for {lookup_name} does not match {known_hosts}"
    else:
        log.debug(f"Host key for {lookup_name} verified")
        return

    if config.host_key_policy == HostKeyPolicy.STRICT:
        raise HostKeyVerificationError(problem)

    log.warning(f"{problem}; continuing (host_key_policy=warn)")


def open_session(
    config: SFTPConfig,
    log: logging.Logger = logger,
) -> ParamikoFilesystem:
    """
    Authenticate with the configured key and open an SFTP session.

    Args:
        config: SFTPConfig with connection details
        log: Logger receiving step failures

    Returns:
        ParamikoFilesystem owning the transport and SFTP channel

    Raises:
        KeyParseError: Key unreadable or unparsable (no dial attempted)
        ConnectError: Connection, host key check or authentication failed
        ProtocolNegotiationError: SFTP subsystem could not be started
    """
    try:
        pkey = parse_private_key(_read_key_data(config), config.passphrase)
    except KeyParseError as e:
        log.error(f"Could not parse SSH key: {e}")
        raise

    transport = None
    try:
        try:
            log.info(f"Connecting to SFTP: {config.address} as {config.username}")
            transport = paramiko.Transport((config.host, config.port))
            transport.start_client()
            verify_host_key(transport, config, log)
            transport.auth_publickey(config.username, pkey)
            if not transport.is_authenticated():
                raise paramiko.AuthenticationException(
                    "Server requires further authentication"
                )
        except (HostKeyVerificationError,) + NETWORK_ERRORS as e:
            log.error(f"Could not establish SSH connection to {config.address}: {e}")
            raise ConnectError(
                f"SSH connection to {config.address} failed: {e}", cause=e
            ) from e

        try:
            sftp = paramiko.SFTPClient.from_transport(transport)
            if sftp is None:
                raise paramiko.SSHException("SFTP channel could not be opened")
        except NETWORK_ERRORS as e:
            log.error(f"Could not create SFTP client on {config.address}: {e}")
            raise ProtocolNegotiationError(
                f"SFTP session negotiation with {config.address} failed: {e}", cause=e
            ) from e
    except BaseException:
        if transport is not None:
            transport.close()
        raise

    log.info(f"Connected to SFTP server: {config.host}")
    return ParamikoFilesystem(sftp, transport)
