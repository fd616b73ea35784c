"""
Client configuration
Defaults, optional JSON settings file and DOCKER_* environment overrides
"""

import json
import logging
import os
import platform
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_UNIX_SOCKET = '/var/run/docker.sock'
DEFAULT_TIMEOUT = 60
DEFAULT_CHUNK_SIZE = 32 * 1024


def default_base_url() -> str:
    """
    Auto-detect the Docker daemon address

    Returns:
        DOCKER_HOST when set, otherwise the local Unix socket URL
    """
    docker_host = os.environ.get('DOCKER_HOST')
    if docker_host:
        return docker_host

    if platform.system() == "Darwin":
        desktop_socket = os.path.expanduser('~/.docker/run/docker.sock')
        if os.path.exists(desktop_socket):
            return f"unix://{desktop_socket}"

    return f"unix://{DEFAULT_UNIX_SOCKET}"


def _env_flag(value: Optional[str]) -> Optional[bool]:
    if value is None or value == '':
        return None
    return value.lower() not in ('0', 'false', 'no')


@dataclass(frozen=True)
class ClientConfig:
    """
    Settings used by the HTTP modem

    Attributes:
        base_url: unix:///path, tcp://host:port, http:// or https:// address
        timeout: Socket timeout in seconds
        api_version: Engine API version to pin (e.g. '1.43'); None uses the daemon default
        tls_verify: Verify the daemon certificate on TLS connections
        cert_path: Directory holding ca.pem, cert.pem and key.pem
        chunk_size: Bytes requested per read on live streams
    """

    base_url: str = ''
    timeout: int = DEFAULT_TIMEOUT
    api_version: Optional[str] = None
    tls_verify: bool = False
    cert_path: Optional[str] = None
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self):
        if not self.base_url:
            object.__setattr__(self, 'base_url', default_base_url())

    @property
    def uses_tls(self) -> bool:
        return self.base_url.startswith('https://') or self.tls_verify or bool(self.cert_path)

    def with_overrides(self, **overrides: Any) -> 'ClientConfig':
        """Copy of this config with the given non-None fields replaced"""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, **overrides: Any) -> 'ClientConfig':
        """
        Build config from DOCKER_HOST, DOCKER_API_VERSION, DOCKER_TLS_VERIFY and DOCKER_CERT_PATH

        Args:
            environ: Environment mapping (default: os.environ)
            **overrides: Explicit values that win over the environment

        Returns:
            ClientConfig
        """
        env = os.environ if environ is None else environ
        config = cls(
            base_url=overrides.pop('base_url', None) or env.get('DOCKER_HOST', ''),
            api_version=env.get('DOCKER_API_VERSION') or None,
            tls_verify=bool(_env_flag(env.get('DOCKER_TLS_VERIFY'))),
            cert_path=env.get('DOCKER_CERT_PATH') or None,
        )
        return config.with_overrides(**overrides)

    @classmethod
    def from_file(cls, path: str, **overrides: Any) -> 'ClientConfig':
        """
        Load settings from a JSON file merged over the defaults

        Unknown keys are ignored. Environment variables are not consulted,
        except for socket auto-detection when the file has no base_url.

        Args:
            path: Path to the JSON settings file
            **overrides: Explicit values that win over the file

        Returns:
            ClientConfig
        """
        with open(path, 'r', encoding='utf-8') as f:
            loaded = json.load(f)

        known = {field.name for field in fields(cls)}
        settings = {key: value for key, value in loaded.items() if key in known}
        ignored = sorted(set(loaded) - known)
        if ignored:
            logger.warning(f"Ignoring unknown settings in {path}: {', '.join(ignored)}")

        logger.info(f"Settings loaded from {path}")
        return cls(**settings).with_overrides(**overrides)
