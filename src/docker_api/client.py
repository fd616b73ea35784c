"""
Docker Client - Main API entry point
"""

from typing import Any, Dict, Optional

from .call import SERVER_ERROR, StatusCodes, bad_request, unavailable
from .config import ClientConfig
from .containers import ContainerCollection
from .http_client import DockerHTTPClient
from .images import ImageCollection
from .networks import NetworkCollection
from .nodes import NodeCollection
from .plugins import PluginCollection
from .resource import dial
from .secrets import SecretCollection
from .services import ServiceCollection
from .stream import Stream
from .swarm import Swarm
from .tasks import TaskCollection
from .volumes import VolumeCollection

AUTH = StatusCodes({200: True, 204: True, 500: SERVER_ERROR})
SYSTEM = StatusCodes({200: True, 500: SERVER_ERROR})
PING = StatusCodes({200: True, 500: SERVER_ERROR, 503: unavailable('daemon not ready')})
EVENTS = StatusCodes({200: True, 400: bad_request(), 500: SERVER_ERROR})


class DockerClient:
    """
    Docker API Client

    Holds one manager per resource kind; every manager and handle shares
    the same modem.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None,
                 config: Optional[ClientConfig] = None, modem=None):
        """
        Initialize Docker client

        Args:
            base_url: Daemon address (default: auto-detect)
            timeout: Request timeout in seconds
            config: Full client configuration; base_url and timeout override it
            modem: Transport to use instead of the bundled HTTP modem
        """
        if modem is None:
            if config is None:
                config = ClientConfig.from_env(base_url=base_url, timeout=timeout)
            else:
                config = config.with_overrides(base_url=base_url, timeout=timeout)
            modem = DockerHTTPClient(config)

        self.modem = modem
        self.containers = ContainerCollection(modem)
        self.images = ImageCollection(modem)
        self.volumes = VolumeCollection(modem)
        self.networks = NetworkCollection(modem)
        self.nodes = NodeCollection(modem)
        self.plugins = PluginCollection(modem)
        self.secrets = SecretCollection(modem)
        self.services = ServiceCollection(modem)
        self.swarm = Swarm(modem)
        self.tasks = TaskCollection(modem)

    def __repr__(self):
        return f"<DockerClient: {self.modem!r}>"

    async def auth(self, authconfig: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate registry credentials

        Args:
            authconfig: username, password, serveraddress (or identitytoken)

        Returns:
            Dict with Status and, for some registries, IdentityToken
        """
        return await dial(self.modem, 'auth', '/auth', 'POST', AUTH, data=authconfig)

    async def version(self) -> Dict[str, Any]:
        """Get Docker version info"""
        return await dial(self.modem, 'system', '/version', 'GET', SYSTEM)

    async def info(self) -> Dict[str, Any]:
        """Get Docker system info"""
        return await dial(self.modem, 'system', '/info', 'GET', SYSTEM)

    async def ping(self) -> str:
        """Ping Docker daemon ('OK' when healthy)"""
        return await dial(self.modem, 'system', '/_ping', 'GET', PING)

    async def events(self, since: Optional[int] = None, until: Optional[int] = None,
                     filters: Optional[Dict[str, Any]] = None) -> Stream:
        """
        Subscribe to daemon events

        Args:
            since: Show events since timestamp (Unix epoch)
            until: Stop streaming at timestamp
            filters: Filters to apply (type, event, container, image, ...)

        Returns:
            Stream of JSON documents (see stream.iter_json)
        """
        params = {'since': since, 'until': until, 'filters': filters}
        return await dial(self.modem, 'system', '/events', 'GET', EVENTS,
                          params=params, stream=True)
