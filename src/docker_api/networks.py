"""
Docker Networks API
"""

from typing import Any, Dict, List, Optional

from .call import SERVER_ERROR, StatusCodes, bad_request, conflict, forbidden, not_found
from .resource import Collection, Model

NO_SUCH_NETWORK = not_found('no such network')
PREDEFINED = forbidden('operation not supported for pre-defined networks')
SWARM_SCOPED = forbidden('operation not supported for swarm scoped network')
NETWORK_OR_CONTAINER = not_found('network or container not found')

INSPECT = StatusCodes({200: True, 404: NO_SUCH_NETWORK, 500: SERVER_ERROR})
REMOVE = StatusCodes({204: True, 403: PREDEFINED, 404: NO_SUCH_NETWORK, 500: SERVER_ERROR})
CONNECT = StatusCodes({
    200: True,
    403: SWARM_SCOPED,
    404: NETWORK_OR_CONTAINER,
    500: SERVER_ERROR,
})
LIST = StatusCodes({200: True, 500: SERVER_ERROR})
CREATE = StatusCodes({
    201: True,
    400: bad_request(),
    403: PREDEFINED,
    404: not_found('plugin not found'),
    409: conflict('network with name already exists'),
    500: SERVER_ERROR,
})
PRUNE = StatusCodes({200: True, 500: SERVER_ERROR})


class Network(Model):
    """Docker Network object"""

    resource = 'network'

    @property
    def name(self) -> str:
        return self.attrs.get('Name', '')

    @property
    def containers(self) -> Dict[str, Any]:
        """Attached endpoints keyed by container ID (inspect snapshots only)"""
        return self.attrs.get('Containers') or {}

    async def status(self, verbose: bool = False, scope: Optional[str] = None) -> 'Network':
        """
        Inspect this network

        Args:
            verbose: Include swarm-wide details
            scope: Only match networks of this scope (swarm, global or local)

        Returns:
            New Network carrying the inspect response
        """
        params = {'verbose': verbose or None, 'scope': scope}
        conf = await self._dial(f'/networks/{self.id}', 'GET', INSPECT, params=params)
        return self._new(conf)

    async def remove(self) -> Any:
        """Remove network"""
        return await self._dial(f'/networks/{self.id}', 'DELETE', REMOVE)

    async def connect(self, container: str,
                      endpoint_config: Optional[Dict[str, Any]] = None) -> 'Network':
        """
        Connect a container to this network

        Args:
            container: Container ID or name
            endpoint_config: EndpointConfig (IPAMConfig, Aliases, ...)
        """
        data = {'Container': container}
        if endpoint_config:
            data['EndpointConfig'] = endpoint_config
        await self._dial(f'/networks/{self.id}/connect', 'POST', CONNECT, data=data)
        return self._new()

    async def disconnect(self, container: str, force: bool = False) -> 'Network':
        """Disconnect a container from this network"""
        data = {'Container': container, 'Force': force}
        await self._dial(f'/networks/{self.id}/disconnect', 'POST', CONNECT, data=data)
        return self._new()


class NetworkCollection(Collection):
    """Docker Networks collection"""

    model = Network

    async def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Network]:
        """
        List networks

        Args:
            filters: dict of filters (e.g., {'name': ['mynet']})

        Returns:
            List of Network objects
        """
        data = await self._dial('/networks', 'GET', LIST, params={'filters': filters})
        return self.prepare_models(data)

    async def create(self, name: str, driver: str = 'bridge', internal: bool = False,
                     attachable: bool = False, options: Optional[Dict[str, str]] = None,
                     labels: Optional[Dict[str, str]] = None,
                     ipam: Optional[Dict[str, Any]] = None, **config) -> Network:
        """
        Create network

        Args:
            name: Network name
            driver: Network driver (default: bridge)
            internal: Restrict external access
            attachable: Allow standalone containers to attach (swarm networks)
            options: Driver options dict
            labels: Labels dict
            ipam: IPAM configuration
            **config: Further body fields (EnableIPv6, Scope, ...)

        Returns:
            Network whose snapshot is the create response (Id, Warning)
        """
        data = {
            'Name': name,
            'Driver': driver,
            'Internal': internal,
            'Attachable': attachable,
        }

        if options:
            data['Options'] = options

        if labels:
            data['Labels'] = labels

        if ipam:
            data['IPAM'] = ipam

        data.update(config)

        result = await self._dial('/networks/create', 'POST', CREATE, data=data)
        return self.prepare_model(result)

    async def prune(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Remove unused networks

        Args:
            filters: Filters to use

        Returns:
            Dict with NetworksDeleted
        """
        return await self._dial('/networks/prune', 'POST', PRUNE, params={'filters': filters})
