"""
Docker Swarm API
"""

import logging
from typing import Any, Dict, List, Optional

from .call import (SERVER_ERROR, StatusCodes, bad_parameter, not_acceptable, not_found,
                   unavailable)
from .nodes import Node
from .resource import dial

logger = logging.getLogger(__name__)

ALREADY_IN_SWARM = 'node is already part of a swarm'
NOT_IN_SWARM = 'node is not part of a swarm'

INIT = StatusCodes({
    200: True,
    400: bad_parameter(),
    406: not_acceptable(ALREADY_IN_SWARM),
    500: SERVER_ERROR,
    503: unavailable(ALREADY_IN_SWARM),
})
JOIN = INIT
INSPECT = StatusCodes({
    200: True,
    404: not_found('no such swarm'),
    500: SERVER_ERROR,
    503: unavailable(NOT_IN_SWARM),
})
LEAVE = StatusCodes({
    200: True,
    406: not_acceptable(NOT_IN_SWARM),
    500: SERVER_ERROR,
    503: unavailable(NOT_IN_SWARM),
})
UPDATE = StatusCodes({
    200: True,
    400: bad_parameter(),
    500: SERVER_ERROR,
    503: unavailable(NOT_IN_SWARM),
})
UNLOCK_KEY = StatusCodes({200: True, 500: SERVER_ERROR, 503: unavailable(NOT_IN_SWARM)})
UNLOCK = UNLOCK_KEY


class Swarm:
    """
    The swarm this daemon belongs to

    There is a single swarm per daemon, so it has no identifier and no
    get/list operations.
    """

    resource = 'swarm'

    def __init__(self, modem, attrs: Optional[Dict[str, Any]] = None):
        self.modem = modem
        self.attrs = attrs if attrs is not None else {}

    def __repr__(self):
        return f"<Swarm: {self.id or 'unknown'}>"

    @property
    def id(self) -> str:
        return self.attrs.get('ID', '')

    @property
    def version(self) -> Optional[int]:
        return (self.attrs.get('Version') or {}).get('Index')

    @property
    def join_tokens(self) -> Dict[str, str]:
        return self.attrs.get('JoinTokens') or {}

    async def _dial(self, path: str, method: str, status_codes: StatusCodes, **kwargs) -> Any:
        return await dial(self.modem, self.resource, path, method, status_codes, **kwargs)

    async def init(self, listen_addr: str = '0.0.0.0:2377',
                   advertise_addr: Optional[str] = None,
                   data_path_addr: Optional[str] = None,
                   force_new_cluster: bool = False,
                   default_addr_pool: Optional[List[str]] = None,
                   subnet_size: Optional[int] = None,
                   spec: Optional[Dict[str, Any]] = None) -> Node:
        """
        Initialize a new swarm with this daemon as manager

        Args:
            listen_addr: Address for inter-manager communication
            advertise_addr: Address advertised to other nodes
            data_path_addr: Address for data path traffic
            force_new_cluster: Force creation of a new swarm
            default_addr_pool: Subnets for global scope networks
            subnet_size: Subnet size for networks from the pool
            spec: Swarm spec (Orchestration, Raft, Dispatcher, ...)

        Returns:
            Node handle for this daemon's node
        """
        data = {
            'ListenAddr': listen_addr,
            'ForceNewCluster': force_new_cluster,
            'Spec': spec or {},
        }
        if advertise_addr:
            data['AdvertiseAddr'] = advertise_addr
        if data_path_addr:
            data['DataPathAddr'] = data_path_addr
        if default_addr_pool:
            data['DefaultAddrPool'] = default_addr_pool
        if subnet_size:
            data['SubnetSize'] = subnet_size

        node_id = await self._dial('/swarm/init', 'POST', INIT, data=data)
        logger.info(f"Initialized swarm, node {node_id}")
        return Node(self.modem, node_id)

    async def status(self) -> 'Swarm':
        """
        Inspect the swarm

        Returns:
            New Swarm carrying the inspect response
        """
        conf = await self._dial('/swarm', 'GET', INSPECT)
        return Swarm(self.modem, conf if isinstance(conf, dict) else None)

    async def join(self, remote_addrs: List[str], join_token: str,
                   listen_addr: str = '0.0.0.0:2377', advertise_addr: Optional[str] = None,
                   data_path_addr: Optional[str] = None) -> Any:
        """
        Join an existing swarm

        Args:
            remote_addrs: Addresses of managers already in the swarm
            join_token: Worker or manager join token
            listen_addr: Address for inter-manager communication
            advertise_addr: Address advertised to other nodes
            data_path_addr: Address for data path traffic
        """
        data = {
            'ListenAddr': listen_addr,
            'RemoteAddrs': remote_addrs,
            'JoinToken': join_token,
        }
        if advertise_addr:
            data['AdvertiseAddr'] = advertise_addr
        if data_path_addr:
            data['DataPathAddr'] = data_path_addr

        return await self._dial('/swarm/join', 'POST', JOIN, data=data)

    async def leave(self, force: bool = False) -> Any:
        """Leave the swarm; force is required for the last manager"""
        return await self._dial('/swarm/leave', 'POST', LEAVE, params={'force': force or None})

    async def update(self, version: int, spec: Dict[str, Any],
                     rotate_worker_token: bool = False, rotate_manager_token: bool = False,
                     rotate_manager_unlock_key: bool = False) -> 'Swarm':
        """
        Replace the swarm spec

        Args:
            version: Current object version (from status().version)
            spec: Full swarm spec
            rotate_worker_token: Issue a new worker join token
            rotate_manager_token: Issue a new manager join token
            rotate_manager_unlock_key: Issue a new unlock key
        """
        params = {
            'version': version,
            'rotateWorkerToken': rotate_worker_token,
            'rotateManagerToken': rotate_manager_token,
            'rotateManagerUnlockKey': rotate_manager_unlock_key,
        }
        await self._dial('/swarm/update', 'POST', UPDATE, params=params, data=spec)
        return Swarm(self.modem)

    async def unlock_key(self) -> Dict[str, Any]:
        """Current unlock key ({'UnlockKey': ...})"""
        return await self._dial('/swarm/unlockkey', 'GET', UNLOCK_KEY)

    async def unlock(self, key: str) -> Any:
        """Unlock a locked manager"""
        return await self._dial('/swarm/unlock', 'POST', UNLOCK, data={'UnlockKey': key})
