"""
Docker Swarm Nodes API
"""

from typing import Any, Dict, List, Optional

from .call import NOT_IN_SWARM, SERVER_ERROR, StatusCodes, bad_parameter, not_found
from .resource import Collection, Model

NO_SUCH_NODE = not_found('no such node')

INSPECT = StatusCodes({200: True, 404: NO_SUCH_NODE, 500: SERVER_ERROR, 503: NOT_IN_SWARM})
UPDATE = StatusCodes({
    200: True,
    400: bad_parameter(),
    404: NO_SUCH_NODE,
    500: SERVER_ERROR,
    503: NOT_IN_SWARM,
})
REMOVE = INSPECT
LIST = StatusCodes({200: True, 500: SERVER_ERROR, 503: NOT_IN_SWARM})


class Node(Model):
    """Swarm node"""

    resource = 'node'
    id_attribute = 'ID'

    @property
    def version(self) -> Optional[int]:
        """Object version to pass back on update"""
        return (self.attrs.get('Version') or {}).get('Index')

    @property
    def spec(self) -> Dict[str, Any]:
        return self.attrs.get('Spec') or {}

    async def status(self) -> 'Node':
        conf = await self._dial(f'/nodes/{self.id}', 'GET', INSPECT)
        return self._new(conf)

    async def update(self, version: int, spec: Dict[str, Any]) -> 'Node':
        """
        Replace the node spec

        Args:
            version: Current object version (from status().version)
            spec: Full node spec (Availability, Role, Labels, Name)
        """
        await self._dial(f'/nodes/{self.id}/update', 'POST', UPDATE,
                         params={'version': version}, data=spec)
        return self._new()

    async def remove(self, force: bool = False) -> Any:
        return await self._dial(f'/nodes/{self.id}', 'DELETE', REMOVE,
                                params={'force': force or None})


class NodeCollection(Collection):
    """Swarm nodes collection"""

    model = Node

    async def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Node]:
        data = await self._dial('/nodes', 'GET', LIST, params={'filters': filters})
        return self.prepare_models(data)
