"""
Docker Swarm Secrets API
"""

import base64
from typing import Any, Dict, List, Optional, Union

from .call import (NOT_IN_SWARM, SERVER_ERROR, StatusCodes, bad_parameter, conflict,
                   not_acceptable, not_found)
from .resource import Collection, Model

NO_SUCH_SECRET = not_found('no such secret')
SWARM_NOT_ACCEPTABLE = not_acceptable('node is not part of a swarm')

INSPECT = StatusCodes({
    200: True,
    404: NO_SUCH_SECRET,
    406: SWARM_NOT_ACCEPTABLE,
    500: SERVER_ERROR,
    503: NOT_IN_SWARM,
})
UPDATE = StatusCodes({
    200: True,
    400: bad_parameter(),
    404: NO_SUCH_SECRET,
    500: SERVER_ERROR,
    503: NOT_IN_SWARM,
})
REMOVE = StatusCodes({204: True, 404: NO_SUCH_SECRET, 500: SERVER_ERROR, 503: NOT_IN_SWARM})
LIST = StatusCodes({200: True, 500: SERVER_ERROR, 503: NOT_IN_SWARM})
CREATE = StatusCodes({
    201: True,
    406: SWARM_NOT_ACCEPTABLE,
    409: conflict('name conflicts with an existing secret'),
    500: SERVER_ERROR,
    503: NOT_IN_SWARM,
})


class Secret(Model):
    """Swarm secret; the daemon never returns its data"""

    resource = 'secret'
    id_attribute = 'ID'

    @property
    def name(self) -> str:
        return (self.attrs.get('Spec') or {}).get('Name', '')

    @property
    def version(self) -> Optional[int]:
        return (self.attrs.get('Version') or {}).get('Index')

    async def status(self) -> 'Secret':
        conf = await self._dial(f'/secrets/{self.id}', 'GET', INSPECT)
        return self._new(conf)

    async def update(self, version: int, spec: Dict[str, Any]) -> 'Secret':
        """
        Update the secret spec (only Labels can change)

        Args:
            version: Current object version
            spec: Secret spec
        """
        await self._dial(f'/secrets/{self.id}/update', 'POST', UPDATE,
                         params={'version': version}, data=spec)
        return self._new()

    async def remove(self) -> Any:
        return await self._dial(f'/secrets/{self.id}', 'DELETE', REMOVE)


class SecretCollection(Collection):
    """Swarm secrets collection"""

    model = Secret

    async def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Secret]:
        data = await self._dial('/secrets', 'GET', LIST, params={'filters': filters})
        return self.prepare_models(data)

    async def create(self, name: str, data: Union[str, bytes],
                     labels: Optional[Dict[str, str]] = None,
                     driver: Optional[Dict[str, Any]] = None) -> Secret:
        """
        Create secret

        Args:
            name: Secret name
            data: Secret payload; encoded to base64 before sending
            labels: Labels dict
            driver: Secret driver ({'Name': ..., 'Options': {...}})

        Returns:
            Secret carrying the create response (ID)
        """
        if isinstance(data, str):
            data = data.encode('utf-8')

        spec = {
            'Name': name,
            'Data': base64.b64encode(data).decode('ascii'),
            'Labels': labels or {},
        }
        if driver:
            spec['Driver'] = driver

        conf = await self._dial('/secrets/create', 'POST', CREATE, data=spec)
        return self.prepare_model(conf)
