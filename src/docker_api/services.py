"""
Docker Swarm Services API
"""

from typing import Any, Dict, List, Optional, Union

from .call import (NOT_IN_SWARM, SERVER_ERROR, ErrorKind, Failure, StatusCodes, bad_parameter,
                   conflict, forbidden, not_acceptable, not_found)
from .resource import Collection, Model
from .stream import Stream

NO_SUCH_SERVICE = not_found('no such service')
EXPERIMENTAL = Failure(ErrorKind.NOT_IMPLEMENTED, 'use --experimental to see this')

INSPECT = StatusCodes({200: True, 404: NO_SUCH_SERVICE, 500: SERVER_ERROR, 503: NOT_IN_SWARM})
UPDATE = StatusCodes({
    200: True,
    400: bad_parameter(),
    404: NO_SUCH_SERVICE,
    500: SERVER_ERROR,
    503: NOT_IN_SWARM,
})
REMOVE = INSPECT
LOGS = StatusCodes({
    101: True,
    200: True,
    404: NO_SUCH_SERVICE,
    500: SERVER_ERROR,
    501: EXPERIMENTAL,
    503: NOT_IN_SWARM,
})
LIST = StatusCodes({200: True, 500: SERVER_ERROR, 503: NOT_IN_SWARM})
CREATE = StatusCodes({
    201: True,
    400: bad_parameter(),
    403: forbidden('network is not eligible for services'),
    406: not_acceptable('node is not part of a swarm'),
    409: conflict('name conflicts with an existing service'),
    500: SERVER_ERROR,
    503: NOT_IN_SWARM,
})


def log_params(details: bool, follow: bool, stdout: bool, stderr: bool,
               since: Optional[int], timestamps: bool,
               tail: Union[str, int]) -> Dict[str, Any]:
    """Query for /services/{id}/logs and /tasks/{id}/logs"""
    return {
        'details': details,
        'follow': follow,
        'stdout': stdout,
        'stderr': stderr,
        'since': since,
        'timestamps': timestamps,
        'tail': tail,
    }


class Service(Model):
    """Swarm service"""

    resource = 'service'
    id_attribute = 'ID'

    @property
    def name(self) -> str:
        return self.spec.get('Name', '')

    @property
    def version(self) -> Optional[int]:
        return (self.attrs.get('Version') or {}).get('Index')

    @property
    def spec(self) -> Dict[str, Any]:
        return self.attrs.get('Spec') or {}

    async def status(self, insert_defaults: bool = False) -> 'Service':
        """
        Inspect this service

        Args:
            insert_defaults: Fill in default values the spec left empty
        """
        conf = await self._dial(f'/services/{self.id}', 'GET', INSPECT,
                                params={'insertDefaults': insert_defaults or None})
        return self._new(conf)

    async def update(self, version: int, spec: Dict[str, Any],
                     auth: Optional[Dict[str, Any]] = None,
                     registry_auth_from: Optional[str] = None,
                     rollback: Optional[str] = None) -> 'Service':
        """
        Replace the service spec

        Args:
            version: Current object version (from status().version)
            spec: Full service spec
            auth: Registry credentials for pulling the new image
            registry_auth_from: 'spec' or 'previous-spec' when auth is omitted
            rollback: 'previous' to roll back to the previous spec

        Returns:
            New Service whose snapshot holds the daemon's Warnings
        """
        params = {
            'version': version,
            'registryAuthFrom': registry_auth_from,
            'rollback': rollback,
        }
        res = await self._dial(f'/services/{self.id}/update', 'POST', UPDATE,
                               params=params, data=spec, authconfig=auth)
        return self._new(res)

    async def remove(self) -> Any:
        return await self._dial(f'/services/{self.id}', 'DELETE', REMOVE)

    async def logs(self, details: bool = False, follow: bool = False, stdout: bool = True,
                   stderr: bool = True, since: Optional[int] = None, timestamps: bool = False,
                   tail: Union[str, int] = 'all') -> Stream:
        """Logs of every task of this service, multiplexed unless the service has a TTY"""
        params = log_params(details, follow, stdout, stderr, since, timestamps, tail)
        return await self._dial(f'/services/{self.id}/logs', 'GET', LOGS,
                                params=params, stream=True)


class ServiceCollection(Collection):
    """Swarm services collection"""

    model = Service

    async def create(self, spec: Dict[str, Any],
                     auth: Optional[Dict[str, Any]] = None) -> Service:
        """
        Create service

        Args:
            spec: Service spec (Name, TaskTemplate, Mode, ...)
            auth: Registry credentials for pulling the image

        Returns:
            Service carrying the create response (ID, Warning)
        """
        conf = await self._dial('/services/create', 'POST', CREATE, data=spec, authconfig=auth)
        return self.prepare_model(conf)

    async def list(self, filters: Optional[Dict[str, Any]] = None,
                   status: bool = False) -> List[Service]:
        """
        List services

        Args:
            filters: Filters to apply (id, label, mode, name)
            status: Include ServiceStatus (running and desired task counts)
        """
        params = {'filters': filters, 'status': status or None}
        data = await self._dial('/services', 'GET', LIST, params=params)
        return self.prepare_models(data)
