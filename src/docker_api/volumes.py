"""
Docker Volumes API
"""

from typing import Any, Dict, List, Optional

from .call import SERVER_ERROR, StatusCodes, conflict, not_found
from .resource import Collection, Model

NO_SUCH_VOLUME = not_found('no such volume')

INSPECT = StatusCodes({200: True, 404: NO_SUCH_VOLUME, 500: SERVER_ERROR})
REMOVE = StatusCodes({
    204: True,
    404: NO_SUCH_VOLUME,
    409: conflict('volume is in use and cannot be removed'),
    500: SERVER_ERROR,
})
LIST = StatusCodes({200: True, 500: SERVER_ERROR})
CREATE = StatusCodes({201: True, 500: SERVER_ERROR})
PRUNE = StatusCodes({200: True, 500: SERVER_ERROR})


class Volume(Model):
    """Docker Volume object, identified by name"""

    resource = 'volume'
    id_attribute = 'Name'

    @property
    def name(self) -> str:
        return self.id

    @property
    def mountpoint(self) -> str:
        return self.attrs.get('Mountpoint', '')

    async def status(self) -> 'Volume':
        conf = await self._dial(f'/volumes/{self.id}', 'GET', INSPECT)
        return self._new(conf)

    async def remove(self, force: bool = False) -> Any:
        """
        Remove volume

        Args:
            force: Remove even if the volume is in use
        """
        return await self._dial(f'/volumes/{self.id}', 'DELETE', REMOVE,
                                params={'force': force or None})


class VolumeCollection(Collection):
    """Docker Volumes collection"""

    model = Volume

    async def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Volume]:
        """
        List volumes

        Args:
            filters: Filters to apply (e.g. {'dangling': ['true']})

        Returns:
            List of Volume objects
        """
        data = await self._dial('/volumes', 'GET', LIST, params={'filters': filters})
        return self.prepare_models((data or {}).get('Volumes'))

    async def create(self, name: Optional[str] = None, driver: str = 'local',
                     driver_opts: Optional[Dict[str, str]] = None,
                     labels: Optional[Dict[str, str]] = None) -> Volume:
        """
        Create volume

        Args:
            name: Volume name (daemon generates one when omitted)
            driver: Volume driver
            driver_opts: Driver options
            labels: Labels dict

        Returns:
            Volume carrying the created volume's data
        """
        data = {'Driver': driver}
        if name:
            data['Name'] = name
        if driver_opts:
            data['DriverOpts'] = driver_opts
        if labels:
            data['Labels'] = labels

        conf = await self._dial('/volumes/create', 'POST', CREATE, data=data)
        return self.prepare_model(conf)

    async def prune(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Remove unused volumes

        Returns:
            Dict with VolumesDeleted and SpaceReclaimed
        """
        return await self._dial('/volumes/prune', 'POST', PRUNE, params={'filters': filters})
