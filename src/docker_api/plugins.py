"""
Docker Plugins API
"""

import logging
from typing import Any, BinaryIO, Dict, List, Optional, Union

from .call import SERVER_ERROR, StatusCodes, not_found
from .resource import Collection, Model
from .stream import Stream

logger = logging.getLogger(__name__)

NO_SUCH_PLUGIN = not_found('no such plugin')
PLUGIN_NOT_FOUND = not_found('plugin not found')

INSPECT = StatusCodes({200: True, 404: NO_SUCH_PLUGIN, 500: SERVER_ERROR})
REMOVE = INSPECT
ENABLE = StatusCodes({200: True, 404: PLUGIN_NOT_FOUND, 500: SERVER_ERROR})
PUSH = ENABLE
SET = StatusCodes({204: True, 404: PLUGIN_NOT_FOUND, 500: SERVER_ERROR})
UPGRADE = StatusCodes({
    200: True,
    204: True,
    404: not_found('plugin not installed'),
    500: SERVER_ERROR,
})
PRIVILEGES = StatusCodes({200: True, 500: SERVER_ERROR})
LIST = StatusCodes({200: True, 500: SERVER_ERROR})
PULL = StatusCodes({200: True, 204: True, 500: SERVER_ERROR})
CREATE = StatusCodes({204: True, 500: SERVER_ERROR})


class Plugin(Model):
    """Docker managed plugin, identified by its name (e.g. 'vieux/sshfs:latest')"""

    resource = 'plugin'
    id_attribute = 'Name'

    def __repr__(self):
        return f"<Plugin: {self.id}>"

    @property
    def enabled(self) -> bool:
        return bool(self.attrs.get('Enabled'))

    @property
    def settings(self) -> Dict[str, Any]:
        return self.attrs.get('Settings') or {}

    async def status(self) -> 'Plugin':
        conf = await self._dial(f'/plugins/{self.id}/json', 'GET', INSPECT)
        return self._new(conf)

    async def remove(self, force: bool = False) -> Any:
        """
        Remove plugin

        Args:
            force: Disable the plugin first if it is enabled
        """
        return await self._dial(f'/plugins/{self.id}', 'DELETE', REMOVE,
                                params={'force': force or None})

    async def enable(self, timeout: int = 0) -> 'Plugin':
        """Enable plugin; timeout is the daemon-side HTTP client timeout in seconds"""
        await self._dial(f'/plugins/{self.id}/enable', 'POST', ENABLE,
                         params={'timeout': timeout})
        return self._new()

    async def disable(self, force: bool = False) -> 'Plugin':
        await self._dial(f'/plugins/{self.id}/disable', 'POST', ENABLE,
                         params={'force': force or None})
        return self._new()

    async def push(self, auth: Optional[Dict[str, Any]] = None) -> Stream:
        """
        Push plugin to its registry

        Returns:
            Progress stream
        """
        return await self._dial(f'/plugins/{self.id}/push', 'POST', PUSH,
                                stream=True, authconfig=auth)

    async def set(self, settings: List[str]) -> 'Plugin':
        """
        Configure plugin

        Args:
            settings: Entries like 'DEBUG=1' or 'mount.source=/data'
        """
        await self._dial(f'/plugins/{self.id}/set', 'POST', SET, data=settings)
        return self._new()

    async def privileges(self) -> List[Dict[str, Any]]:
        """Privileges the installed plugin's remote reference requests"""
        remote = self.attrs.get('PluginReference') or self.id
        return await self._dial('/plugins/privileges', 'GET', PRIVILEGES,
                                params={'remote': remote}) or []

    async def upgrade(self, remote: str, privileges: Optional[List[Dict[str, Any]]] = None,
                      auth: Optional[Dict[str, Any]] = None) -> Stream:
        """
        Upgrade plugin to another remote reference (the plugin must be disabled)

        Args:
            remote: Remote reference to upgrade to
            privileges: Privileges to grant, as returned by privileges()
            auth: Registry credentials

        Returns:
            Progress stream
        """
        return await self._dial(
            f'/plugins/{self.id}/upgrade', 'POST', UPGRADE,
            params={'remote': remote}, data=privileges or [], stream=True, authconfig=auth,
        )


class PluginCollection(Collection):
    """Docker plugins collection"""

    model = Plugin

    async def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Plugin]:
        data = await self._dial('/plugins', 'GET', LIST, params={'filters': filters})
        return self.prepare_models(data)

    async def privileges(self, remote: str) -> List[Dict[str, Any]]:
        """Privileges a remote plugin reference requests before install"""
        return await self._dial('/plugins/privileges', 'GET', PRIVILEGES,
                                params={'remote': remote}) or []

    async def install(self, remote: str, name: Optional[str] = None,
                      privileges: Optional[List[Dict[str, Any]]] = None,
                      auth: Optional[Dict[str, Any]] = None) -> Stream:
        """
        Pull and install a plugin

        Args:
            remote: Remote reference, e.g. 'vieux/sshfs:latest'
            name: Local name (default: remote)
            privileges: Privileges to grant (see privileges())
            auth: Registry credentials

        Returns:
            Progress stream; the plugin is disabled once installed
        """
        params = {'remote': remote, 'name': name}
        logger.debug(f"Installing plugin {remote}")
        return await self._dial('/plugins/pull', 'POST', PULL, params=params,
                                data=privileges or [], stream=True, authconfig=auth)

    async def create(self, name: str, archive: Union[bytes, BinaryIO]) -> Plugin:
        """
        Create plugin from a tar archive holding config.json and rootfs/

        Returns:
            Plugin handle for name
        """
        await self._dial('/plugins/create', 'POST', CREATE, params={'name': name}, file=archive)
        return self.get(name)
