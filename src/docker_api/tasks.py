"""
Docker Swarm Tasks API
"""

from typing import Any, Dict, List, Optional, Union

from .call import NOT_IN_SWARM, SERVER_ERROR, StatusCodes, not_found
from .resource import Collection, Model
from .services import EXPERIMENTAL, log_params
from .stream import Stream

NO_SUCH_TASK = not_found('no such task')

INSPECT = StatusCodes({200: True, 404: NO_SUCH_TASK, 500: SERVER_ERROR, 503: NOT_IN_SWARM})
LOGS = StatusCodes({
    101: True,
    200: True,
    404: NO_SUCH_TASK,
    500: SERVER_ERROR,
    501: EXPERIMENTAL,
    503: NOT_IN_SWARM,
})
LIST = StatusCodes({200: True, 500: SERVER_ERROR, 503: NOT_IN_SWARM})


class Task(Model):
    """Swarm task"""

    resource = 'task'
    id_attribute = 'ID'

    @property
    def state(self) -> str:
        return (self.attrs.get('Status') or {}).get('State', 'unknown')

    async def status(self) -> 'Task':
        conf = await self._dial(f'/tasks/{self.id}', 'GET', INSPECT)
        return self._new(conf)

    async def logs(self, details: bool = False, follow: bool = False, stdout: bool = True,
                   stderr: bool = True, since: Optional[int] = None, timestamps: bool = False,
                   tail: Union[str, int] = 'all') -> Stream:
        params = log_params(details, follow, stdout, stderr, since, timestamps, tail)
        return await self._dial(f'/tasks/{self.id}/logs', 'GET', LOGS,
                                params=params, stream=True)


class TaskCollection(Collection):
    """Swarm tasks collection"""

    model = Task

    async def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Task]:
        """
        List tasks

        Args:
            filters: Filters to apply (desired-state, id, label, name, node, service)
        """
        data = await self._dial('/tasks', 'GET', LIST, params={'filters': filters})
        return self.prepare_models(data)
