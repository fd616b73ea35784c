"""
Docker Containers API
"""

import base64
import json
import logging
from typing import Any, BinaryIO, Dict, List, Optional, Union

from .call import (SERVER_ERROR, StatusCodes, bad_request, conflict, forbidden, not_acceptable,
                   not_found)
from .images import Image
from .resource import Collection, Model, dial
from .stream import Stream
from .tar_utils import create_tar

logger = logging.getLogger(__name__)

NO_SUCH_CONTAINER = not_found('no such container')
NO_SUCH_EXEC = not_found('no such exec instance')
CONTAINER_PAUSED = conflict('container is paused')

INSPECT = StatusCodes({200: True, 404: NO_SUCH_CONTAINER, 500: SERVER_ERROR})
LOGS = StatusCodes({101: True, 200: True, 404: NO_SUCH_CONTAINER, 500: SERVER_ERROR})
START_STOP = StatusCodes({204: True, 304: True, 404: NO_SUCH_CONTAINER, 500: SERVER_ERROR})
ACTION = StatusCodes({204: True, 404: NO_SUCH_CONTAINER, 500: SERVER_ERROR})
RESIZE = StatusCodes({200: True, 404: NO_SUCH_CONTAINER, 500: SERVER_ERROR})
UPDATE = StatusCodes({
    200: True,
    400: bad_request(),
    404: NO_SUCH_CONTAINER,
    500: SERVER_ERROR,
})
RENAME = StatusCodes({
    204: True,
    404: NO_SUCH_CONTAINER,
    409: conflict('name already taken'),
    500: SERVER_ERROR,
})
ATTACH = StatusCodes({
    101: True,
    200: True,
    400: bad_request(),
    404: NO_SUCH_CONTAINER,
    500: SERVER_ERROR,
})
WAIT = StatusCodes({200: True, 400: bad_request(), 404: NO_SUCH_CONTAINER, 500: SERVER_ERROR})
REMOVE = StatusCodes({
    204: True,
    400: bad_request(),
    404: NO_SUCH_CONTAINER,
    409: conflict(),
    500: SERVER_ERROR,
})
COMMIT = StatusCodes({201: True, 404: NO_SUCH_CONTAINER, 500: SERVER_ERROR})

ARCHIVE_INFO = StatusCodes({
    200: True,
    400: bad_request(),
    404: not_found('no such container or path'),
    500: SERVER_ERROR,
})
ARCHIVE_GET = StatusCodes({
    200: True,
    400: bad_request(),
    404: NO_SUCH_CONTAINER,
    500: SERVER_ERROR,
})
ARCHIVE_PUT = StatusCodes({
    200: True,
    400: bad_request(),
    403: forbidden('permission denied'),
    404: NO_SUCH_CONTAINER,
    500: SERVER_ERROR,
})

EXEC_CREATE = StatusCodes({
    200: True,
    201: True,
    404: not_found('no such container', resource='container'),
    409: CONTAINER_PAUSED,
    500: SERVER_ERROR,
})
EXEC_START = StatusCodes({101: True, 200: True, 404: NO_SUCH_EXEC, 409: CONTAINER_PAUSED})
EXEC_RESIZE = StatusCodes({200: True, 201: True, 404: NO_SUCH_EXEC})
EXEC_INSPECT = StatusCodes({200: True, 404: NO_SUCH_EXEC, 500: SERVER_ERROR})

LIST = StatusCodes({200: True, 400: bad_request(), 500: SERVER_ERROR})
CREATE = StatusCodes({
    200: True,
    201: True,
    400: bad_request(),
    404: not_found('no such image', resource='image'),
    406: not_acceptable('impossible to attach'),
    409: conflict(),
    500: SERVER_ERROR,
})
PRUNE = StatusCodes({200: True, 500: SERVER_ERROR})

STAT_HEADER = 'x-docker-container-path-stat'


class Exec(Model):
    """Exec instance running inside a container"""

    resource = 'exec'

    def __init__(self, modem, id: str, attrs: Optional[Dict[str, Any]] = None, container=None):
        super().__init__(modem, id, attrs)
        self.container = container

    def _new(self, attrs: Any = None) -> 'Exec':
        return Exec(self.modem, self.id, attrs if isinstance(attrs, dict) else None,
                    container=self.container)

    @property
    def exit_code(self) -> Optional[int]:
        return self.attrs.get('ExitCode')

    @property
    def running(self) -> bool:
        return bool(self.attrs.get('Running'))

    async def start(self, detach: bool = False, tty: bool = False, stdin: bool = False) -> Stream:
        """
        Start this exec instance

        Args:
            detach: Return immediately instead of streaming output
            tty: Allocate a pseudo-TTY (output is then not multiplexed)
            stdin: Hijack the connection so stdin can be written

        Returns:
            Output stream; writable when stdin is True
        """
        return await self._dial(
            f'/exec/{self.id}/start', 'POST', EXEC_START,
            data={'Detach': detach, 'Tty': tty},
            stream=True, hijack=stdin, open_stdin=stdin,
        )

    async def resize(self, height: int, width: int) -> 'Exec':
        """Resize the TTY of this exec instance"""
        await self._dial(f'/exec/{self.id}/resize', 'POST', EXEC_RESIZE,
                         params={'h': height, 'w': width})
        return self._new()

    async def status(self) -> 'Exec':
        """
        Inspect this exec instance

        Returns:
            New Exec carrying Running, ExitCode, ProcessConfig...
        """
        conf = await self._dial(f'/exec/{self.id}/json', 'GET', EXEC_INSPECT)
        return self._new(conf)


class ExecManager:
    """Exec instances of one container"""

    def __init__(self, modem, container: 'Container'):
        self.modem = modem
        self.container = container

    def __repr__(self):
        return f"<ExecManager: {self.container.short_id}>"

    def get(self, id: str) -> Exec:
        return Exec(self.modem, id, container=self.container)

    async def create(self, cmd: Union[str, List[str]], stdout: bool = True, stderr: bool = True,
                     stdin: bool = False, tty: bool = False, privileged: bool = False,
                     user: str = '', environment: Optional[Dict[str, str]] = None,
                     workdir: str = '', detach_keys: Optional[str] = None) -> Exec:
        """
        Create exec instance in running container

        Args:
            cmd: Command to execute; a string runs through 'sh -c'
            stdout: Attach to stdout
            stderr: Attach to stderr
            stdin: Attach to stdin
            tty: Allocate TTY
            privileged: Run as privileged
            user: User to run as
            environment: Environment variables
            workdir: Working directory
            detach_keys: Key sequence for detaching

        Returns:
            Exec handle; call start() to run it
        """
        exec_config = {
            'AttachStdout': stdout,
            'AttachStderr': stderr,
            'AttachStdin': stdin,
            'Tty': tty,
            'Privileged': privileged,
            'Cmd': cmd if isinstance(cmd, list) else ['sh', '-c', cmd],
        }

        if user:
            exec_config['User'] = user
        if environment:
            exec_config['Env'] = [f"{k}={v}" for k, v in environment.items()]
        if workdir:
            exec_config['WorkingDir'] = workdir
        if detach_keys:
            exec_config['DetachKeys'] = detach_keys

        conf = await dial(self.modem, Exec.resource, f'/containers/{self.container.id}/exec',
                          'POST', EXEC_CREATE, data=exec_config)
        return Exec(self.modem, conf['Id'], conf, container=self.container)


class ContainerFs:
    """Filesystem of one container, accessed through tar archives"""

    def __init__(self, modem, container: 'Container'):
        self.modem = modem
        self.container = container

    def __repr__(self):
        return f"<ContainerFs: {self.container.short_id}>"

    async def _dial(self, method: str, status_codes: StatusCodes, **kwargs) -> Any:
        return await dial(self.modem, Container.resource,
                          f'/containers/{self.container.id}/archive', method, status_codes,
                          **kwargs)

    async def info(self, path: str) -> Dict[str, Any]:
        """
        Stat a path inside the container

        Args:
            path: Path in container

        Returns:
            Dict with name, size, mode, mtime and linkTarget
        """
        headers = await self._dial('HEAD', ARCHIVE_INFO, params={'path': path})
        for name, value in (headers or {}).items():
            if name.lower() == STAT_HEADER:
                return json.loads(base64.b64decode(value).decode('utf-8'))
        return {}

    async def get(self, path: str) -> Stream:
        """
        Download path from container as tar archive

        Args:
            path: Path in container to download

        Returns:
            Stream of the tar archive
        """
        return await self._dial('GET', ARCHIVE_GET, params={'path': path}, stream=True)

    async def put(self, archive: Union[bytes, BinaryIO], path: str,
                  no_overwrite_dir_non_dir: bool = False, copy_uidgid: bool = False) -> Any:
        """
        Upload tar archive to container

        Args:
            archive: Tar archive as bytes or binary file
            path: Path in container where to extract archive
            no_overwrite_dir_non_dir: Fail instead of replacing a directory with a file (or back)
            copy_uidgid: Keep the archive's UID/GID

        Returns:
            Daemon response (usually None)
        """
        params = {
            'path': path,
            'noOverwriteDirNonDir': no_overwrite_dir_non_dir or None,
            'copyUIDGID': copy_uidgid or None,
        }
        return await self._dial('PUT', ARCHIVE_PUT, params=params, file=archive)

    async def put_path(self, src_path: str, path: str) -> Any:
        """
        Copy a local file or directory into the container

        Args:
            src_path: Path on host (file or directory)
            path: Directory in container where to place it
        """
        result = await self.put(create_tar(src_path), path)
        logger.debug(f"Copied {src_path} to {self.container.short_id}:{path}")
        return result


class Container(Model):
    """Docker Container object"""

    resource = 'container'

    def __init__(self, modem, id: str, attrs: Optional[Dict[str, Any]] = None):
        super().__init__(modem, id, attrs)
        self.fs = ContainerFs(modem, self)
        self.exec = ExecManager(modem, self)

    def __repr__(self):
        return f"<Container: {self.name or self.short_id}>"

    @property
    def name(self) -> str:
        names = self.attrs.get('Names')
        name = self.attrs.get('Name') or (names[0] if names else '')
        return name.lstrip('/')

    @property
    def state(self) -> str:
        # Inspect returns a State object, list returns a plain string
        state = self.attrs.get('State', {})
        if isinstance(state, dict):
            return state.get('Status', 'unknown')
        return state or 'unknown'

    @property
    def image(self) -> str:
        config = self.attrs.get('Config') or {}
        return config.get('Image') or self.attrs.get('Image', '')

    @property
    def labels(self) -> Dict[str, str]:
        config = self.attrs.get('Config') or {}
        return config.get('Labels') or self.attrs.get('Labels') or {}

    @property
    def warnings(self) -> List[str]:
        return self.attrs.get('Warnings') or []

    async def status(self, size: bool = False) -> 'Container':
        """
        Inspect this container

        Args:
            size: Include SizeRw and SizeRootFs

        Returns:
            New Container carrying the inspect response
        """
        conf = await self._dial(f'/containers/{self.id}/json', 'GET', INSPECT,
                                params={'size': size or None})
        return self._new(conf)

    async def top(self, ps_args: Optional[str] = None) -> Dict[str, Any]:
        """Processes running inside the container ({'Titles': [...], 'Processes': [...]})"""
        return await self._dial(f'/containers/{self.id}/top', 'GET', INSPECT,
                                params={'ps_args': ps_args})

    async def logs(self, follow: bool = False, stdout: bool = True, stderr: bool = True,
                   since: Optional[int] = None, until: Optional[int] = None,
                   timestamps: bool = False, tail: Union[str, int] = 'all') -> Stream:
        """
        Get container logs

        Args:
            follow: Keep the stream open for new output
            stdout: Return stdout stream
            stderr: Return stderr stream
            since: Show logs since timestamp (Unix epoch)
            until: Show logs before timestamp (Unix epoch)
            timestamps: Show timestamps
            tail: Number of lines to show from end ('all' for all)

        Returns:
            Log stream; multiplexed unless the container has a TTY (see stream.demux)
        """
        params = {
            'follow': follow,
            'stdout': stdout,
            'stderr': stderr,
            'since': since,
            'until': until,
            'timestamps': timestamps,
            'tail': tail,
        }
        return await self._dial(f'/containers/{self.id}/logs', 'GET', LOGS,
                                params=params, stream=True)

    async def changes(self) -> List[Dict[str, Any]]:
        """Filesystem changes since creation ({'Path': ..., 'Kind': 0|1|2})"""
        return await self._dial(f'/containers/{self.id}/changes', 'GET', INSPECT) or []

    async def export_stream(self) -> Stream:
        """Export the container filesystem as a live tarball stream"""
        return await self._dial(f'/containers/{self.id}/export', 'GET', INSPECT, stream=True)

    async def export(self) -> bytes:
        """
        Export the container filesystem

        Returns:
            The whole tarball, buffered in memory
        """
        stream = await self.export_stream()
        return await stream.read_all()

    async def stats(self, stream: bool = True, one_shot: bool = False) -> Stream:
        """
        Resource usage statistics

        Args:
            stream: Keep emitting one JSON document per second
            one_shot: With stream=False, skip the pre-sample wait

        Returns:
            Stream of JSON documents (see stream.iter_json)
        """
        params = {'stream': stream, 'one-shot': one_shot or None}
        return await self._dial(f'/containers/{self.id}/stats', 'GET', INSPECT,
                                params=params, stream=True)

    async def resize(self, height: int, width: int) -> 'Container':
        """Resize the container TTY"""
        await self._dial(f'/containers/{self.id}/resize', 'POST', RESIZE,
                         params={'h': height, 'w': width})
        return self._new()

    async def start(self, detach_keys: Optional[str] = None) -> 'Container':
        """Start this container"""
        await self._dial(f'/containers/{self.id}/start', 'POST', START_STOP,
                         params={'detachKeys': detach_keys})
        return self._new()

    async def stop(self, timeout: Optional[int] = None,
                   signal: Optional[str] = None) -> 'Container':
        """
        Stop this container

        Args:
            timeout: Seconds to wait before killing (daemon default when None)
            signal: Signal to send instead of the configured stop signal
        """
        await self._dial(f'/containers/{self.id}/stop', 'POST', START_STOP,
                         params={'t': timeout, 'signal': signal})
        return self._new()

    async def restart(self, timeout: Optional[int] = None,
                      signal: Optional[str] = None) -> 'Container':
        """Restart this container"""
        await self._dial(f'/containers/{self.id}/restart', 'POST', ACTION,
                         params={'t': timeout, 'signal': signal})
        return self._new()

    async def kill(self, signal: str = 'SIGKILL') -> 'Container':
        """Kill this container"""
        await self._dial(f'/containers/{self.id}/kill', 'POST', ACTION,
                         params={'signal': signal})
        return self._new()

    async def update(self, **resources) -> 'Container':
        """
        Update resource limits and restart policy

        Args:
            **resources: Body fields, e.g. Memory=..., CpuShares=..., RestartPolicy={...}

        Returns:
            New Container whose snapshot holds the daemon's Warnings
        """
        res = await self._dial(f'/containers/{self.id}/update', 'POST', UPDATE, data=resources)
        return self._new(res)

    async def rename(self, name: str) -> 'Container':
        """Rename this container"""
        await self._dial(f'/containers/{self.id}/rename', 'POST', RENAME, params={'name': name})
        return self._new()

    async def pause(self) -> 'Container':
        await self._dial(f'/containers/{self.id}/pause', 'POST', ACTION)
        return self._new()

    async def unpause(self) -> 'Container':
        await self._dial(f'/containers/{self.id}/unpause', 'POST', ACTION)
        return self._new()

    async def attach(self, stdin: bool = False, stdout: bool = True, stderr: bool = True,
                     stream: bool = True, logs: bool = False,
                     detach_keys: Optional[str] = None) -> Stream:
        """
        Attach to the container's stdio

        Args:
            stdin: Hijack the connection so stdin can be written
            stdout: Attach to stdout
            stderr: Attach to stderr
            stream: Stream output produced from now on
            logs: Replay output produced so far
            detach_keys: Key sequence for detaching

        Returns:
            Output stream; writable when stdin is True
        """
        params = {
            'stdin': stdin,
            'stdout': stdout,
            'stderr': stderr,
            'stream': stream,
            'logs': logs,
            'detachKeys': detach_keys,
        }
        return await self._dial(f'/containers/{self.id}/attach', 'POST', ATTACH,
                                params=params, stream=True, hijack=stdin, open_stdin=stdin)

    async def wait(self, condition: Optional[str] = None) -> Dict[str, Any]:
        """
        Block until the container stops

        Args:
            condition: 'not-running' (default), 'next-exit' or 'removed'

        Returns:
            Dict with StatusCode and, on failure, Error
        """
        return await self._dial(f'/containers/{self.id}/wait', 'POST', WAIT,
                                params={'condition': condition}, no_timeout=True)

    async def remove(self, v: bool = False, force: bool = False, link: bool = False) -> Any:
        """
        Remove this container

        Args:
            v: Remove anonymous volumes too
            force: Kill the container first if it is running
            link: Remove the link with this name instead of the container
        """
        params = {'v': v, 'force': force, 'link': link or None}
        return await self._dial(f'/containers/{self.id}', 'DELETE', REMOVE, params=params)

    async def commit(self, repository: Optional[str] = None, tag: Optional[str] = None,
                     comment: Optional[str] = None, author: Optional[str] = None,
                     pause: bool = True, changes: Optional[str] = None,
                     config: Optional[Dict[str, Any]] = None) -> Image:
        """
        Create an image from this container's changes

        Args:
            repository: Repository name for the image
            tag: Tag name
            comment: Commit message
            author: Author of the image
            pause: Pause the container while committing
            changes: Dockerfile instructions to apply
            config: Container config for the image

        Returns:
            Image handle for the new image
        """
        params = {
            'container': self.id,
            'repo': repository,
            'tag': tag,
            'comment': comment,
            'author': author,
            'pause': pause,
            'changes': changes,
        }
        res = await self._dial('/commit', 'POST', COMMIT, params=params, data=config or {})
        return Image(self.modem, res['Id'].replace('sha256:', ''))


class ContainerCollection(Collection):
    """Docker Containers collection"""

    model = Container

    async def list(self, all: bool = False, limit: Optional[int] = None, size: bool = False,
                   filters: Optional[Dict[str, Any]] = None) -> List[Container]:
        """
        List containers

        Args:
            all: Show all containers (including stopped)
            limit: Maximum number of containers to return
            size: Include SizeRw and SizeRootFs
            filters: Filters to apply

        Returns:
            List of Container objects
        """
        params = {'all': all, 'limit': limit, 'size': size or None, 'filters': filters}
        containers_data = await self._dial('/containers/json', 'GET', LIST, params=params)
        return self.prepare_models(containers_data)

    async def create(self, image: Optional[str] = None, name: Optional[str] = None,
                     platform: Optional[str] = None, command: Union[str, List[str], None] = None,
                     environment: Optional[Dict[str, str]] = None,
                     volumes: Optional[Dict[str, Dict[str, str]]] = None,
                     ports: Optional[Dict[str, int]] = None, stdin_open: bool = False,
                     tty: bool = False, network_mode: Optional[str] = None,
                     hostname: Optional[str] = None, auto_remove: bool = False,
                     **kwargs) -> Container:
        """
        Create container

        Args:
            image: Image name or ID
            name: Container name
            platform: Platform (e.g., linux/amd64)
            command: Command to run; a string runs through 'sh -c'
            environment: Environment variables
            volumes: Volume mounts {host_path: {'bind': container_path, 'mode': 'rw'}}
            ports: Port bindings {container_port: host_port}
            stdin_open: Keep STDIN open
            tty: Allocate TTY
            network_mode: Network mode
            hostname: Container hostname
            auto_remove: Auto-remove when stopped
            **kwargs: Raw create body fields (Image, Labels, HostConfig, ...),
                merged last

        Returns:
            Container whose snapshot is the create response (Id, Warnings)
        """
        config = {
            'Tty': tty,
            'OpenStdin': stdin_open,
            'StdinOnce': False,
            'AttachStdin': stdin_open,
            'AttachStdout': True,
            'AttachStderr': True,
        }
        if image:
            config['Image'] = image

        if command:
            if isinstance(command, str):
                config['Cmd'] = ['sh', '-c', command]
            else:
                config['Cmd'] = command

        if environment:
            config['Env'] = [f"{k}={v}" for k, v in environment.items()]

        if hostname:
            config['Hostname'] = hostname

        # Host config
        host_config = {}

        if auto_remove:
            host_config['AutoRemove'] = auto_remove

        if network_mode:
            host_config['NetworkMode'] = network_mode

        if volumes:
            binds = []
            for host_path, mount_info in volumes.items():
                container_path = mount_info.get('bind', '')
                mode = mount_info.get('mode', 'rw')
                binds.append(f"{host_path}:{container_path}:{mode}")
            host_config['Binds'] = binds

        if ports:
            port_bindings = {}
            exposed_ports = {}
            for container_port, host_port in ports.items():
                port_key = str(container_port) if '/' in str(container_port) else f"{container_port}/tcp"
                exposed_ports[port_key] = {}
                port_bindings[port_key] = [{'HostPort': str(host_port)}]
            config['ExposedPorts'] = exposed_ports
            host_config['PortBindings'] = port_bindings

        # Raw HostConfig fields are added to the ones built above
        host_config.update(kwargs.pop('HostConfig', None) or {})

        if host_config:
            config['HostConfig'] = host_config

        # Merge additional kwargs
        config.update(kwargs)

        params = {'name': name, 'platform': platform}
        conf = await self._dial('/containers/create', 'POST', CREATE, params=params, data=config)
        return self.prepare_model(conf)

    async def run(self, image: Optional[str] = None, command: Union[str, List[str], None] = None,
                  **kwargs) -> Container:
        """
        Create and start container

        Args:
            image: Image name
            command: Command to run
            **kwargs: Additional create parameters

        Returns:
            Container object
        """
        container = await self.create(image, command=command, **kwargs)
        await container.start()
        logger.debug(f"Started container {container.short_id}")
        return container

    async def prune(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Remove stopped containers

        Returns:
            Dict with ContainersDeleted and SpaceReclaimed
        """
        return await self._dial('/containers/prune', 'POST', PRUNE, params={'filters': filters})
