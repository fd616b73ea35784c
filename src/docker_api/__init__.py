"""
Async Docker Engine API client
Maps daemon resources (containers, images, networks, volumes, swarm objects)
onto per-resource handles and collections
"""

from .call import Call, ErrorKind, Failure, StatusCodes
from .client import DockerClient
from .config import ClientConfig
from .containers import Container, ContainerFs, Exec
from .exceptions import (
    APIError,
    Conflict,
    ContainerNotFound,
    DockerException,
    ImageNotFound,
    NetworkNotFound,
    NotFound,
    StreamError,
    VolumeNotFound,
)
from .http_client import DockerHTTPClient
from .images import Image
from .networks import Network
from .nodes import Node
from .plugins import Plugin
from .secrets import Secret
from .services import Service
from .stream import Stream, demux, follow_progress, iter_json
from .swarm import Swarm
from .tar_utils import create_tar, list_tar_contents, make_build_context
from .tasks import Task
from .volumes import Volume

__all__ = [
    'DockerClient',
    'DockerHTTPClient',
    'ClientConfig',
    'Call',
    'ErrorKind',
    'Failure',
    'StatusCodes',
    'Container',
    'ContainerFs',
    'Exec',
    'Image',
    'Network',
    'Node',
    'Plugin',
    'Secret',
    'Service',
    'Swarm',
    'Task',
    'Volume',
    'Stream',
    'demux',
    'follow_progress',
    'iter_json',
    'create_tar',
    'make_build_context',
    'list_tar_contents',
    'DockerException',
    'APIError',
    'NotFound',
    'ContainerNotFound',
    'ImageNotFound',
    'NetworkNotFound',
    'VolumeNotFound',
    'Conflict',
    'StreamError',
]

__version__ = '1.0.0'
