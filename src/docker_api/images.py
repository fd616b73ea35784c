"""
Docker Images API
"""

import logging
from typing import Any, BinaryIO, Callable, Dict, List, Optional, Union

from .call import (SERVER_ERROR, StatusCodes, bad_parameter, bad_request, conflict,
                   not_found)
from .resource import Collection, Model
from .stream import Stream, follow_progress
from .tar_utils import make_build_context

logger = logging.getLogger(__name__)

NO_SUCH_IMAGE = not_found('no such image')

INSPECT = StatusCodes({200: True, 404: NO_SUCH_IMAGE, 500: SERVER_ERROR})
PUSH = StatusCodes({200: True, 404: NO_SUCH_IMAGE, 500: SERVER_ERROR})
TAG = StatusCodes({
    201: True,
    400: bad_parameter(),
    404: NO_SUCH_IMAGE,
    409: conflict(),
    500: SERVER_ERROR,
})
REMOVE = StatusCodes({200: True, 404: NO_SUCH_IMAGE, 409: conflict(), 500: SERVER_ERROR})
EXPORT = StatusCodes({200: True, 500: SERVER_ERROR})
SEARCH = StatusCodes({200: True, 500: SERVER_ERROR})
LIST = StatusCodes({200: True, 400: bad_request(), 500: SERVER_ERROR})
BUILD = StatusCodes({200: True, 400: bad_parameter(), 500: SERVER_ERROR})
CREATE = StatusCodes({
    200: True,
    404: not_found('repository does not exist or no read access'),
    500: SERVER_ERROR,
})
LOAD = StatusCodes({200: True, 500: SERVER_ERROR})
PRUNE = StatusCodes({200: True, 500: SERVER_ERROR})


class Image(Model):
    """Docker Image object"""

    resource = 'image'

    def __repr__(self):
        tags = self.tags
        return f"<Image: {tags[0] if tags else self.short_id}>"

    @property
    def tags(self) -> List[str]:
        return [tag for tag in self.attrs.get('RepoTags') or [] if tag != '<none>:<none>']

    @property
    def labels(self) -> Dict[str, str]:
        config = self.attrs.get('Config') or {}
        return config.get('Labels') or self.attrs.get('Labels') or {}

    async def status(self) -> 'Image':
        """
        Inspect this image

        Returns:
            New Image carrying the inspect response
        """
        conf = await self._dial(f'/images/{self.id}/json', 'GET', INSPECT)
        return self._new(conf)

    async def history(self) -> List[Dict[str, Any]]:
        """Layers this image was built from, newest first"""
        return await self._dial(f'/images/{self.id}/history', 'GET', INSPECT) or []

    async def push(self, tag: Optional[str] = None,
                   auth: Optional[Dict[str, Any]] = None) -> Stream:
        """
        Push this image to its registry

        Args:
            tag: Tag to push (default: all tags)
            auth: Registry credentials (username, password, serveraddress or identitytoken)

        Returns:
            Progress stream, see stream.follow_progress
        """
        return await self._dial(
            f'/images/{self.id}/push', 'POST', PUSH,
            params={'tag': tag}, stream=True, authconfig=auth or {},
        )

    async def tag(self, repo: str, tag: Optional[str] = None) -> 'Image':
        """
        Tag this image into a repository, then fetch its new state

        Args:
            repo: Repository name, e.g. 'registry.local/app'
            tag: Tag name (default: latest)

        Returns:
            New Image carrying the refreshed inspect data
        """
        await self._dial(f'/images/{self.id}/tag', 'POST', TAG, params={'repo': repo, 'tag': tag})
        logger.debug(f"Tagged {self.id} as {repo}:{tag or 'latest'}")
        return await self.status()

    async def remove(self, force: bool = False, noprune: bool = False) -> List[Dict[str, str]]:
        """
        Remove this image

        Args:
            force: Remove even if used by stopped containers or tagged elsewhere
            noprune: Don't delete untagged parents

        Returns:
            List of {'Untagged': ...} / {'Deleted': ...} entries
        """
        params = {'force': force, 'noprune': noprune}
        return await self._dial(f'/images/{self.id}', 'DELETE', REMOVE, params=params) or []

    async def save(self) -> Stream:
        """Export this image and its parents as a tarball stream"""
        return await self._dial(f'/images/{self.id}/get', 'GET', EXPORT, stream=True)


class ImageCollection(Collection):
    """Docker Images collection"""

    model = Image

    async def list(self, all: bool = False, filters: Optional[Dict[str, Any]] = None,
                   digests: bool = False, name: Optional[str] = None) -> List[Image]:
        """
        List images

        Args:
            all: Show all images (including intermediates)
            filters: Filters to apply
            digests: Include digest information
            name: Only images matching this reference (e.g. 'alpine' or 'app:*')

        Returns:
            List of Image objects
        """
        filters = dict(filters or {})
        if name:
            filters['reference'] = [name]

        params = {'all': all, 'filters': filters or None, 'digests': digests or None}
        images_data = await self._dial('/images/json', 'GET', LIST, params=params)
        return self.prepare_models(images_data)

    async def search(self, term: str, limit: Optional[int] = None,
                     filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Search Docker Hub; returns the raw result entries"""
        params = {'term': term, 'limit': limit, 'filters': filters}
        return await self._dial('/images/search', 'GET', SEARCH, params=params) or []

    async def build(self, context: Union[str, bytes, BinaryIO], tag: Optional[str] = None,
                    dockerfile: str = 'Dockerfile', buildargs: Optional[Dict[str, str]] = None,
                    platform: Optional[str] = None, rm: bool = True, nocache: bool = False,
                    pull: bool = False, labels: Optional[Dict[str, str]] = None,
                    target: Optional[str] = None,
                    registryconfig: Optional[Dict[str, Any]] = None,
                    **params) -> Stream:
        """
        Build image from a context archive

        Args:
            context: Build context directory, or tar archive bytes / binary file
            tag: Tag for the image
            dockerfile: Dockerfile path inside the context
            buildargs: Build arguments
            platform: Target platform
            rm: Remove intermediate containers
            nocache: Do not use the build cache
            pull: Always attempt to pull newer base images
            labels: Labels to set on the image
            target: Build stage to stop at
            registryconfig: Credentials per registry for pulling base images
            **params: Further /build query parameters

        Returns:
            Progress stream, see stream.follow_progress
        """
        if isinstance(context, str):
            context = make_build_context(context, dockerfile)

        query = {
            'dockerfile': dockerfile,
            't': tag,
            'buildargs': buildargs,
            'platform': platform,
            'rm': rm,
            'nocache': nocache or None,
            'pull': pull or None,
            'labels': labels,
            'target': target,
        }
        query.update(params)

        return await self._dial(
            '/build', 'POST', BUILD,
            params=query, file=context, stream=True, registryconfig=registryconfig,
        )

    async def create(self, from_image: Optional[str] = None, tag: Optional[str] = None,
                     platform: Optional[str] = None, from_src: Optional[str] = None,
                     repo: Optional[str] = None,
                     auth: Optional[Dict[str, Any]] = None) -> Stream:
        """
        Create an image by pulling it or importing it

        Args:
            from_image: Image to pull
            tag: Tag or digest to pull
            platform: Platform to pull for
            from_src: Source URL to import from ('-' for the request body)
            repo: Repository name for an import
            auth: Registry credentials

        Returns:
            Progress stream
        """
        params = {
            'fromImage': from_image,
            'tag': tag,
            'platform': platform,
            'fromSrc': from_src,
            'repo': repo,
        }
        return await self._dial('/images/create', 'POST', CREATE,
                                params=params, stream=True, authconfig=auth)

    async def pull(self, repository: str, tag: str = 'latest',
                   auth: Optional[Dict[str, Any]] = None, platform: Optional[str] = None,
                   callback: Optional[Callable[[str], None]] = None) -> Image:
        """
        Pull image from registry and wait for it

        Args:
            repository: Repository name
            tag: Image tag or digest (sha256:...)
            auth: Registry credentials
            platform: Platform (e.g., linux/amd64)
            callback: Called with each progress message

        Returns:
            Image object with inspect data

        Raises:
            StreamError: If the pull reports an error
        """
        stream = await self.create(from_image=repository, tag=tag, platform=platform, auth=auth)
        await follow_progress(stream, callback)

        # Digests (sha256:...) are referenced with @, tags with :
        separator = '@' if ':' in tag else ':'
        full_name = f"{repository}{separator}{tag}"
        logger.info(f"Pulled {full_name}")
        return await self.get(full_name).status()

    async def save(self, names: List[str]) -> Stream:
        """Export several images as one tarball stream"""
        return await self._dial('/images/get', 'GET', EXPORT, params={'names': names}, stream=True)

    async def load(self, archive: Union[bytes, BinaryIO], quiet: bool = False) -> Stream:
        """
        Load images from a tarball produced by save

        Returns:
            Progress stream
        """
        return await self._dial('/images/load', 'POST', LOAD,
                                params={'quiet': quiet}, file=archive, stream=True)

    async def prune(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Remove unused images

        Returns:
            Dict with ImagesDeleted and SpaceReclaimed
        """
        return await self._dial('/images/prune', 'POST', PRUNE, params={'filters': filters})
