"""
TAR archive helpers for build contexts and container uploads

Public helpers: create_tar and make_build_context pack archives for
ContainerFs.put and ImageCollection.build; list_tar_contents inspects an
archive fetched with ContainerFs.get or Image.save.
"""

import fnmatch
import io
import os
import tarfile
from typing import List, Optional


def create_tar_from_file(file_path: str, arcname: Optional[str] = None) -> bytes:
    """
    Create tar archive from a single file

    Args:
        file_path: Path to file to archive
        arcname: Name of file in archive (default: basename of file_path)

    Returns:
        Tar archive as bytes
    """
    if arcname is None:
        arcname = os.path.basename(file_path)

    tar_stream = io.BytesIO()
    with tarfile.open(fileobj=tar_stream, mode='w') as tar:
        tar.add(file_path, arcname=arcname)

    return tar_stream.getvalue()


def create_tar_from_directory(dir_path: str, arcname: Optional[str] = None) -> bytes:
    """
    Create tar archive from a directory

    Args:
        dir_path: Path to directory to archive
        arcname: Name of directory in archive (default: basename of dir_path)

    Returns:
        Tar archive as bytes
    """
    if arcname is None:
        arcname = os.path.basename(os.path.normpath(dir_path))

    tar_stream = io.BytesIO()
    with tarfile.open(fileobj=tar_stream, mode='w') as tar:
        tar.add(dir_path, arcname=arcname)

    return tar_stream.getvalue()


def create_tar(path: str) -> bytes:
    """Archive a file or a directory, whichever path points to"""
    if os.path.isfile(path):
        return create_tar_from_file(path)
    if os.path.isdir(path):
        return create_tar_from_directory(path)
    raise FileNotFoundError(f"Source path not found: {path}")


def read_dockerignore(context_dir: str) -> List[str]:
    """Patterns from .dockerignore, without comments and blank lines"""
    ignore_file = os.path.join(context_dir, '.dockerignore')
    if not os.path.exists(ignore_file):
        return []

    with open(ignore_file, 'r', encoding='utf-8') as f:
        lines = [line.strip() for line in f]
    return [line.rstrip('/') for line in lines if line and not line.startswith('#')]


def is_ignored(relative_path: str, patterns: List[str]) -> bool:
    """
    Match a context-relative path against .dockerignore patterns

    Later patterns win; '!' re-includes a path. A matching directory
    excludes everything below it.
    """
    relative_path = relative_path.replace(os.sep, '/')
    parts = relative_path.split('/')
    prefixes = ['/'.join(parts[:i]) for i in range(1, len(parts) + 1)]

    ignored = False
    for pattern in patterns:
        negate = pattern.startswith('!')
        if negate:
            pattern = pattern[1:]
        pattern = pattern.lstrip('/')
        if any(fnmatch.fnmatchcase(prefix, pattern) for prefix in prefixes):
            ignored = not negate
    return ignored


def make_build_context(context_dir: str, dockerfile: Optional[str] = None) -> bytes:
    """
    Pack a directory into a build context archive

    Args:
        context_dir: Build context directory
        dockerfile: Dockerfile path relative to the context; always included

    Returns:
        Tar archive as bytes
    """
    patterns = read_dockerignore(context_dir)
    keep = {dockerfile.replace(os.sep, '/')} if dockerfile else set()

    tar_stream = io.BytesIO()
    with tarfile.open(fileobj=tar_stream, mode='w') as tar:
        for root, dirs, files in os.walk(context_dir):
            dirs.sort()
            for file in sorted(files):
                file_path = os.path.join(root, file)
                arcname = os.path.relpath(file_path, context_dir).replace(os.sep, '/')
                if arcname not in keep and is_ignored(arcname, patterns):
                    continue
                tar.add(file_path, arcname=arcname)

    return tar_stream.getvalue()


def list_tar_contents(tar_data: bytes) -> List[str]:
    """
    List contents of tar archive

    Args:
        tar_data: Tar archive as bytes

    Returns:
        List of filenames in archive
    """
    with tarfile.open(fileobj=io.BytesIO(tar_data), mode='r') as tar:
        return tar.getnames()
