"""
Live response streams
Logs, attach, events, stats, archives and progress output
"""

import asyncio
import json
import logging
import socket
import struct
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Tuple

from .config import DEFAULT_CHUNK_SIZE
from .exceptions import DockerException, StreamError

logger = logging.getLogger(__name__)

STDIN = 0
STDOUT = 1
STDERR = 2

# stream type, 3 padding bytes, big-endian payload length
FRAME_HEADER = struct.Struct('>BxxxL')


class Stream:
    """
    Live byte stream returned by streaming and hijacked calls

    Blocking reads and writes run in a worker thread, so awaiting them never
    blocks the event loop. The stream owns its HTTP connection: close it
    (or use ``async with``) once consumed.
    """

    def __init__(self, reader, response=None, connection=None, sock=None,
                 chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Args:
            reader: Binary file-like object with read/read1/readline
            response: HTTP response the stream belongs to
            connection: HTTP connection to close with the stream
            sock: Raw socket for hijacked (stdin-enabled) connections
            chunk_size: Maximum bytes per chunk when iterating
        """
        self._reader = reader
        self.response = response
        self.connection = connection
        self._sock = sock
        self.chunk_size = chunk_size
        self._closed = False

    def __repr__(self):
        state = 'closed' if self._closed else 'open'
        return f"<Stream: {state}>"

    @property
    def status(self) -> Optional[int]:
        return getattr(self.response, 'status', None)

    @property
    def headers(self) -> Dict[str, str]:
        if self.response is None:
            return {}
        return dict(self.response.getheaders())

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def writable(self) -> bool:
        return self._sock is not None and not self._closed

    async def read(self, size: Optional[int] = None) -> bytes:
        """Read up to size bytes, or everything until EOF when size is None"""
        return await asyncio.to_thread(self._reader.read, size)

    async def read_chunk(self) -> bytes:
        """Read whatever is available, at most chunk_size bytes; b'' at EOF"""
        return await asyncio.to_thread(self._reader.read1, self.chunk_size)

    async def readline(self) -> bytes:
        return await asyncio.to_thread(self._reader.readline)

    async def write(self, data: bytes):
        """
        Send bytes to the container's stdin

        Raises:
            DockerException: If the stream was not opened with stdin
        """
        if not self.writable:
            raise DockerException("Stream is not attached to stdin")
        await asyncio.to_thread(self._sock.sendall, data)

    async def close_write(self):
        """Signal EOF on stdin while keeping the output side open"""
        if not self.writable:
            raise DockerException("Stream is not attached to stdin")
        await asyncio.to_thread(self._sock.shutdown, socket.SHUT_WR)

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._chunks()

    async def _chunks(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self.read_chunk()
            if not chunk:
                break
            yield chunk

    async def read_all(self) -> bytes:
        """Consume the stream, close it and return all chunks concatenated"""
        try:
            return b''.join([chunk async for chunk in self])
        finally:
            self.close()

    def close(self):
        if self._closed:
            return
        self._closed = True
        if self.response is not None:
            self.response.close()
        if self._sock is not None:
            self._sock.close()
        if self.connection is not None:
            self.connection.close()

    async def __aenter__(self) -> 'Stream':
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()


async def demux(stream: Stream) -> AsyncIterator[Tuple[int, bytes]]:
    """
    Split a multiplexed (non-TTY) stream into frames

    Args:
        stream: Stream from logs, attach or exec start

    Yields:
        (stream_type, payload) where stream_type is STDIN, STDOUT or STDERR

    Raises:
        StreamError: If the stream ends in the middle of a frame
    """
    buffer = b''
    async for chunk in stream:
        buffer += chunk
        while len(buffer) >= FRAME_HEADER.size:
            stream_type, length = FRAME_HEADER.unpack_from(buffer)
            end = FRAME_HEADER.size + length
            if len(buffer) < end:
                break
            payload = buffer[FRAME_HEADER.size:end]
            buffer = buffer[end:]
            if payload:
                yield stream_type, payload

    if buffer:
        raise StreamError(f"Stream ended inside a frame ({len(buffer)} bytes left)")


async def iter_json(stream: Stream) -> AsyncIterator[Dict[str, Any]]:
    """Yield newline-delimited JSON documents (events, progress, stats)"""
    while True:
        line = await stream.readline()
        if not line:
            break

        line = line.strip()
        if not line:
            continue

        try:
            yield json.loads(line.decode('utf-8'))
        except json.JSONDecodeError:
            logger.debug(f"Skipping non-JSON line: {line[:80]!r}")


async def follow_progress(stream: Stream,
                          callback: Optional[Callable[[str], None]] = None) -> List[Dict[str, Any]]:
    """
    Drain a pull, push or build progress stream

    Args:
        stream: Progress stream
        callback: Called with each non-empty 'stream' or 'status' message

    Returns:
        All decoded documents

    Raises:
        StreamError: If the daemon reports an error entry
    """
    documents = []
    try:
        async for document in iter_json(stream):
            documents.append(document)

            if 'error' in document:
                error_msg = document['error']
                if 'errorDetail' in document:
                    error_msg = document['errorDetail'].get('message', error_msg)
                raise StreamError(error_msg)

            msg = (document.get('stream') or document.get('status') or '').strip()
            if callback and msg:
                callback(msg)
    finally:
        stream.close()

    return documents
