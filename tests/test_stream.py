import io

import pytest

from conftest import byte_stream
from docker_api.exceptions import DockerException, StreamError
from docker_api.stream import FRAME_HEADER, STDERR, STDOUT, Stream, demux, follow_progress, iter_json


def frame(stream_type: int, payload: bytes) -> bytes:
    return FRAME_HEADER.pack(stream_type, len(payload)) + payload


async def test_iterates_chunks():
    chunks = [chunk async for chunk in byte_stream(b'abcdefg', chunk_size=3)]

    assert chunks == [b'abc', b'def', b'g']


async def test_demux_splits_frames():
    data = frame(STDOUT, b'hello\n') + frame(STDERR, b'oops\n') + frame(STDOUT, b'bye\n')

    frames = [item async for item in demux(byte_stream(data, chunk_size=5))]

    assert frames == [(STDOUT, b'hello\n'), (STDERR, b'oops\n'), (STDOUT, b'bye\n')]


async def test_demux_truncated_frame():
    data = frame(STDOUT, b'hello')[:-2]

    with pytest.raises(StreamError):
        [item async for item in demux(byte_stream(data))]


async def test_iter_json_skips_noise():
    data = b'{"a": 1}\n\nnot json\n{"b": 2}\n'

    documents = [doc async for doc in iter_json(byte_stream(data))]

    assert documents == [{'a': 1}, {'b': 2}]


async def test_follow_progress_collects_documents():
    stream = byte_stream(b'{"stream": "Step 1/2\\n"}\n{"aux": {"ID": "sha256:1"}}\n')
    messages = []

    documents = await follow_progress(stream, messages.append)

    assert messages == ['Step 1/2']
    assert documents[1] == {'aux': {'ID': 'sha256:1'}}
    assert stream.closed


async def test_follow_progress_raises_on_error():
    stream = byte_stream(b'{"error": "no space left"}\n')

    with pytest.raises(StreamError, match='no space left'):
        await follow_progress(stream)

    assert stream.closed


async def test_write_requires_stdin():
    stream = byte_stream(b'')

    with pytest.raises(DockerException):
        await stream.write(b'data')


async def test_context_manager_closes():
    async with Stream(io.BytesIO(b'x')) as stream:
        assert await stream.read() == b'x'

    assert stream.closed
    stream.close()
