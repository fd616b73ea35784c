import os
import socket
import tempfile
import threading
import time

import pytest

from docker_api.client import DockerClient
from docker_api.config import ClientConfig
from docker_api.stream import iter_json

pytestmark = pytest.mark.skipif(not hasattr(socket, 'AF_UNIX'), reason='needs Unix sockets')

REQUEST_TIMEOUT = 0.3
PAUSE = 1.0


def chunk(data: bytes) -> bytes:
    return f'{len(data):x}\r\n'.encode() + data + b'\r\n'


class QuietDaemon:
    """Unix socket server answering one request in parts, idling between them"""

    def __init__(self, path, parts):
        self.parts = parts
        self.listener = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self.listener.bind(path)
        self.listener.listen(1)
        self.thread = threading.Thread(target=self._serve, daemon=True)
        self.thread.start()

    def _serve(self):
        conn, _ = self.listener.accept()
        with conn:
            request = b''
            while b'\r\n\r\n' not in request:
                data = conn.recv(4096)
                if not data:
                    return
                request += data
            for index, part in enumerate(self.parts):
                if index:
                    time.sleep(PAUSE)
                try:
                    conn.sendall(part)
                except OSError:
                    return

    def close(self):
        self.listener.close()
        self.thread.join(PAUSE * 3)


@pytest.fixture
def socket_path():
    with tempfile.TemporaryDirectory() as tmp:
        yield os.path.join(tmp, 'docker.sock')


@pytest.fixture
def daemon(socket_path):
    servers = []

    def start(parts):
        server = QuietDaemon(socket_path, parts)
        servers.append(server)
        config = ClientConfig(base_url=f'unix://{socket_path}', timeout=REQUEST_TIMEOUT)
        return DockerClient(config=config)

    yield start
    for server in servers:
        server.close()


def json_response(body: bytes) -> bytes:
    return (
        b'HTTP/1.1 200 OK\r\n'
        b'Content-Type: application/json\r\n'
        b'Content-Length: ' + str(len(body)).encode() + b'\r\n\r\n' + body
    )


async def test_events_survive_quiet_periods(daemon):
    client = daemon([
        b'HTTP/1.1 200 OK\r\n'
        b'Content-Type: application/json\r\n'
        b'Transfer-Encoding: chunked\r\n\r\n' + chunk(b'{"status": "start"}\n'),
        chunk(b'{"status": "die"}\n') + b'0\r\n\r\n',
    ])

    stream = await client.events()
    async with stream:
        documents = [document async for document in iter_json(stream)]

    assert documents == [{'status': 'start'}, {'status': 'die'}]


async def test_wait_outlasts_request_timeout(daemon):
    client = daemon([b'', json_response(b'{"StatusCode": 0}')])

    result = await client.containers.get('abc').wait()

    assert result == {'StatusCode': 0}


async def test_plain_request_still_times_out(daemon):
    client = daemon([b'', json_response(b'{}')])

    with pytest.raises(socket.timeout):
        await client.info()
