import io
import json

import pytest

from docker_api.call import Call, ErrorKind, StatusCodes, not_found
from docker_api.config import ClientConfig
from docker_api.containers import ARCHIVE_INFO, ATTACH, CREATE, INSPECT, LOGS
from docker_api.exceptions import APIError, ContainerNotFound, ImageNotFound
from docker_api.http_client import DockerHTTPClient, encode_auth, encode_query
from docker_api.stream import Stream

OK = StatusCodes({200: True})


class FakeSocket:
    def __init__(self):
        self.sent = []
        self.closed = False
        self.timeout = 60

    def settimeout(self, timeout):
        self.timeout = timeout

    def sendall(self, data):
        self.sent.append(data)

    def close(self):
        self.closed = True


class FakeResponse:
    def __init__(self, status, body=b'', headers=None):
        self.status = status
        self.fp = io.BytesIO(body)
        self._headers = headers or []
        self.closed = False

    def read(self, size=None):
        return self.fp.read(size)

    def read1(self, size=-1):
        return self.fp.read1(size)

    def readline(self):
        return self.fp.readline()

    def getheaders(self):
        return list(self._headers)

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, response):
        self.response = response
        self.sock = FakeSocket()
        self.timeout = 60
        self.requests = []
        self.closed = False

    def request(self, method, url, body=None, headers=None):
        self.requests.append((method, url, body, headers))

    def getresponse(self):
        return self.response

    def close(self):
        self.closed = True


@pytest.fixture
def http():
    return DockerHTTPClient(ClientConfig(base_url='tcp://127.0.0.1:2375', api_version='1.43'))


@pytest.fixture
def answer(http, monkeypatch):
    """Make the next connection answer with the given response"""
    def install(status, body=b'', headers=None):
        conn = FakeConnection(FakeResponse(status, body, headers))
        monkeypatch.setattr(http, '_connect', lambda: conn)
        return conn
    return install


def test_encode_query():
    query = encode_query({
        'all': True,
        'limit': None,
        'filters': {'status': ['running']},
        'names': ['a', 'b'],
        'tail': 10,
    })

    assert query == (
        'all=true'
        '&filters=%7B%22status%22%3A%20%5B%22running%22%5D%7D'
        '&names=a&names=b'
        '&tail=10'
    )


def test_encode_query_empty():
    assert encode_query(None) == ''
    assert encode_query({'a': None}) == ''


def test_encode_auth():
    assert encode_auth({}) == 'e30='


def test_build_url_versioned(http):
    call = Call('/containers/json', 'GET', OK, params={'all': False})

    assert http.build_url(call) == '/v1.43/containers/json?all=false'


def test_build_headers(http):
    call = Call('/images/create', 'POST', OK, authconfig={}, registryconfig={'r': {}})

    headers = http.build_headers(call)

    assert headers['Host'] == '127.0.0.1:2375'
    assert headers['X-Registry-Auth'] == 'e30='
    assert 'X-Registry-Config' in headers
    assert 'Upgrade' not in headers


def test_build_headers_hijack(http):
    headers = http.build_headers(Call('/exec/e/start', 'POST', OK, hijack=True))

    assert headers['Connection'] == 'Upgrade'
    assert headers['Upgrade'] == 'tcp'


def test_build_body_json(http):
    headers = {}
    body = http.build_body(Call('/x', 'POST', OK, data={'a': 1}), headers)

    assert json.loads(body) == {'a': 1}
    assert headers['Content-Type'] == 'application/json'


def test_build_body_tar(http):
    headers = {}
    body = http.build_body(Call('/x', 'PUT', OK, file=b'tar'), headers)

    assert body == b'tar'
    assert headers['Content-Type'] == 'application/x-tar'
    assert headers['Content-Length'] == '3'


def test_unsupported_scheme():
    with pytest.raises(ValueError):
        DockerHTTPClient(ClientConfig(base_url='ssh://user@host'))


def test_tls_default_port():
    http = DockerHTTPClient(ClientConfig(base_url='tcp://docker.local', tls_verify=True))

    assert http.port == 2376


async def test_dial_json(http, answer):
    conn = answer(201, b'{"Id": "abc", "Warnings": []}')

    result = await http.dial(Call('/containers/create', 'POST', CREATE, data={'Image': 'alpine'}))

    assert result == {'Id': 'abc', 'Warnings': []}
    assert conn.requests[0][0] == 'POST'
    assert conn.requests[0][1] == '/v1.43/containers/create'
    assert conn.closed


async def test_dial_empty_and_text(http, answer):
    answer(204)
    assert await http.dial(Call('/containers/a/start', 'POST', StatusCodes({204: True}))) is None

    answer(200, b'OK')
    assert await http.dial(Call('/_ping', 'GET', OK)) == 'OK'


async def test_dial_not_found(http, answer):
    answer(404, b'{"message": "No such container: ghost"}')

    with pytest.raises(ContainerNotFound) as exc_info:
        await http.dial(Call('/containers/ghost/json', 'GET', INSPECT, resource='container'))

    error = exc_info.value
    assert error.status_code == 404
    assert error.label == 'no such container'
    assert error.explanation == 'No such container: ghost'
    assert str(error) == 'container error: no such container (No such container: ghost)'


async def test_dial_failure_names_other_resource(http, answer):
    answer(404, b'{"message": "No such image: nope"}')

    with pytest.raises(ImageNotFound):
        await http.dial(Call('/containers/create', 'POST', CREATE, resource='container'))


async def test_dial_unexpected_status(http, answer):
    answer(418, b'teapot')

    with pytest.raises(APIError) as exc_info:
        await http.dial(Call('/x', 'GET', StatusCodes({200: True, 404: not_found('gone')})))

    assert exc_info.value.kind is ErrorKind.UNEXPECTED
    assert exc_info.value.explanation == 'teapot'


async def test_dial_head_returns_headers(http, answer):
    answer(200, headers=[('X-Docker-Container-Path-Stat', 'e30=')])

    headers = await http.dial(Call('/containers/a/archive', 'HEAD', ARCHIVE_INFO))

    assert headers == {'X-Docker-Container-Path-Stat': 'e30='}


async def test_dial_stream_keeps_connection(http, answer):
    conn = answer(200, b'line1\nline2\n')

    stream = await http.dial(Call('/containers/a/logs', 'GET', LOGS, stream=True))

    assert isinstance(stream, Stream)
    assert not conn.closed
    assert not stream.writable
    assert await stream.read_all() == b'line1\nline2\n'
    assert conn.closed


async def test_dial_hijacked_stream_is_writable(http, answer):
    conn = answer(101, b'output')

    stream = await http.dial(
        Call('/containers/a/attach', 'POST', ATTACH, stream=True, hijack=True, open_stdin=True)
    )
    await stream.write(b'ls\n')

    assert conn.sock.sent == [b'ls\n']
    assert await stream.read_all() == b'output'
    assert conn.sock.closed


async def test_dial_stream_drops_socket_timeout(http, answer):
    conn = answer(200, b'{}\n')

    stream = await http.dial(Call('/events', 'GET', OK, stream=True))

    assert conn.sock.timeout is None
    stream.close()


async def test_dial_without_timeout(http, answer):
    conn = answer(200, b'{"StatusCode": 0}')

    await http.dial(Call('/containers/a/wait', 'POST', OK, no_timeout=True))

    assert conn.timeout is None


async def test_dial_keeps_timeout_by_default(http, answer):
    conn = answer(200, b'{}')

    await http.dial(Call('/info', 'GET', OK))

    assert conn.timeout == 60
    assert conn.sock.timeout == 60
