import base64

import pytest

from conftest import byte_stream
from docker_api.call import ErrorKind
from docker_api.exceptions import APIError, Conflict, NotFound
from docker_api.nodes import Node
from docker_api.swarm import Swarm


async def test_swarm_init_returns_node(client, modem):
    modem.reply('node-1')

    node = await client.swarm.init(advertise_addr='10.0.0.1')

    assert isinstance(node, Node)
    assert node.id == 'node-1'
    assert modem.last.data['AdvertiseAddr'] == '10.0.0.1'
    assert modem.last.data['ListenAddr'] == '0.0.0.0:2377'


async def test_swarm_init_already_member(client, modem):
    modem.fail(503)

    with pytest.raises(APIError) as exc_info:
        await client.swarm.init()

    assert exc_info.value.kind is ErrorKind.UNAVAILABLE
    assert exc_info.value.label == 'node is already part of a swarm'


async def test_swarm_status(client, modem):
    modem.reply({'ID': 's1', 'Version': {'Index': 7}})

    swarm = await client.swarm.status()

    assert isinstance(swarm, Swarm)
    assert swarm is not client.swarm
    assert swarm.version == 7
    assert client.swarm.attrs == {}


async def test_swarm_status_missing(client, modem):
    modem.fail(404)

    with pytest.raises(NotFound) as exc_info:
        await client.swarm.status()

    assert exc_info.value.label == 'no such swarm'


async def test_swarm_update_and_unlock(client, modem):
    modem.reply(None, {'UnlockKey': 'SWMKEY-1'}, None)

    await client.swarm.update(7, {'Name': 'default'}, rotate_worker_token=True)
    key = await client.swarm.unlock_key()
    await client.swarm.unlock(key['UnlockKey'])

    assert modem.calls[0].params['version'] == 7
    assert modem.calls[0].params['rotateWorkerToken'] is True
    assert modem.calls[2].data == {'UnlockKey': 'SWMKEY-1'}


async def test_swarm_join_and_leave(client, modem):
    await client.swarm.join(['10.0.0.1:2377'], 'SWMTKN-1')
    await client.swarm.leave(force=True)

    assert modem.calls[0].data['RemoteAddrs'] == ['10.0.0.1:2377']
    assert modem.calls[1].params == {'force': True}


async def test_node_list_uses_capital_id(client, modem):
    modem.reply([{'ID': 'n1', 'Version': {'Index': 3}}])

    nodes = await client.nodes.list()

    assert nodes[0].id == 'n1'
    assert nodes[0].version == 3


async def test_node_not_in_swarm(client, modem):
    modem.fail(503)

    with pytest.raises(APIError) as exc_info:
        await client.nodes.get('n1').status()

    assert exc_info.value.label == 'node is not part of a swarm'


async def test_node_update(client, modem):
    await client.nodes.get('n1').update(3, {'Availability': 'drain'})

    assert modem.last.path == '/nodes/n1/update'
    assert modem.last.params == {'version': 3}
    assert modem.last.data == {'Availability': 'drain'}


async def test_service_create_with_auth(client, modem):
    modem.reply({'ID': 'svc1'})

    service = await client.services.create({'Name': 'web'}, auth={'username': 'u'})

    assert service.id == 'svc1'
    assert modem.last.authconfig == {'username': 'u'}


async def test_service_create_name_conflict(client, modem):
    modem.fail(409)

    with pytest.raises(Conflict) as exc_info:
        await client.services.create({'Name': 'web'})

    assert exc_info.value.label == 'name conflicts with an existing service'


async def test_service_update(client, modem):
    modem.reply({'Warnings': []})

    await client.services.get('svc1').update(5, {'Name': 'web'}, rollback='previous')

    assert modem.last.params == {'version': 5, 'registryAuthFrom': None, 'rollback': 'previous'}


async def test_service_logs_experimental(client, modem):
    modem.fail(501)

    with pytest.raises(APIError) as exc_info:
        await client.services.get('svc1').logs()

    assert exc_info.value.kind is ErrorKind.NOT_IMPLEMENTED


async def test_task_logs_and_list(client, modem):
    modem.reply(byte_stream(b''), [{'ID': 't1', 'Status': {'State': 'running'}}])

    await client.tasks.get('t1').logs(follow=True)
    tasks = await client.tasks.list(filters={'service': ['web']})

    assert modem.calls[0].path == '/tasks/t1/logs'
    assert modem.calls[0].stream is True
    assert tasks[0].state == 'running'


async def test_secret_create_encodes_data(client, modem):
    modem.reply({'ID': 'sec1'})

    secret = await client.secrets.create('token', 's3cret', labels={'a': 'b'})

    assert secret.id == 'sec1'
    assert base64.b64decode(modem.last.data['Data']) == b's3cret'
    assert modem.last.data['Labels'] == {'a': 'b'}


async def test_secret_create_conflict(client, modem):
    modem.fail(409)

    with pytest.raises(Conflict) as exc_info:
        await client.secrets.create('token', b'x')

    assert exc_info.value.label == 'name conflicts with an existing secret'


async def test_secret_status_missing(client, modem):
    modem.fail(404)

    with pytest.raises(NotFound) as exc_info:
        await client.secrets.get('sec1').status()

    assert exc_info.value.label == 'no such secret'
