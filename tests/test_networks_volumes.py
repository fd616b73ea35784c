import pytest

from docker_api.call import ErrorKind
from docker_api.exceptions import APIError, Conflict, NetworkNotFound, VolumeNotFound


async def test_network_create(client, modem):
    modem.reply({'Id': 'n1', 'Warning': ''})

    network = await client.networks.create('backend', labels={'env': 'dev'}, EnableIPv6=True)

    assert network.id == 'n1'
    assert modem.last.data == {
        'Name': 'backend',
        'Driver': 'bridge',
        'Internal': False,
        'Attachable': False,
        'Labels': {'env': 'dev'},
        'EnableIPv6': True,
    }


async def test_network_create_conflict(client, modem):
    modem.fail(409)

    with pytest.raises(Conflict):
        await client.networks.create('backend')


async def test_network_status_missing(client, modem):
    modem.fail(404)

    with pytest.raises(NetworkNotFound) as exc_info:
        await client.networks.get('nope').status()

    assert exc_info.value.label == 'no such network'


async def test_network_connect_and_disconnect(client, modem):
    network = client.networks.get('n1')

    await network.connect('abc', endpoint_config={'Aliases': ['db']})
    await network.disconnect('abc', force=True)

    assert modem.calls[0].path == '/networks/n1/connect'
    assert modem.calls[0].data == {'Container': 'abc', 'EndpointConfig': {'Aliases': ['db']}}
    assert modem.calls[1].data == {'Container': 'abc', 'Force': True}


async def test_network_connect_swarm_scoped(client, modem):
    modem.fail(403)

    with pytest.raises(APIError) as exc_info:
        await client.networks.get('n1').connect('abc')

    assert exc_info.value.kind is ErrorKind.PERMISSION_DENIED
    assert exc_info.value.label == 'operation not supported for swarm scoped network'


async def test_network_list_empty(client, modem):
    modem.reply([])

    assert await client.networks.list() == []


async def test_volume_list_unwraps(client, modem):
    modem.reply({'Volumes': [{'Name': 'data'}, {'Name': 'cache'}], 'Warnings': None})

    volumes = await client.volumes.list()

    assert [v.id for v in volumes] == ['data', 'cache']


async def test_volume_list_empty(client, modem):
    modem.reply({'Volumes': None})

    assert await client.volumes.list() == []


async def test_volume_create(client, modem):
    modem.reply({'Name': 'data', 'Driver': 'local', 'Mountpoint': '/var/lib/docker/volumes/data'})

    volume = await client.volumes.create('data', labels={'a': 'b'})

    assert volume.id == 'data'
    assert volume.mountpoint == '/var/lib/docker/volumes/data'
    assert modem.last.data == {'Driver': 'local', 'Name': 'data', 'Labels': {'a': 'b'}}


async def test_volume_remove_in_use(client, modem):
    modem.fail(409)

    with pytest.raises(Conflict):
        await client.volumes.get('data').remove()


async def test_volume_status_missing(client, modem):
    modem.fail(404)

    with pytest.raises(VolumeNotFound):
        await client.volumes.get('data').status()
