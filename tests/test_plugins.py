import pytest

from conftest import byte_stream
from docker_api.exceptions import NotFound
from docker_api.plugins import Plugin


async def test_list_uses_name(client, modem):
    modem.reply([{'Id': 'abc', 'Name': 'vieux/sshfs:latest', 'Enabled': True}])

    plugins = await client.plugins.list()

    assert plugins[0].id == 'vieux/sshfs:latest'
    assert plugins[0].enabled


async def test_install(client, modem):
    grants = [{'Name': 'network', 'Value': ['host']}]
    modem.reply(byte_stream(b''))

    await client.plugins.install('vieux/sshfs:latest', privileges=grants)

    assert modem.last.path == '/plugins/pull'
    assert modem.last.params == {'remote': 'vieux/sshfs:latest', 'name': None}
    assert modem.last.data == grants
    assert modem.last.stream is True


async def test_create_from_archive(client, modem):
    plugin = await client.plugins.create('local/plug', b'tar')

    assert isinstance(plugin, Plugin)
    assert plugin.id == 'local/plug'
    assert modem.last.file == b'tar'


async def test_status_missing(client, modem):
    modem.fail(404)

    with pytest.raises(NotFound) as exc_info:
        await client.plugins.get('nope').status()

    assert exc_info.value.label == 'no such plugin'


async def test_enable_disable_set(client, modem):
    plugin = client.plugins.get('sshfs')

    await plugin.enable(timeout=5)
    await plugin.disable(force=True)
    await plugin.set(['DEBUG=1'])

    assert modem.calls[0].params == {'timeout': 5}
    assert modem.calls[1].params == {'force': True}
    assert modem.calls[2].data == ['DEBUG=1']


async def test_upgrade(client, modem):
    modem.reply(byte_stream(b''))

    await client.plugins.get('sshfs').upgrade('vieux/sshfs:next', auth={})

    assert modem.last.path == '/plugins/sshfs/upgrade'
    assert modem.last.params == {'remote': 'vieux/sshfs:next'}
    assert modem.last.authconfig == {}


async def test_privileges_uses_reference(client, modem):
    plugin = Plugin(modem, 'sshfs', {'PluginReference': 'docker.io/vieux/sshfs:latest'})

    assert await plugin.privileges() == []
    assert modem.last.params == {'remote': 'docker.io/vieux/sshfs:latest'}
