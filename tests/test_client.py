import asyncio
import pytest
from pytest import raises, mark

import ircwire
from ircwire import events
from ircwire.client import ConnectionState, NotConnected
from ircwire.protocol import LineTooLong
from ircwire.transport import StreamTransport
from .fixtures import with_client
from .mocks import Mock, MockClient, MockServer, MockTransport


## Initialization.


def test_client_default_transport():
    client = ircwire.Client()
    assert isinstance(client.transport, StreamTransport)
    assert client.transport.listener is client
    assert isinstance(client.classifier, ircwire.Classifier)
    assert client.state is ConnectionState.DISCONNECTED


@pytest.mark.asyncio
@with_client(invalid_kwarg=False, connected=False)
async def test_client_superfluous_arguments(server, client):
    assert client.logger.warning.called


## Connection.


@pytest.mark.asyncio
@with_client(connected=False)
async def test_client_connect(server, client):
    assert client.state is ConnectionState.DISCONNECTED

    await client.connect('irc.mock.local', 1337)
    assert client.state is ConnectionState.CONNECTED
    assert client.connected
    assert client.transport.hostname == 'irc.mock.local'
    assert client.transport.port == 1337
    assert client.events == [events.Connect()]


@pytest.mark.asyncio
@with_client(connected=False)
async def test_client_connect_invalid_params(server, client):
    with raises(ValueError):
        await client.connect()
    with raises(ValueError):
        await client.connect(port=1337)
    assert client.state is ConnectionState.DISCONNECTED


@pytest.mark.asyncio
@with_client()
async def test_client_close_on_connect(server, client):
    client.close = Mock(wraps=client.close)

    await client.connect('irc.mock.local', 1337)
    assert client.connected
    assert client.close.called
    assert client.transport.opened == 2


@pytest.mark.asyncio
@with_client(connected=False, transport=MockTransport(refuse=True))
async def test_client_connect_refused(server, client):
    await client.connect('irc.mock.local', 1337)

    assert client.state is ConnectionState.DISCONNECTED
    assert len(client.events) == 1
    assert isinstance(client.events[0].error, ConnectionRefusedError)
    assert client._reconnect_task is None


def gate_transport(server, client, **kwargs):
    transport = MockTransport(server, gated=True, **kwargs)
    transport.listener = client
    client.transport = transport
    return transport


@pytest.mark.asyncio
@with_client(connected=False)
async def test_client_close_while_connecting(server, client):
    transport = gate_transport(server, client)
    task = asyncio.ensure_future(client.connect('irc.mock.local', 1337))
    await asyncio.sleep(0)
    assert client.state is ConnectionState.CONNECTING

    await client.close()
    transport.opening.set_result(None)
    await task

    assert client.state is ConnectionState.DISCONNECTED
    assert not transport.connected
    assert not client.events


@pytest.mark.asyncio
@with_client(connected=False)
async def test_client_close_after_connecting(server, client):
    transport = gate_transport(server, client)
    task = asyncio.ensure_future(client.connect('irc.mock.local', 1337))
    await asyncio.sleep(0)

    transport.opening.set_result(None)
    await task
    assert client.connected
    await client.close()

    assert client.state is ConnectionState.DISCONNECTED
    assert not transport.connected
    assert client.events_named('connect')


@pytest.mark.asyncio
@with_client(connected=False)
async def test_client_close_while_connecting_stray_open(server, client):
    transport = gate_transport(server, client, honour_close=False)
    task = asyncio.ensure_future(client.connect('irc.mock.local', 1337))
    await asyncio.sleep(0)

    await client.close()
    transport.opening.set_result(None)
    await task

    # The transport connected anyway: the client hangs up on it.
    assert transport.opened == 1
    assert not transport.connected
    assert client.state is ConnectionState.DISCONNECTED
    assert not client.events_named('connect')


@pytest.mark.asyncio
@with_client(connected=False, auto_reconnect=True)
async def test_client_close_while_connecting_refused(server, client):
    transport = gate_transport(server, client, refuse=True)
    task = asyncio.ensure_future(client.connect('irc.mock.local', 1337))
    await asyncio.sleep(0)

    await client.close()
    transport.opening.set_result(None)
    await task

    assert client.state is ConnectionState.DISCONNECTED
    assert not client.events
    assert client._reconnect_task is None


@pytest.mark.asyncio
@with_client()
async def test_client_close(server, client):
    await client.close()
    assert client.state is ConnectionState.DISCONNECTED
    assert not client.transport.connected

    # Closing again does nothing.
    await client.close()
    assert client.state is ConnectionState.DISCONNECTED
    assert client.events == [events.Connect()]


@pytest.mark.asyncio
@with_client()
async def test_client_reconnect(server, client):
    await client.close()
    assert not client.connected

    await client.connect(reconnect=True)
    assert client.connected
    assert client.transport.hostname == 'irc.mock.local'


@pytest.mark.asyncio
@with_client()
async def test_client_disconnect(server, client):
    await server.hangup()

    assert client.state is ConnectionState.DISCONNECTED
    assert not client.transport.connected
    assert client.events == [events.Connect(), events.Disconnect()]
    assert client._reconnect_task is None


@pytest.mark.asyncio
@with_client(auto_reconnect=True)
async def test_client_unexpected_disconnect_reconnect(server, client):
    client.RECONNECT_DELAYED = False
    await server.hangup()
    assert not client.connected

    await asyncio.sleep(0.01)
    assert client.connected
    assert client.transport.opened == 2
    assert client.events == [events.Connect(), events.Disconnect(), events.Connect()]
    assert client._reconnect_attempts == 0


@pytest.mark.asyncio
@with_client(auto_reconnect=True)
async def test_client_unexpected_reconnect_give_up(server, client):
    client.RECONNECT_MAX_ATTEMPTS = 0
    await server.hangup()

    assert not client.connected
    assert client._reconnect_task is None
    assert client.logger.error.called


@pytest.mark.asyncio
@with_client(auto_reconnect=True)
async def test_client_unexpected_reconnect_attempts(server, client):
    client.RECONNECT_DELAYED = False
    client.RECONNECT_MAX_ATTEMPTS = 2
    client.transport.refuse = True
    await server.hangup()

    await asyncio.wait_for(client.wait_disconnected(), 1)
    assert not client.connected
    assert [event.name for event in client.events] == ['connect', 'disconnect', 'error', 'error']
    assert client._reconnect_attempts == 2


@pytest.mark.asyncio
@mark.slow
@with_client(auto_reconnect=True)
async def test_client_unexpected_disconnect_reconnect_delay(server, client):
    client._reconnect_delay = Mock(return_value=0.5)
    await server.hangup()
    assert client._reconnect_delay.called

    await asyncio.sleep(0.1)
    assert not client.connected
    await asyncio.sleep(0.6)
    assert client.connected


@pytest.mark.asyncio
@with_client(auto_reconnect=True)
async def test_client_close_cancels_reconnect(server, client):
    client._reconnect_delay = Mock(return_value=10)
    await server.hangup()
    task = client._reconnect_task
    assert task is not None

    await client.close()
    await asyncio.sleep(0)
    assert client._reconnect_task is None
    assert task.cancelled()
    assert not client.connected


@pytest.mark.asyncio
@with_client()
async def test_client_reconnect_delay_calculation(server, client):
    client.RECONNECT_DELAYED = False
    assert client._reconnect_delay() == 0

    client.RECONNECT_DELAYED = True
    for expected_delay in client.RECONNECT_DELAYS:
        delay = client._reconnect_delay()
        assert delay == expected_delay

        client._reconnect_attempts += 1

    assert client._reconnect_delay() == client.RECONNECT_DELAYS[-1]


@pytest.mark.asyncio
@with_client()
async def test_client_wait_disconnected(server, client):
    waiter = asyncio.ensure_future(client.wait_disconnected())
    await asyncio.sleep(0)
    assert not waiter.done()

    await client.close()
    await asyncio.wait_for(waiter, 1)


def test_client_run():
    client = MockClient(mock_server=MockServer())

    async def stop(event):
        if isinstance(event, events.Connect):
            await client.quit()

    client.subscribe(stop)
    client.run('irc.mock.local', 1337)

    assert client.state is ConnectionState.DISCONNECTED
    assert client._mock_server.received('QUIT')


@pytest.mark.asyncio
@with_client(connected=False)
async def test_client_server_tag(server, client):
    assert client.server_tag is None

    await client.connect('Mock.local', 1337)
    assert client.server_tag == 'mock'
    await client.close()

    await client.connect('irc.mock.local', 1337)
    assert client.server_tag == 'mock'
    await client.close()

    await client.connect('mock', 1337)
    assert client.server_tag == 'mock'
    await client.close()

    await client.connect('127.0.0.1', 1337)
    assert client.server_tag == '127.0.0.1'
    await client.close()
    assert client.server_tag is None


@pytest.mark.asyncio
@with_client()
async def test_client_transport_error(server, client):
    error = OSError('boom')
    await server.fail(error)

    assert client.connected
    assert client.events[-1] == events.Error(error)
    assert client.logger.error.called


## Subscribers.


@pytest.mark.asyncio
@with_client()
async def test_client_subscribers(server, client):
    received = []

    async def subscriber(event):
        received.append(event)

    client.subscribe(subscriber)
    await server.send('001', 'me', 'Welcome', prefix='srv')
    client.unsubscribe(subscriber)
    await server.send('002', 'me', 'Your host', prefix='srv')

    assert received == [events.Welcome('srv', 'me')]
    assert client.events[-2:] == [events.Welcome('srv', 'me'), events.YourHost('srv', 'Your host')]


@pytest.mark.asyncio
@with_client()
async def test_client_subscriber_failure(server, client):
    received = []

    def broken(event):
        raise RuntimeError('oops')

    client.subscribe(broken)
    client.subscribe(received.append)
    await server.send('001', 'me', 'Welcome', prefix='srv')

    assert client.logger.exception.called
    assert received == [events.Welcome('srv', 'me')]


@pytest.mark.asyncio
@with_client()
async def test_client_close_stops_delivery(server, client):
    async def closer(event):
        if isinstance(event, events.Welcome):
            await client.close()

    client.subscribe(closer)
    await server.sendraw(b':srv 001 me :Hi\r\n:srv 002 me :Host\r\n')

    assert client.events_named('welcome')
    assert not client.events_named('yourHost')

    await server.sendraw(b':srv 003 me :Today\r\n')
    assert not client.events_named('uptime')


## Receiving.


@pytest.mark.asyncio
@with_client()
async def test_client_event_order(server, client):
    await server.sendraw(b':srv 001 me :Hi\r\n:srv 002 me :Host\r\n:srv 00')
    await server.sendraw(b'3 me :Today\r')
    await server.sendraw(b'\n')

    assert [event.name for event in client.events] == ['connect', 'welcome', 'yourHost', 'uptime']


@pytest.mark.asyncio
@with_client()
async def test_client_unknown(server, client):
    await server.send('INSTALL', 'gentoo')

    event = client.events[-1]
    assert isinstance(event, events.Unknown)
    assert event.message.command == 'INSTALL'
    assert event.message.params == ('gentoo',)


@pytest.mark.asyncio
@with_client()
async def test_client_suppressed(server, client):
    await server.send('376', 'me', 'End of MOTD', prefix='srv')
    assert client.events == [events.Connect()]


@pytest.mark.asyncio
@with_client()
async def test_client_malformed_line(server, client):
    await server.sendraw(b':srv\r\n:srv 001 me :Hi\r\n')

    assert client.logger.warning.called
    assert client.events[1:] == [events.Welcome('srv', 'me')]


@pytest.mark.asyncio
@with_client()
async def test_client_strictly_invalid_line(server, client):
    client.logger.warning.reset_mock()
    await server.sendraw(b':srv COMM4ND me\r\n')

    assert client.logger.warning.called
    assert isinstance(client.events[-1], events.Unknown)


@pytest.mark.asyncio
@with_client(max_line_length=16)
async def test_client_line_too_long(server, client):
    await server.sendraw(b':srv 001 me :Hi\r\n' + b'x' * 40)

    assert client.events[1] == events.Welcome('srv', 'me')
    assert isinstance(client.events[2].error, LineTooLong)
    assert client.connected

    await server.sendraw(b'yyy\r\n:srv 002 me :Host\r\n')
    assert client.events[3:] == [events.YourHost('srv', 'Host')]


## Keep-alive.


@pytest.mark.asyncio
@with_client()
async def test_client_keep_alive(server, client):
    await server.sendraw(b'PING :abc\r\n')

    assert server.received('PONG :abc')
    assert not client.events_named('ping')


@pytest.mark.asyncio
@with_client()
async def test_client_keep_alive_without_value(server, client):
    await server.sendraw(b':srv PING\r\n')
    assert server.received('PONG')


@pytest.mark.asyncio
@with_client(keep_alive=False)
async def test_client_no_keep_alive(server, client):
    await server.sendraw(b':srv PING :abc\r\n')

    assert client.events[-1] == events.Ping('srv', 'abc')
    assert server.recvbuffer == b''


## Sending.


@pytest.mark.asyncio
@with_client(connected=False)
async def test_client_send_not_connected(server, client):
    with raises(NotConnected):
        await client.send('PING :abc')
    with raises(NotConnected):
        await client.nick('alice')


@pytest.mark.asyncio
@with_client()
async def test_client_send(server, client):
    await client.send(ircwire.commands.privmsg('#chan', 'hello'))
    await client.send('PING :abc')
    await client.send(b'PING :def\r\n')

    assert server.recvbuffer == b'PRIVMSG #chan :hello\r\nPING :abc\r\nPING :def\r\n'


@pytest.mark.asyncio
@with_client()
async def test_client_send_encoding(server, client):
    await client.message('#chan', 'café')
    assert server.recvbuffer == 'PRIVMSG #chan :café\r\n'.encode('utf-8')


class ChunkedTransport(MockTransport):
    """ Writes data in two halves, yielding in between. """

    async def write(self, data):
        half = len(data) // 2
        await super().write(data[:half])
        await asyncio.sleep(0)
        await super().write(data[half:])


@pytest.mark.asyncio
@with_client(transport=ChunkedTransport(), connected=False)
async def test_client_send_lines_never_interleave(server, client):
    client.transport._mock_server = server
    await client.connect('irc.mock.local', 1337)

    targets = ['#chan{}'.format(i) for i in range(10)]
    await asyncio.gather(*(client.message(target, 'hello there') for target in targets))

    assert server.lines == ['PRIVMSG {} :hello there'.format(target) for target in targets]


@pytest.mark.asyncio
@with_client()
async def test_client_send_failure(server, client):
    client.transport._mock_connected = False
    await client.message('#chan', 'hello')

    assert isinstance(client.events[-1].error, BrokenPipeError)
    assert client.logger.error.called


@pytest.mark.asyncio
@with_client()
async def test_client_send_failure_subscriber_sends(server, client):
    @client.subscribe
    async def on_error(event):
        if isinstance(event, events.Error):
            await client.quit('bye')

    client.transport._mock_connected = False
    await asyncio.wait_for(client.message('#chan', 'hello'), 2)

    assert isinstance(client.events_named('error')[0].error, BrokenPipeError)
    assert client.state is ConnectionState.DISCONNECTED
    assert client.logger.error.called


@pytest.mark.asyncio
@with_client()
async def test_client_send_from_subscriber(server, client):
    @client.subscribe
    async def on_welcome(event):
        if isinstance(event, events.Welcome):
            await client.join('#chan')

    await asyncio.wait_for(server.send('001', 'me', 'Welcome', prefix='srv'), 2)
    await asyncio.wait_for(client.message('#chan', 'hello'), 2)

    assert server.lines == ['JOIN :#chan', 'PRIVMSG #chan :hello']


@pytest.mark.asyncio
@with_client()
async def test_client_commands(server, client):
    await client.password('hunter2')
    await client.nick('alice')
    await client.user('alice', realname='Alice Liddell')
    await client.list_capabilities(302)
    await client.list_active_capabilities()
    await client.request_capabilities(['multi-prefix', 'sasl'])
    await client.acknowledge_capabilities(['multi-prefix'])
    await client.reject_capabilities(['sasl'])
    await client.end_capabilities()
    await client.join('#chan')
    await client.names('#chan')
    await client.message('#chan', 'hello')
    await client.notice('bob', 'psst')
    await client.ping('abc')
    await client.part('#chan')

    assert server.lines == [
        'PASS :hunter2',
        'NICK :alice',
        'USER alice 0 * :Alice Liddell',
        'CAP LS :302',
        'CAP :LIST',
        'CAP REQ :multi-prefix sasl',
        'CAP ACK :multi-prefix',
        'CAP NAK :sasl',
        'CAP :END',
        'JOIN :#chan',
        'NAMES :#chan',
        'PRIVMSG #chan :hello',
        'NOTICE bob :psst',
        'PING :abc',
        'PART :#chan',
    ]


@pytest.mark.asyncio
@with_client()
async def test_client_quit(server, client):
    await client.quit('Bye all')

    assert server.received('QUIT :Bye all')
    assert client.state is ConnectionState.DISCONNECTED

    # Quitting while disconnected only closes.
    await client.quit()
    assert not server.received('QUIT')
