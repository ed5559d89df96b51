## client.py
# Basic IRC client implementation.
import asyncio
import enum
import inspect
import logging

from . import commands, events, framing, protocol
from .classifier import BasicClassifier
from .features.ircv3.tags import TaggedMessage
from .transport import StreamTransport

__all__ = ['NotConnected', 'ConnectionState', 'BasicClient']


class NotConnected(protocol.Error):
    def __init__(self):
        super().__init__('Not connected.')


class ConnectionState(enum.Enum):
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    CONNECTED = 'connected'


class BasicClient:
    """
    Base IRC client class.
    Owns a transport, turns the bytes it receives into events for its subscribers, and sends commands over it.
    This class on its own classifies nothing but error replies: ircwire.Client plugs in the full classifier.
    """
    CLASSIFIER = BasicClassifier
    MESSAGE = TaggedMessage
    MAX_LINE_LENGTH = framing.DEFAULT_MAX_LENGTH
    RECONNECT_MAX_ATTEMPTS = 3
    RECONNECT_DELAYED = True
    RECONNECT_DELAYS = [5, 5, 10, 30, 120, 600]

    def __init__(self, transport=None, classifier=None, keep_alive=True, auto_reconnect=False,
                 encoding=protocol.DEFAULT_ENCODING, max_line_length=None, subscribers=(), **kwargs):
        """ Create a client. """
        self.transport = transport or StreamTransport()
        self.transport.listener = self
        self.classifier = classifier or self.CLASSIFIER()
        self.keep_alive = keep_alive
        self.auto_reconnect = auto_reconnect
        self.encoding = encoding
        self.framer = framing.LineFramer(max_line_length or self.MAX_LINE_LENGTH)

        self._subscribers = list(subscribers)
        self._send_lock = asyncio.Lock()
        self._state_changed = asyncio.Event()
        self.logger = logging.getLogger(__name__)
        self._reset_connection_attributes()

        if kwargs:
            self.logger.warning('Unused arguments: %s', ', '.join(kwargs.keys()))

    def _reset_connection_attributes(self):
        """ Reset connection attributes. """
        self.hostname = None
        self.port = None
        self.state = ConnectionState.DISCONNECTED
        self._reconnect_attempts = 0
        self._reconnect_task = None

    def _set_state(self, state, notify=True):
        self.logger.debug('Connection state: %s -> %s', self.state.value, state.value)
        self.state = state
        if notify:
            self._notify_state()

    def _notify_state(self):
        """ Wake up everyone waiting on a state change. """
        self._state_changed.set()
        self._state_changed = asyncio.Event()

    ## Subscribers.

    def subscribe(self, callback):
        """ Deliver events to callback. Callback can be a function or a coroutine function. """
        self._subscribers.append(callback)
        return callback

    def unsubscribe(self, callback):
        """ Stop delivering events to callback. """
        self._subscribers.remove(callback)

    ## Connection.

    def run(self, *args, **kwargs):
        """ Connect and handle the connection until it is closed for good. """
        async def run():
            await self.connect(*args, **kwargs)
            await self.wait_disconnected()

        asyncio.run(run())

    async def connect(self, hostname=None, port=None, reconnect=False):
        """ Connect to IRC server. """
        if (not hostname or not port) and not reconnect:
            raise ValueError('Have to specify hostname and port if not reconnecting.')

        # Disconnect from current connection.
        if self.state is not ConnectionState.DISCONNECTED:
            await self.close()

        if not reconnect:
            self.hostname = hostname
            self.port = port

        self.framer.reset()
        self._set_state(ConnectionState.CONNECTING)
        try:
            await self.transport.open(self.hostname, self.port)
        except OSError as e:
            if self.state is not ConnectionState.CONNECTING:
                # Closed while connecting.
                return

            self.logger.error('Could not connect to %s:%s: %s', self.hostname, self.port, e)
            # Waiters are woken once we know whether a reconnect is pending.
            self._set_state(ConnectionState.DISCONNECTED, notify=False)
            await self.on_event(events.Error(e))
            if self.auto_reconnect:
                self._schedule_reconnect()
            self._notify_state()

    async def close(self):
        """ Close the connection. Stops event delivery and any pending reconnect. Closing twice does nothing. """
        task, self._reconnect_task = self._reconnect_task, None
        if task and task is not asyncio.current_task():
            task.cancel()

        if self.state is not ConnectionState.DISCONNECTED:
            self._set_state(ConnectionState.DISCONNECTED)
        else:
            self._notify_state()
        await self.transport.close()

    async def wait_disconnected(self):
        """ Wait until we are disconnected and no reconnect is pending. """
        while self.state is not ConnectionState.DISCONNECTED or self._reconnect_task is not None:
            await self._state_changed.wait()

    def _schedule_reconnect(self):
        if self.RECONNECT_MAX_ATTEMPTS is not None and self._reconnect_attempts >= self.RECONNECT_MAX_ATTEMPTS:
            self.logger.error('Unexpected disconnect. Giving up.')
            return

        # Calculate reconnect delay.
        delay = self._reconnect_delay()
        self._reconnect_attempts += 1

        if delay > 0:
            self.logger.error('Unexpected disconnect. Attempting to reconnect within %s seconds.', delay)
        else:
            self.logger.error('Unexpected disconnect. Attempting to reconnect.')
        self._reconnect_task = asyncio.ensure_future(self._reconnect(delay))

    async def _reconnect(self, delay):
        await asyncio.sleep(delay)
        self._reconnect_task = None
        await self.connect(reconnect=True)

    def _reconnect_delay(self):
        """ Calculate reconnection delay. """
        if self.RECONNECT_DELAYED:
            if self._reconnect_attempts >= len(self.RECONNECT_DELAYS):
                return self.RECONNECT_DELAYS[-1]
            else:
                return self.RECONNECT_DELAYS[self._reconnect_attempts]
        else:
            return 0

    ## IRC attributes.

    @property
    def connected(self):
        """ Whether or not we are connected. """
        return self.state is ConnectionState.CONNECTED

    @property
    def server_tag(self):
        if self.connected and self.hostname:
            tag = self.hostname.lower()

            # Remove hostname prefix.
            if tag.startswith('irc.'):
                tag = tag[4:]

            # Check if host is either an FQDN or IPv4.
            if '.' in tag:
                # Attempt to cut off TLD.
                host, suffix = tag.rsplit('.', 1)

                # Make sure we aren't cutting off the last octet of an IPv4.
                try:
                    int(suffix)
                except ValueError:
                    tag = host

            return tag
        else:
            return None

    ## IRC API.

    async def send(self, message):
        """ Send a message, raw line or raw data. The line separator is added here. """
        if not self.connected:
            raise NotConnected()

        if isinstance(message, protocol.Message):
            message = message.construct()
        if isinstance(message, str):
            message = message.encode(self.encoding)
        line_separator = protocol.LINE_SEPARATOR.encode(self.encoding)
        if not message.endswith(line_separator):
            message += line_separator

        # Lines are written one at a time so concurrent sends never interleave.
        error = None
        async with self._send_lock:
            self.logger.debug('>> %s', protocol.decode(message, self.encoding).rstrip())
            try:
                await self.transport.write(message)
            except OSError as e:
                self.logger.error('Could not send message: %s', e)
                error = e

        # Subscribers may send in response, so only report once the lock is released.
        if error:
            await self.on_event(events.Error(error))

    async def rawmsg(self, command, *params, tags=(), prefix=None):
        """ Send message built from its parts. """
        await self.send(self.MESSAGE(command, params, tags=tags, prefix=prefix))

    async def quit(self, message=None):
        """ Quit network. """
        if self.connected:
            await self.send(commands.quit(message))
        await self.close()

    async def password(self, password):
        await self.send(commands.password(password))

    async def nick(self, nickname):
        """ Set nickname. Only rely on the nickname actually being changed once the server confirms it. """
        await self.send(commands.nick(nickname))

    async def user(self, username, mode=0, realname=None):
        await self.send(commands.user(username, mode, realname))

    async def join(self, channel):
        await self.send(commands.join(channel))

    async def part(self, channel):
        await self.send(commands.part(channel))

    async def names(self, channel):
        await self.send(commands.names(channel))

    async def message(self, target, message):
        """ Message channel or user. """
        await self.send(commands.privmsg(target, message))

    async def notice(self, target, message):
        """ Notice channel or user. """
        await self.send(commands.notice(target, message))

    async def ping(self, value=None):
        await self.send(commands.ping(value))

    async def list_capabilities(self, version=None):
        """ Ask the server which capabilities it supports. """
        await self.send(commands.cap_ls(version))

    async def list_active_capabilities(self):
        await self.send(commands.cap_list())

    async def request_capabilities(self, capabilities):
        await self.send(commands.cap_req(capabilities))

    async def acknowledge_capabilities(self, capabilities):
        await self.send(commands.cap_ack(capabilities))

    async def reject_capabilities(self, capabilities):
        await self.send(commands.cap_nak(capabilities))

    async def end_capabilities(self):
        """ End capability negotiation. """
        await self.send(commands.cap_end())

    ## Overloadable callbacks.

    async def on_event(self, event):
        """ Deliver event to all subscribers, in subscription order. """
        for callback in list(self._subscribers):
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                self.logger.exception('Failed to deliver %s event to %r.', event.name, callback)

    ## Transport callbacks.

    async def on_transport_open(self):
        """ Transport connected. """
        if self.state is not ConnectionState.CONNECTING:
            # Closed while connecting: don't keep the stream around.
            self.logger.debug('Transport opened after close, closing it.')
            await self.transport.close()
            return

        self._set_state(ConnectionState.CONNECTED)
        # Reset reconnect attempts.
        self._reconnect_attempts = 0

        # Set logger name.
        if self.server_tag:
            self.logger = logging.getLogger(self.__class__.__name__ + ':' + self.server_tag)

        await self.on_event(events.Connect())

    async def on_transport_data(self, data):
        """ Handle received data. """
        if self.state is ConnectionState.DISCONNECTED:
            return

        try:
            lines = self.framer.feed(data)
            error = None
        except protocol.LineTooLong as e:
            lines = e.lines
            error = e

        for line in lines:
            # Closing stops delivery.
            if self.state is ConnectionState.DISCONNECTED:
                return
            await self.on_line(line)

        if error:
            self.logger.warning('Discarding data from server: %s', error)
            await self.on_event(events.Error(error))

    async def on_transport_eof(self):
        """ Transport reached end of stream. """
        if self.state is ConnectionState.DISCONNECTED:
            return

        self._set_state(ConnectionState.DISCONNECTED, notify=False)
        await self.transport.close()
        await self.on_event(events.Disconnect())

        # If auto-reconnect is set up, try to connect again.
        if self.auto_reconnect and self.state is ConnectionState.DISCONNECTED:
            self._schedule_reconnect()
        self._notify_state()

    async def on_transport_error(self, error):
        """ Transport reported an error. Errors alone don't close the connection. """
        self.logger.error('Encountered error on transport: %s', error)
        await self.on_event(events.Error(error))

    ## Raw message handlers.

    async def on_line(self, line):
        """ Handle a single line. Lines that aren't IRC messages are skipped. """
        try:
            message = self.MESSAGE.parse(line, encoding=self.encoding)
        except protocol.ProtocolViolation as e:
            self.logger.warning('Skipping malformed line from server (%s): %r', e, line)
            return

        self.logger.debug('<< %s', message.raw)
        if not message.valid:
            self.logger.warning('Encountered strictly invalid IRC message from server: %s', message.raw)

        await self.on_raw(message)

    async def on_raw(self, message):
        """ Handle a single message. """
        # Answer pings ourselves.
        if self.keep_alive and message.command.upper() == 'PING':
            await self.send(commands.pong(message.params[0] if message.params else None))
            return

        event = self.classifier.classify(message)
        if event is not None:
            await self.on_event(event)
