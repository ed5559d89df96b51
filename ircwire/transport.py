## transport.py
# Byte stream transports the client runs on.
import asyncio
import logging
import os.path as path
import ssl
import sys
from abc import abstractmethod

from tornado.iostream import StreamClosedError
from tornado.tcpclient import TCPClient
from tornado.util import TimeoutError

__all__ = ['Transport', 'StreamTransport']

DEFAULT_CA_PATHS = {
    'linux': '/etc/ssl/certs',
    'linux2': '/etc/ssl/certs',
    'freebsd': '/etc/ssl/certs'
}


class Transport:
    """
    Abstract duplex byte stream.
    Notifies its listener through the coroutines on_transport_open(), on_transport_data(data),
    on_transport_eof() and on_transport_error(error).
    """

    def __init__(self):
        self.listener = None

    @abstractmethod
    async def open(self, hostname, port):
        """ Open the stream. The listener is notified once it is open. """
        raise NotImplementedError()

    @abstractmethod
    async def write(self, data):
        """ Write data to the stream. """
        raise NotImplementedError()

    @abstractmethod
    async def close(self):
        """ Close the stream. Closing a closed stream does nothing. """
        raise NotImplementedError()


class StreamTransport(Transport):
    """ A TCP connection, optionally over TLS. """
    CONNECT_TIMEOUT = 10
    READ_CHUNK_SIZE = 4096

    def __init__(self, tls=False, tls_verify=True, tls_certificate_file=None, tls_certificate_keyfile=None,
                 tls_certificate_password=None, source_address=None):
        super().__init__()
        self.hostname = None
        self.port = None
        self.source_address = source_address

        self.tls = tls
        self.tls_context = None
        self.tls_verify = tls_verify
        self.tls_certificate_file = tls_certificate_file
        self.tls_certificate_keyfile = tls_certificate_keyfile
        self.tls_certificate_password = tls_certificate_password

        self.stream = None
        self._read_task = None
        # Bumped by every close, so an open that completes after a close can tell.
        self._generation = 0
        self.logger = logging.getLogger(__name__)

    @property
    def connected(self):
        """ Whether this connection is... connected to something. """
        return self.stream is not None and not self.stream.closed()

    async def open(self, hostname, port):
        """ Connect to target and start reading. """
        self.hostname = hostname
        self.port = port
        self.tls_context = None

        if self.tls:
            self.tls_context = self.create_tls_context()

        source_ip, source_port = self.source_address or (None, None)
        generation = self._generation
        try:
            stream = await TCPClient().connect(
                hostname, port,
                ssl_options=self.tls_context,
                source_ip=source_ip,
                source_port=source_port,
                timeout=self.CONNECT_TIMEOUT
            )
        except StreamClosedError as e:
            raise ConnectionError('Could not connect to {}:{}.'.format(hostname, port)) from (e.real_error or e)
        except TimeoutError as e:
            raise ConnectionError('Timed out connecting to {}:{}.'.format(hostname, port)) from e

        if generation != self._generation:
            # Closed while connecting.
            self.logger.debug('Connection to %s:%s closed before it was established.', hostname, port)
            stream.close()
            return

        self.stream = stream
        stream.set_nodelay(True)

        await self.listener.on_transport_open()
        # The listener may have closed us already.
        if self.stream is stream:
            self._read_task = asyncio.ensure_future(self._read_forever(stream))

    def create_tls_context(self):
        """ Create the TLS context for our socket. """
        # Create context manually, as we're going to set our own options.
        tls_context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)

        # Load client certificate.
        if self.tls_certificate_file:
            tls_context.load_cert_chain(self.tls_certificate_file, self.tls_certificate_keyfile,
                                        password=self.tls_certificate_password)

        # Set some relevant options:
        # - No server should use SSLv2 or SSLv3 any more, they are outdated and full of security holes. (RFC6176, RFC7568)
        # - Disable compression in order to counter the CRIME attack. (https://en.wikipedia.org/wiki/CRIME_%28security_exploit%29)
        # - Disable session resumption to maintain perfect forward secrecy. (https://timtaubert.de/blog/2014/11/the-sad-state-of-server-side-tls-session-resumption-implementations/)
        for opt in ['NO_SSLv2', 'NO_SSLv3', 'NO_COMPRESSION', 'NO_TICKET']:
            if hasattr(ssl, 'OP_' + opt):
                tls_context.options |= getattr(ssl, 'OP_' + opt)

        # Set TLS verification options.
        if self.tls_verify:
            # Load certificate verification paths.
            tls_context.set_default_verify_paths()
            if sys.platform in DEFAULT_CA_PATHS and path.isdir(DEFAULT_CA_PATHS[sys.platform]):
                tls_context.load_verify_locations(capath=DEFAULT_CA_PATHS[sys.platform])

            # If we want to verify the TLS connection, we first need a certicate.
            tls_context.verify_mode = ssl.CERT_REQUIRED
            tls_context.check_hostname = True
        else:
            tls_context.check_hostname = False
            tls_context.verify_mode = ssl.CERT_NONE

        return tls_context

    async def _read_forever(self, stream):
        """ Read bounded chunks until the stream ends, yielding to other tasks in between. """
        while True:
            try:
                data = await stream.read_bytes(self.READ_CHUNK_SIZE, partial=True)
            except StreamClosedError as e:
                if stream is not self.stream:
                    # Closed by us.
                    return
                if e.real_error:
                    await self.listener.on_transport_error(e.real_error)
                await self.listener.on_transport_eof()
                return

            await self.listener.on_transport_data(data)
            await asyncio.sleep(0)

    async def write(self, data):
        """ Write data and wait for it to be flushed. """
        if not self.connected:
            raise BrokenPipeError('Stream is closed.')
        try:
            await self.stream.write(data)
        except StreamClosedError as e:
            raise BrokenPipeError('Stream closed while writing.') from (e.real_error or e)

    async def close(self):
        """ Disconnect from target. """
        self._generation += 1
        stream, self.stream = self.stream, None
        read_task, self._read_task = self._read_task, None

        if read_task and read_task is not asyncio.current_task():
            read_task.cancel()
        if stream and not stream.closed():
            stream.close()
