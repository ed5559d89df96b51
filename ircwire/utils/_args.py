## _args.py
# Common argument parsing code.
import argparse
import logging

import ircwire
from ircwire import events
from ircwire.features.rfc1459 import protocol as rfc1459
from ircwire.transport import StreamTransport


def client_from_args(name, description, default_nick='ircwire', cls=ircwire.Client, argv=None):
    # Parse some arguments.
    parser = argparse.ArgumentParser(name, description=description, add_help=False,
        epilog='This program is part of {package}.'.format(package=ircwire.__name__))

    meta = parser.add_argument_group('Meta')
    meta.add_argument('-h', '--help', action='help', help='What you are reading right now.')
    meta.add_argument('-v', '--version', action='version', version='{package}/%(prog)s {ver}'.format(package=ircwire.__name__, ver=ircwire.__version__), help='Dump version number.')
    meta.add_argument('-V', '--verbose', help='Be verbose in warnings and errors.', action='store_true', default=False)
    meta.add_argument('-d', '--debug', help='Show debug output.', action='store_true', default=False)

    conn = parser.add_argument_group('Connection')
    conn.add_argument('server', help='The server to connect to.', metavar='SERVER')
    conn.add_argument('-p', '--port', help='The port to use. (default: 6667, 6697 (TLS))', type=int)
    conn.add_argument('-P', '--password', help='Server password.', metavar='PASS')
    conn.add_argument('--tls', help='Use TLS. (default: no)', action='store_true', default=False)
    conn.add_argument('--verify-tls', help='Verify TLS certificate sent by server. (default: no)', action='store_true', default=False)
    conn.add_argument('--tls-client-cert', help='TLS client certificate to use.', metavar='CERT')
    conn.add_argument('--tls-client-cert-keyfile', help='Keyfile to use for TLS client cert.', metavar='KEYFILE')
    conn.add_argument('-e', '--encoding', help='Connection encoding. (default: UTF-8)', default='utf-8', metavar='ENCODING')
    conn.add_argument('--reconnect', help='Reconnect when the connection drops. (default: no)', action='store_true', default=False)
    conn.add_argument('--no-keep-alive', help='Do not answer server pings. (default: answer them)', action='store_false', dest='keep_alive', default=True)

    init = parser.add_argument_group('Initialization')
    init.add_argument('-n', '--nickname', help='Nickname. (default: {})'.format(default_nick), default=default_nick, metavar='NICK')
    init.add_argument('-u', '--username', help='Username. (default: derived from nickname)', metavar='USER')
    init.add_argument('-r', '--realname', help='Realname (GECOS). (default: derived from username)', metavar='REAL')
    init.add_argument('-c', '--channel', help='Channel to automatically join. Can be set multiple times for multiple channels.', action='append', dest='channels', default=[], metavar='CHANNEL')

    args = parser.parse_args(argv)

    # Set log level.
    if args.debug:
        log_level = logging.DEBUG
    elif args.verbose:
        log_level = logging.INFO
    else:
        log_level = logging.ERROR

    logging.basicConfig(level=log_level)
    # Logging may have been configured before us.
    logging.getLogger().setLevel(log_level)

    # Setup client.
    transport = StreamTransport(tls=args.tls, tls_verify=args.verify_tls,
        tls_certificate_file=args.tls_client_cert, tls_certificate_keyfile=args.tls_client_cert_keyfile)
    client = cls(transport=transport, encoding=args.encoding, keep_alive=args.keep_alive, auto_reconnect=args.reconnect)

    async def register(event):
        """ Register once connected, join channels once welcomed. """
        if isinstance(event, events.Connect):
            if args.password:
                await client.password(args.password)
            await client.nick(args.nickname)
            await client.user(args.username or args.nickname, realname=args.realname)
        elif isinstance(event, events.Welcome):
            for channel in args.channels:
                await client.join(channel)

    client.subscribe(register)

    port = args.port or (rfc1459.DEFAULT_TLS_PORT if args.tls else rfc1459.DEFAULT_PORT)

    async def connect():
        await client.connect(hostname=args.server, port=port)

    return client, connect
