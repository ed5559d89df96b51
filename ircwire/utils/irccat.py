#!/usr/bin/env python3
## irccat.py
# Simple irccat implementation, using ircwire.
import sys
import logging
import asyncio

from .. import Client, __version__, commands, events
from . import _args


class IRCCat(Client):
    """ irccat. Takes raw messages on stdin, dumps classified events to stdout. Life has never been easier. """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.async_stdin = None

    async def process_stdin(self):
        """ Send every line on stdin to the server, and quit at end of input. """
        loop = asyncio.get_running_loop()

        self.async_stdin = asyncio.StreamReader()
        reader_protocol = asyncio.StreamReaderProtocol(self.async_stdin)
        await loop.connect_read_pipe(lambda: reader_protocol, sys.stdin)

        while True:
            line = await self.async_stdin.readline()
            if not line:
                break
            line = line.rstrip(b'\r\n')
            if line and self.connected:
                await self.send(line)

        await self.quit('EOF')

    async def on_event(self, event):
        print(event)
        await super().on_event(event)

        if isinstance(event, events.Version) and self.connected:
            await self.send(commands.version('ircwire-cat v{}'.format(__version__), target=event.source))


async def _main():
    # Create client.
    irccat, connect = _args.client_from_args('irccat', default_nick='irccat',
                                             description='Process raw IRC messages from stdin, dump received IRC events to stdout.',
                                             cls=IRCCat)
    await connect()
    stdin = asyncio.ensure_future(irccat.process_stdin())
    await irccat.wait_disconnected()
    stdin.cancel()


def main():
    # Setup logging.
    logging.basicConfig(format='!! %(levelname)s: %(message)s')
    asyncio.run(_main())


if __name__ == '__main__':
    main()
