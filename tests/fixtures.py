from .mocks import MockServer, MockClient


def with_client(connected=True, **options):
    def inner(f):
        async def run():
            server = MockServer()
            client = MockClient(mock_server=server, **options)
            if connected:
                await client.connect('irc.mock.local', 1337)

            try:
                return await f(client=client, server=server)
            finally:
                await client.close()

        run.__name__ = f.__name__
        return run
    return inner
