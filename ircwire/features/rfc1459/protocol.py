## protocol.py
# RFC1459 protocol constants.
import re

# While this *technically* is supposed to be 143, I've yet to see a server that actually uses those.
DEFAULT_PORT = 6667
DEFAULT_TLS_PORT = 6697


## Limits.

MESSAGE_LENGTH_LIMIT = 512


## Message parsing.

FORBIDDEN_CHARACTERS = { '\r', '\n', '\0' }
USER_SEPARATOR = '!'
HOST_SEPARATOR = '@'
PREFIX_INDICATOR = ':'
TAG_INDICATOR = '@'
ARGUMENT_SEPARATOR = ' '
COMMAND_PATTERN = re.compile('^([a-zA-Z]+|[0-9]{3})$', re.UNICODE)
TRAILING_PREFIX = ':'
