## protocol.py
# IRC implementation-agnostic constants/helpers.
import re
from abc import abstractmethod

DEFAULT_ENCODING = 'utf-8'
FALLBACK_ENCODING = 'iso-8859-1'

LINE_SEPARATOR = '\r\n'
MINIMAL_LINE_SEPARATOR = '\n'


## Errors.

class Error(Exception):
    """ Base class for all ircwire errors. """
    pass


class ProtocolViolation(Error):
    """ An error that occurred while parsing or constructing an IRC message that violates the IRC protocol. """
    def __init__(self, msg, message=None):
        super().__init__(msg)
        self.irc_message = message


class LineTooLong(ProtocolViolation):
    """
    The line framer buffered more than its limit without seeing a line terminator.
    Lines that were completed before the overflow are kept in `lines`.
    """
    def __init__(self, length, limit, lines=()):
        super().__init__('Line exceeds maximum length without terminator ({len} > {maxlen})'.format(
            len=length, maxlen=limit))
        self.length = length
        self.limit = limit
        self.lines = list(lines)


## Bases.

class Message:
    """ Abstract message class. Messages must inherit from this class. """
    @classmethod
    @abstractmethod
    def parse(cls, line, encoding=DEFAULT_ENCODING):
        """ Parse data into IRC message. Return a Message instance or raise an error. """
        raise NotImplementedError()

    @abstractmethod
    def construct(self):
        """ Convert message into raw IRC line, without line terminator. """
        raise NotImplementedError()

    def __str__(self):
        return self.construct()


## Misc.

def decode(data, encoding=DEFAULT_ENCODING):
    """ Decode raw line data, falling back to a byte-transparent encoding. """
    if isinstance(data, str):
        return data
    try:
        return data.decode(encoding)
    except UnicodeDecodeError:
        return data.decode(FALLBACK_ENCODING)


def identifierify(name):
    """ Clean up name so it works for a Python identifier. """
    name = name.lower()
    name = re.sub('[^a-z0-9]', '_', name)
    return name
