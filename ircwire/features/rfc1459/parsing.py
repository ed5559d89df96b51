## parsing.py
# RFC1459 parsing and construction.
import ircwire.protocol
from . import protocol


class RFC1459Message(ircwire.protocol.Message):
    """
    A single IRC protocol line: optional prefix, command and parameters.
    Messages are immutable: all fields are set at construction and validated there.
    """

    def __init__(self, command, params=(), prefix=None, _raw=None, _valid=True, **kw):
        if not isinstance(command, str) or not command:
            raise ircwire.protocol.ProtocolViolation('IRC messages require a command.', message=command)
        if protocol.ARGUMENT_SEPARATOR in command:
            raise ircwire.protocol.ProtocolViolation('Commands can not contain spaces.', message=command)
        if command[0] in (protocol.PREFIX_INDICATOR, protocol.TAG_INDICATOR):
            raise ircwire.protocol.ProtocolViolation('Commands can not start with a prefix or tag indicator.', message=command)
        if not prefix:
            prefix = None
        elif protocol.ARGUMENT_SEPARATOR in prefix:
            raise ircwire.protocol.ProtocolViolation('Prefixes can not contain spaces.', message=prefix)

        params = tuple(params)
        for idx, param in enumerate(params):
            if idx + 1 < len(params) and (not param or ' ' in param or param[0] == protocol.TRAILING_PREFIX):
                raise ircwire.protocol.ProtocolViolation(
                    'Only the final parameter of an IRC message can be trailing and thus be empty, '
                    'contain spaces, or start with a colon.', message=param)

        for field in (command, prefix or '') + params:
            if any(ch in field for ch in protocol.FORBIDDEN_CHARACTERS):
                raise ircwire.protocol.ProtocolViolation('The message contains forbidden characters ({chs}).'.format(
                    chs=', '.join(repr(ch) for ch in sorted(protocol.FORBIDDEN_CHARACTERS))), message=field)

        if not protocol.COMMAND_PATTERN.match(command):
            _valid = False

        self._kw = kw
        self._kw['command'] = command
        self._kw['params'] = params
        self._kw['prefix'] = prefix
        self.__dict__.update(self._kw)
        self.__dict__['_valid'] = _valid
        self.__dict__['_raw'] = _raw

    def __setattr__(self, attr, value):
        if '_kw' in self.__dict__:
            raise AttributeError('{cls} instances are immutable.'.format(cls=self.__class__.__name__))
        super().__setattr__(attr, value)

    @property
    def valid(self):
        """ Whether the message strictly follows the IRC message grammar. """
        return self._valid

    @property
    def raw(self):
        """ The line this message was parsed from, if any. """
        return self._raw

    @classmethod
    def parse(cls, line, encoding=ircwire.protocol.DEFAULT_ENCODING):
        """
        Parse given line into IRC message structure.
        Returns a Message.
        """
        message = strip_line(line, encoding)
        prefix, command, params = split_message(message)

        # Sanity check for message length.
        valid = len(message) + len(ircwire.protocol.LINE_SEPARATOR) <= protocol.MESSAGE_LENGTH_LIMIT
        return cls(command, params, prefix=prefix, _raw=message, _valid=valid)

    def construct(self):
        """ Construct a raw IRC message, without line terminator. """
        message = self.command

        # Add parameters. The final parameter is always sent as trailing.
        for idx, param in enumerate(self.params):
            if idx + 1 == len(self.params):
                message += protocol.ARGUMENT_SEPARATOR + protocol.TRAILING_PREFIX + param
            else:
                message += protocol.ARGUMENT_SEPARATOR + param

        # Prepend prefix.
        if self.prefix:
            message = protocol.PREFIX_INDICATOR + self.prefix + protocol.ARGUMENT_SEPARATOR + message

        return message

    def __eq__(self, other):
        if not isinstance(other, RFC1459Message):
            return NotImplemented
        return self._fields() == other._fields()

    def __hash__(self):
        return hash(self._fields())

    def _fields(self):
        return (self.__dict__.get('tags', ()), self.prefix, self.command, self.params)

    def __repr__(self):
        return '{cls}({kw})'.format(
            cls=self.__class__.__name__,
            kw=', '.join('{}={!r}'.format(k, v) for k, v in sorted(self._kw.items())))


## Scanning.

def strip_line(line, encoding=ircwire.protocol.DEFAULT_ENCODING):
    """ Decode line and strip a single line separator from it. """
    message = ircwire.protocol.decode(line, encoding)

    if message.endswith(ircwire.protocol.LINE_SEPARATOR):
        message = message[:-len(ircwire.protocol.LINE_SEPARATOR)]
    elif message.endswith(ircwire.protocol.MINIMAL_LINE_SEPARATOR):
        message = message[:-len(ircwire.protocol.MINIMAL_LINE_SEPARATOR)]
    return message


def next_token(text, pos):
    """ Return the token starting at pos and the position of the separator (or end of text) after it. """
    end = text.find(protocol.ARGUMENT_SEPARATOR, pos)
    if end < 0:
        end = len(text)
    return text[pos:end], end


def skip_separators(text, pos):
    """ Skip a run of separators starting at pos. """
    while pos < len(text) and text[pos] == protocol.ARGUMENT_SEPARATOR:
        pos += 1
    return pos


def split_message(message):
    """
    Split untagged message into (prefix, command, params).
    Format: (:prefix SP+)? command (SP+ middle)* (SP+ :trailing)? SP*
    """
    pos = 0
    prefix = None

    # Prefix.
    if message.startswith(protocol.PREFIX_INDICATOR):
        prefix, pos = next_token(message, len(protocol.PREFIX_INDICATOR))
        if not prefix:
            raise ircwire.protocol.ProtocolViolation('Improper IRC message format: empty prefix.', message=message)
        pos = skip_separators(message, pos)

    # Command.
    command, pos = next_token(message, pos)
    if not command:
        raise ircwire.protocol.ProtocolViolation('Improper IRC message format: no command.', message=message)

    # Parameters.
    params = []
    pos = skip_separators(message, pos)
    while pos < len(message):
        if message[pos] == protocol.TRAILING_PREFIX:
            # Trailing parameter: everything up to the end of the line.
            params.append(message[pos + len(protocol.TRAILING_PREFIX):])
            break
        param, pos = next_token(message, pos)
        params.append(param)
        pos = skip_separators(message, pos)

    return prefix, command, params


## Prefixes.

def parse_user(raw):
    """ Parse nick(!user(@host)?)? structure. """
    nick = raw
    user = None
    host = None

    # Attempt to extract host.
    if protocol.HOST_SEPARATOR in raw:
        raw, _, host = raw.partition(protocol.HOST_SEPARATOR)
        nick = raw
    # Attempt to extract user.
    if protocol.USER_SEPARATOR in raw:
        nick, _, user = raw.partition(protocol.USER_SEPARATOR)

    return nick, user, host
