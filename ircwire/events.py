## events.py
# Event value classes produced by the classifier and the client.
from ircwire.features.rfc1459.parsing import parse_user

__all__ = [
    'Event', 'ModeChange',
    'Connect', 'Disconnect', 'Error', 'Ping', 'Version', 'Welcome', 'YourHost', 'Uptime', 'ServerInfo',
    'Bounce', 'ISupport', 'Info', 'MessageOfTheDay', 'UserClient', 'UserOperators', 'UserUnknownConnections',
    'UserChannels', 'UserLocalUsers', 'UserGlobalUsers', 'UserMe', 'Stats', 'Names', 'Mode',
    'ChannelJoin', 'ChannelPart', 'CapabilitiesAcknowledged', 'CapabilitiesRejected', 'CapabilitiesRequested',
    'CapabilitiesList', 'CapabilitiesActive', 'PrivateMessage', 'Notice', 'ErrorReply', 'Unknown'
]


class Event:
    """
    Base event class. Events are immutable values: they compare equal when they are of the same type
    and carry the same fields.
    """
    name = None

    def __init__(self, **fields):
        self.__dict__['_fields'] = fields

    def __getattr__(self, attr):
        try:
            return self.__dict__['_fields'][attr]
        except KeyError:
            raise AttributeError(attr) from None

    def __setattr__(self, attr, value):
        raise AttributeError('Events are immutable.')

    @property
    def fields(self):
        """ The fields of this event, as a dict. """
        return dict(self._fields)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._fields == other._fields

    def __hash__(self):
        return hash((type(self), tuple(sorted(self._fields.items()))))

    def __repr__(self):
        return '{cls}({fields})'.format(
            cls=self.__class__.__name__,
            fields=', '.join('{}={!r}'.format(k, v) for k, v in self._fields.items()))


class ModeChange:
    """ A single (target, mode) couple from a MODE message. """
    __slots__ = ('target', 'mode')

    def __init__(self, target, mode):
        object.__setattr__(self, 'target', target)
        object.__setattr__(self, 'mode', mode)

    def __setattr__(self, attr, value):
        raise AttributeError('Mode changes are immutable.')

    def __iter__(self):
        return iter((self.target, self.mode))

    def __eq__(self, other):
        if not isinstance(other, ModeChange):
            return NotImplemented
        return (self.target, self.mode) == (other.target, other.mode)

    def __hash__(self):
        return hash((self.target, self.mode))

    def __repr__(self):
        return 'ModeChange(target={!r}, mode={!r})'.format(self.target, self.mode)


class _UserEvent(Event):
    @property
    def nickname(self):
        """ Nickname part of the originating user. """
        return parse_user(self.user)[0]


class _CapabilityEvent(Event):
    def __init__(self, capabilities):
        super().__init__(capabilities=tuple(capabilities))

    @property
    def names(self):
        """ Individual capability tokens following the sub-command. """
        names = []
        for param in self.capabilities[1:]:
            names.extend(cap for cap in param.split() if cap != '*')
        return names


## Connection.

class Connect(Event):
    """ Connected to server. """
    name = 'connect'


class Disconnect(Event):
    """ Disconnected from server. """
    name = 'disconnect'


class Error(Event):
    """ Transport or framing error. Errors never close the connection by themselves. """
    name = 'error'

    def __init__(self, error):
        super().__init__(error=error)


## Server.

class Ping(Event):
    name = 'ping'

    def __init__(self, source, value):
        super().__init__(source=source, value=value)


class Version(Event):
    name = 'version'

    def __init__(self, source):
        super().__init__(source=source)


class Welcome(Event):
    name = 'welcome'

    def __init__(self, source, message):
        super().__init__(source=source, message=message)


class YourHost(Event):
    name = 'yourHost'

    def __init__(self, source, value):
        super().__init__(source=source, value=value)


class Uptime(Event):
    name = 'uptime'

    def __init__(self, source, value):
        super().__init__(source=source, value=value)


class ServerInfo(Event):
    name = 'serverInfo'

    def __init__(self, source, message):
        super().__init__(source=source, message=message)


class Bounce(Event):
    name = 'bounce'

    def __init__(self, source, message):
        super().__init__(source=source, message=message)


class ISupport(Event):
    """ Supported features (RPL_ISUPPORT). """
    name = 'iSupport'
    DISABLED_PREFIX = '-'

    def __init__(self, source, commands, comment):
        super().__init__(source=source, commands=tuple(commands), comment=comment)

    @property
    def tokens(self):
        """
        Advertised features mapped to their values.
        Features without a value map to True, negated features (-FEATURE) to False.
        """
        tokens = {}
        for feature in self.commands:
            if feature.startswith(self.DISABLED_PREFIX):
                feature, value = feature[len(self.DISABLED_PREFIX):], False
            elif '=' in feature:
                feature, value = feature.split('=', 1)
            else:
                value = True
            tokens[feature.upper()] = value
        return tokens


class Info(Event):
    name = 'info'

    def __init__(self, source, message):
        super().__init__(source=source, message=message)


class MessageOfTheDay(Event):
    name = 'messageOfTheDay'

    def __init__(self, source, message):
        super().__init__(source=source, message=message)


class Stats(Event):
    name = 'stats'

    def __init__(self, source, message):
        super().__init__(source=source, message=message)


class ErrorReply(Event):
    """ 4xx/5xx numeric error reply. """
    name = 'errorReply'

    def __init__(self, source, code, message):
        super().__init__(source=source, code=code, message=message)


## User statistics (LUSERS).

class UserClient(Event):
    name = 'userClient'

    def __init__(self, source, message):
        super().__init__(source=source, message=message)


class UserOperators(Event):
    name = 'userOperators'

    def __init__(self, source, count, comment):
        super().__init__(source=source, count=count, comment=comment)


class UserUnknownConnections(Event):
    name = 'userUnknownConnections'

    def __init__(self, source, count, comment):
        super().__init__(source=source, count=count, comment=comment)


class UserChannels(Event):
    name = 'userChannels'

    def __init__(self, source, count, comment):
        super().__init__(source=source, count=count, comment=comment)


class UserLocalUsers(Event):
    name = 'userLocalUsers'

    def __init__(self, source, count, max, comment):
        super().__init__(source=source, count=count, max=max, comment=comment)


class UserGlobalUsers(Event):
    name = 'userGlobalUsers'

    def __init__(self, source, count, max, comment):
        super().__init__(source=source, count=count, max=max, comment=comment)


class UserMe(Event):
    name = 'userMe'

    def __init__(self, source, message):
        super().__init__(source=source, message=message)


## Channels.

class Names(Event):
    name = 'names'

    def __init__(self, modifier, channel, users):
        super().__init__(modifier=modifier, channel=channel, users=tuple(users))


class Mode(Event):
    name = 'mode'

    def __init__(self, source, changes):
        super().__init__(source=source, changes=tuple(changes))


class ChannelJoin(_UserEvent):
    name = 'channelJoin'

    def __init__(self, user, channel):
        super().__init__(user=user, channel=channel)


class ChannelPart(_UserEvent):
    name = 'channelPart'

    def __init__(self, user, channel):
        super().__init__(user=user, channel=channel)


## Messages.

class PrivateMessage(_UserEvent):
    """ PRIVMSG to a channel or to us. Channel messages are told apart by their recipient. """
    name = 'privateMessage'

    def __init__(self, user, recipient, message):
        super().__init__(user=user, recipient=recipient, message=message)


class Notice(_UserEvent):
    name = 'notice'

    def __init__(self, user, recipient, message):
        super().__init__(user=user, recipient=recipient, message=message)


## Capabilities.

class CapabilitiesAcknowledged(_CapabilityEvent):
    name = 'capabilitiesAcknowledged'


class CapabilitiesRejected(_CapabilityEvent):
    name = 'capabilitiesRejected'


class CapabilitiesRequested(_CapabilityEvent):
    name = 'capabilitiesRequested'


class CapabilitiesList(_CapabilityEvent):
    name = 'capabilitiesList'


class CapabilitiesActive(_CapabilityEvent):
    name = 'capabilitiesActive'


## Fallback.

class Unknown(Event):
    """ A message no classification rule matched. """
    name = 'unknown'

    def __init__(self, message):
        super().__init__(message=message)
