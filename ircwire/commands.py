## commands.py
# Builders for client-initiated commands.
from .features.ircv3.tags import TaggedMessage

__all__ = [
    'nick', 'user', 'password', 'join', 'part', 'privmsg', 'notice', 'names', 'quit', 'ping', 'pong', 'version',
    'cap_ls', 'cap_list', 'cap_req', 'cap_ack', 'cap_nak', 'cap_end'
]

CAPABILITY_SEPARATOR = ' '


def _message(command, *params):
    return TaggedMessage(command, params)


## Registration.

def nick(nickname):
    """ NICK command. """
    return _message('NICK', nickname)


def user(username, mode=0, realname=None):
    """ USER command. The real name defaults to the username. """
    return _message('USER', username, str(mode), '*', realname if realname is not None else username)


def password(password):
    """ PASS command. """
    return _message('PASS', password)


def quit(message=None):
    """ QUIT command, with optional farewell message. """
    if message is None:
        return _message('QUIT')
    return _message('QUIT', message)


## Channels.

def join(channel):
    return _message('JOIN', channel)


def part(channel):
    return _message('PART', channel)


def names(channel):
    return _message('NAMES', channel)


## Messages.

def privmsg(target, message):
    """ PRIVMSG to a channel or user. """
    return _message('PRIVMSG', target, message)


def notice(target, message):
    """ NOTICE to a channel or user. """
    return _message('NOTICE', target, message)


def version(value, target=None):
    """ VERSION command, optionally directed at a target. """
    if target is None:
        return _message('VERSION', value)
    return _message('VERSION', target, value)


## Keep-alive.

def ping(value=None):
    if value is None:
        return _message('PING')
    return _message('PING', value)


def pong(value=None):
    """ PONG command, echoing the value of the PING it answers. """
    if value is None:
        return _message('PONG')
    return _message('PONG', value)


## Capability negotiation.

def cap_ls(version=None):
    """ CAP LS, optionally announcing the negotiation version (e.g. 302). """
    if version is None:
        return _message('CAP', 'LS')
    return _message('CAP', 'LS', str(version))


def cap_list():
    return _message('CAP', 'LIST')


def cap_req(capabilities):
    """ CAP REQ for the given capabilities. """
    return _message('CAP', 'REQ', CAPABILITY_SEPARATOR.join(capabilities))


def cap_ack(capabilities):
    return _message('CAP', 'ACK', CAPABILITY_SEPARATOR.join(capabilities))


def cap_nak(capabilities):
    return _message('CAP', 'NAK', CAPABILITY_SEPARATOR.join(capabilities))


def cap_end():
    return _message('CAP', 'END')
