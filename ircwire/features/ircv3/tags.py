## tags.py
# Tagged message support.
import collections
import re

import ircwire.protocol
from ircwire.features import rfc1459

__all__ = [ 'TaggedMessage', 'format_tag' ]

TAG_INDICATOR = '@'
TAG_SEPARATOR = ';'
TAG_VALUE_SEPARATOR = '='
TAG_LENGTH_LIMIT = 8191

TAG_CONVERSIONS = {
    r"\:": ';',
    r"\s": ' ',
    r"\\": '\\',
    r"\r": '\r',
    r"\n": '\n'
}
TAG_ESCAPE_PATTERN = re.compile(r"\\(.?)", re.DOTALL)


class TaggedMessage(rfc1459.RFC1459Message):
    """ An IRC message with an optional IRCv3 message tag block. """

    def __init__(self, command, params=(), tags=(), **kw):
        tags = tuple(tags)
        for tag in tags:
            if not tag or ' ' in tag or TAG_SEPARATOR in tag or \
                    any(ch in tag for ch in rfc1459.protocol.FORBIDDEN_CHARACTERS):
                raise ircwire.protocol.ProtocolViolation('Invalid message tag: {!r}'.format(tag), message=tag)
        super().__init__(command, params, tags=tags, **kw)

    @property
    def tag_values(self):
        """ Tags mapped to their unescaped values, or True for tags without a value. """
        values = collections.OrderedDict()
        for raw_tag in self.tags:
            if TAG_VALUE_SEPARATOR in raw_tag:
                tag, value = raw_tag.split(TAG_VALUE_SEPARATOR, 1)
                value = unescape(value)
            else:
                tag = raw_tag
                value = True
            values[tag] = value
        return values

    @classmethod
    def parse(cls, line, encoding=ircwire.protocol.DEFAULT_ENCODING):
        """
        Parse given line into IRC message structure.
        Returns a TaggedMessage.
        """
        message = rfc1459.parsing.strip_line(line, encoding)
        raw = message

        # Parse tags.
        tags = []
        valid = True
        if message.startswith(TAG_INDICATOR):
            raw_tags, pos = rfc1459.parsing.next_token(message, len(TAG_INDICATOR))
            pos = rfc1459.parsing.skip_separators(message, pos)
            if pos >= len(message):
                raise ircwire.protocol.ProtocolViolation('Improper IRC message format: only tags.', message=raw)

            # Sanity check for tag length.
            if len(raw_tags) + len(TAG_INDICATOR) > TAG_LENGTH_LIMIT:
                valid = False

            tags = [tag for tag in raw_tags.split(TAG_SEPARATOR) if tag]
            message = message[pos:]

        # Parse rest of message.
        prefix, command, params = rfc1459.parsing.split_message(message)
        if len(message) + len(ircwire.protocol.LINE_SEPARATOR) > rfc1459.protocol.MESSAGE_LENGTH_LIMIT:
            valid = False

        return cls(command, params, prefix=prefix, tags=tags, _raw=raw, _valid=valid)

    def construct(self):
        """
        Construct raw IRC message and return it.
        """
        message = super().construct()

        # Add tags.
        if self.tags:
            message = TAG_INDICATOR + TAG_SEPARATOR.join(self.tags) + ' ' + message
        return message


def unescape(value):
    """ Convert IRCv3 tag value escapes, since IRC escapes != python escapes. """
    def replace(match):
        escape = match.group()
        if escape in TAG_CONVERSIONS:
            return TAG_CONVERSIONS[escape]
        # Unknown escapes drop the backslash; a lone trailing backslash is dropped entirely.
        return match.group(1)

    return TAG_ESCAPE_PATTERN.sub(replace, value)


def escape(value):
    """ Escape tag value for the wire. """
    value = value.replace('\\', r'\\')
    for sequence, replacement in TAG_CONVERSIONS.items():
        if replacement != '\\':
            value = value.replace(replacement, sequence)
    return value


def format_tag(tag, value=None):
    """ Create a raw tag string from a key and optional value. """
    if value is None or value is True:
        return tag
    return tag + TAG_VALUE_SEPARATOR + escape(value)
