## framing.py
# Splitting a byte stream into IRC lines.
from . import protocol

__all__ = ['DEFAULT_MAX_LENGTH', 'LineFramer']

LINE_SEPARATOR = protocol.LINE_SEPARATOR.encode('ascii')
DEFAULT_MAX_LENGTH = 1024 * 1024


class LineFramer:
    """
    Turns arbitrarily chunked data into complete lines.
    Data after the last line separator is kept until a later chunk terminates it.
    """

    def __init__(self, max_length=DEFAULT_MAX_LENGTH):
        self.max_length = max_length
        self.reset()

    def reset(self):
        """ Drop all buffered data. """
        self._buffer = b''
        self._discarding = False

    @property
    def pending(self):
        """ Amount of buffered, unterminated bytes. """
        return len(self._buffer)

    def feed(self, data):
        """
        Add data to the buffer and return the lines it completed, without separators.
        Empty lines are dropped. Raises LineTooLong when the unterminated rest outgrows max_length; the
        exception carries the lines completed before that point, and input is skipped up to the next separator.
        """
        buffer = self._buffer + data
        lines = []
        start = 0

        while True:
            end = buffer.find(LINE_SEPARATOR, start)
            if end < 0:
                break
            if self._discarding:
                # Tail end of an overlong line.
                self._discarding = False
            elif end > start:
                lines.append(buffer[start:end])
            start = end + len(LINE_SEPARATOR)

        rest = buffer[start:]
        if self._discarding:
            # Keep a possible half separator so a split terminator still ends the overlong line.
            self._buffer = _partial_separator(rest)
            return lines

        if len(rest) > self.max_length:
            self._buffer = _partial_separator(rest)
            self._discarding = True
            raise protocol.LineTooLong(len(rest), self.max_length, lines=lines)

        self._buffer = rest
        return lines


def _partial_separator(data):
    """ The start of a line separator data ends with, if any. """
    if data.endswith(LINE_SEPARATOR[:1]):
        return LINE_SEPARATOR[:1]
    return b''
