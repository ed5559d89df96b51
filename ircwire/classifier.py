## classifier.py
# Basic message classification.
import logging

from . import events, protocol

__all__ = ['IGNORED', 'BasicClassifier']

# Returned by handlers for replies that never produce an event.
IGNORED = object()


class BasicClassifier:
    """
    Base classifier class. Maps an incoming message onto exactly one event.

    Classification is dispatched on the uppercased command: a `classify_raw_<command>` method is looked up
    and called with the message. Handlers return an event, `IGNORED` for suppressed replies, or None when
    the message does not have the shape the handler expects, in which case the message is classified as unknown.
    This class on its own classifies nothing but numeric error replies; features add the handlers.
    """
    ERROR_REPLY_PREFIXES = ('4', '5')

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def classify(self, message):
        """ Classify message. Returns an event, or None if the message is suppressed. """
        command = message.command.upper()
        method = 'classify_raw_' + protocol.identifierify(command)
        handler = getattr(self, method, self.classify_unhandled)

        try:
            event = handler(message)
        except Exception:
            self.logger.exception('Failed to execute %s handler.', method)
            event = None

        if event is IGNORED:
            return None
        if event is None:
            return self.classify_unknown(message)
        return event

    def classify_unhandled(self, message):
        """ No specific handler: numeric error replies still get classified. """
        code = message.command
        if len(code) == 3 and code.isdigit() and code.startswith(self.ERROR_REPLY_PREFIXES) and message.prefix:
            return events.ErrorReply(message.prefix, code, ' '.join(message.params[1:]))
        return None

    def classify_unknown(self, message):
        """ Unknown command. """
        return events.Unknown(message)

    def _ignored(self, message):
        """ Ignore message. """
        return IGNORED

    def __call__(self, message):
        return self.classify(message)
