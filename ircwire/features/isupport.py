## isupport.py
# ISUPPORT (server-side IRC extension indication) support.
# See: http://tools.ietf.org/html/draft-hardy-irc-isupport-00
from ircwire import events
from ircwire.features import rfc1459

__all__ = [ 'ISUPPORTSupport' ]


class ISUPPORTSupport(rfc1459.RFC1459Support):
    """ ISUPPORT support. """

    ## Command handlers.

    def classify_raw_005(self, message):
        """ ISUPPORT indication. """
        # Strip target (first argument) and 'are supported by this server' (last argument).
        if len(message.params[1:]) >= 3:
            return events.ISupport(message.prefix, message.params[1:-1], message.params[-1])
