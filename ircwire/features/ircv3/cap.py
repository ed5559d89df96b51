## cap.py
# Server <-> client optional extension indication support.
# See also: http://ircv3.atheme.org/specification/capability-negotiation-3.1
import ircwire.protocol
from ircwire import events
from ircwire.features import rfc1459

__all__ = [ 'CapabilityNegotiationSupport' ]


class CapabilityNegotiationSupport(rfc1459.RFC1459Support):
    """ CAP command support. """

    ## Message handlers.

    def classify_raw_cap(self, message):
        """ Handle CAP message. Sub-command events carry every parameter after the target. """
        if len(message.params) < 2:
            return None
        subcommand = message.params[1]

        # Call handler.
        attr = '_classify_cap_' + ircwire.protocol.identifierify(subcommand)
        if hasattr(self, attr):
            return getattr(self, attr)(message.params[1:])

        self.logger.warning('Unknown CAP subcommand sent from server: %s', subcommand)
        return None

    def _classify_cap_ack(self, params):
        """ Requested capabilities accepted. """
        return events.CapabilitiesAcknowledged(params)

    def _classify_cap_nak(self, params):
        """ Requested capabilities rejected. """
        return events.CapabilitiesRejected(params)

    def _classify_cap_req(self, params):
        return events.CapabilitiesRequested(params)

    def _classify_cap_ls(self, params):
        """ Capabilities supported by the server. """
        return events.CapabilitiesList(params)

    def _classify_cap_list(self, params):
        """ Capabilities active on this connection. """
        return events.CapabilitiesActive(params)
