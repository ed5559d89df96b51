## classifier.py
# Basic RFC1459 stuff.
from ircwire import events
from ircwire.classifier import BasicClassifier


def _integer(value):
    """ Return value as int, or None if it isn't one. """
    try:
        return int(value)
    except ValueError:
        return None


class RFC1459Support(BasicClassifier):
    """ Basic RFC1459 classification. """

    ## Commands.

    def classify_raw_ping(self, message):
        """ PING command. Only seen when the client does not answer pings itself. """
        if message.prefix and message.params:
            return events.Ping(message.prefix, message.params[0])

    def classify_raw_version(self, message):
        """ VERSION request. """
        if message.prefix:
            return events.Version(message.prefix)

    def classify_raw_mode(self, message):
        """ MODE command. Changes are read in couples after the target; an unpaired trailing token is dropped. """
        if not message.prefix or len(message.params) < 2:
            return None

        params = message.params
        changes = [events.ModeChange(params[i], params[i + 1]) for i in range(1, len(params) - 1, 2)]
        return events.Mode(message.prefix, changes)

    def classify_raw_join(self, message):
        """ JOIN command. """
        if message.prefix and message.params:
            return events.ChannelJoin(message.prefix, message.params[0])

    def classify_raw_part(self, message):
        """ PART command. """
        if message.prefix and message.params:
            return events.ChannelPart(message.prefix, message.params[0])

    def classify_raw_privmsg(self, message):
        """ PRIVMSG command. """
        if message.prefix and len(message.params) >= 2:
            return events.PrivateMessage(message.prefix, message.params[0], message.params[-1])

    def classify_raw_notice(self, message):
        """ NOTICE command. """
        if message.prefix and len(message.params) >= 2:
            return events.Notice(message.prefix, message.params[0], message.params[-1])

    ## Numeric responses.

    def classify_raw_001(self, message):
        """ Welcome message. """
        return events.Welcome(message.prefix, message.params[0] if message.params else None)

    def classify_raw_002(self, message):
        """ Server host. """
        if message.params:
            return events.YourHost(message.prefix, message.params[-1])

    def classify_raw_003(self, message):
        """ Server creation time. """
        if message.params:
            return events.Uptime(message.prefix, message.params[-1])

    def classify_raw_004(self, message):
        """ Basic server information. """
        if message.params[1:]:
            return events.ServerInfo(message.prefix, ' '.join(message.params[1:]))

    def classify_raw_010(self, message):
        """ Server redirect. """
        if message.params:
            return events.Bounce(message.prefix, message.params[-1])

    def classify_raw_251(self, message):
        """ Amount of users online. """
        return events.UserClient(message.prefix, ' '.join(message.params[1:]))

    def classify_raw_252(self, message):
        """ Amount of operators online. """
        count = self._lusers_count(message)
        if count is not None:
            return events.UserOperators(message.prefix, count, message.params[2])

    def classify_raw_253(self, message):
        """ Amount of unknown connections. """
        count = self._lusers_count(message)
        if count is not None:
            return events.UserUnknownConnections(message.prefix, count, message.params[2])

    def classify_raw_254(self, message):
        """ Amount of channels. Servers that send other shapes are reported as local users. """
        count = self._lusers_count(message)
        if count is not None:
            return events.UserChannels(message.prefix, count, message.params[2])
        return events.UserLocalUsers(message.prefix, None, None, ' '.join(message.params[1:]))

    def classify_raw_255(self, message):
        """ Amount of local users and servers. """
        if len(message.params[1:]) == 4:
            return events.UserMe(message.prefix, ' '.join(message.params[1:]))

    def classify_raw_265(self, message):
        """ Amount of local users. """
        count, max, comment = self._lusers_range(message)
        return events.UserLocalUsers(message.prefix, count, max, comment)

    def classify_raw_266(self, message):
        """ Amount of global users. """
        count, max, comment = self._lusers_range(message)
        return events.UserGlobalUsers(message.prefix, count, max, comment)

    def classify_raw_353(self, message):
        """ Response to NAMES. Users are split on single spaces, so doubled spaces leave empty entries. """
        if len(message.params) >= 4:
            return events.Names(message.params[1], message.params[2], message.params[3].split(' '))

    def classify_raw_371(self, message):
        """ Server information. """
        return events.Info(message.prefix, message.params[-1] if message.params else None)

    def classify_raw_372(self, message):
        """ Message of the day. """
        return events.MessageOfTheDay(message.prefix, message.params[-1] if message.params else None)

    classify_raw_375 = classify_raw_372  # Start of message of the day.

    # End-of-list markers carry nothing of interest.
    classify_raw_366 = BasicClassifier._ignored  # End of NAMES.
    classify_raw_374 = BasicClassifier._ignored  # End of INFO.
    classify_raw_376 = BasicClassifier._ignored  # End of MOTD.

    def _classify_stats(self, message):
        """ STATS replies. """
        if message.params[1:]:
            return events.Stats(message.prefix, ' '.join(message.params[1:]))

    classify_raw_213 = _classify_stats  # C-lines.
    classify_raw_214 = _classify_stats  # N-lines.
    classify_raw_215 = _classify_stats  # I-lines.
    classify_raw_216 = _classify_stats  # K-lines.
    classify_raw_217 = _classify_stats  # Q-lines.
    classify_raw_218 = _classify_stats  # Y-lines.
    classify_raw_240 = _classify_stats  # V-lines.
    classify_raw_241 = _classify_stats  # L-lines.
    classify_raw_244 = _classify_stats  # H-lines.
    classify_raw_247 = _classify_stats  # G-lines.
    classify_raw_250 = _classify_stats  # Connection statistics.

    ## Helpers.

    def _lusers_count(self, message):
        """ Count from a `<target> <count> <comment> <extra>` LUSERS reply, or None if it has another shape. """
        if len(message.params[1:]) == 3:
            return _integer(message.params[1])
        return None

    def _lusers_range(self, message):
        """ (count, max, comment) from a `<target> <count> <max> <comment> <extra>` LUSERS reply. """
        if len(message.params[1:]) == 4:
            count = _integer(message.params[1])
            max = _integer(message.params[2])
            if count is not None and max is not None:
                return count, max, message.params[3]
        return None, None, ' '.join(message.params[1:])
