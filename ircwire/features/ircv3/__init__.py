## IRCv3.1 support.
from . import cap

from .cap import CapabilityNegotiationSupport


## IRCv3.2 support.
from . import tags

from .tags import TaggedMessage


class IRCv3Support(CapabilityNegotiationSupport):
    pass
