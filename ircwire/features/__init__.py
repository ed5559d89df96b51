from . import rfc1459, isupport, ircv3

from .rfc1459 import RFC1459Support
from .isupport import ISUPPORTSupport
from .ircv3 import IRCv3Support

ALL = [ IRCv3Support, ISUPPORTSupport, RFC1459Support ]
LITE = [ ISUPPORTSupport, RFC1459Support ]
