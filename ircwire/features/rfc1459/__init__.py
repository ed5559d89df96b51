from . import protocol, parsing, classifier

from .classifier import RFC1459Support
from .parsing import RFC1459Message
