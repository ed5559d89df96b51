from . import protocol, framing, events, classifier, commands, transport, client, features

from .protocol import Error, ProtocolViolation, LineTooLong
from .client import NotConnected, ConnectionState, BasicClient
from .features.ircv3.tags import TaggedMessage as Message

__name__ = 'ircwire'
__version__ = '0.3.0'
__version_info__ = (0, 3, 0)
__license__ = 'BSD'


def featurize(*features):
    """ Put features into proper MRO order. """
    from functools import cmp_to_key

    def compare_subclass(left, right):
        if issubclass(left, right):
            return -1
        elif issubclass(right, left):
            return 1
        return 0

    sorted_features = sorted(features, key=cmp_to_key(compare_subclass))
    name = 'FeaturizedClassifier[{features}]'.format(
        features=', '.join(feature.__name__ for feature in sorted_features))
    return type(name, tuple(sorted_features), {})


class Classifier(featurize(*features.ALL)):
    """ Classifier knowing every supported message. """
    pass


class MinimalClassifier(featurize(*features.LITE)):
    """ A cut-down classifier without IRCv3 capability support. """
    pass


_classifier = Classifier()


def classify(message):
    """ Classify message into exactly one event, or None for suppressed replies. """
    return _classifier.classify(message)


class Client(BasicClient):
    """ A fully featured IRC client. """
    CLASSIFIER = Classifier


class MinimalClient(BasicClient):
    """ A cut-down, less-featured IRC client. """
    CLASSIFIER = MinimalClassifier
