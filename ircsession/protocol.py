## protocol.py
# IRC constants, errors and the message base class.
import re
from abc import abstractmethod

DEFAULT_ENCODING = 'utf-8'
FALLBACK_ENCODING = 'iso-8859-1'

# While this *technically* is supposed to be 194, nobody uses that.
DEFAULT_PORT = 6667
DEFAULT_TLS_PORT = 6697


## Errors.

class Error(Exception):
    """ Base class for all ircsession errors. """
    pass


class ProtocolViolation(Error):
    """ An error that occurred while parsing or constructing an IRC message that violates the IRC protocol. """
    def __init__(self, msg, message=None):
        super().__init__(msg)
        self.irc_message = message


class ReceiveBufferOverflow(ProtocolViolation):
    """ The peer sent more undelimited data than we are willing to hold on to. """
    def __init__(self, size, limit):
        super().__init__('Receive buffer overflow: {size} bytes pending without line separator (limit: {limit}).'.format(
            size=size, limit=limit))
        self.size = size
        self.limit = limit


## Limits.

MESSAGE_LENGTH_LIMIT = 512
DEFAULT_RECEIVE_LIMIT = 64 * 1024


## Message parsing.

LINE_SEPARATOR = '\r\n'
MINIMAL_LINE_SEPARATOR = '\n'

FORBIDDEN_CHARACTERS = { '\r', '\n', '\0' }
USER_SEPARATOR = '!'
HOST_SEPARATOR = '@'
PREFIX_SENTINEL = ':'
TRAILING_PREFIX = ':'

ARGUMENT_SEPARATOR = re.compile(' +', re.UNICODE)
COMMAND_PATTERN = re.compile('^([a-zA-Z]+|[0-9]+)$', re.UNICODE)
NUMERIC_PATTERN = re.compile('^[0-9]+$')

CHANNEL_SIGIL = '#'
CHANNEL_PREFIXES = { '#', '&', '+', '!' }
MAIN_BUFFER_PATTERN = '*'

CASE_MAPPINGS = { 'ascii', 'rfc1459', 'strict-rfc1459' }
DEFAULT_CASE_MAPPING = 'ascii'


## CTCP.

CTCP_DELIMITER = '\x01'
CTCP_ESCAPE_CHAR = '\x16'
CTCP_ACTION = 'ACTION'


## Numerics.

RPL_WELCOME = 1

# Registration fields we don't know or care about. Servers ignore these for directly connected clients.
UNKNOWN_HOST = 'unknown'


## Bases.

class Message:
    """ Abstract message class. Messages must inherit from this class. """

    @abstractmethod
    def construct(self, force=False):
        """ Convert message into raw IRC line. If `force` is True, don't attempt to check message validity. """
        raise NotImplementedError()

    def __str__(self):
        return self.construct(force=True).rstrip(LINE_SEPARATOR)
