## parsing.py
# Line decoding, RFC1459 message parsing and construction.
import collections.abc
import locale

from . import protocol

__all__ = ['RawMessage', 'decode', 'parse_user', 'normalize', 'NormalizingDict']


def decode(data, encoding=None):
    """
    Decode a received line.
    With a configured encoding, fall back to Latin-1 on failure.
    Without one, try UTF-8 first, then the locale's preferred encoding, then Latin-1.
    """
    if encoding:
        candidates = [encoding]
    else:
        candidates = [protocol.DEFAULT_ENCODING, locale.getpreferredencoding(False)]

    for candidate in candidates:
        try:
            return data.decode(candidate)
        except (UnicodeDecodeError, LookupError):
            continue
    # Latin-1 maps every byte, so this can't fail.
    return data.decode(protocol.FALLBACK_ENCODING)


class RawMessage(protocol.Message):
    """ A line split into source, command and parameters. """

    def __init__(self, command, params, source=None, trailing=False, _raw=None, _valid=True):
        self.command = command
        self.params = list(params)
        self.source = source
        self.trailing = trailing
        self._valid = _valid
        self._raw = _raw

    @property
    def is_numeric(self):
        return bool(protocol.NUMERIC_PATTERN.match(str(self.command)))

    @property
    def code(self):
        """ Numeric reply code, or None for named commands. """
        if self.is_numeric:
            return int(self.command)
        return None

    @classmethod
    def parse(cls, line, encoding=None):
        """
        Parse given line into IRC message structure.
        Returns a RawMessage.
        """
        valid = True

        if isinstance(line, (bytes, bytearray)):
            message = decode(bytes(line), encoding)
        else:
            message = line

        # Sanity check for message length.
        if len(message) > protocol.MESSAGE_LENGTH_LIMIT:
            valid = False

        # Strip message separator.
        if message.endswith(protocol.LINE_SEPARATOR):
            message = message[:-len(protocol.LINE_SEPARATOR)]
        elif message.endswith(protocol.MINIMAL_LINE_SEPARATOR):
            message = message[:-len(protocol.MINIMAL_LINE_SEPARATOR)]

        # Sanity check for forbidden characters.
        if any(ch in message for ch in protocol.FORBIDDEN_CHARACTERS):
            valid = False

        # Extract message sections.
        # Format: (:source)? command parameter*
        if message.startswith(protocol.PREFIX_SENTINEL):
            parts = protocol.ARGUMENT_SEPARATOR.split(message[1:], 2)
        else:
            parts = [None] + protocol.ARGUMENT_SEPARATOR.split(message, 1)

        if len(parts) == 3:
            source, command, raw_params = parts
        elif len(parts) == 2:
            source, command = parts
            raw_params = ''
        else:
            raise protocol.ProtocolViolation('Improper IRC message format: not enough elements.', message=message)

        if not command:
            raise protocol.ProtocolViolation('Improper IRC message format: no command.', message=message)

        # Sanity check for command.
        if not protocol.COMMAND_PATTERN.match(command):
            valid = False

        # Extract parameters properly.
        # Format: (word|:sentence)*

        # Only parameter is a 'trailing' sentence.
        if raw_params.startswith(protocol.TRAILING_PREFIX):
            params = [raw_params[len(protocol.TRAILING_PREFIX):]]
        # We have a sentence in our parameters.
        elif ' ' + protocol.TRAILING_PREFIX in raw_params:
            index = raw_params.find(' ' + protocol.TRAILING_PREFIX)

            # Get all single-word parameters.
            params = protocol.ARGUMENT_SEPARATOR.split(raw_params[:index].rstrip(' '))
            # Extract last parameter as sentence
            params.append(raw_params[index + len(protocol.TRAILING_PREFIX) + 1:])
        # We have some parameters, but no sentences.
        elif raw_params:
            params = protocol.ARGUMENT_SEPARATOR.split(raw_params.rstrip(' '))
        # No parameters.
        else:
            params = []

        return RawMessage(command.upper(), params, source=source, _valid=valid, _raw=message)

    def construct(self, force=False):
        """ Construct a raw IRC message. """
        # Sanity check for command.
        command = str(self.command)
        if not protocol.COMMAND_PATTERN.match(command) and not force:
            raise protocol.ProtocolViolation('The constructed command does not follow the command pattern ({pat})'.format(pat=protocol.COMMAND_PATTERN.pattern), message=command)
        message = command.upper()

        # Add parameters.
        for idx, param in enumerate(self.params):
            last = idx + 1 == len(self.params)
            # Trailing parameter?
            if not param or ' ' in param or param[0] == protocol.TRAILING_PREFIX or (last and self.trailing):
                if not last and not force:
                    raise protocol.ProtocolViolation('Only the final parameter of an IRC message can be trailing and thus contain spaces, or start with a colon.', message=param)
                message += ' ' + protocol.TRAILING_PREFIX + param
            # Regular parameter.
            else:
                message += ' ' + param

        # Prepend source.
        if self.source:
            message = protocol.PREFIX_SENTINEL + self.source + ' ' + message

        # Sanity check for characters.
        if any(ch in message for ch in protocol.FORBIDDEN_CHARACTERS) and not force:
            raise protocol.ProtocolViolation('The constructed message contains forbidden characters ({chs}).'.format(chs=', '.join(repr(ch) for ch in sorted(protocol.FORBIDDEN_CHARACTERS))), message=message)

        # Sanity check for length.
        message += protocol.LINE_SEPARATOR
        if len(message) > protocol.MESSAGE_LENGTH_LIMIT and not force:
            raise protocol.ProtocolViolation('The constructed message is too long. ({len} > {maxlen})'.format(len=len(message), maxlen=protocol.MESSAGE_LENGTH_LIMIT), message=message)

        return message

    def __repr__(self):
        return '{cls}({cmd!r}, {params!r}, source={src!r})'.format(
            cls=self.__class__.__name__, cmd=self.command, params=self.params, src=self.source)


def parse_user(raw):
    """ Parse nick(!user(@host)?)? structure. """
    nick = raw
    user = None
    host = None

    if not raw:
        return None, None, None

    # Attempt to extract host.
    if protocol.HOST_SEPARATOR in raw:
        raw, host = raw.split(protocol.HOST_SEPARATOR, 1)
        nick = raw
    # Attempt to extract user.
    if protocol.USER_SEPARATOR in raw:
        nick, user = raw.split(protocol.USER_SEPARATOR, 1)

    return nick, user, host


def normalize(input, case_mapping=protocol.DEFAULT_CASE_MAPPING):
    """ Normalize input according to case mapping. """
    if case_mapping not in protocol.CASE_MAPPINGS:
        raise protocol.ProtocolViolation('Unknown case mapping ({})'.format(case_mapping))

    input = input.lower()

    if case_mapping in ('rfc1459', 'strict-rfc1459'):
        input = input.replace('{', '[').replace('}', ']').replace('|', '\\')
    if case_mapping == 'rfc1459':
        input = input.replace('~', '^')

    return input


class NormalizingDict(collections.abc.MutableMapping):
    """ A dict that normalizes entries according to the given case mapping. """
    def __init__(self, *args, case_mapping=protocol.DEFAULT_CASE_MAPPING):
        self.storage = {}
        self.case_mapping = case_mapping
        self.update(dict(*args))

    def __getitem__(self, key):
        if not isinstance(key, str):
            raise KeyError(key)
        return self.storage[normalize(key, case_mapping=self.case_mapping)]

    def __setitem__(self, key, value):
        if not isinstance(key, str):
            raise KeyError(key)
        self.storage[normalize(key, case_mapping=self.case_mapping)] = value

    def __delitem__(self, key):
        if not isinstance(key, str):
            raise KeyError(key)
        del self.storage[normalize(key, case_mapping=self.case_mapping)]

    def __iter__(self):
        return iter(self.storage)

    def __len__(self):
        return len(self.storage)

    def __repr__(self):
        return '{mod}.{cls}({dict}, case_mapping={cm})'.format(
            mod=__name__, cls=self.__class__.__name__,
            dict=self.storage, cm=self.case_mapping)
