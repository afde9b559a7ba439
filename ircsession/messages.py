## messages.py
# Typed IRC messages and command classification.
from . import ctcp, parsing, protocol

__all__ = [
    'Message', 'NumericMessage', 'PingMessage', 'PongMessage',
    'JoinMessage', 'PartMessage', 'TopicMessage', 'NamesMessage', 'ListMessage', 'InviteMessage', 'KickMessage',
    'ChannelModeMessage', 'UserModeMessage',
    'PrivateMessage', 'NoticeMessage', 'CtcpActionMessage', 'CtcpRequestMessage', 'CtcpReplyMessage',
    'WhoMessage', 'WhoisMessage', 'WhowasMessage',
    'classify'
]


class Message(protocol.Message):
    """
    Base class for typed messages.

    Fields are taken positionally from the message parameters, in `FIELDS` order.
    Parameters the server didn't send become empty strings.
    """
    COMMAND = None
    FIELDS = ()
    # Amount of fields that are sent even when empty.
    REQUIRED = 1
    # Free-text field that is always sent as trailing parameter when it is the last one.
    TRAILING = None

    def __init__(self, *args, prefix=None, **kwargs):
        if len(args) > len(self.FIELDS):
            raise TypeError('{cls} takes at most {n} fields ({got} given)'.format(
                cls=self.__class__.__name__, n=len(self.FIELDS), got=len(args)))

        values = dict(zip(self.FIELDS, args))
        for name, value in kwargs.items():
            if name not in self.FIELDS:
                raise TypeError('{cls} has no field {name!r}'.format(cls=self.__class__.__name__, name=name))
            values[name] = value

        self.prefix = prefix
        for name in self.FIELDS:
            setattr(self, name, values.get(name) or '')

    @classmethod
    def from_params(cls, prefix, params):
        """ Create message from received prefix and parameters. """
        return cls(*params[:len(cls.FIELDS)], prefix=prefix)

    @property
    def command(self):
        return self.COMMAND

    @property
    def params(self):
        """ Parameters as they would be sent. Empty optional fields at the end are left out. """
        values = [getattr(self, name) for name in self.FIELDS]
        while len(values) > self.REQUIRED and not values[-1]:
            values.pop()
        return values

    @property
    def nick(self):
        return parsing.parse_user(self.prefix)[0]

    @property
    def ident(self):
        return parsing.parse_user(self.prefix)[1]

    @property
    def host(self):
        return parsing.parse_user(self.prefix)[2]

    def construct(self, force=False):
        params = self.params
        trailing = self.TRAILING is not None and len(params) == self.FIELDS.index(self.TRAILING) + 1
        message = parsing.RawMessage(self.command, params, source=self.prefix, trailing=trailing)
        return message.construct(force=force)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.prefix == other.prefix and self.command == other.command and self.params == other.params

    def __hash__(self):
        return hash((type(self), self.prefix, self.command, tuple(self.params)))

    def __repr__(self):
        fields = ', '.join('{}={!r}'.format(name, getattr(self, name)) for name in self.FIELDS)
        return '{cls}({fields}, prefix={prefix!r})'.format(cls=self.__class__.__name__, fields=fields, prefix=self.prefix)


## Numerics.

class NumericMessage(Message):
    """ A numeric server reply. The first parameter is the target of the reply, usually our own nickname. """
    FIELDS = ('target',)
    REQUIRED = 0

    def __init__(self, code, target=None, arguments=(), prefix=None):
        super().__init__(target, prefix=prefix)
        self.code = int(code)
        self.arguments = list(arguments)

    @classmethod
    def from_params(cls, prefix, params, code=0):
        return cls(code, *params[:1], arguments=params[1:], prefix=prefix)

    @property
    def command(self):
        return str(self.code).zfill(3)

    @property
    def params(self):
        if self.arguments:
            return [self.target] + self.arguments
        return super().params

    def __repr__(self):
        return '{cls}({code:03d}, target={target!r}, arguments={args!r}, prefix={prefix!r})'.format(
            cls=self.__class__.__name__, code=self.code, target=self.target, args=self.arguments, prefix=self.prefix)


## Connection control.

class PingMessage(Message):
    COMMAND = 'PING'
    FIELDS = ('argument',)

class PongMessage(Message):
    COMMAND = 'PONG'
    FIELDS = ('argument',)


## Channel operations.

class JoinMessage(Message):
    COMMAND = 'JOIN'
    FIELDS = ('channel', 'key')

class PartMessage(Message):
    COMMAND = 'PART'
    FIELDS = ('channel', 'reason')
    TRAILING = 'reason'

class TopicMessage(Message):
    COMMAND = 'TOPIC'
    FIELDS = ('channel', 'topic')
    TRAILING = 'topic'

class NamesMessage(Message):
    COMMAND = 'NAMES'
    FIELDS = ('channel',)

class ListMessage(Message):
    COMMAND = 'LIST'
    FIELDS = ('channels', 'server')
    REQUIRED = 0

class InviteMessage(Message):
    COMMAND = 'INVITE'
    FIELDS = ('user', 'channel')
    REQUIRED = 2

class KickMessage(Message):
    COMMAND = 'KICK'
    FIELDS = ('channel', 'user', 'reason')
    REQUIRED = 2
    TRAILING = 'reason'


## Modes.

class ChannelModeMessage(Message):
    COMMAND = 'MODE'
    FIELDS = ('channel', 'mode', 'argument', 'mask')

class UserModeMessage(Message):
    COMMAND = 'MODE'
    FIELDS = ('user', 'mode')


## Messages.

class PrivateMessage(Message):
    COMMAND = 'PRIVMSG'
    FIELDS = ('target', 'message')
    REQUIRED = 2
    TRAILING = 'message'

class NoticeMessage(Message):
    COMMAND = 'NOTICE'
    FIELDS = ('target', 'message')
    REQUIRED = 2
    TRAILING = 'message'


## CTCP.

class CtcpActionMessage(Message):
    """ A /me action: PRIVMSG with a CTCP ACTION payload. """
    COMMAND = 'PRIVMSG'
    FIELDS = ('target', 'action')
    REQUIRED = 2
    TRAILING = 'action'

    @classmethod
    def from_params(cls, prefix, params):
        target = params[0] if params else ''
        _, action = ctcp.parse_ctcp(params[1]) if len(params) > 1 else (None, None)
        return cls(target, action, prefix=prefix)

    @property
    def params(self):
        return [self.target, ctcp.construct_ctcp(protocol.CTCP_ACTION, self.action)]


class _CtcpMessage(Message):
    """ Shared behaviour of CTCP requests and replies: the payload is kept without delimiters. """
    REQUIRED = 2

    @classmethod
    def from_params(cls, prefix, params):
        target = params[0] if params else ''
        payload = ctcp.unquote_ctcp(params[1]) if len(params) > 1 else ''
        return cls(target, payload, prefix=prefix)

    @property
    def payload(self):
        return getattr(self, self.FIELDS[1])

    @property
    def query(self):
        """ CTCP type, such as VERSION or PING. """
        return self.payload.split(' ', 1)[0]

    @property
    def contents(self):
        """ Everything after the CTCP type, or None. """
        if ' ' in self.payload:
            return self.payload.split(' ', 1)[1]
        return None

    @property
    def params(self):
        return [self.target, ctcp.construct_ctcp(self.payload)]


class CtcpRequestMessage(_CtcpMessage):
    COMMAND = 'PRIVMSG'
    FIELDS = ('target', 'request')
    TRAILING = 'request'

class CtcpReplyMessage(_CtcpMessage):
    COMMAND = 'NOTICE'
    FIELDS = ('target', 'reply')
    TRAILING = 'reply'


## User queries.

class WhoMessage(Message):
    COMMAND = 'WHO'
    FIELDS = ('mask',)

class WhoisMessage(Message):
    COMMAND = 'WHOIS'
    FIELDS = ('user',)

class WhowasMessage(Message):
    COMMAND = 'WHOWAS'
    FIELDS = ('user',)


## Classification.

COMMANDS = {
    'JOIN': JoinMessage,
    'PART': PartMessage,
    'TOPIC': TopicMessage,
    'NAMES': NamesMessage,
    'LIST': ListMessage,
    'INVITE': InviteMessage,
    'KICK': KickMessage,
    'WHO': WhoMessage,
    'WHOIS': WhoisMessage,
    'WHOWAS': WhowasMessage,
}


def classify(prefix, command, params):
    """
    Turn a received named command into a typed message.
    Returns None for commands we don't handle. Numerics and PING are the session's business.
    """
    command = command.upper()
    text = params[1] if len(params) > 1 else ''

    if command == 'MODE':
        if params and params[0].startswith(protocol.CHANNEL_SIGIL):
            cls = ChannelModeMessage
        else:
            cls = UserModeMessage
    elif command == 'PRIVMSG':
        if ctcp.is_action(text):
            cls = CtcpActionMessage
        elif ctcp.is_ctcp(text):
            cls = CtcpRequestMessage
        else:
            cls = PrivateMessage
    elif command == 'NOTICE':
        if ctcp.is_ctcp(text):
            cls = CtcpReplyMessage
        else:
            cls = NoticeMessage
    elif command in COMMANDS:
        cls = COMMANDS[command]
    else:
        return None

    return cls.from_params(prefix, params)
