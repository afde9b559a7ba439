## models.py
# Conversation buffer model.
from . import messages, parsing, protocol


class Buffer:
    """ A conversation target: a channel, a query with another user, or the session-wide main buffer. """

    def __init__(self, pattern, session):
        self.pattern = pattern
        self.session = session

    @property
    def key(self):
        """ Identity used for lookup. Buffers are case-insensitive. """
        return parsing.normalize(self.pattern)

    @property
    def is_main(self):
        return self.pattern == protocol.MAIN_BUFFER_PATTERN

    @property
    def is_channel(self):
        return bool(self.pattern) and self.pattern[0] in protocol.CHANNEL_PREFIXES

    def message(self, text):
        """ Send a message to this buffer's target. """
        return self.session.send_message(messages.PrivateMessage(self.pattern, text))

    def notice(self, text):
        """ Send a notice to this buffer's target. """
        return self.session.send_message(messages.NoticeMessage(self.pattern, text))

    def action(self, text):
        """ Send a CTCP ACTION to this buffer's target. """
        return self.session.send_message(messages.CtcpActionMessage(self.pattern, text))

    def __repr__(self):
        return '{cls}({pattern!r})'.format(cls=self.__class__.__name__, pattern=self.pattern)
