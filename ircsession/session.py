## session.py
# IRC session: registration, line processing, message dispatch and buffers.
import collections
import logging

from . import buffers, framing, messages, models, parsing, protocol
from .connection import Connection, CONNECTING as TRANSPORT_CONNECTING, CONNECTED as TRANSPORT_CONNECTED

__all__ = ['Session', 'IDLE', 'CONNECTING', 'REGISTERED', 'DISCONNECTED']

# Session states.
IDLE = 'idle'
CONNECTING = 'connecting'
REGISTERED = 'registered'
DISCONNECTED = 'disconnected'


class Session:
    """
    An IRC session.

    The session owns the byte stream to a server: it reassembles received data into lines, turns those into
    typed messages and hands them to `on_message` and any registered listeners. Registration is started as soon
    as the transport connects; the session counts as registered once the server welcomes us.

    Sessions are single-threaded. Everything happens inside transport callbacks or calls made from the event loop
    thread, and nothing blocks.
    """
    DEFAULT_QUIT_MESSAGE = 'Quitting'
    EVENTS = ('connecting', 'connected', 'disconnected', 'password', 'message', 'buffer_added', 'buffer_removed')

    def __init__(self, nickname=None, username=None, realname=None, host=None, port=protocol.DEFAULT_PORT,
                 encoding=None, password=None, connection=None, tls=False, tls_verify=True, buffer_factory=None,
                 trace=None, receive_limit=protocol.DEFAULT_RECEIVE_LIMIT, eventloop=None, **kwargs):
        """ Create a session. Without a connection, the session creates and owns one itself. """
        self.logger = logging.getLogger(__name__)

        self._nickname = nickname or ''
        self._username = username or ''
        self._realname = realname or ''
        self._host = host
        self._port = port
        self.encoding = encoding
        self.password = password

        self.buffer_factory = buffer_factory
        self.trace = trace or self._trace
        self.eventloop = eventloop
        self.state = IDLE

        # Buffers.
        self.main_buffer = None
        self.buffers = buffers.BufferRegistry(self.create_buffer,
                                              added=self._buffer_added, removed=self._buffer_removed)

        # Low-level data stuff.
        self._framer = framing.LineFramer(self._on_line, limit=receive_limit)
        self._listeners = collections.defaultdict(list)
        self._connection = None
        self._own_connection = False

        if connection is None:
            self._set_connection(Connection(tls=tls, tls_verify=tls_verify, eventloop=eventloop), owned=True)
        else:
            self._set_connection(connection, owned=False)

        if kwargs:
            self.logger.warning('Unused arguments: %s', ', '.join(kwargs.keys()))

    ## Configuration.

    @property
    def host(self):
        return self._host

    @host.setter
    def host(self, value):
        if self.connected:
            self.logger.warning('Changing host has no effect until re-connect.')
        self._host = value

    @property
    def port(self):
        return self._port

    @port.setter
    def port(self, value):
        if self.connected:
            self.logger.warning('Changing port has no effect until re-connect.')
        self._port = value

    @property
    def username(self):
        return self._username

    @username.setter
    def username(self, value):
        if self.connected:
            self.logger.warning('Changing username has no effect until re-connect.')
        self._username = value

    @property
    def realname(self):
        return self._realname

    @realname.setter
    def realname(self, value):
        if self.connected:
            self.logger.warning('Changing realname has no effect until re-connect.')
        self._realname = value

    @property
    def nickname(self):
        return self._nickname

    @nickname.setter
    def nickname(self, value):
        self._nickname = value

    ## Connection.

    @property
    def connection(self):
        """ The transport this session talks over. """
        return self._connection

    @connection.setter
    def connection(self, value):
        self.set_connection(value)

    def set_connection(self, connection):
        """
        Use given connection from now on. The session does not take ownership of it.
        A previous connection is detached from, and closed if the session created it.
        """
        self._set_connection(connection, owned=False)

    def _set_connection(self, connection, owned):
        if connection is self._connection:
            return

        if self._connection:
            for event, handler in self._connection_handlers():
                self._connection.off(event, handler)
            if self._own_connection:
                self._connection.close()

        self._connection = connection
        self._own_connection = owned and connection is not None
        self.state = IDLE

        if connection:
            for event, handler in self._connection_handlers():
                connection.on(event, handler)

    def _connection_handlers(self):
        return [
            ('connected', self._on_connected),
            ('disconnected', self._on_disconnected),
            ('data', self._on_data),
            ('error', self._on_error),
            ('state', self._on_state),
        ]

    @property
    def connected(self):
        """ Whether the transport is connecting or connected. """
        return self._connection is not None and self._connection.state in (TRANSPORT_CONNECTING, TRANSPORT_CONNECTED)

    @property
    def registered(self):
        """ Whether the server has welcomed us. """
        return self.state == REGISTERED

    def open(self):
        """
        Connect to the server.
        Returns False without doing anything if nickname, username or realname is empty.
        """
        for attr in ('nickname', 'username', 'realname'):
            if not getattr(self, attr):
                self.logger.error('Can not open session: %s is empty.', attr)
                return False
        return self.reconnect()

    def reconnect(self):
        """ (Re)connect to the server, securing the connection if the transport supports it. """
        if not self._connection:
            self.logger.error('Can not connect: no connection set.')
            return False

        self.state = CONNECTING
        self._connection.connect(self._host, self._port)
        if getattr(self._connection, 'supports_tls', False):
            self._connection.start_tls()
        return True

    def close(self):
        """ Disconnect from the server. """
        if self._connection:
            self._connection.close()

    def quit(self, message=None):
        """ Quit network. """
        if message is None:
            message = self.DEFAULT_QUIT_MESSAGE

        self.rawmsg('QUIT', message, trailing=True)
        self.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    ## Transport callbacks.

    def _on_connected(self):
        self._framer.reset()
        self.state = CONNECTING
        self._emit('connecting')

        # Password first.
        password = self._request_password()
        if password:
            self.rawmsg('PASS', password)

        # Then nickname...
        self.rawmsg('NICK', self._nickname)
        # And now for the rest of the user information.
        self.rawmsg('USER', self._username, protocol.UNKNOWN_HOST, protocol.UNKNOWN_HOST, self._realname, trailing=True)

        self.main_buffer = self.create_buffer(protocol.MAIN_BUFFER_PATTERN)

    def _on_disconnected(self):
        self.state = DISCONNECTED
        self._emit('disconnected')

    def _on_data(self, data):
        try:
            self._framer.feed(data)
        except protocol.ReceiveBufferOverflow as e:
            self.logger.error('%s Closing connection.', e)
            self.close()

    def _on_error(self, error):
        self.logger.warning('Connection error: %s', error)

    def _on_state(self, state):
        self.logger.debug('Connection state: %s', state)

    ## Message handling.

    def _trace(self, line):
        self.logger.debug('<< %s', line)

    def _on_line(self, line):
        try:
            self._process_line(line)
        except Exception:
            self.logger.exception('Failed to process line: %r', line)

    def _process_line(self, line):
        """ Handle a single received line. """
        text = parsing.decode(line, self.encoding)
        self.trace(text)

        try:
            raw = parsing.RawMessage.parse(text)
        except protocol.ProtocolViolation as e:
            self.logger.warning('Dropping malformed line: %s', e)
            return

        if not raw._valid:
            self.logger.warning('Encountered strictly invalid IRC message from server: %s', raw._raw)

        if raw.is_numeric:
            # Connected!
            if raw.code == protocol.RPL_WELCOME:
                self.state = REGISTERED
                self._emit('connected')
            message = messages.NumericMessage.from_params(raw.source, raw.params, code=raw.code)
        elif raw.command == 'PING':
            self.send_message(messages.PongMessage(raw.params[0] if raw.params else ''))
            return
        else:
            message = messages.classify(raw.source, raw.command, raw.params)
            if message is None:
                self.logger.debug('Ignoring unhandled command: [%s] %s %s', raw.source, raw.command, raw.params)
                return

        self._emit('message', message)

    ## Sending.

    def send_message(self, message):
        """ Send a message. Returns whether the transport accepted it, and False for messages that can not be sent. """
        try:
            line = message.construct()
        except protocol.ProtocolViolation as e:
            self.logger.error('Refusing to send invalid message: %s', e)
            return False
        return self._write(line)

    def raw(self, line):
        """ Send raw line. """
        return self._write(line.rstrip(protocol.LINE_SEPARATOR) + protocol.LINE_SEPARATOR)

    def rawmsg(self, command, *params, **kwargs):
        """ Send raw message. """
        return self.send_message(parsing.RawMessage(command, params, **kwargs))

    def _write(self, line):
        self.logger.debug('>> %s', line.rstrip(protocol.LINE_SEPARATOR))
        if not self._connection:
            return False

        data = line.encode(self.encoding or protocol.DEFAULT_ENCODING, errors='replace')
        return bool(self._connection.write(data))

    ## Buffers.

    def create_buffer(self, target):
        """
        Create a buffer for target.
        Uses the buffer factory if one was given; override to make the session use a Buffer subclass.
        """
        if self.buffer_factory:
            return self.buffer_factory(target, self)
        return models.Buffer(target, self)

    def buffer(self, target):
        """ Return the buffer for target, or None if there is none. """
        return self.buffers.lookup(target)

    def add_buffer(self, target):
        """ Return the buffer for target, creating it if needed. """
        return self.buffers.add(target)

    def remove_buffer(self, buffer):
        """ Remove buffer. Returns whether it was removed. """
        return self.buffers.remove(buffer)

    def _buffer_added(self, buffer):
        self._emit('buffer_added', buffer)

    def _buffer_removed(self, buffer):
        self._emit('buffer_removed', buffer)

    ## Events.

    def add_listener(self, event, callback):
        """ Call callback whenever event happens, after the corresponding on_<event> callback. """
        if event not in self.EVENTS:
            raise ValueError('Unknown session event: {}'.format(event))
        self._listeners[event].append(callback)

    def remove_listener(self, event, callback):
        """ Stop calling callback for event. """
        if callback in self._listeners[event]:
            self._listeners[event].remove(callback)

    def _emit(self, event, *args):
        handlers = [getattr(self, 'on_' + event)] + list(self._listeners[event])
        for handler in handlers:
            try:
                handler(*args)
            except Exception:
                self.logger.exception('Failed to execute %s handler.', event)

    def _request_password(self):
        handlers = [self.on_password] + list(self._listeners['password'])
        for handler in handlers:
            try:
                password = handler()
            except Exception:
                self.logger.exception('Failed to execute password handler.')
                continue
            if password:
                return password
        return None

    ## Overloadable callbacks.

    def on_connecting(self):
        """ Callback called when the transport has connected and registration is about to start. """
        pass

    def on_connected(self):
        """ Callback called when the server has welcomed us. """
        pass

    def on_disconnected(self):
        """ Callback called when the transport has disconnected. """
        pass

    def on_password(self):
        """ Callback called before registration to obtain the server password. Return None or '' for none. """
        return self.password

    def on_message(self, message):
        """ Callback called for every received message. """
        pass

    def on_buffer_added(self, buffer):
        pass

    def on_buffer_removed(self, buffer):
        pass

    def __repr__(self):
        if self._host:
            return '{cls}(host={host!r}, port={port!r})'.format(cls=self.__class__.__name__, host=self._host, port=self._port)
        return '{cls}()'.format(cls=self.__class__.__name__)
