## connection.py
# TCP transport to an IRC server, reporting progress through event callbacks.
import asyncio
import datetime
import logging
import os.path as path
import ssl
import sys

from tornado.iostream import StreamClosedError
from tornado.tcpclient import TCPClient
from tornado.util import TimeoutError

__all__ = ['Connection', 'UNCONNECTED', 'CONNECTING', 'CONNECTED', 'CLOSING']

DEFAULT_CA_PATHS = {
    'linux': '/etc/ssl/certs',
    'linux2': '/etc/ssl/certs',
    'freebsd': '/etc/ssl/certs'
}

# Transport states, reported through the 'state' event.
UNCONNECTED = 'unconnected'
CONNECTING = 'connecting'
CONNECTED = 'connected'
CLOSING = 'closing'


class Connection:
    """
    A TCP connection over the IRC protocol.

    Connecting happens in the background on the event loop. Progress is reported to callbacks registered with `on()`:
    'connected', 'disconnected', 'data' (received bytes), 'error' (the exception) and 'state' (the new state).
    """
    CONNECT_TIMEOUT = 10
    READ_CHUNK_SIZE = 4096
    EVENTS = ('connected', 'disconnected', 'data', 'error', 'state')

    def __init__(self, tls=False, tls_verify=True, tls_certificate_file=None, tls_certificate_keyfile=None,
                 tls_certificate_password=None, source_address=None, eventloop=None):
        self.hostname = None
        self.port = None
        self.source_address = source_address

        self.tls = tls
        self.tls_context = None
        self.tls_verify = tls_verify
        self.tls_certificate_file = tls_certificate_file
        self.tls_certificate_keyfile = tls_certificate_keyfile
        self.tls_certificate_password = tls_certificate_password

        self.stream = None
        self.state = UNCONNECTED
        self.eventloop = eventloop
        self.logger = logging.getLogger(__name__)

        self._handlers = {event: [] for event in self.EVENTS}
        self._task = None
        self._tls_requested = False

    ## Events.

    def on(self, event, callback):
        """ Call callback whenever event happens. """
        if event not in self._handlers:
            raise ValueError('Unknown connection event: {}'.format(event))
        self._handlers[event].append(callback)

    def off(self, event, callback=None):
        """ Stop calling callback for event. Without callback, remove all callbacks for event. """
        if event not in self._handlers:
            raise ValueError('Unknown connection event: {}'.format(event))
        if callback is None:
            self._handlers[event].clear()
        elif callback in self._handlers[event]:
            self._handlers[event].remove(callback)

    def _emit(self, event, *args):
        for callback in list(self._handlers[event]):
            try:
                callback(*args)
            except Exception:
                self.logger.exception('Failed to execute %s handler.', event)

    def _set_state(self, state):
        if self.state != state:
            self.state = state
            self._emit('state', state)

    ## Connection.

    @property
    def connected(self):
        """ Whether this connection is... connected to something. """
        return self.stream is not None and not self.stream.closed()

    @property
    def supports_tls(self):
        """ Whether this connection can be upgraded to TLS. """
        return self.tls

    def connect(self, hostname, port):
        """ Start connecting to target. Returns the task doing so. """
        self.close()

        self.hostname = hostname
        self.port = port
        self._tls_requested = False

        loop = self.eventloop or asyncio.get_running_loop()
        self._task = loop.create_task(self._connect())
        return self._task

    def start_tls(self):
        """ Upgrade the connection to TLS as soon as the TCP connection is established. """
        if self.connected:
            self.logger.warning('Can not upgrade an established connection to TLS.')
            return
        self._tls_requested = True

    async def _connect(self):
        self._set_state(CONNECTING)
        self.tls_context = None

        try:
            stream = await TCPClient().connect(self.hostname, self.port, source_ip=self.source_address,
                                               timeout=datetime.timedelta(seconds=self.CONNECT_TIMEOUT))
            if self._tls_requested:
                self.tls_context = self.create_tls_context()
                stream = await stream.start_tls(False, ssl_options=self.tls_context, server_hostname=self.hostname)
        except (OSError, StreamClosedError, TimeoutError) as e:
            self._set_state(UNCONNECTED)
            self._emit('error', e)
            return

        stream.set_nodelay(True)
        self.stream = stream
        self._set_state(CONNECTED)
        self._emit('connected')
        await self._read_forever(stream)

    async def _read_forever(self, stream):
        try:
            while True:
                data = await stream.read_bytes(self.READ_CHUNK_SIZE, partial=True)
                self._emit('data', data)
        except StreamClosedError:
            if stream.error:
                self._emit('error', stream.error)
        finally:
            stream.close()
            if self.stream is stream:
                self.stream = None
                self._set_state(UNCONNECTED)
                self._emit('disconnected')

    def create_tls_context(self):
        """ Create the TLS context used to secure the connection. """
        tls_context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)

        # Load client certificate.
        if self.tls_certificate_file:
            tls_context.load_cert_chain(self.tls_certificate_file, self.tls_certificate_keyfile,
                                        password=self.tls_certificate_password)

        # Set some relevant options:
        # - No server should use SSLv2 or SSLv3 any more, they are outdated and full of security holes. (RFC6176, RFC7568)
        # - Disable compression in order to counter the CRIME attack.
        # - Disable session resumption to maintain perfect forward secrecy.
        for opt in ['NO_SSLv2', 'NO_SSLv3', 'NO_COMPRESSION', 'NO_TICKET']:
            if hasattr(ssl, 'OP_' + opt):
                tls_context.options |= getattr(ssl, 'OP_' + opt)

        # Set TLS verification options.
        if self.tls_verify:
            tls_context.set_default_verify_paths()
            if sys.platform in DEFAULT_CA_PATHS and path.isdir(DEFAULT_CA_PATHS[sys.platform]):
                tls_context.load_verify_locations(capath=DEFAULT_CA_PATHS[sys.platform])
            tls_context.verify_mode = ssl.CERT_REQUIRED
            tls_context.check_hostname = True
        else:
            # Order matters: hostname checking has to go before verification can be disabled.
            tls_context.check_hostname = False
            tls_context.verify_mode = ssl.CERT_NONE

        return tls_context

    def write(self, data):
        """ Queue data for sending. Returns False if the connection can't take it. """
        if not self.connected:
            return False

        try:
            future = self.stream.write(data)
        except StreamClosedError:
            return False

        future.add_done_callback(self._write_done)
        return True

    def _write_done(self, future):
        if not future.cancelled() and future.exception():
            self.logger.debug('Write failed: %s', future.exception())

    def close(self):
        """ Disconnect from target, or stop connecting to it. """
        if self._task and not self._task.done() and not self.connected:
            self._task.cancel()
            self._set_state(UNCONNECTED)
        if self.connected:
            self._set_state(CLOSING)
            self.stream.close()
