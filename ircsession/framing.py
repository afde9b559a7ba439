## framing.py
# Reassembly of a raw byte stream into IRC lines.
from . import protocol

__all__ = ['LineFramer']


class LineFramer:
    """
    Accumulates received bytes and hands every complete line to `on_line`.

    Lines end on a line feed; surrounding whitespace (including the carriage return of a proper CRLF)
    is stripped, and lines that are empty after stripping are dropped.
    Undelimited data is held until the next feed, up to `limit` bytes.
    """

    def __init__(self, on_line, limit=protocol.DEFAULT_RECEIVE_LIMIT):
        self.on_line = on_line
        self.limit = limit
        self._buffer = bytearray()

    @property
    def pending(self):
        """ Amount of bytes received that are not part of a complete line yet. """
        return len(self._buffer)

    def reset(self):
        """ Drop any partially received line. """
        self._buffer.clear()

    def feed(self, data):
        """ Add received data and process every complete line in it. """
        self._buffer += data
        separator = protocol.MINIMAL_LINE_SEPARATOR.encode('ascii')

        # All complete lines leave the buffer before any is handed on, even if on_line raises.
        end = self._buffer.rfind(separator)
        if end == -1:
            lines = []
        else:
            lines = bytes(self._buffer[:end]).split(separator)
            del self._buffer[:end + len(separator)]

        if self.limit is not None and len(self._buffer) > self.limit:
            size = len(self._buffer)
            self.reset()
            overflow = protocol.ReceiveBufferOverflow(size, self.limit)
        else:
            overflow = None

        for line in lines:
            line = line.strip()
            if line:
                self.on_line(line)

        if overflow:
            raise overflow
