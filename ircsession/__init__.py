from . import protocol, parsing, framing, messages, models, buffers, connection, session

from .protocol import Error, ProtocolViolation, ReceiveBufferOverflow
from .connection import Connection
from .models import Buffer
from .buffers import BufferRegistry
from .session import Session, IDLE, CONNECTING, REGISTERED, DISCONNECTED

__name__ = 'ircsession'
__version__ = '0.3.0'
__version_info__ = (0, 3, 0)
__license__ = 'BSD'
