"""Transport module for raw byte channels."""

from .base import Transport, TransportError
from .impairment import BitErrorInjector
from .memory import MemoryTransport
from .serial_transport import SerialTransport

__all__ = [
    "Transport", "TransportError", "BitErrorInjector",
    "MemoryTransport", "SerialTransport"
]
