"""
Serial Link

Stop-and-wait ARQ link layer for unreliable byte transports:
- Configuration management
- Protocol handling (checksum, framing, frame synchronization, ARQ)
- Transports (pyserial port, in-memory loopback)
- Utilities (logging, frame dumps)
"""

from .config import Config, config
from .protocol import (
    LinkLayer, LinkReport, LinkStats, LinkEvent,
    LinkError, InvalidUse, TransportFailure, GiveUp
)
from .transport import MemoryTransport, SerialTransport, Transport, TransportError

__all__ = [
    "Config", "config",
    "LinkLayer", "LinkReport", "LinkStats", "LinkEvent",
    "LinkError", "InvalidUse", "TransportFailure", "GiveUp",
    "MemoryTransport", "SerialTransport", "Transport", "TransportError"
]
