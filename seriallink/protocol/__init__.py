"""Protocol module for framing and the stop-and-wait link layer."""

from .constants import (
    START_MARKER, HEADER_LENGTH, TRAILER_LENGTH, CHECKSUM_MODULO,
    ACK_POSITIVE, ACK_NEGATIVE, ACK_LENGTH, next_seq
)
from .checksum import Verdict
from .connection import ConnectionState, LinkEvent, LinkReport, LinkStats
from .errors import LinkError, InvalidUse, TransportFailure, GiveUp
from .frame_codec import Frame, FrameCodec, FrameFormatError
from .frame_sync import FrameSynchronizer
from .link_layer import LinkLayer

__all__ = [
    "START_MARKER", "HEADER_LENGTH", "TRAILER_LENGTH", "CHECKSUM_MODULO",
    "ACK_POSITIVE", "ACK_NEGATIVE", "ACK_LENGTH", "next_seq",
    "Verdict", "ConnectionState", "LinkEvent", "LinkReport", "LinkStats",
    "LinkError", "InvalidUse", "TransportFailure", "GiveUp",
    "Frame", "FrameCodec", "FrameFormatError", "FrameSynchronizer", "LinkLayer"
]
