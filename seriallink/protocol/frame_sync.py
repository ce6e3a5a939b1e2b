"""
Frame Synchronizer

Pulls bytes from a transport and assembles exactly one frame: hunt for the
start marker, read the size field, then read the rest of the frame in one
size-directed read.  Checksums are not inspected here.
"""

import logging
import time
from typing import Callable, Optional

from .constants import START_MARKER
from ..transport.base import Transport

logger = logging.getLogger(__name__)


class FrameSynchronizer:
    """フレーム同期クラス"""

    def __init__(self, transport: Transport, read_timeout: float = 1.0,
                 clock: Callable[[], float] = time.monotonic):
        self.transport = transport
        self.read_timeout = read_timeout
        self.clock = clock

    def _hunt_marker(self, deadline: float) -> bool:
        """開始マーカーを1バイトずつ探す"""
        discarded = 0
        while True:
            remaining = deadline - self.clock()
            if remaining <= 0:
                logger.debug(f"Timeout seeking START, {discarded} bytes discarded")
                return False

            byte = self.transport.receive(1, remaining)
            if byte and byte[0] == START_MARKER:
                if discarded:
                    logger.debug(f"Discarded {discarded} bytes before START")
                return True
            discarded += len(byte)

    def get_frame(self, capacity: int, time_limit: float) -> Optional[bytes]:
        """
        Extract one frame from the byte stream.

        Args:
            capacity: 受け入れ可能なフレームの最大バイト数（これ以上は不正）
            time_limit: 開始マーカーを待つ秒数

        Returns:
            The assembled frame bytes, or None on timeout / oversized frame.
            TransportError from the transport propagates unchanged.
        """
        if not self._hunt_marker(self.clock() + time_limit):
            return None

        frame = bytearray([START_MARKER])
        size = self.transport.receive(1, self.read_timeout)
        if not size:
            logger.debug("No size byte after START")
            return bytes(frame)
        frame.extend(size)

        frame_size = size[0]
        body = self.transport.receive(frame_size, self.read_timeout)
        frame.extend(body)
        if len(body) < frame_size:
            logger.debug(f"Short frame: expected {frame_size} bytes after size, got {len(body)}")

        if len(frame) >= capacity:
            logger.debug(f"Size limit reached, {len(frame)} bytes received (capacity {capacity})")
            return None

        return bytes(frame)
