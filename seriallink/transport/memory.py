"""In-memory byte channel for loopback use."""

import logging
import queue
import time
from typing import Optional, Tuple

from .base import Transport, TransportError
from .impairment import BitErrorInjector

logger = logging.getLogger(__name__)


class MemoryTransport(Transport):
    """
    メモリ上の双方向チャネルの片側

    Bytes sent on one endpoint of a pair are received on the other.
    """

    def __init__(self, inbox: "queue.Queue[int]", outbox: "queue.Queue[int]",
                 name: str = "memory", injector: Optional[BitErrorInjector] = None):
        self.inbox = inbox
        self.outbox = outbox
        self.name = name
        self.injector = injector or BitErrorInjector()
        self._open = False

    @classmethod
    def pair(cls, injector_a: Optional[BitErrorInjector] = None,
             injector_b: Optional[BitErrorInjector] = None) -> Tuple["MemoryTransport", "MemoryTransport"]:
        """相互接続されたエンドポイントを2つ生成"""
        a_to_b: "queue.Queue[int]" = queue.Queue()
        b_to_a: "queue.Queue[int]" = queue.Queue()
        return (cls(b_to_a, a_to_b, name="memory-a", injector=injector_a),
                cls(a_to_b, b_to_a, name="memory-b", injector=injector_b))

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        self._open = True
        logger.debug(f"{self.name} opened")

    def close(self) -> None:
        self._open = False
        logger.debug(f"{self.name} closed")

    def send(self, data: bytes) -> int:
        if not self._open:
            raise TransportError(f"{self.name} is not open")
        for b in data:
            self.outbox.put(b)
        return len(data)

    def receive(self, max_count: int, timeout: float) -> bytes:
        if not self._open:
            raise TransportError(f"{self.name} is not open")

        deadline = time.monotonic() + max(timeout, 0.0)
        data = bytearray()
        while len(data) < max_count:
            remaining = deadline - time.monotonic()
            try:
                if remaining <= 0:
                    data.append(self.inbox.get_nowait())
                else:
                    data.append(self.inbox.get(timeout=remaining))
            except queue.Empty:
                break
        return self.injector.apply(bytes(data))
