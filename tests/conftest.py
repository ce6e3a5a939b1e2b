"""Shared fixtures: a scripted transport double and a manual clock."""

from typing import Callable, List, Optional, Union

import pytest

from seriallink.config import Config
from seriallink.protocol import LinkLayer
from seriallink.transport.base import Transport, TransportError


class FakeClock:
    """手動で進める時計"""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


Reply = Optional[bytes]


class ScriptedTransport(Transport):
    """
    テスト用トランスポート

    - ``feed()`` queues inbound bytes.
    - Each ``send()`` pops the next entry of ``replies`` (None = nothing comes
      back) or calls ``on_send`` and queues whatever it returns.
    - ``send_results`` can force a return value or exception per send.
    - Reading from an empty inbox advances the clock by the timeout.
    """

    def __init__(self, clock: FakeClock, replies: Optional[List[Reply]] = None,
                 on_send: Optional[Callable[[bytes], Reply]] = None):
        self.clock = clock
        self.inbound = bytearray()
        self.replies = list(replies or [])
        self.on_send = on_send
        self.send_results: List[Union[int, Exception]] = []
        self.sent: List[bytes] = []
        self.opened = False
        self.open_error: Optional[Exception] = None
        self.close_error: Optional[Exception] = None

    @property
    def is_open(self) -> bool:
        return self.opened

    def feed(self, data: bytes) -> None:
        self.inbound.extend(data)

    def open(self) -> None:
        if self.open_error:
            raise self.open_error
        self.opened = True

    def close(self) -> None:
        self.opened = False
        if self.close_error:
            raise self.close_error

    def send(self, data: bytes) -> int:
        if self.send_results:
            result = self.send_results.pop(0)
            if isinstance(result, Exception):
                raise result
            self.sent.append(bytes(data))
            return result

        self.sent.append(bytes(data))
        if self.on_send is not None:
            reply = self.on_send(bytes(data))
        elif self.replies:
            reply = self.replies.pop(0)
        else:
            reply = None
        if reply:
            self.inbound.extend(reply)
        return len(data)

    def receive(self, max_count: int, timeout: float) -> bytes:
        if not self.opened:
            raise TransportError("not open")
        if not self.inbound:
            self.clock.advance(timeout)
            return b""
        data = bytes(self.inbound[:max_count])
        del self.inbound[:max_count]
        return data

    def take_sent(self) -> List[bytes]:
        sent, self.sent = self.sent, []
        return sent


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fast_config():
    return Config(TX_WAIT=2.0, RX_WAIT=3.0, READ_TIMEOUT=0.5, MAX_TRIES=5,
                  MAX_BLOCK=200, OPT_BLOCK=70, MOD_SEQNUM=16)


@pytest.fixture
def transport(clock):
    return ScriptedTransport(clock)


@pytest.fixture
def link(transport, fast_config, clock):
    link = LinkLayer(transport, fast_config, clock=clock)
    link.connect()
    return link
