import os
import sys
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from conftest import FakeClock, ScriptedTransport
from seriallink.protocol import checksum
from seriallink.protocol.checksum import Verdict
from seriallink.protocol.frame_codec import FrameCodec
from seriallink.protocol.frame_sync import FrameSynchronizer
from seriallink.transport.base import TransportError


@pytest.fixture
def sync_setup():
    clock = FakeClock()
    transport = ScriptedTransport(clock)
    transport.open()
    return transport, FrameSynchronizer(transport, read_timeout=0.5, clock=clock), clock


def test_get_frame_exact(sync_setup):
    transport, sync, _ = sync_setup
    frame = FrameCodec.build(b"\x01\x02\x03", 0)
    transport.feed(frame)
    assert sync.get_frame(600, 6.0) == frame

def test_get_frame_skips_leading_noise(sync_setup):
    transport, sync, _ = sync_setup
    frame = FrameCodec.build(b"payload", 4)
    transport.feed(b"\x00\x55\xaa" + frame)
    assert sync.get_frame(600, 6.0) == frame

def test_get_frame_one_at_a_time(sync_setup):
    transport, sync, _ = sync_setup
    first = FrameCodec.build(b"one", 0)
    second = FrameCodec.build(b"two", 1)
    transport.feed(first + second)
    assert sync.get_frame(600, 6.0) == first
    assert sync.get_frame(600, 6.0) == second

def test_get_frame_timeout_returns_none(sync_setup):
    _, sync, clock = sync_setup
    start = clock()
    assert sync.get_frame(600, 6.0) is None
    assert clock() - start == pytest.approx(6.0)

def test_get_frame_timeout_after_noise_only(sync_setup):
    transport, sync, _ = sync_setup
    transport.feed(b"\x01\x02\x03\x04")
    assert sync.get_frame(600, 6.0) is None
    assert not transport.inbound

def test_empty_payload_frame(sync_setup):
    transport, sync, _ = sync_setup
    frame = FrameCodec.build(b"", 3)
    transport.feed(frame)
    assert sync.get_frame(600, 6.0) == frame

def test_oversized_frame_is_dropped_and_drained(sync_setup):
    transport, sync, _ = sync_setup
    big = FrameCodec.build(bytes(20), 0)
    ack = FrameCodec.build_ack(1, 0)
    transport.feed(big + ack)
    assert sync.get_frame(10, 6.0) is None
    # 後続のフレームは読める
    assert sync.get_frame(10, 6.0) == ack

def test_frame_reaching_capacity_is_dropped(sync_setup):
    transport, sync, _ = sync_setup
    ack = FrameCodec.build_ack(1, 0)
    transport.feed(ack)
    assert sync.get_frame(len(ack), 6.0) is None

def test_short_frame_fails_checksum(sync_setup):
    transport, sync, _ = sync_setup
    frame = FrameCodec.build(b"truncated", 2)
    transport.feed(frame[:-3])
    raw = sync.get_frame(600, 6.0)
    assert raw == frame[:-3]
    assert checksum.verify(raw) is Verdict.BAD

def test_marker_without_size_byte(sync_setup):
    transport, sync, _ = sync_setup
    transport.feed(b"\xd4")
    raw = sync.get_frame(600, 6.0)
    assert raw == b"\xd4"
    assert checksum.verify(raw) is Verdict.BAD

def test_transport_error_propagates():
    transport = MagicMock()
    transport.receive.side_effect = TransportError("port gone")
    sync = FrameSynchronizer(transport, read_timeout=0.5, clock=FakeClock())
    with pytest.raises(TransportError):
        sync.get_frame(600, 6.0)

def test_size_directed_read():
    """サイズフィールドの分だけ一度に読む"""
    frame = FrameCodec.build(b"abcdef", 1)
    transport = MagicMock()
    transport.receive.side_effect = [frame[0:1], frame[1:2], frame[2:]]
    sync = FrameSynchronizer(transport, read_timeout=0.5, clock=FakeClock())

    assert sync.get_frame(600, 6.0) == frame
    counts = [c.args[0] for c in transport.receive.call_args_list]
    assert counts == [1, 1, frame[1]]
