"""Frame building and parsing utilities."""

from dataclasses import dataclass
from typing import Optional, Tuple

from . import checksum
from .constants import (
    START_MARKER, SEQ_NUM_POS, HEADER_LENGTH, TRAILER_LENGTH,
    FRAME_SIZE_OVERHEAD, MAX_PAYLOAD_LENGTH, MIN_FRAME_LENGTH,
    ACK_POSITIVE, ACK_NEGATIVE, ACK_LENGTH
)


class FrameFormatError(ValueError):
    """フレーム構造エラー"""
    pass


@dataclass(frozen=True)
class Frame:
    """Immutable data frame: a sequence number and its payload."""
    seq: int
    payload: bytes = b""

    @property
    def frame_size(self) -> int:
        return len(self.payload) + FRAME_SIZE_OVERHEAD

    def to_bytes(self) -> bytes:
        return FrameCodec.build(self.payload, self.seq)


class FrameCodec:
    """フレーム組み立て・解析クラス"""

    @staticmethod
    def build(payload: bytes, seq: int) -> bytes:
        """
        データブロックからフレームを組み立てる

        Args:
            payload: フレームに入れるデータ (0..253 bytes)
            seq: ヘッダーに入れるシーケンス番号

        Returns:
            [START][frame_size][seq][payload...][checksum]
        """
        if len(payload) > MAX_PAYLOAD_LENGTH:
            raise FrameFormatError(
                f"Payload of {len(payload)} bytes exceeds frame limit {MAX_PAYLOAD_LENGTH}")
        if not 0 <= seq <= 0xFF:
            raise FrameFormatError(f"Sequence number {seq} does not fit in one byte")

        frame_size = len(payload) + FRAME_SIZE_OVERHEAD
        frame = bytearray([START_MARKER, frame_size, seq])
        frame.extend(payload)
        frame.append(checksum.compute(payload, frame_size, seq))
        return bytes(frame)

    @staticmethod
    def build_ack(ack_type: int, seq: int) -> bytes:
        """ACK/NAKフレームを組み立てる（1バイトのペイロード）"""
        if ack_type not in (ACK_POSITIVE, ACK_NEGATIVE):
            raise FrameFormatError(f"Unknown acknowledgement type {ack_type}")
        return FrameCodec.build(bytes([ack_type]), seq)

    @staticmethod
    def parse(raw: bytes, max_len: int) -> Tuple[int, bytes]:
        """
        検査済みフレームからシーケンス番号とデータを取り出す

        Payload bytes beyond ``max_len`` are dropped.
        """
        if len(raw) < MIN_FRAME_LENGTH:
            raise FrameFormatError(f"Frame too short: {len(raw)} bytes")
        seq = raw[SEQ_NUM_POS]
        payload = raw[HEADER_LENGTH:len(raw) - TRAILER_LENGTH]
        return seq, bytes(payload[:max_len])

    @staticmethod
    def parse_ack(raw: bytes) -> Tuple[int, Optional[int]]:
        """
        Return ``(seq, ack_type)`` of an acknowledgement frame.

        ack_type is None when the frame does not have the acknowledgement shape.
        """
        if len(raw) < MIN_FRAME_LENGTH:
            raise FrameFormatError(f"Frame too short: {len(raw)} bytes")
        if len(raw) != ACK_LENGTH:
            return raw[SEQ_NUM_POS], None
        return raw[SEQ_NUM_POS], raw[HEADER_LENGTH]
