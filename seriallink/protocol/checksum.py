"""Single-byte additive checksum.

The checksum covers the frame size byte, the sequence number byte and the
payload.  It is taken modulo 250, so it always fits in one byte.  It is a weak
check: single-byte corruption is always caught, but some multi-byte errors
cancel out.
"""

import enum
from typing import Iterable

from .constants import CHECKSUM_MODULO, MIN_FRAME_LENGTH, TRAILER_LENGTH


class Verdict(enum.Enum):
    """フレーム検査結果"""
    GOOD = 1
    BAD = 0


def compute(payload: Iterable[int], frame_size: int, seq: int) -> int:
    """送信フレーム用のチェックサムを計算"""
    return (frame_size + seq + sum(payload)) % CHECKSUM_MODULO


def verify(frame: bytes) -> Verdict:
    """
    受信フレームのチェックサムを検査

    Args:
        frame: 開始マーカーからチェックサムまでのフレーム全体

    Returns:
        Verdict.GOOD if the trailing byte matches the recomputed sum
    """
    if len(frame) < MIN_FRAME_LENGTH:
        return Verdict.BAD

    # 開始マーカーとチェックサム以外の全バイトを合計
    covered = frame[1:len(frame) - TRAILER_LENGTH]
    if sum(covered) % CHECKSUM_MODULO != frame[-1]:
        return Verdict.BAD
    return Verdict.GOOD
