"""Errors raised across the link layer boundary."""

from typing import Optional


class LinkError(Exception):
    """リンク層エラーの基底クラス"""
    pass


class InvalidUse(LinkError):
    """Operation used the wrong way: not connected, block too large, re-entrant call."""
    pass


class TransportFailure(LinkError):
    """伝送路のハードエラー（セッションは破棄すべき）"""

    def __init__(self, message: str, report=None):
        super().__init__(message)
        self.report = report


class GiveUp(LinkError):
    """MAX_TRIES exhausted without success; the connection is still usable."""

    def __init__(self, message: str, attempts: int, seq: Optional[int] = None):
        super().__init__(message)
        self.attempts = attempts
        self.seq = seq
