"""Byte transport interface consumed by the link layer."""

import abc


class TransportError(IOError):
    """伝送路のハードエラー（タイムアウトではない）"""
    pass


class Transport(abc.ABC):
    """
    Minimal byte channel.

    ``receive`` returns an empty bytes object when the timeout expires; only
    hard failures raise TransportError.
    """

    @abc.abstractmethod
    def open(self) -> None:
        """Open and configure the channel."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release the channel."""

    @abc.abstractmethod
    def send(self, data: bytes) -> int:
        """Write bytes, returning how many were actually sent."""

    @abc.abstractmethod
    def receive(self, max_count: int, timeout: float) -> bytes:
        """Read up to ``max_count`` bytes, waiting at most ``timeout`` seconds."""

    @property
    def is_open(self) -> bool:
        return False
