"""Simulated bit errors on the receive path."""

import logging
import random
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

BITS_PER_BYTE = 8


@dataclass
class BitErrorInjector:
    """
    受信データにランダムなビット誤りを挿入する

    Each received byte has one random bit inverted with probability
    ``8 * prob_err`` (prob_err is the per-bit error probability).
    """
    prob_err: float = 0.0
    rng: random.Random = field(default_factory=random.Random)

    def __post_init__(self):
        if not 0.0 <= self.prob_err <= 1.0:
            raise ValueError(f"Probability of error must be within [0, 1], got {self.prob_err}")

    @property
    def enabled(self) -> bool:
        return self.prob_err > 0.0

    def apply(self, data: bytes) -> bytes:
        if not self.enabled or not data:
            return data

        threshold = BITS_PER_BYTE * self.prob_err
        damaged = bytearray(data)
        for i in range(len(damaged)):
            if self.rng.random() < threshold:
                damaged[i] ^= 1 << self.rng.randrange(BITS_PER_BYTE)
                logger.debug(f"Simulated bit error at byte {i}")
        return bytes(damaged)
