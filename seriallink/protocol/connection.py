"""Connection state and statistics for one link session."""

import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .constants import next_seq
from .errors import InvalidUse

logger = logging.getLogger(__name__)


@dataclass
class LinkStats:
    """接続中の統計カウンタ"""
    frames_sent: int = 0
    acks_sent: int = 0
    naks_sent: int = 0
    acks_received: int = 0
    naks_received: int = 0
    bad_frames: int = 0
    good_frames: int = 0
    timeouts: int = 0
    ack_send_failures: int = 0


@dataclass(frozen=True)
class LinkEvent:
    """Published to listeners on every counter increment."""
    name: str
    detail: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LinkReport:
    """切断時のレポート"""
    stats: LinkStats
    elapsed_s: float

    def summary_lines(self) -> List[str]:
        s = self.stats
        return [
            f"Disconnected after {self.elapsed_s:.2f} s.  Sent {s.frames_sent} data frames",
            f"Received {s.good_frames} good and {s.bad_frames} bad frames, had {s.timeouts} timeouts",
            f"Sent {s.acks_sent} ACKs and {s.naks_sent} NAKs",
            f"Received {s.acks_received} ACKs and {s.naks_received} NAKs",
        ]

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self.stats)
        data["elapsed_s"] = self.elapsed_s
        return data


Listener = Callable[[LinkEvent], None]


class ConnectionState:
    """
    1セッション分のプロトコル状態

    Created on connect, discarded on disconnect.  ``last_seq_good_rx`` starts
    at ``2 * mod_seqnum - 1``, which no real frame carries; its successor is 0.
    """

    def __init__(self, mod_seqnum: int, listeners: Optional[List[Listener]] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.mod_seqnum = mod_seqnum
        self.connected = True
        self.seq_num_tx = 0
        self.last_seq_good_rx = 2 * mod_seqnum - 1
        self.stats = LinkStats()
        self.listeners = listeners if listeners is not None else []
        self.clock = clock
        self.connect_time = clock()

    def next_seq(self, seq: int) -> int:
        return next_seq(seq, self.mod_seqnum)

    @property
    def expected_seq(self) -> int:
        return self.next_seq(self.last_seq_good_rx)

    def advance_tx(self) -> None:
        self.seq_num_tx = self.next_seq(self.seq_num_tx)

    def count(self, counter: str, **detail) -> None:
        """
        カウンタを増やしてリスナーに通知

        A failing listener is logged and skipped so the protocol state stays
        consistent.  InvalidUse from a re-entrant call still propagates.
        """
        setattr(self.stats, counter, getattr(self.stats, counter) + 1)
        event = LinkEvent(counter, detail)
        for listener in list(self.listeners):
            try:
                listener(event)
            except InvalidUse:
                raise
            except Exception:
                logger.warning(f"Listener failed on {counter} event", exc_info=True)

    def elapsed(self) -> float:
        return self.clock() - self.connect_time

    def report(self) -> LinkReport:
        snapshot = LinkStats(**asdict(self.stats))
        return LinkReport(stats=snapshot, elapsed_s=self.elapsed())
