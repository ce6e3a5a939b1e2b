"""
Stop-and-wait Link Layer

Reliable, in-order delivery of data blocks over an unreliable byte transport.
Each block is framed, sent, and retransmitted until a matching positive
acknowledgement arrives or MAX_TRIES attempts have been made.  The receiver
acknowledges every frame it can read, accepts only the expected sequence
number and never re-delivers a duplicate.
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Optional

from . import checksum
from .checksum import Verdict
from .connection import ConnectionState, LinkReport, Listener
from .constants import ACK_POSITIVE, ACK_NEGATIVE, ACK_CAPACITY, SEQ_NUM_POS
from .errors import GiveUp, InvalidUse, LinkError, TransportFailure
from .frame_codec import Frame, FrameCodec
from .frame_sync import FrameSynchronizer
from ..config.settings import Config, config as default_config
from ..transport.base import Transport, TransportError
from ..utils.frame_dump import format_frame

logger = logging.getLogger(__name__)


class LinkLayer:
    """ストップアンドウェイトARQリンク層"""

    def __init__(self, transport: Transport, config: Optional[Config] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.transport = transport
        self.config = config or default_config
        self.clock = clock
        self.synchronizer = FrameSynchronizer(transport, self.config.READ_TIMEOUT, clock)
        self.state: Optional[ConnectionState] = None
        self.listeners = []
        self._busy: Optional[str] = None

    # ------------------------------------------------------------------
    # Lifecycle

    def connect(self) -> None:
        """伝送路を開いてセッションを開始"""
        if self.connected:
            raise InvalidUse("Already connected")
        try:
            self.transport.open()
        except TransportError as e:
            logger.error(f"Failed to connect: {e}")
            raise TransportFailure(f"Failed to connect: {e}") from e

        self.state = ConnectionState(self.config.MOD_SEQNUM, self.listeners, self.clock)
        logger.info("Connected")

    def disconnect(self) -> LinkReport:
        """
        伝送路を閉じて統計レポートを返す

        The session is marked disconnected even if closing the transport
        fails; the raised TransportFailure then carries the report.
        """
        if self.state is None:
            raise InvalidUse("Attempt to disconnect while not connected")
        if self._busy is not None:
            raise InvalidUse(f"Attempt to disconnect while {self._busy} is in progress")

        report = self.state.report()
        self.state.connected = False
        self.state = None

        try:
            self.transport.close()
        except TransportError as e:
            logger.error(f"Failed to disconnect: {e}")
            raise TransportFailure(f"Failed to disconnect: {e}", report=report) from e

        for line in report.summary_lines():
            logger.info(line)
        return report

    @property
    def connected(self) -> bool:
        return self.state is not None and self.state.connected

    def optimal_block_size(self) -> int:
        logger.debug(f"Optimum size of data block is {self.config.OPT_BLOCK} bytes")
        return self.config.OPT_BLOCK

    def subscribe(self, listener: Listener) -> None:
        """統計イベントのリスナーを登録"""
        self.listeners.append(listener)

    def __enter__(self) -> "LinkLayer":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.state is None:
            return
        if exc_type is None:
            self.disconnect()
            return
        # 元の例外を優先し、切断失敗はログのみ
        try:
            self.disconnect()
        except LinkError as e:
            logger.warning(f"Disconnect failed while handling {exc_type.__name__}: {e}")

    @contextmanager
    def _operation(self, name: str):
        if not self.connected:
            raise InvalidUse(f"Attempt to {name} while not connected")
        if self._busy is not None:
            raise InvalidUse(f"Attempt to {name} while {self._busy} is in progress")
        self._busy = name
        try:
            yield self.state
        finally:
            self._busy = None

    # ------------------------------------------------------------------
    # Send path

    def send_reliable(self, payload: bytes) -> None:
        """
        データブロックを送信し、肯定応答を待つ

        Raises:
            InvalidUse: not connected, re-entrant call or block too large
            TransportFailure: the transport failed or wrote short
            GiveUp: no matching positive acknowledgement after MAX_TRIES attempts
        """
        with self._operation("send") as state:
            if len(payload) > self.config.MAX_BLOCK:
                raise InvalidUse(
                    f"Cannot send block of {len(payload)} bytes, max block size {self.config.MAX_BLOCK}")

            seq = state.seq_num_tx
            frame = Frame(seq, payload).to_bytes()

            for attempt in range(1, self.config.MAX_TRIES + 1):
                self._transmit(frame, seq)
                state.count("frames_sent", seq=seq, attempt=attempt)
                logger.debug(f"Sent frame of {len(frame)} bytes, block {seq}, attempt {attempt}")

                if self._await_ack(state, seq, attempt):
                    state.advance_tx()
                    return

            logger.warning(f"Block {seq}, tried {self.config.MAX_TRIES} times, failed")
            raise GiveUp(f"Block {seq} not acknowledged after {self.config.MAX_TRIES} attempts",
                         attempts=self.config.MAX_TRIES, seq=seq)

    def _transmit(self, frame: bytes, seq: int) -> None:
        try:
            sent = self.transport.send(frame)
        except TransportError as e:
            logger.error(f"Block {seq}, failed to send frame: {e}")
            raise TransportFailure(f"Block {seq}, failed to send frame: {e}") from e
        if sent != len(frame):
            logger.error(f"Block {seq}, sent {sent} of {len(frame)} bytes")
            raise TransportFailure(f"Block {seq}, short write: {sent} of {len(frame)} bytes")

    def _await_ack(self, state: ConnectionState, seq: int, attempt: int) -> bool:
        """応答フレームを1つ待ち、正しいACKならTrueを返す"""
        response = self._get_frame(ACK_CAPACITY, self.config.TX_WAIT)
        if response is None:
            logger.warning(f"Timeout waiting for response to block {seq}, attempt {attempt}")
            state.count("timeouts", seq=seq, attempt=attempt)
            return False

        if checksum.verify(response) is Verdict.BAD:
            logger.warning(f"Bad response frame for block {seq}, attempt {attempt}")
            self._dump(response)
            state.count("bad_frames", seq=seq, attempt=attempt)
            return False

        state.count("good_frames", seq=seq, attempt=attempt)
        ack_seq, ack_type = FrameCodec.parse_ack(response)
        if ack_type == ACK_POSITIVE and ack_seq == seq:
            logger.debug(f"ACK received, seq {ack_seq}")
            state.count("acks_received", seq=ack_seq, attempt=attempt)
            return True

        logger.warning(f"Response type {ack_type}, seq {ack_seq} for block {seq}, attempt {attempt}")
        state.count("naks_received", seq=ack_seq, ack_type=ack_type, attempt=attempt)
        return False

    # ------------------------------------------------------------------
    # Receive path

    def receive_reliable(self, max_len: int) -> bytes:
        """
        期待したシーケンス番号のデータブロックを受信

        Args:
            max_len: 返すデータの最大長（超えた分は捨てる）

        Raises:
            InvalidUse: not connected, re-entrant call or negative max_len
            TransportFailure: the transport failed while reading
            GiveUp: no acceptable frame after MAX_TRIES attempts
        """
        with self._operation("receive") as state:
            if max_len < 0:
                raise InvalidUse(f"Cannot receive into a negative buffer length {max_len}")
            expected = state.expected_seq
            capacity = 3 * self.config.MAX_BLOCK

            for attempt in range(1, self.config.MAX_TRIES + 1):
                raw = self._get_frame(capacity, self.config.RX_WAIT)
                if raw is None:
                    # 何も受信していないので応答は送らない
                    logger.warning(f"Timeout trying to receive frame, attempt {attempt}")
                    state.count("timeouts", seq=expected, attempt=attempt)
                    continue

                logger.debug(f"Got frame, {len(raw)} bytes, attempt {attempt}")
                if checksum.verify(raw) is Verdict.BAD:
                    logger.warning(f"Bad frame received, attempt {attempt}")
                    self._dump(raw)
                    state.count("bad_frames", seq=expected, attempt=attempt)
                    # 破損フレームのシーケンス番号は信頼できない
                    claimed = raw[SEQ_NUM_POS] if len(raw) > SEQ_NUM_POS else expected
                    self._send_ack(state, ACK_NEGATIVE, claimed, reason="bad_frame")
                    continue

                seq, payload = FrameCodec.parse(raw, max_len)
                state.count("good_frames", seq=seq, attempt=attempt)
                logger.debug(f"Received block {seq} with {len(payload)} data bytes")

                if seq == expected:
                    state.last_seq_good_rx = seq
                    self._send_ack(state, ACK_POSITIVE, seq)
                    return payload

                if seq == state.last_seq_good_rx:
                    logger.warning(f"Duplicate rx seq. {seq}, expected {expected}")
                    self._send_ack(state, ACK_NEGATIVE, seq, reason="duplicate")
                else:
                    logger.warning(f"Unexpected block rx seq. {seq}, expected {expected}")
                    self._send_ack(state, ACK_NEGATIVE, seq, reason="unexpected")

            logger.warning(f"Tried to receive a frame {self.config.MAX_TRIES} times, failed")
            raise GiveUp(f"No block {expected} after {self.config.MAX_TRIES} attempts",
                         attempts=self.config.MAX_TRIES, seq=expected)

    def _send_ack(self, state: ConnectionState, ack_type: int, seq: int,
                  reason: Optional[str] = None) -> bool:
        """
        ACK/NAKを送信

        A failed send is logged and counted; the caller keeps waiting for the
        sender's retransmission.
        """
        frame = FrameCodec.build_ack(ack_type, seq)
        try:
            sent = self.transport.send(frame)
        except TransportError as e:
            logger.warning(f"Failed to send response, seq. {seq}: {e}")
            state.count("ack_send_failures", seq=seq, ack_type=ack_type)
            return False
        if sent != len(frame):
            logger.warning(f"Failed to send response, seq. {seq}: sent {sent} of {len(frame)} bytes")
            state.count("ack_send_failures", seq=seq, ack_type=ack_type)
            return False

        if ack_type == ACK_POSITIVE:
            state.count("acks_sent", seq=seq)
        else:
            state.count("naks_sent", seq=seq, reason=reason)
        logger.debug(f"Sent response of {len(frame)} bytes, type {ack_type}, seq {seq}")
        return True

    # ------------------------------------------------------------------

    def _get_frame(self, capacity: int, time_limit: float) -> Optional[bytes]:
        try:
            return self.synchronizer.get_frame(capacity, time_limit)
        except TransportError as e:
            logger.error(f"Problem receiving frame: {e}")
            raise TransportFailure(f"Problem receiving frame: {e}") from e

    def _dump(self, frame: bytes) -> None:
        if self.config.DEBUG_FRAME_DUMP:
            logger.debug("Frame dump:\n" + format_frame(frame))
