"""Serial port transport built on pyserial."""

import logging
from typing import Optional

import serial

from .base import Transport, TransportError
from .impairment import BitErrorInjector

logger = logging.getLogger(__name__)

PARITY_MAP = {
    "N": serial.PARITY_NONE,
    "O": serial.PARITY_ODD,
    "E": serial.PARITY_EVEN,
}
BIT_RATE_STEP = 1200  # all valid rates are multiples of 1200


class SerialTransport(Transport):
    """
    シリアルポート伝送路

    ``port`` may be a device name or any pyserial URL (e.g. ``loop://``).
    """

    def __init__(self, port: str, baud_rate: int = 4800, data_bits: int = 8,
                 parity: str = "N", inter_byte_timeout: Optional[float] = 0.05,
                 write_timeout: Optional[float] = 2.0,
                 injector: Optional[BitErrorInjector] = None):
        self.port = port
        self.baud_rate = baud_rate
        self.data_bits = data_bits
        self.parity = parity.upper()
        self.inter_byte_timeout = inter_byte_timeout
        self.write_timeout = write_timeout
        self.injector = injector or BitErrorInjector()
        self.serial: Optional[serial.SerialBase] = None

    @classmethod
    def from_config(cls, cfg) -> "SerialTransport":
        """設定からトランスポートを生成"""
        return cls(
            cfg.SERIAL_PORT,
            baud_rate=cfg.BAUD_RATE,
            data_bits=cfg.DATA_BITS,
            parity=cfg.PARITY,
            inter_byte_timeout=cfg.INTER_BYTE_TIMEOUT,
            write_timeout=cfg.WRITE_TIMEOUT,
            injector=BitErrorInjector(cfg.PROB_ERR),
        )

    @property
    def is_open(self) -> bool:
        return self.serial is not None and self.serial.is_open

    def _validate(self) -> None:
        if self.baud_rate <= 0 or self.baud_rate % BIT_RATE_STEP != 0:
            raise TransportError(f"Invalid bit rate requested: {self.baud_rate}")
        if self.data_bits not in (7, 8):
            raise TransportError(f"Invalid number of data bits: {self.data_bits}")
        if self.parity not in PARITY_MAP:
            raise TransportError(f"Invalid parity setting: {self.parity}")

    def open(self) -> None:
        self._validate()
        try:
            port = serial.serial_for_url(self.port, do_not_open=True)
            port.baudrate = self.baud_rate
            port.bytesize = serial.SEVENBITS if self.data_bits == 7 else serial.EIGHTBITS
            port.parity = PARITY_MAP[self.parity]
            port.stopbits = serial.STOPBITS_ONE
            port.write_timeout = self.write_timeout
            port.inter_byte_timeout = self.inter_byte_timeout
            port.open()
        except (serial.SerialException, ValueError) as e:
            raise TransportError(f"Failed to open {self.port}: {e}") from e

        self.serial = port
        if self.injector.enabled:
            logger.info(f"Simulating receive errors, probability {self.injector.prob_err}")
        logger.info(f"Serial port {self.port} opened at {self.baud_rate} baud, "
                    f"{self.data_bits}{self.parity}1")

    def close(self) -> None:
        if self.serial is None:
            return
        try:
            self.serial.close()
        except serial.SerialException as e:
            raise TransportError(f"Failed to close {self.port}: {e}") from e
        finally:
            self.serial = None
        logger.info(f"Serial port {self.port} closed")

    def _require_open(self) -> serial.SerialBase:
        if not self.is_open:
            raise TransportError("Port not valid")
        return self.serial

    def send(self, data: bytes) -> int:
        port = self._require_open()
        try:
            sent = port.write(data)
            port.flush()
        except serial.SerialTimeoutException:
            # 書き込みタイムアウトはショートライトとして扱う
            logger.warning(f"Timeout in transmission of {len(data)} bytes")
            return 0
        except serial.SerialException as e:
            raise TransportError(f"Problem sending data: {e}") from e
        return len(data) if sent is None else sent

    def receive(self, max_count: int, timeout: float) -> bytes:
        port = self._require_open()
        if max_count <= 0:
            return b""
        try:
            timeout = max(timeout, 0.0)
            # 値が変わった時だけ再設定する
            if port.timeout != timeout:
                port.timeout = timeout
            data = port.read(max_count)
        except serial.SerialException as e:
            raise TransportError(f"Problem receiving data: {e}") from e
        return self.injector.apply(data)
