"""Link configuration settings."""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class Config:
    """リンク層設定"""
    # Serial communication settings
    SERIAL_PORT: str = os.environ.get("SERIAL_PORT", "/dev/ttyUSB0")
    BAUD_RATE: int = int(os.environ.get("BAUD_RATE", "4800"))
    DATA_BITS: int = 8
    PARITY: str = "N"  # N, O, E
    READ_TIMEOUT: float = float(os.environ.get("READ_TIMEOUT", "1.0"))  # 開始マーカー以降の読み取り
    INTER_BYTE_TIMEOUT: float = 0.05
    WRITE_TIMEOUT: float = 2.0

    # Simulated receive errors (per-bit probability)
    PROB_ERR: float = float(os.environ.get("PROB_ERR", "0.0"))

    # Link protocol settings
    MAX_BLOCK: int = 200  # largest data block accepted by send_reliable
    OPT_BLOCK: int = 70  # block size recommended to callers
    MOD_SEQNUM: int = 16
    TX_WAIT: float = float(os.environ.get("TX_WAIT", "8.0"))  # 送信側のACK待ち時間
    RX_WAIT: float = float(os.environ.get("RX_WAIT", "6.0"))  # 受信側のフレーム待ち時間
    MAX_TRIES: int = int(os.environ.get("MAX_TRIES", "5"))

    # Debug settings
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    DEBUG_FRAME_DUMP: bool = os.environ.get("DEBUG_FRAME_DUMP", "false").lower() == "true"


# Global configuration instance
config = Config()
