import logging
from unittest.mock import patch

from seriallink.config import Config, config
from seriallink.protocol.frame_codec import FrameCodec
from seriallink.utils import format_frame, setup_logging


class TestConfigValues:
    """設定値のテスト"""

    def test_protocol_defaults(self):
        cfg = Config()
        assert cfg.MAX_BLOCK == 200
        assert cfg.OPT_BLOCK == 70
        assert cfg.MOD_SEQNUM == 16
        assert cfg.DATA_BITS == 8
        assert cfg.PARITY == "N"

    def test_wait_times_are_positive(self):
        assert config.TX_WAIT > 0
        assert config.RX_WAIT > 0
        assert config.MAX_TRIES >= 1

    def test_override_per_instance(self):
        cfg = Config(MAX_TRIES=2, TX_WAIT=0.1)
        assert cfg.MAX_TRIES == 2
        assert cfg.TX_WAIT == 0.1


class TestLogging:

    def test_setup_logging_uses_given_level(self):
        with patch("seriallink.utils.logging_setup.logging.basicConfig") as basic:
            logger = setup_logging("debug")
        assert basic.call_args.kwargs["level"] == logging.DEBUG
        assert logger.name == "seriallink"

    def test_setup_logging_unknown_level_falls_back_to_info(self):
        with patch("seriallink.utils.logging_setup.logging.basicConfig") as basic:
            setup_logging("chatty")
        assert basic.call_args.kwargs["level"] == logging.INFO


class TestFrameDump:
    """フレームダンプのテスト"""

    def test_small_frame_full_dump(self):
        frame = FrameCodec.build(b"AB", 0)
        assert format_frame(frame) == "212   4   0  65  66 135 : ...AB."

    def test_groups_of_eight(self):
        frame = FrameCodec.build(b"abcdefghij", 1)
        lines = format_frame(frame).splitlines()
        assert len(lines) == 2
        assert lines[0] == "212  12   1  97  98  99 100 101 : ...abcde"
        assert lines[1] == "102 103 104 105 106  28 : fghij."

    def test_large_frame_shows_ends(self):
        frame = FrameCodec.build(bytes(range(48, 98)), 2)
        lines = format_frame(frame).splitlines()
        assert len(lines) == 3
        assert lines[1] == " - - -"
        assert lines[0].startswith("212  52   2  48")
