"""Human-readable dumps of raw frames for debug logs."""

from typing import List

GROUP_SIZE = 8
FULL_DUMP_LIMIT = 40


def _printable(chunk: bytes) -> str:
    return "".join(chr(b) if 32 <= b < 127 else "." for b in chunk)


def _dump_line(chunk: bytes) -> str:
    numbers = " ".join(f"{b:3d}" for b in chunk)
    return f"{numbers} : {_printable(chunk)}"


def format_frame(frame: bytes) -> str:
    """
    フレームを8バイトずつ表示用に整形

    Small frames are shown in full; larger ones only show the first and last
    eight bytes.
    """
    if len(frame) <= FULL_DUMP_LIMIT:
        lines: List[str] = [
            _dump_line(frame[i:i + GROUP_SIZE])
            for i in range(0, len(frame), GROUP_SIZE)
        ]
    else:
        lines = [
            _dump_line(frame[:GROUP_SIZE]),
            " - - -",
            _dump_line(frame[-GROUP_SIZE:]),
        ]
    return "\n".join(lines)
