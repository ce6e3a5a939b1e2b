"""Protocol constants for frame processing."""

# Frame marker
START_MARKER = 0xD4

# Sequence number byte position
SEQ_NUM_POS = 2

# Header (marker, size, seq) and trailer (checksum) lengths
HEADER_LENGTH = 3
TRAILER_LENGTH = 1
MIN_FRAME_LENGTH = HEADER_LENGTH + TRAILER_LENGTH

# frame_size counts seq + checksum + payload
FRAME_SIZE_OVERHEAD = 2
MAX_FRAME_SIZE = 0xFF
MAX_PAYLOAD_LENGTH = MAX_FRAME_SIZE - FRAME_SIZE_OVERHEAD

# Checksum modulus (below 256 so the result always fits one byte)
CHECKSUM_MODULO = 250

# Acknowledgement payload values
ACK_POSITIVE = 1
ACK_NEGATIVE = 26
ACK_LENGTH = 5

# Receive buffer capacity for acknowledgement frames
ACK_CAPACITY = 2 * ACK_LENGTH


def next_seq(seq: int, modulo: int) -> int:
    """Advance a sequence number, wrapping at ``modulo``."""
    return (seq + 1) % modulo
