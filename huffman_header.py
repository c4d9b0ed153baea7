# filename: huffman_header.py

import logging
import math
import struct

from huffman_config import PROBABILITY_TOLERANCE
from huffman_core import ALPHABET_SIZE
from huffman_errors import CorruptHeader, ReadFault, WriteFault

logger = logging.getLogger(__name__)

# Little-endian: entry count, then (byte value, probability) per entry
COUNT_FORMAT = struct.Struct("<H")
ENTRY_FORMAT = struct.Struct("<Bd")


def encode_header(table):
    if len(table) > ALPHABET_SIZE:
        raise ValueError(f"frequency table has {len(table)} entries, at most {ALPHABET_SIZE} allowed")

    out = bytearray(COUNT_FORMAT.pack(len(table)))
    previous = -1
    for symbol, probability in table:
        if symbol <= previous:
            raise ValueError(f"byte values must be strictly increasing, got {symbol} after {previous}")
        out += ENTRY_FORMAT.pack(symbol, probability)
        previous = symbol
    return bytes(out)


def write_header(sink, table):
    data = encode_header(table)
    try:
        sink.write(data)
    except OSError as exc:
        raise WriteFault(f"failed to write header: {exc}") from exc
    return len(data)


def _read_exact(source, size, what):
    try:
        data = source.read(size)
    except OSError as exc:
        raise ReadFault(f"failed to read {what}: {exc}") from exc
    if len(data) != size:
        raise CorruptHeader(f"header truncated while reading {what}")
    return data


def read_header(source, tolerance=PROBABILITY_TOLERANCE):
    """Read a frequency table written by ``write_header``.

    Raises ``CorruptHeader`` when the count is out of range, byte values are
    not strictly increasing, the header is truncated, or the probabilities
    do not sum to 1.0 within ``tolerance``. A zero count is the header of an
    empty input and yields an empty table.
    """
    (count,) = COUNT_FORMAT.unpack(_read_exact(source, COUNT_FORMAT.size, "entry count"))
    if count > ALPHABET_SIZE:
        raise CorruptHeader(f"entry count {count} exceeds {ALPHABET_SIZE}")

    table = []
    previous = -1
    total = 0.0
    for i in range(count):
        symbol, probability = ENTRY_FORMAT.unpack(_read_exact(source, ENTRY_FORMAT.size, f"entry {i}"))
        if symbol <= previous:
            raise CorruptHeader(f"entry {i}: byte value {symbol} does not increase from {previous}")
        if not (math.isfinite(probability) and probability >= 0.0):
            raise CorruptHeader(f"entry {i}: invalid probability {probability!r}")
        table.append((symbol, probability))
        total += probability
        previous = symbol

    if count and not abs(total - 1.0) <= tolerance:
        raise CorruptHeader(f"probabilities sum to {total!r}, expected 1.0 +/- {tolerance}")

    logger.debug("read header with %d entries", count)
    return table
