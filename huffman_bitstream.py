# filename: huffman_bitstream.py

import logging

from bitarray import bitarray

from huffman_config import DEFAULT_CONFIG
from huffman_core import NO_NODE
from huffman_errors import CorruptStream, ReadFault, UnknownSymbol, WriteFault

logger = logging.getLogger(__name__)

# Codes are packed most significant bit first
BIT_ORDER = "big"
MAX_PADDING = 7


class BitAccumulator:
    """Bit buffer between the byte-oriented I/O and the code tree.

    ``count`` is the number of valid bits and ``pos`` the read cursor used
    by the decoder. Once ``count`` reaches ``capacity`` the encoder drains
    the whole bytes and the trailing partial byte moves to the front.
    """

    def __init__(self, capacity):
        self.capacity = capacity
        self.bits = bitarray(endian=BIT_ORDER)
        self.pos = 0

    @property
    def count(self):
        return len(self.bits)

    def is_full(self):
        return self.count >= self.capacity

    def room(self):
        return self.capacity - self.count

    def encode(self, codes, data):
        self.bits.encode(codes, data)

    def extend(self, bits):
        if len(bits) > self.room():
            raise ValueError(f"{len(bits)} bits do not fit in {self.room()} free bits")
        self.bits.extend(bits)

    def take_bytes(self):
        whole = self.count - self.count % 8
        out = self.bits[:whole].tobytes()
        del self.bits[:whole]
        self.pos = 0
        return out

    def take_all(self):
        """Drain every bit, zero-filling the last byte. Returns ``(data, padding)``."""
        padding = -self.count % 8
        out = self.bits.tobytes()
        del self.bits[:]
        self.pos = 0
        return out, padding

    def load(self, data, valid_bits=None):
        size = len(data) * 8 if valid_bits is None else valid_bits
        if size > self.capacity:
            raise ValueError(f"{size} bits exceed the accumulator capacity of {self.capacity}")
        self.bits = bitarray(endian=BIT_ORDER)
        self.bits.frombytes(data)
        if valid_bits is not None:
            del self.bits[valid_bits:]
        self.pos = 0

    def consume(self):
        unread = self.bits[self.pos:]
        self.pos = self.count
        return unread


def _read(source, size):
    try:
        return source.read(size)
    except OSError as exc:
        raise ReadFault(f"read failed: {exc}") from exc


def _write(sink, data):
    try:
        sink.write(data)
    except OSError as exc:
        raise WriteFault(f"write failed: {exc}") from exc


class BitStreamEncoder:
    def __init__(self, tree, config=DEFAULT_CONFIG):
        self.tree = tree
        self.config = config
        self.codes = {symbol: self._code_bits(symbol) for symbol in tree.symbols()}
        self.max_code_length = max(len(code) for code in self.codes.values())
        self.accumulator = BitAccumulator(config.flush_bits)
        self.bytes_written = 0

    def _code_bits(self, symbol):
        # The parent walk yields leaf-to-root order, the code is root-to-leaf
        code = bitarray(self.tree.path_bits(self.tree.leaf_for(symbol)), endian=BIT_ORDER)
        code.reverse()
        return code

    def _emit(self, sink, data):
        if data:
            _write(sink, data)
            self.bytes_written += len(data)

    def _flush_if_full(self, sink):
        if self.accumulator.is_full():
            self._emit(sink, self.accumulator.take_bytes())

    def _code(self, symbol):
        try:
            return self.codes[symbol]
        except KeyError:
            raise UnknownSymbol(f"byte {symbol} is not in the frequency table") from None

    def _append_split(self, sink, code):
        # The code is longer than the free space: fill, flush and resume mid-code
        start = 0
        while start < len(code):
            end = start + min(self.accumulator.room(), len(code) - start)
            self.accumulator.extend(code[start:end])
            start = end
            self._flush_if_full(sink)

    def _encode_chunk(self, sink, chunk):
        accumulator = self.accumulator
        pos = 0
        while pos < len(chunk):
            # Symbols guaranteed to fit even if every one takes the longest code
            fit = accumulator.room() // self.max_code_length
            if fit:
                piece = chunk[pos:pos + fit]
                try:
                    accumulator.encode(self.codes, piece)
                except (KeyError, ValueError):
                    # Report the first offending byte
                    for symbol in piece:
                        self._code(symbol)
                    raise
                pos += len(piece)
            else:
                self._append_split(sink, self._code(chunk[pos]))
                pos += 1
            self._flush_if_full(sink)

    def encode(self, source, sink):
        while True:
            chunk = _read(source, self.config.read_chunk_size)
            if not chunk:
                break
            self._encode_chunk(sink, chunk)

        tail, padding = self.accumulator.take_all()
        self._emit(sink, tail + bytes([padding]))
        logger.debug("encoded stream: %d bytes written, %d padding bits", self.bytes_written, padding)
        return self.bytes_written


class BitStreamDecoder:
    def __init__(self, tree, config=DEFAULT_CONFIG):
        self.tree = tree
        self.config = config
        self.position = tree.root
        nodes = tree.nodes[:tree.size]
        # Flat views of the arena for the per-bit walk
        self._left = [node.left for node in nodes]
        self._right = [node.right for node in nodes]
        self._is_leaf = [node.is_leaf() for node in nodes]
        self._symbol = [node.symbol for node in nodes]
        self.accumulator = BitAccumulator(config.flush_bits)
        self.bytes_written = 0

    def _decode_bits(self, sink, data, valid_bits):
        # Feed the accumulator at most one flush-sized slice at a time
        step = self.config.flush_bytes
        for start in range(0, len(data), step):
            piece = data[start:start + step]
            self._walk(sink, piece, min(len(piece) * 8, valid_bits - start * 8))

    def _walk(self, sink, data, valid_bits):
        self.accumulator.load(data, valid_bits)
        root = self.tree.root
        left, right, is_leaf, symbols = self._left, self._right, self._is_leaf, self._symbol
        position = self.position
        out = bytearray()

        for bit in self.accumulator.consume():
            position = left[position] if bit else right[position]
            if position == NO_NODE:
                raise CorruptStream(f"missing child after {self.bytes_written + len(out)} decoded bytes")
            if is_leaf[position]:
                symbol = symbols[position]
                if symbol is None:
                    raise CorruptStream("code points at a leaf with no symbol")
                out.append(symbol)
                position = root

        self.position = position
        if out:
            _write(sink, out)
            self.bytes_written += len(out)

    def decode(self, source, sink):
        # The last two bytes read are held back: final payload byte and trailer
        held = b""
        while True:
            chunk = _read(source, self.config.read_chunk_size)
            if not chunk:
                break
            data = held + chunk
            if len(data) > 2:
                self._decode_bits(sink, data[:-2], (len(data) - 2) * 8)
                held = data[-2:]
            else:
                held = data

        if not held:
            raise CorruptStream("stream ends before the padding trailer")
        padding = held[-1]
        payload = held[:-1]
        if padding > MAX_PADDING:
            raise CorruptStream(f"padding trailer {padding} exceeds {MAX_PADDING}")
        if padding and not payload:
            raise CorruptStream(f"padding of {padding} bits declared without a payload byte")
        if payload:
            self._decode_bits(sink, payload, 8 - padding)
        if self.position != self.tree.root:
            raise CorruptStream("stream ends in the middle of a code")

        logger.debug("decoded stream: %d bytes written, %d padding bits", self.bytes_written, padding)
        return self.bytes_written


def encode_stream(tree, source, sink, config=DEFAULT_CONFIG):
    return BitStreamEncoder(tree, config).encode(source, sink)


def decode_stream(tree, source, sink, config=DEFAULT_CONFIG):
    return BitStreamDecoder(tree, config).decode(source, sink)
