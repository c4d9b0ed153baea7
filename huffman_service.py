# filename: huffman_service.py

import io
import logging
from dataclasses import dataclass

from huffman_bitstream import decode_stream, encode_stream
from huffman_config import DEFAULT_CONFIG
from huffman_core import build_tree, count_frequencies
from huffman_errors import CorruptStream, ReadFault
from huffman_header import read_header, write_header

logger = logging.getLogger(__name__)


@dataclass
class CompressionStats:
    original_bytes: int
    compressed_bytes: int
    symbols: int

    @property
    def ratio(self):
        if self.original_bytes == 0:
            return 0.0
        return self.compressed_bytes / self.original_bytes


class _CountingReader:
    def __init__(self, source):
        self.source = source
        self.consumed = 0

    def read(self, size=-1):
        data = self.source.read(size)
        self.consumed += len(data)
        return data


class HuffmanService:
    def __init__(self, config=DEFAULT_CONFIG):
        self.config = config

    def compress(self, data):
        out = io.BytesIO()
        self.compress_stream(io.BytesIO(data), out)
        return out.getvalue()

    def decompress(self, data):
        out = io.BytesIO()
        self.decompress_stream(io.BytesIO(data), out)
        return out.getvalue()

    def compress_stream(self, source, sink):
        """Compress a seekable ``source`` into ``sink``.

        The source is read twice: once to count frequencies, then again
        from the same starting offset to encode.
        """
        try:
            start = source.tell()
        except OSError as exc:
            raise ReadFault(f"source is not seekable: {exc}") from exc

        table, total = count_frequencies(source, self.config.read_chunk_size)
        header_size = write_header(sink, table)
        if not table:
            logger.info("empty input, wrote header only")
            return CompressionStats(0, header_size, 0)

        tree = build_tree(table)
        try:
            source.seek(start)
        except OSError as exc:
            raise ReadFault(f"cannot rewind source: {exc}") from exc

        payload_size = encode_stream(tree, source, sink, self.config)
        stats = CompressionStats(total, header_size + payload_size, len(table))
        logger.info(
            "compressed %d bytes to %d (%d symbols, ratio %.4f)",
            stats.original_bytes, stats.compressed_bytes, stats.symbols, stats.ratio,
        )
        return stats

    def decompress_stream(self, source, sink):
        counted = _CountingReader(source)
        table = read_header(counted, self.config.tolerance)
        if not table:
            try:
                trailing = counted.read(1)
            except OSError as exc:
                raise ReadFault(f"read failed: {exc}") from exc
            if trailing:
                raise CorruptStream("empty-input header followed by payload data")
            logger.info("empty header, nothing to decode")
            return CompressionStats(0, counted.consumed, 0)

        tree = build_tree(table)
        written = decode_stream(tree, counted, sink, self.config)
        stats = CompressionStats(written, counted.consumed, len(table))
        logger.info("decompressed %d bytes to %d (%d symbols)", stats.compressed_bytes, written, stats.symbols)
        return stats

    def describe(self, source):
        """Symbol table of a compressed stream as ``(byte, probability, code)`` rows."""
        table = read_header(source, self.config.tolerance)
        if not table:
            return []
        codes = build_tree(table).generate_codes()
        return [(symbol, probability, codes[symbol]) for symbol, probability in table]

    def compress_file(self, input_path, output_path):
        with open(input_path, "rb") as source, open(output_path, "wb") as sink:
            return self.compress_stream(source, sink)

    def decompress_file(self, input_path, output_path):
        with open(input_path, "rb") as source, open(output_path, "wb") as sink:
            return self.decompress_stream(source, sink)
