#!/usr/bin/env python3
# filename: huffman_cli.py
"""
Command-line front end for the Huffman stream compressor.

    huffman-stream compress INPUT OUTPUT
    huffman-stream decompress INPUT OUTPUT
    huffman-stream info INPUT
"""
import argparse
import logging
import os
import sys
import time

from huffman_config import DEFAULT_CONFIG
from huffman_errors import CorruptHeader, CorruptStream, HuffmanError, ReadFault, UnknownSymbol, WriteFault
from huffman_service import HuffmanService

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_IO_ERROR = 1
EXIT_CORRUPT = 3


def build_parser():
    parser = argparse.ArgumentParser(prog="huffman-stream", description="Static Huffman compressor for binary files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--chunk-size", type=int, default=None, help="Bytes read per I/O call")
    parser.add_argument("--tolerance", type=float, default=None, help="Allowed header probability sum error")
    parser.add_argument("--time", action="store_true", help="Print wall-clock time of the run")

    sub = parser.add_subparsers(dest="command", required=True)

    compress = sub.add_parser("compress", help="Compress INPUT into OUTPUT")
    compress.add_argument("input")
    compress.add_argument("output")

    decompress = sub.add_parser("decompress", help="Decompress INPUT into OUTPUT")
    decompress.add_argument("input")
    decompress.add_argument("output")

    info = sub.add_parser("info", help="Print the symbol table of a compressed file")
    info.add_argument("input")
    return parser


def format_symbol(symbol):
    return chr(symbol) if 32 <= symbol < 127 else f"\\x{symbol:02x}"


def print_symbol_table(rows, out=None):
    out = out or sys.stdout
    print(f"{len(rows)} symbols", file=out)
    for symbol, probability, code in rows:
        print(f"{symbol:3d}  {format_symbol(symbol):>4}  {probability:.6f}  {len(code):3d}  {code}", file=out)


def _discard(path):
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def run(args):
    config = DEFAULT_CONFIG.with_overrides(read_chunk_size=args.chunk_size, tolerance=args.tolerance)
    service = HuffmanService(config)

    if args.command == "info":
        with open(args.input, "rb") as source:
            print_symbol_table(service.describe(source))
        return EXIT_OK

    action = service.compress_file if args.command == "compress" else service.decompress_file
    t0 = time.time()
    try:
        stats = action(args.input, args.output)
    except HuffmanError:
        # Partial output is never a valid result
        _discard(args.output)
        raise
    dur = time.time() - t0

    print(f"{stats.original_bytes} bytes original, {stats.compressed_bytes} bytes compressed")
    if stats.original_bytes:
        print(f"{stats.ratio * 100:.2f}% compression ratio")
    if args.time:
        print(f"{args.command} took {dur:.4f}s")
    return EXIT_OK


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return run(args)
    except (CorruptHeader, CorruptStream) as e:
        print(f"{args.input}: not a valid compressed file: {e}", file=sys.stderr)
        return EXIT_CORRUPT
    except (ReadFault, WriteFault, OSError) as e:
        print(f"I/O error: {e}", file=sys.stderr)
        return EXIT_IO_ERROR
    except UnknownSymbol as e:
        print(f"{args.input} changed while it was being compressed: {e}", file=sys.stderr)
        return EXIT_IO_ERROR
    except HuffmanError as e:
        logger.debug("run failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_IO_ERROR


if __name__ == "__main__":
    sys.exit(main())
