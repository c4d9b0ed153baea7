# filename: huffman_errors.py


class HuffmanError(Exception):
    """Base class for every failure raised by the compressor."""


class ReadFault(HuffmanError):
    """The underlying input raised an I/O error (not end-of-stream)."""


class WriteFault(HuffmanError):
    """The underlying output raised an I/O error."""


class CorruptHeader(HuffmanError, ValueError):
    """The frequency header is not a valid table."""


class CorruptStream(HuffmanError, ValueError):
    """The payload or trailer cannot be decoded with the rebuilt tree."""


class EmptyInput(HuffmanError):
    """No symbols to build a tree from."""


class BuildError(HuffmanError):
    """The node arena ran out of room while building the tree."""


class UnknownSymbol(HuffmanError, ValueError):
    """The input holds a byte the frequency table did not count."""


EncodeError = (ReadFault, WriteFault, UnknownSymbol)
DecodeError = (ReadFault, WriteFault, CorruptStream)
