# filename: huffman_core.py

import logging
from collections import Counter

from huffman_config import READ_CHUNK_SIZE
from huffman_errors import BuildError, EmptyInput, ReadFault

logger = logging.getLogger(__name__)

ALPHABET_SIZE = 256
ARENA_CAPACITY = 2 * ALPHABET_SIZE - 1
NO_NODE = -1


class HuffmanNode:
    __slots__ = ("symbol", "freq", "parent", "left", "right")

    def __init__(self, symbol, freq):
        # symbol is None for internal nodes and for the phantom leaf
        self.symbol = symbol
        self.freq = freq
        self.parent = NO_NODE
        self.left = NO_NODE
        self.right = NO_NODE

    def is_leaf(self):
        return self.left == NO_NODE and self.right == NO_NODE

    def __repr__(self):
        return f"HuffmanNode(symbol={self.symbol!r}, freq={self.freq!r})"


class HuffmanTree:
    """Prefix-code tree stored in a fixed-capacity node arena.

    Nodes refer to each other by arena index. Every leaf for a real byte
    value is reachable in O(1) through ``symbol_index``; the encoder walks
    parent links from there and the decoder walks child links from ``root``.
    """

    def __init__(self):
        self.nodes = [None] * ARENA_CAPACITY
        self.size = 0
        self.symbol_index = [NO_NODE] * ALPHABET_SIZE
        self.root = NO_NODE

    def __len__(self):
        return self.size

    def _append(self, node):
        if self.size >= ARENA_CAPACITY:
            raise BuildError(f"node arena exhausted at {ARENA_CAPACITY} nodes")
        index = self.size
        self.nodes[index] = node
        self.size += 1
        return index

    def add_leaf(self, symbol, freq):
        index = self._append(HuffmanNode(symbol, freq))
        if symbol is not None:
            self.symbol_index[symbol] = index
        return index

    def add_parent(self, left, right):
        left_node = self.nodes[left]
        right_node = self.nodes[right]
        node = HuffmanNode(None, left_node.freq + right_node.freq)
        node.left = left
        node.right = right
        index = self._append(node)
        left_node.parent = index
        right_node.parent = index
        return index

    def leaf_for(self, symbol):
        index = self.symbol_index[symbol]
        if index == NO_NODE:
            raise KeyError(f"byte {symbol} is not in the frequency table")
        return index

    def path_bits(self, index):
        """Bits from ``index`` up to the root, in leaf-to-root order.

        A bit is 1 when the child is its parent's left child.
        """
        bits = []
        node = self.nodes[index]
        while node.parent != NO_NODE:
            parent = self.nodes[node.parent]
            bits.append(1 if parent.left == index else 0)
            index = node.parent
            node = parent
        return bits

    def code_for(self, symbol):
        bits = self.path_bits(self.leaf_for(symbol))
        return "".join("1" if bit else "0" for bit in reversed(bits))

    def symbols(self):
        return [symbol for symbol, index in enumerate(self.symbol_index) if index != NO_NODE]

    def generate_codes(self):
        return {symbol: self.code_for(symbol) for symbol in self.symbols()}

    def code_lengths(self):
        return {symbol: len(self.path_bits(self.symbol_index[symbol])) for symbol in self.symbols()}


def count_frequencies(source, chunk_size=READ_CHUNK_SIZE):
    """Scan ``source`` to EOF and return ``(table, total_length)``.

    The table lists ``(byte, probability)`` pairs in increasing byte order.
    """
    counts = Counter()
    total = 0
    while True:
        try:
            chunk = source.read(chunk_size)
        except OSError as exc:
            raise ReadFault(f"read failed after {total} bytes: {exc}") from exc
        if not chunk:
            break
        counts.update(chunk)
        total += len(chunk)

    table = [(symbol, counts[symbol] / total) for symbol in sorted(counts)]
    logger.debug("counted %d bytes, %d distinct symbols", total, len(table))
    return table, total


def build_tree(table):
    if not table:
        raise EmptyInput("cannot build a code tree from an empty frequency table")

    tree = HuffmanTree()
    # Leaves in increasing byte order, so the stable sort keeps that order for ties
    working = [tree.add_leaf(symbol, freq) for symbol, freq in table]
    if len(working) == 1:
        # Phantom sibling gives the only symbol a 1-bit code
        working.append(tree.add_leaf(None, 0.0))

    nodes = tree.nodes
    working.sort(key=lambda index: nodes[index].freq, reverse=True)

    while len(working) > 1:
        right = working.pop()
        left = working.pop()
        merged = tree.add_parent(left, right)
        freq = nodes[merged].freq

        # Insert after every entry with a greater or equal frequency
        pos = len(working)
        while pos > 0 and nodes[working[pos - 1]].freq < freq:
            pos -= 1
        working.insert(pos, merged)

    tree.root = working[0]
    logger.debug("built tree with %d nodes for %d symbols", tree.size, len(table))
    return tree
