#!/usr/bin/env python3
import heapq
from itertools import count
from typing import Dict, List, Optional, Tuple

from huffio import EOF, BitInputStream, BitOutputStream

BITS_PER_WORD = 8
BITS_PER_INT = 32
ALPH_SIZE = 1 << BITS_PER_WORD  # 256
EOS = ALPH_SIZE                 # pseudo end-of-stream symbol
SYMBOL_BITS = BITS_PER_WORD + 1  # 9 bits cover 0..256
MAX_COUNT = (1 << BITS_PER_INT) - 1


# ---------------------------------
# Errors
# ---------------------------------
class HuffError(ValueError):
    pass


class FormatError(HuffError):
    """Input is not a stream this codec wrote."""


class StreamTruncatedError(HuffError):
    """Bits ran out before the header or body was complete."""


class TreeInvariantError(HuffError):
    """Frequency table or tree is malformed (a caller bug, not bad data)."""


# ---------------------------------
# Basic tree node
# ---------------------------------
class Node:
    def __init__(self, sym: Optional[int], freq: int = 0,
                 left: Optional['Node'] = None, right: Optional['Node'] = None):
        # sym: None for internal nodes, 0..256 for leaf nodes
        self.sym = sym
        self.freq = freq
        self.left = left
        self.right = right

    @property
    def is_leaf(self) -> bool:
        return self.sym is not None

    def __repr__(self) -> str:
        if self.is_leaf:
            return f"Leaf({self.sym})"
        return f"Internal({self.left!r}, {self.right!r})"


# ------------------------------------
# 1) Count bytes (freq)
# ------------------------------------
def count_bytes(bits_in: BitInputStream) -> Dict[int, int]:
    """
    Single pass over the reader. The table always carries EOS with a
    count of 1, so even an empty input yields a one-entry table.
    """
    freq: Dict[int, int] = {}
    while True:
        val = bits_in.read_bits(BITS_PER_WORD)
        if val == EOF:
            break
        freq[val] = freq.get(val, 0) + 1
    freq[EOS] = 1
    return freq


def check_freq(freq: Dict[int, int]) -> None:
    if freq.get(EOS, 0) < 1:
        raise TreeInvariantError("frequency table has no EOS entry")
    for sym, fr in freq.items():
        if not 0 <= sym <= EOS:
            raise TreeInvariantError(f"symbol {sym} out of range")
        if fr < 0:
            raise TreeInvariantError(f"negative count {fr} for symbol {sym}")


# -------------------------------------
# 2) Make heap and build Huffman tree
# -------------------------------------
def build_tree(freq: Dict[int, int]) -> Node:
    """
    Huffman merge with a fixed tie-break so equal inputs give equal trees:
    at equal weight leaves pop before internal nodes, leaves by ascending
    symbol, internal nodes in the order they were made.
    """
    check_freq(freq)
    h = []
    for sym in sorted(freq):
        fr = freq[sym]
        if fr > 0:
            h.append((fr, 0, sym, Node(sym, fr)))
    heapq.heapify(h)

    made = count()
    while len(h) > 1:
        wa, _, _, a = heapq.heappop(h)
        wb, _, _, b = heapq.heappop(h)
        p = Node(None, wa + wb, a, b)
        heapq.heappush(h, (p.freq, 1, next(made), p))
    # a lone EOS leaf stays a bare leaf; make_codes gives it one bit
    return h[0][3]


# ---------------------------
# 3) Walk tree -> code map
# ---------------------------
def make_codes(root: Node) -> Dict[int, str]:
    codes: Dict[int, str] = {}

    def walk(node: Node, prefix: str):
        if node.is_leaf:
            if node.sym in codes:
                raise TreeInvariantError(f"symbol {node.sym} appears on two leaves")
            codes[node.sym] = prefix
            return
        if node.left is None or node.right is None:
            raise TreeInvariantError("internal node without two children")
        walk(node.left, prefix + "0")
        walk(node.right, prefix + "1")

    if root.is_leaf:
        # single-symbol edge-case -> "0"
        codes[root.sym] = "0"
        return codes
    walk(root, "")
    return codes


def code_lengths(codes: Dict[int, str]) -> Dict[int, int]:
    return {sym: len(code) for sym, code in codes.items()}


# ----------------------------------------------------------------------
# 4) Tree serialization (preorder): 0 = internal, 1 + 9 bits = leaf
# ----------------------------------------------------------------------
def write_tree(root: Node, bits_out: BitOutputStream) -> None:
    if root.is_leaf:
        bits_out.write_bits(1, 1)
        bits_out.write_bits(SYMBOL_BITS, root.sym)
        return
    bits_out.write_bits(1, 0)
    write_tree(root.left, bits_out)
    write_tree(root.right, bits_out)


def _read_node(bits_in: BitInputStream, depth: int) -> Node:
    # 257 leaves never need a path longer than 256 edges
    if depth > ALPH_SIZE:
        raise FormatError("Bad tree: deeper than any valid header")
    flag = bits_in.read_bits(1)
    if flag == EOF:
        raise StreamTruncatedError("Bad tree data: ran out")
    if flag == 1:
        sym = bits_in.read_bits(SYMBOL_BITS)
        if sym == EOF:
            raise StreamTruncatedError("Bad tree: leaf missing symbol")
        if sym > EOS:
            raise FormatError(f"Bad tree: symbol {sym} out of range")
        return Node(sym)
    left_node = _read_node(bits_in, depth + 1)
    right_node = _read_node(bits_in, depth + 1)
    return Node(None, 0, left_node, right_node)


def leaf_symbols(root: Node) -> List[int]:
    if root.is_leaf:
        return [root.sym]
    return leaf_symbols(root.left) + leaf_symbols(root.right)


def read_tree(bits_in: BitInputStream) -> Node:
    """
    Rebuild a tree written by write_tree. A header whose leaves repeat a
    symbol or do not hold exactly one EOS is rejected before any body bit
    is decoded.
    """
    root = _read_node(bits_in, 0)
    syms = leaf_symbols(root)
    if syms.count(EOS) != 1:
        raise FormatError(f"Bad tree: {syms.count(EOS)} EOS leaves")
    if len(set(syms)) != len(syms):
        raise FormatError("Bad tree: symbol on more than one leaf")
    return root


# ----------------------------------------------------------------------
# 5) Count header: 256 x 32-bit counts, EOS implied
# ----------------------------------------------------------------------
def write_counts(freq: Dict[int, int], bits_out: BitOutputStream) -> None:
    check_freq(freq)
    for sym in range(ALPH_SIZE):
        fr = freq.get(sym, 0)
        if fr > MAX_COUNT:
            raise TreeInvariantError(f"count {fr} for symbol {sym} overflows {BITS_PER_INT} bits")
        bits_out.write_bits(BITS_PER_INT, fr)


def read_counts(bits_in: BitInputStream) -> Dict[int, int]:
    freq: Dict[int, int] = {}
    for sym in range(ALPH_SIZE):
        fr = bits_in.read_bits(BITS_PER_INT)
        if fr == EOF:
            raise StreamTruncatedError(f"Bad count header: ran out at symbol {sym}")
        if fr:
            freq[sym] = fr
    freq[EOS] = 1
    return freq


def tree_stats(root: Node) -> Tuple[int, int]:
    """(leaf count, depth) of a tree."""
    if root.is_leaf:
        return 1, 0
    ll, ld = tree_stats(root.left)
    rl, rd = tree_stats(root.right)
    return ll + rl, 1 + max(ld, rd)
