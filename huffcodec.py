#!/usr/bin/env python3
"""
Huffman file compressor.

Stream layout::

    u32 magic       HUFF_TREE or HUFF_COUNTS
    header          preorder tree (0 = internal, 1 + 9-bit symbol = leaf)
                    or 256 x u32 byte counts
    body            code of every input byte, then the EOS code,
                    zero padded to a whole byte

Compression reads the input twice (count, then encode), so the reader
must be resettable. Decompression is a single pass.
"""
import io
import os
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from huffio import EOF, BitInputStream, BitOutputStream
from hufftree import (BITS_PER_INT, BITS_PER_WORD, EOS, FormatError, HuffError,
                      Node, StreamTruncatedError, TreeInvariantError,
                      build_tree, code_lengths, count_bytes, make_codes, read_counts,
                      read_tree, tree_stats, write_counts, write_tree)

__all__ = [
    "HUFF_NUMBER", "HUFF_TREE", "HUFF_COUNTS", "Header", "HuffConfig",
    "HuffError", "FormatError", "StreamTruncatedError", "TreeInvariantError",
    "compress", "decompress", "compress_bytes", "decompress_bytes",
    "compress_file", "decompress_file",
]

HUFF_NUMBER = 0xFACE8200  # file signature family
HUFF_TREE = HUFF_NUMBER | 1
HUFF_COUNTS = HUFF_NUMBER | 2


class Header(Enum):
    TREE = "tree"
    COUNTS = "counts"


MAGIC_FOR = {Header.TREE: HUFF_TREE, Header.COUNTS: HUFF_COUNTS}
HEADER_FOR = {HUFF_NUMBER: Header.TREE, HUFF_TREE: Header.TREE, HUFF_COUNTS: Header.COUNTS}


@dataclass(frozen=True)
class HuffConfig:
    header: Header = Header.TREE


DEFAULT_CONFIG = HuffConfig()


# -------------------------
# 1) Compressor
# -------------------------
def compress(bits_in: BitInputStream, bits_out: BitOutputStream,
             config: Optional[HuffConfig] = None) -> Tuple[Node, Dict[str, object]]:
    """
    Encode everything `bits_in` holds into `bits_out`. Returns the tree that
    was used and a stats dict. The caller flushes `bits_out`.
    """
    config = config or DEFAULT_CONFIG
    t0 = time.perf_counter()
    freq = count_bytes(bits_in)
    t_count = time.perf_counter()

    root = build_tree(freq)
    t_tree = time.perf_counter()

    codes = make_codes(root)
    t_codes = time.perf_counter()

    start = bits_out.bits_written
    bits_out.write_bits(BITS_PER_INT, MAGIC_FOR[config.header])
    if config.header is Header.TREE:
        write_tree(root, bits_out)
    else:
        write_counts(freq, bits_out)
    header_bits = bits_out.bits_written - start
    t_header = time.perf_counter()

    bits_in.reset()
    while True:
        val = bits_in.read_bits(BITS_PER_WORD)
        if val == EOF:
            break
        bits_out.write_code(codes[val])
    bits_out.write_code(codes[EOS])
    t_encode = time.perf_counter()

    leaves, depth = tree_stats(root)
    stats = {
        "header": config.header.value,
        "original_bytes": sum(freq.values()) - 1,
        "unique_symbols": len(freq) - 1,
        "leaves": leaves,
        "tree_depth": depth,
        "max_code_bits": max(code_lengths(codes).values()),
        "header_bits": header_bits,
        "body_bits": bits_out.bits_written - start - header_bits,
        "time_count": t_count - t0,
        "time_tree_build": t_tree - t_count,
        "time_codes": t_codes - t_tree,
        "time_header": t_header - t_codes,
        "time_encode": t_encode - t_header,
    }
    return root, stats


# -------------------------
# 2) Decompressor
# -------------------------
def read_header(bits_in: BitInputStream, config: Optional[HuffConfig] = None) -> Tuple[Header, Node]:
    magic = bits_in.read_bits(BITS_PER_INT)
    if magic == EOF:
        raise FormatError("Not a .huff stream (too short for magic number)")
    header = HEADER_FOR.get(magic)
    if header is None:
        raise FormatError(f"Not a .huff stream (magic mismatch: {magic:#010x})")
    if config is not None and config.header is not header:
        raise FormatError(f"Expected a {config.header.value} header, found {header.value}")

    if header is Header.TREE:
        return header, read_tree(bits_in)
    return header, build_tree(read_counts(bits_in))


def decompress(bits_in: BitInputStream, bits_out: BitOutputStream,
               config: Optional[HuffConfig] = None) -> Dict[str, object]:
    """
    Decode one stream. With no config any known header is accepted; a config
    pins the header mode. Raises FormatError before reading past the magic
    number when it is wrong, StreamTruncatedError when bits run out before EOS.
    """
    t0 = time.perf_counter()
    header, root = read_header(bits_in, config)
    t_tree = time.perf_counter()

    restored = 0
    node = root
    while True:
        bit = bits_in.read_bits(1)
        if bit == EOF:
            raise StreamTruncatedError(f"No EOS after {restored} bytes")
        # a bare-leaf tree spends one bit per code
        if not node.is_leaf:
            node = node.right if bit else node.left
        if node.is_leaf:
            if node.sym == EOS:
                break
            bits_out.write(node.sym)
            restored += 1
            node = root
    t_decode = time.perf_counter()

    return {
        "header": header.value,
        "restored_bytes": restored,
        "time_tree": t_tree - t0,
        "time_decode": t_decode - t_tree,
    }


# -------------------------
# 3) In-memory helpers
# -------------------------
def compress_bytes(data: bytes, config: Optional[HuffConfig] = None) -> bytes:
    sink = io.BytesIO()
    with BitInputStream(io.BytesIO(data)) as bits_in, BitOutputStream(sink) as bits_out:
        compress(bits_in, bits_out, config)
    return sink.getvalue()


def decompress_bytes(blob: bytes, config: Optional[HuffConfig] = None) -> bytes:
    sink = io.BytesIO()
    with BitInputStream(io.BytesIO(blob)) as bits_in, BitOutputStream(sink) as bits_out:
        decompress(bits_in, bits_out, config)
    return sink.getvalue()


# -------------------------
# 4) File front-ends
# -------------------------
def _run_file(src: str, dst: str, step):
    """
    Open `src`, then create `dst` and run `step(bits_in, bits_out)`. Only a
    `dst` this call created is removed when the step fails; an existing file
    is never touched if `src` cannot be opened.
    """
    with open(src, 'rb') as f_in:
        if os.path.exists(dst) and os.path.samefile(src, dst):
            raise ValueError(f"Input and output are the same file: {dst}")
        f_out = open(dst, 'wb')
        try:
            with f_out, BitInputStream(f_in) as bits_in, BitOutputStream(f_out) as bits_out:
                return step(bits_in, bits_out)
        except Exception:
            os.remove(dst)
            raise


def compress_file(src: str, dst: str,
                  config: Optional[HuffConfig] = None) -> Tuple[Node, Dict[str, object]]:
    """
    Returns (root, stats). On any failure the partly written `dst` is
    removed and the error propagates.
    """
    t0 = time.perf_counter()
    root, stats = _run_file(src, dst, lambda bits_in, bits_out: compress(bits_in, bits_out, config))
    t_write = time.perf_counter()

    original_bytes = stats["original_bytes"]
    compressed_bytes = os.path.getsize(dst)
    if original_bytes > 0:
        compression_ratio = compressed_bytes / original_bytes
        space_saved_percent = ((original_bytes - compressed_bytes) / original_bytes) * 100.0
    else:
        compression_ratio = None
        space_saved_percent = None

    stats.update({
        "input": src,
        "output": dst,
        "compressed_bytes": compressed_bytes,
        "pad_bits": (-(stats["header_bits"] + stats["body_bits"])) % 8,
        "compression_ratio": compression_ratio,
        "space_saved_percent": space_saved_percent,
        "time_total": t_write - t0,
    })
    return root, stats


def decompress_file(src: str, dst: str, config: Optional[HuffConfig] = None) -> Dict[str, object]:
    t0 = time.perf_counter()
    stats = _run_file(src, dst, lambda bits_in, bits_out: decompress(bits_in, bits_out, config))
    t_write = time.perf_counter()

    stats.update({
        "input_huff": src,
        "output": dst,
        "compressed_size": os.path.getsize(src),
        "restored_size": os.path.getsize(dst),
        "time_total": t_write - t0,
    })
    return stats
