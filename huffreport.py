#!/usr/bin/env python3
"""Turn codec stats and trees into things the web page can show."""
from typing import Dict, List

import pandas as pd

from hufftree import EOS, Node

COMPRESS_STEPS = [
    ("Count Bytes", "time_count"),
    ("Build Tree", "time_tree_build"),
    ("Make Codes", "time_codes"),
    ("Write Header", "time_header"),
    ("Encode Body", "time_encode"),
    ("Total", "time_total"),
]

DECOMPRESS_STEPS = [
    ("Rebuild Tree", "time_tree"),
    ("Decode Body", "time_decode"),
    ("Total", "time_total"),
]


def symbol_label(sym: int) -> str:
    if sym == EOS:
        return "EOS"
    if 0x21 <= sym < 0x7F and chr(sym) not in '"\\':
        return repr(chr(sym))
    return f"0x{sym:02x}"


# --------------------------------
# Convert Tree to Graphviz format
# --------------------------------
def tree_to_dot(root: Node, max_depth: int = 3) -> str:
    lines: List[str] = [
        "digraph G {",
        "node [shape=circle, style=filled, color=lightblue];",
    ]
    ids = iter(range(1 << 20))

    def traverse(n: Node, depth: int) -> str:
        name = f"n{next(ids)}"
        if n.is_leaf:
            label = f"{n.freq}\\n{symbol_label(n.sym)}" if n.freq else symbol_label(n.sym)
            lines.append(f'{name} [label="{label}", shape=box];')
            return name
        lines.append(f'{name} [label="{n.freq if n.freq else ""}"];')
        if depth < max_depth:
            for bit, child in (("0", n.left), ("1", n.right)):
                child_name = traverse(child, depth + 1)
                lines.append(f'{name} -> {child_name} [label="{bit}"];')
        return name

    traverse(root, 0)
    lines.append("}")
    return "\n".join(lines)


# --------------------------------
# Tables
# --------------------------------
def timings_frame(stats: Dict[str, object]) -> pd.DataFrame:
    steps = COMPRESS_STEPS if "time_count" in stats else DECOMPRESS_STEPS
    rows = [(step, stats[key]) for step, key in steps if key in stats]
    return pd.DataFrame(rows, columns=["Step", "Time (s)"])


def summary_frame(stats: Dict[str, object]) -> pd.DataFrame:
    if "original_bytes" in stats:
        rows = [
            ("Original Size (bytes)", stats["original_bytes"]),
            ("Compressed Size (bytes)", stats.get("compressed_bytes")),
            ("Unique Symbols", stats["unique_symbols"]),
            ("Header Bits", stats["header_bits"]),
            ("Body Bits", stats["body_bits"]),
            ("Longest Code (bits)", stats["max_code_bits"]),
            ("Padding Bits", stats.get("pad_bits")),
        ]
    else:
        rows = [
            ("Compressed Size (bytes)", stats.get("compressed_size")),
            ("Restored Size (bytes)", stats["restored_bytes"]),
        ]
    rows.insert(0, ("Header Mode", stats["header"]))
    # one dtype for the column so it renders as a plain table
    rows = [(metric, "N/A" if value is None else str(value)) for metric, value in rows]
    return pd.DataFrame(rows, columns=["Metric", "Value"])
