#!/usr/bin/env python3
"""
Bit-granular streams used by the codec.

Both classes wrap an ordinary binary file object (an open file, a BytesIO)
and keep a small ``bitarray`` buffer in front of it. Bits are packed most
significant first, the same order ``int2ba`` / ``ba2int`` use by default.
"""
from typing import BinaryIO

from bitarray import bitarray
from bitarray.util import ba2int, int2ba

EOF = -1  # returned by read_bits when the stream runs dry

# drop consumed bits / flush written bytes once the buffer gets this big
_COMPACT_BITS = 1 << 15


# ---------------------------
#  Reading side
# ---------------------------
class BitInputStream:
    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self.buffer = bitarray()
        self.pos = 0
        self.bits_read = 0

    def __enter__(self) -> "BitInputStream":
        return self

    def __exit__(self, *exc) -> None:
        self.buffer = bitarray()
        self.pos = 0

    def read_bits(self, count: int) -> int:
        """
        Return the next `count` bits as an unsigned int, or EOF if fewer
        than `count` bits are left. Only the bytes needed to satisfy the
        request are pulled from the underlying stream.
        """
        if count <= 0:
            raise ValueError(f"bit count must be positive, got {count}")
        available = len(self.buffer) - self.pos
        if available < count:
            need = (count - available + 7) // 8
            chunk = self.stream.read(need)
            if chunk:
                self.buffer.frombytes(chunk)
            if len(self.buffer) - self.pos < count:
                return EOF

        if count == 1:
            value = self.buffer[self.pos]
        else:
            value = ba2int(self.buffer[self.pos:self.pos + count])
        self.pos += count
        self.bits_read += count

        if self.pos >= _COMPACT_BITS:
            del self.buffer[:self.pos]
            self.pos = 0
        return value

    def reset(self) -> None:
        # second pass of the compressor starts over from byte 0
        self.stream.seek(0)
        self.buffer = bitarray()
        self.pos = 0
        self.bits_read = 0


# ---------------------------
#  Writing side
# ---------------------------
class BitOutputStream:
    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self.buffer = bitarray()
        self.bits_written = 0

    def __enter__(self) -> "BitOutputStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # nothing half-written gets padded out after a failure
        if exc_type is None:
            self.flush()

    def write_bits(self, count: int, value: int) -> None:
        if count <= 0:
            raise ValueError(f"bit count must be positive, got {count}")
        if value < 0 or value >> count:
            raise ValueError(f"value {value} does not fit in {count} bits")
        self.buffer.extend(int2ba(value, count))
        self.bits_written += count
        self._drain()

    def write_code(self, code: str) -> None:
        """Append a code given as a string of '0'/'1' characters."""
        self.buffer.extend(code)
        self.bits_written += len(code)
        self._drain()

    def _drain(self) -> None:
        if len(self.buffer) >= _COMPACT_BITS:
            whole = len(self.buffer) & ~7
            self.stream.write(self.buffer[:whole].tobytes())
            del self.buffer[:whole]

    def write(self, byte: int) -> None:
        self.write_bits(8, byte)

    def flush(self) -> None:
        """
        Write out everything buffered, zero padding the final byte.
        Call once, when the stream is complete.
        """
        if len(self.buffer):
            self.stream.write(self.buffer.tobytes())
            self.buffer = bitarray()
        if hasattr(self.stream, "flush"):
            self.stream.flush()
