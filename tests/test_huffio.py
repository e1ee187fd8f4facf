import io

import pytest

from huffio import EOF, BitInputStream, BitOutputStream


def test_bits_pack_most_significant_first():
    sink = io.BytesIO()
    with BitOutputStream(sink) as out:
        out.write_bits(3, 0b101)
        out.write_bits(5, 0b00011)
    assert sink.getvalue() == b"\xa3"


def test_flush_zero_pads_last_byte():
    sink = io.BytesIO()
    with BitOutputStream(sink) as out:
        out.write_bits(1, 1)
        out.write_code("01")
        assert out.bits_written == 3
    assert sink.getvalue() == b"\xa0"


def test_write_raw_byte():
    sink = io.BytesIO()
    with BitOutputStream(sink) as out:
        out.write(0x41)
        out.write(0xFF)
    assert sink.getvalue() == b"A\xff"


def test_value_must_fit():
    out = BitOutputStream(io.BytesIO())
    with pytest.raises(ValueError):
        out.write_bits(3, 8)
    with pytest.raises(ValueError):
        out.write_bits(0, 0)


def test_failed_block_writes_nothing():
    sink = io.BytesIO()
    with pytest.raises(RuntimeError):
        with BitOutputStream(sink) as out:
            out.write_bits(4, 0xF)
            raise RuntimeError("boom")
    assert sink.getvalue() == b""


def test_read_bits_and_eof():
    bits_in = BitInputStream(io.BytesIO(b"\xa3"))
    assert bits_in.read_bits(3) == 0b101
    assert bits_in.read_bits(1) == 0
    assert bits_in.read_bits(4) == 0b0011
    assert bits_in.read_bits(1) == EOF
    # stays at EOF
    assert bits_in.read_bits(1) == EOF


def test_short_read_is_eof():
    bits_in = BitInputStream(io.BytesIO(b"\xff"))
    assert bits_in.read_bits(9) == EOF


def test_reads_only_what_is_needed():
    stream = io.BytesIO(b"\x01\x02\x03\x04\x05\x06")
    bits_in = BitInputStream(stream)
    assert bits_in.read_bits(32) == 0x01020304
    assert stream.tell() == 4
    assert bits_in.read_bits(1) == 0
    assert stream.tell() == 5


def test_reset_rereads_from_start():
    bits_in = BitInputStream(io.BytesIO(b"xy"))
    assert bits_in.read_bits(8) == ord("x")
    assert bits_in.read_bits(8) == ord("y")
    assert bits_in.read_bits(8) == EOF
    bits_in.reset()
    assert bits_in.bits_read == 0
    assert bits_in.read_bits(8) == ord("x")


def test_long_streams_survive_buffer_compaction():
    payload = bytes(i % 251 for i in range(20000))
    sink = io.BytesIO()
    with BitOutputStream(sink) as out:
        for b in payload:
            out.write_bits(1, b >> 7)
            out.write_bits(7, b & 0x7F)
    assert sink.getvalue() == payload

    bits_in = BitInputStream(io.BytesIO(payload))
    got = bytearray()
    while True:
        val = bits_in.read_bits(8)
        if val == EOF:
            break
        got.append(val)
    assert bytes(got) == payload
