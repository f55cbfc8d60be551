import pytest
from hypothesis import given
from hypothesis import strategies as st

from wsqcodec.segments import (
    ByteReader,
    ByteWriter,
    FrameHeader,
    Marker,
    MarkerContext,
    WsqError,
    read_block_header,
    read_comment,
    read_frame_header,
    read_marker,
    write_block_header,
    write_comment,
    write_frame_header,
)


def _reader_after_marker(data: bytes, marker: Marker) -> ByteReader:
    reader = ByteReader(data)
    assert read_marker(reader, MarkerContext.ANY) is marker
    return reader


@given(st.integers(0, 0xFFFF))
def test_ushort_round_trip(value):
    writer = ByteWriter()
    writer.write_ushort(value)
    reader = ByteReader(writer.getvalue())
    assert reader.read_ushort() == value
    assert reader.remaining == 0


@given(st.integers(0, 0xFFFFFFFF))
def test_uint_round_trip(value):
    writer = ByteWriter()
    writer.write_uint(value)
    assert len(writer.getvalue()) == 4
    assert ByteReader(writer.getvalue()).read_uint() == value


def test_values_are_big_endian():
    writer = ByteWriter()
    writer.write_ushort(Marker.SOI)
    writer.write_byte(7)
    assert writer.getvalue() == b"\xff\xa0\x07"


def test_writer_rejects_out_of_range():
    writer = ByteWriter()
    with pytest.raises(ValueError):
        writer.write_byte(256)
    with pytest.raises(ValueError):
        writer.write_ushort(-1)
    with pytest.raises(ValueError):
        writer.write_uint(1 << 32)


def test_reading_past_end_raises():
    reader = ByteReader(b"\x01")
    with pytest.raises(WsqError):
        reader.read_ushort()
    assert reader.pos == 0
    assert reader.read_byte() == 1
    with pytest.raises(WsqError):
        reader.read_byte()


def test_peek_does_not_consume_and_rewind_steps_back():
    reader = ByteReader(b"abcdef")
    assert reader.peek_bytes(3) == b"abc"
    assert reader.read_bytes(4) == b"abcd"
    reader.rewind(2)
    assert reader.read_bytes(2) == b"cd"
    with pytest.raises(WsqError):
        reader.rewind(10)


def test_skip_segment_skips_body():
    reader = ByteReader(b"\x00\x04xy\xff\xa1")
    reader.skip_segment()
    assert read_marker(reader, MarkerContext.ANY) is Marker.EOI


def test_skip_segment_truncated():
    reader = ByteReader(b"\x00\x10ab")
    with pytest.raises(WsqError):
        reader.skip_segment()


def test_read_marker_soi():
    assert read_marker(ByteReader(b"\xff\xa0"), MarkerContext.SOI) is Marker.SOI
    with pytest.raises(WsqError):
        read_marker(ByteReader(b"\xff\xa2"), MarkerContext.SOI)


@pytest.mark.parametrize(
    "marker", [Marker.DTT, Marker.DQT, Marker.DHT, Marker.COM, Marker.SOF]
)
def test_tables_or_sof_accepts(marker):
    data = int(marker).to_bytes(2, "big")
    assert read_marker(ByteReader(data), MarkerContext.TABLES_OR_SOF) is marker


def test_tables_or_sof_rejects_sob():
    with pytest.raises(WsqError):
        read_marker(ByteReader(b"\xff\xa3"), MarkerContext.TABLES_OR_SOF)


def test_tables_or_sob_accepts_sob_rejects_sof():
    assert read_marker(ByteReader(b"\xff\xa3"), MarkerContext.TABLES_OR_SOB) is Marker.SOB
    with pytest.raises(WsqError):
        read_marker(ByteReader(b"\xff\xa2"), MarkerContext.TABLES_OR_SOB)


@pytest.mark.parametrize("data", [b"\x12\x34", b"\xff\x9f", b"\xff\xa9", b"\xff\xd8"])
def test_any_rejects_invalid(data):
    with pytest.raises(WsqError):
        read_marker(ByteReader(data), MarkerContext.ANY)


@given(st.sampled_from(list(Marker)))
def test_any_accepts_all_markers(marker):
    data = int(marker).to_bytes(2, "big")
    assert read_marker(ByteReader(data), MarkerContext.ANY) is marker


def test_frame_header_fixed_fields():
    writer = ByteWriter()
    write_frame_header(writer, 500, 400, 0.0, 0.0)
    data = writer.getvalue()
    assert data[:6] == b"\xff\xa2\x00\x11\x00\xff"
    assert len(data) == 2 + 17


def test_frame_header_round_trip():
    writer = ByteWriter()
    write_frame_header(writer, 640, 480, 127.25, 1.5)
    header = read_frame_header(_reader_after_marker(writer.getvalue(), Marker.SOF))
    assert isinstance(header, FrameHeader)
    assert (header.width, header.height) == (640, 480)
    assert (header.black, header.white) == (0, 255)
    assert header.wsq_encoder == 2
    assert header.software == 0
    assert header.m_shift == pytest.approx(127.25, rel=1e-4)
    assert header.r_scale == pytest.approx(1.5, rel=1e-4)


def test_frame_header_zero_values():
    writer = ByteWriter()
    write_frame_header(writer, 1, 1, 0.0, 0.0)
    header = read_frame_header(_reader_after_marker(writer.getvalue(), Marker.SOF))
    assert header.m_shift == 0.0
    assert header.r_scale == 0.0


@given(st.floats(min_value=0.001, max_value=6000.0))
def test_frame_header_scaled_values_round_trip(value):
    writer = ByteWriter()
    write_frame_header(writer, 8, 8, value, value)
    header = read_frame_header(_reader_after_marker(writer.getvalue(), Marker.SOF))
    assert header.m_shift == pytest.approx(value, rel=1e-3)
    assert header.r_scale == header.m_shift


def test_frame_header_rejects_negative_shift():
    with pytest.raises(ValueError):
        write_frame_header(ByteWriter(), 8, 8, -1.0, 1.0)


def test_frame_header_truncated():
    writer = ByteWriter()
    write_frame_header(writer, 8, 8, 1.0, 1.0)
    reader = _reader_after_marker(writer.getvalue()[:-3], Marker.SOF)
    with pytest.raises(WsqError):
        read_frame_header(reader)


def test_block_header_bytes_and_round_trip():
    writer = ByteWriter()
    write_block_header(writer, 1)
    data = writer.getvalue()
    assert data == b"\xff\xa3\x00\x03\x01"
    assert read_block_header(_reader_after_marker(data, Marker.SOB)) == 1


@given(st.text(alphabet=st.characters(min_codepoint=32, max_codepoint=255), max_size=200))
def test_comment_round_trip(text):
    writer = ByteWriter()
    write_comment(writer, text)
    data = writer.getvalue()
    assert len(data) == 4 + len(text)
    reader = _reader_after_marker(data, Marker.COM)
    assert read_comment(reader) == text
    assert reader.remaining == 0


def test_comment_wire_format():
    writer = ByteWriter()
    write_comment(writer, "hi")
    assert writer.getvalue() == b"\xff\xa8\x00\x04hi"


def test_comment_too_long():
    with pytest.raises(ValueError):
        write_comment(ByteWriter(), b"x" * 65534)


def test_comment_invalid_length():
    with pytest.raises(WsqError):
        read_comment(ByteReader(b"\x00\x01"))