"""Byte-level reading and writing of WSQ markers and segment headers."""

from __future__ import annotations

import enum
import math
import struct
from dataclasses import dataclass

import numpy as np

_USHORT_MAX = 0xFFFF
_UINT_MAX = 0xFFFFFFFF


class WsqError(ValueError):
    """Raised when a WSQ byte stream is malformed or truncated."""


class Marker(enum.IntEnum):
    """Two-byte markers that introduce the segments of a WSQ stream."""

    SOI = 0xFFA0
    EOI = 0xFFA1
    SOF = 0xFFA2
    SOB = 0xFFA3
    DTT = 0xFFA4
    DQT = 0xFFA5
    DHT = 0xFFA6
    DRT = 0xFFA7
    COM = 0xFFA8


class MarkerContext(enum.Enum):
    """Which markers are acceptable at a given point of the stream."""

    SOI = "soi"
    TABLES_OR_SOF = "tables_or_sof"
    TABLES_OR_SOB = "tables_or_sob"
    ANY = "any"


_TABLE_MARKERS = frozenset({Marker.DTT, Marker.DQT, Marker.DHT, Marker.COM})


class ByteReader:
    """Sequential big-endian reader over an in-memory byte stream."""

    def __init__(self, data: bytes | bytearray | memoryview, pos: int = 0) -> None:
        self.data = bytes(data)
        if not 0 <= pos <= len(self.data):
            raise ValueError("start position lies outside the data")
        self.pos = pos

    @property
    def remaining(self) -> int:
        """Number of bytes not yet consumed."""
        return len(self.data) - self.pos

    def _take(self, count: int) -> bytes:
        if count < 0:
            raise ValueError("byte count must not be negative")
        if count > self.remaining:
            raise WsqError(
                f"unexpected end of data: wanted {count} bytes, "
                f"{self.remaining} left"
            )
        chunk = self.data[self.pos:self.pos + count]
        self.pos += count
        return chunk

    def read_byte(self) -> int:
        """Read one unsigned byte."""
        return self._take(1)[0]

    def read_ushort(self) -> int:
        """Read a big-endian unsigned 16-bit integer."""
        return struct.unpack(">H", self._take(2))[0]

    def read_uint(self) -> int:
        """Read a big-endian unsigned 32-bit integer."""
        return struct.unpack(">I", self._take(4))[0]

    def read_bytes(self, count: int) -> bytes:
        """Read exactly ``count`` bytes."""
        return self._take(count)

    def peek_bytes(self, count: int) -> bytes:
        """Return up to ``count`` upcoming bytes without consuming them."""
        if count < 0:
            raise ValueError("byte count must not be negative")
        return self.data[self.pos:self.pos + count]

    def skip_segment(self) -> None:
        """Skip a marker segment whose length field comes next."""
        length = self.read_ushort()
        if length < 2:
            raise WsqError(f"invalid segment length {length}")
        self._take(length - 2)

    def rewind(self, count: int) -> None:
        """Step back ``count`` bytes."""
        if count < 0 or count > self.pos:
            raise WsqError("cannot rewind before the start of the data")
        self.pos -= count


class ByteWriter:
    """Growing big-endian byte buffer."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def __len__(self) -> int:
        return len(self._buf)

    def write_byte(self, value: int) -> None:
        """Append one unsigned byte."""
        if not 0 <= value <= 0xFF:
            raise ValueError(f"byte value {value} out of range")
        self._buf.append(value)

    def write_ushort(self, value: int) -> None:
        """Append a big-endian unsigned 16-bit integer."""
        if not 0 <= value <= _USHORT_MAX:
            raise ValueError(f"unsigned short value {value} out of range")
        self._buf += struct.pack(">H", value)

    def write_uint(self, value: int) -> None:
        """Append a big-endian unsigned 32-bit integer."""
        if not 0 <= value <= _UINT_MAX:
            raise ValueError(f"unsigned int value {value} out of range")
        self._buf += struct.pack(">I", value)

    def write_bytes(self, data: bytes | bytearray | memoryview) -> None:
        """Append raw bytes."""
        self._buf += bytes(data)

    def getvalue(self) -> bytes:
        """Everything written so far."""
        return bytes(self._buf)


@dataclass
class FrameHeader:
    """Parameters carried by the SOF segment of a WSQ stream."""

    black: int
    white: int
    height: int
    width: int
    m_shift: float
    r_scale: float
    wsq_encoder: int
    software: int


def read_marker(reader: ByteReader, context: MarkerContext) -> Marker:
    """Read a marker and check that it is allowed in ``context``."""
    value = reader.read_ushort()
    if context is MarkerContext.SOI:
        if value != Marker.SOI:
            raise WsqError(f"no SOI marker {{{value:04X}}}")
    elif context is MarkerContext.TABLES_OR_SOF:
        if value not in _TABLE_MARKERS and value != Marker.SOF:
            raise WsqError(
                f"no SOF, table or comment marker {{{value:04X}}}"
            )
    elif context is MarkerContext.TABLES_OR_SOB:
        if value not in _TABLE_MARKERS and value != Marker.SOB:
            raise WsqError(
                f"no SOB, table or comment marker {{{value:04X}}}"
            )
    elif context is MarkerContext.ANY:
        if value & 0xFF00 != 0xFF00:
            raise WsqError(f"no marker found {{{value:04X}}}")
        if value < Marker.SOI or value > Marker.COM:
            raise WsqError(f"{{{value:04X}}} not a valid marker")
    else:
        raise WsqError(f"invalid marker context {context!r}")
    return Marker(value)


def _read_scaled(reader: ByteReader) -> float:
    scale = reader.read_byte()
    value = np.float32(reader.read_ushort())
    for _ in range(scale):
        value = np.float32(float(value) / 10.0)
    return float(value)


def _sround(value: float) -> int:
    return int(value - 0.5) if value < 0 else int(value + 0.5)


def _encode_scaled(value: float) -> tuple[int, int]:
    """Split a float into a decimal exponent and a 16-bit mantissa."""
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"cannot encode {value} as a scaled unsigned short")
    flt = np.float32(value)
    if flt == 0.0:
        return 0, 0
    scale = 0
    with np.errstate(over="ignore"):
        while flt < 65535:
            scale += 1
            flt = np.float32(flt * np.float32(10))
    scale -= 1
    return scale & 0xFF, _sround(float(flt) / 10.0) & _USHORT_MAX


def read_frame_header(reader: ByteReader) -> FrameHeader:
    """Read a frame header; the SOF marker must already be consumed."""
    reader.read_ushort()  # header length
    black = reader.read_byte()
    white = reader.read_byte()
    height = reader.read_ushort()
    width = reader.read_ushort()
    m_shift = _read_scaled(reader)
    r_scale = _read_scaled(reader)
    wsq_encoder = reader.read_byte()
    software = reader.read_ushort()
    return FrameHeader(
        black=black,
        white=white,
        height=height,
        width=width,
        m_shift=m_shift,
        r_scale=r_scale,
        wsq_encoder=wsq_encoder,
        software=software,
    )


def write_frame_header(
    writer: ByteWriter, width: int, height: int, m_shift: float, r_scale: float
) -> None:
    """Write an SOF marker and frame header."""
    writer.write_ushort(Marker.SOF)
    writer.write_ushort(17)
    writer.write_byte(0)
    writer.write_byte(255)
    writer.write_ushort(height)
    writer.write_ushort(width)
    for value in (m_shift, r_scale):
        scale, mantissa = _encode_scaled(value)
        writer.write_byte(scale)
        writer.write_ushort(mantissa)
    writer.write_byte(2)
    writer.write_ushort(0)


def read_block_header(reader: ByteReader) -> int:
    """Read a block header and return its Huffman table id."""
    reader.read_ushort()  # header length
    return reader.read_byte()


def write_block_header(writer: ByteWriter, table: int) -> None:
    """Write an SOB marker and block header for Huffman table ``table``."""
    writer.write_ushort(Marker.SOB)
    writer.write_ushort(3)
    writer.write_byte(table)


def read_comment(reader: ByteReader) -> str:
    """Read a comment segment body; the COM marker must already be consumed."""
    length = reader.read_ushort()
    if length < 2:
        raise WsqError(f"invalid comment length {length}")
    return reader.read_bytes(length - 2).decode("latin-1")


def write_comment(writer: ByteWriter, text: str | bytes) -> None:
    """Write a COM marker followed by the comment text."""
    body = text.encode("latin-1") if isinstance(text, str) else bytes(text)
    if len(body) + 2 > _USHORT_MAX:
        raise ValueError(f"comment of {len(body)} bytes is too long")
    writer.write_ushort(Marker.COM)
    writer.write_ushort(len(body) + 2)
    writer.write_bytes(body)