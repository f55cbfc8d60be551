"""Adding, listing and removing comment segments of WSQ streams."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from typing import TextIO

from wsqcodec.segments import (
    ByteReader,
    ByteWriter,
    Marker,
    MarkerContext,
    read_comment,
    read_marker,
    write_comment,
)


def _comment_bytes(comment: str | bytes | bytearray) -> bytes:
    if isinstance(comment, str):
        body = comment.encode("latin-1")
    else:
        body = bytes(comment)
    # Comments are NUL-terminated text; anything past a NUL is not part of it.
    return body.split(b"\x00", 1)[0]


def add_comment(data: bytes | bytearray | memoryview, comment: str | bytes) -> bytes:
    """Insert a comment segment after any comments that follow SOI.

    Returns the new byte stream; ``data`` is not modified.
    """
    if comment is None:
        raise ValueError("empty comment passed")
    body = _comment_bytes(comment)
    if not body:
        raise ValueError("empty comment passed")

    reader = ByteReader(data)
    writer = ByteWriter()

    writer.write_ushort(read_marker(reader, MarkerContext.SOI))

    marker = reader.read_ushort()
    while marker == Marker.COM:
        write_comment(writer, _comment_bytes(read_comment(reader).encode("latin-1")))
        marker = reader.read_ushort()

    # Step back so the marker just read is copied with the rest.
    reader.rewind(2)

    write_comment(writer, body)
    writer.write_bytes(reader.read_bytes(reader.remaining))
    return writer.getvalue()


def iter_comments(data: bytes | bytearray | memoryview) -> Iterator[str]:
    """Yield the text of every comment segment before the first SOB."""
    reader = ByteReader(data)
    read_marker(reader, MarkerContext.SOI)
    marker = read_marker(reader, MarkerContext.ANY)
    while marker != Marker.SOB:
        if marker == Marker.COM:
            yield read_comment(reader)
        else:
            reader.skip_segment()
        marker = read_marker(reader, MarkerContext.ANY)


def print_comments(
    data: bytes | bytearray | memoryview, out: TextIO | None = None
) -> None:
    """Write each comment before the first SOB to ``out``, one per line."""
    stream = sys.stdout if out is None else out
    for text in iter_comments(data):
        stream.write(text.split("\x00", 1)[0] + "\n")


def _copy_entropy_data(reader: ByteReader, writer: ByteWriter) -> None:
    """Copy coded block data up to (not including) the next marker."""
    while True:
        first = reader.read_byte()
        if first != 0xFF:
            writer.write_byte(first)
            continue
        second = reader.read_byte()
        if second == 0x00:
            writer.write_byte(first)
            writer.write_byte(second)
        else:
            reader.rewind(2)
            return


def delete_comments(data: bytes | bytearray | memoryview) -> bytes:
    """Return a copy of the stream with every comment segment removed."""
    reader = ByteReader(data)
    writer = ByteWriter()

    writer.write_ushort(read_marker(reader, MarkerContext.SOI))

    marker = read_marker(reader, MarkerContext.ANY)
    while marker != Marker.EOI:
        length = reader.read_ushort()
        if marker != Marker.COM:
            writer.write_ushort(marker)
            writer.write_ushort(length)
            writer.write_bytes(reader.read_bytes(max(length - 2, 0)))
            if marker == Marker.SOB:
                _copy_entropy_data(reader, writer)
        else:
            reader.read_bytes(max(length - 2, 0))
        marker = read_marker(reader, MarkerContext.ANY)

    writer.write_ushort(marker)
    return writer.getvalue()