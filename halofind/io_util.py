"""Byte swapping and Fortran unformatted record helpers for binary snapshots."""

from __future__ import annotations

import os
import struct
import sys
from typing import BinaryIO

UINT32_MAX = 2**32 - 1

_NATIVE = "<" if sys.byteorder == "little" else ">"
_SWAPPED = ">" if sys.byteorder == "little" else "<"


class FortranRecordError(ValueError):
    """Raised when a Fortran record marker is inconsistent."""


def _swap_words(data: bytes, width: int) -> bytes:
    data = bytes(data)
    if len(data) % width:
        raise ValueError(f"data length {len(data)} is not a multiple of {width}")
    return b"".join(data[i:i + width][::-1] for i in range(0, len(data), width))


def _read_exact(stream: BinaryIO, count: int) -> bytes:
    data = stream.read(count)
    if len(data) < count:
        raise EOFError(f"expected {count} bytes, got {len(data)}")
    return data


def swap_endian_4byte(data: bytes) -> bytes:
    """Reverse the byte order of every 4-byte word."""
    return _swap_words(data, 4)


def swap_endian_8byte(data: bytes) -> bytes:
    """Reverse the byte order of every 8-byte word."""
    return _swap_words(data, 8)


def swap_4byte_to_8byte(data: bytes) -> bytes:
    """Exchange the two 4-byte halves of every 8-byte word."""
    data = bytes(data)
    if len(data) % 8:
        raise ValueError(f"data length {len(data)} is not a multiple of 8")
    return b"".join(
        data[i + 4:i + 8] + data[i:i + 4] for i in range(0, len(data), 8)
    )


def read_swapped(stream: BinaryIO, size: int, nitems: int) -> bytes:
    """Read ``nitems`` items of ``size`` bytes, swapping 4-byte words when aligned."""
    data = _read_exact(stream, size * nitems)
    if size % 4 == 0:
        data = _swap_words(data, 4)
    return data


def read_swapped8(stream: BinaryIO, size: int, nitems: int) -> bytes:
    """Read ``nitems`` items of ``size`` bytes and swap every 8-byte word."""
    if (size * nitems) % 8:
        raise ValueError("total size must be a multiple of 8 bytes")
    return _swap_words(_read_exact(stream, size * nitems), 8)


def _read_marker(stream: BinaryIO, swap: bool) -> int:
    raw = _read_exact(stream, 4)
    return struct.unpack((_SWAPPED if swap else _NATIVE) + "I", raw)[0]


def read_fortran(stream: BinaryIO, size: int, nitems: int, swap: bool = False) -> bytes:
    """Read ``size * nitems`` bytes spread over one or more Fortran records."""
    wanted = size * nitems
    chunks = []
    got = 0
    while got < wanted:
        head = _read_marker(stream, swap)
        if head > wanted - got:
            raise FortranRecordError(
                f"record of {head} bytes exceeds the {wanted - got} bytes requested"
            )
        if head == 0:
            raise FortranRecordError("empty record while data was still expected")
        body = _read_exact(stream, head)
        if swap and size % 4 == 0:
            if head % 4:
                raise FortranRecordError("record length is not a multiple of 4")
            body = _swap_words(body, 4)
        tail = _read_marker(stream, swap)
        if tail != head:
            raise FortranRecordError(f"Header length: {head}; tail length: {tail}")
        chunks.append(body)
        got += head
    return b"".join(chunks)


def skip_fortran(stream: BinaryIO, swap: bool = False) -> None:
    """Skip over one Fortran record."""
    head = _read_marker(stream, swap)
    stream.seek(head, os.SEEK_CUR)
    tail = _read_marker(stream, swap)
    if tail != head:
        raise FortranRecordError(f"Header length: {head}; tail length: {tail}")


def write_fortran(stream: BinaryIO, data: bytes, size: int) -> int:
    """Write ``data`` as Fortran records of items of ``size`` bytes.

    Data too long for one record is split into several.  Returns the number
    of items written.
    """
    if size <= 0:
        raise ValueError("item size must be positive")
    data = bytes(data)
    if len(data) % size:
        raise ValueError("data length is not a multiple of the item size")
    nitems = len(data) // size
    per_record = UINT32_MAX // size
    written = 0
    while written < nitems:
        count = min(per_record, nitems - written)
        chunk = data[written * size:(written + count) * size]
        marker = struct.pack(_NATIVE + "I", len(chunk))
        stream.write(marker)
        stream.write(chunk)
        stream.write(marker)
        written += count
    return written


def particle_range(total_p: int, block: int, num_blocks: int) -> tuple[int, int]:
    """Split ``total_p`` particles into ``num_blocks`` near-equal blocks.

    Returns ``(start, count)`` for ``block``; the first ``total_p % num_blocks``
    blocks each hold one extra particle.
    """
    if num_blocks <= 0:
        raise ValueError("num_blocks must be positive")
    if total_p < 0 or block < 0:
        raise ValueError("total_p and block must be non-negative")
    per_block, extra = divmod(total_p, num_blocks)
    start = per_block * block
    count = per_block
    if block < extra:
        start += block
        count += 1
    else:
        start += extra
    if start > total_p or start + count > total_p:
        raise ValueError(f"block {block} lies outside {total_p} particles")
    return start, count