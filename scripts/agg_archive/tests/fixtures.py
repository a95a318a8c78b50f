"""
Helpers for building AGG archives and override images in tests.
"""

import struct
import zlib
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

from PIL import Image


def encode_name(name: str, width: int = 15) -> bytes:
    """Encode a file name as a NUL-padded fixed-width field."""
    return name.encode("latin-1")[:width].ljust(width, b"\x00")


def build_agg(entries: Sequence[Tuple[str, bytes]], max_filename_size: int = 15,
              padding: int = 0, unknown: int = 0) -> bytes:
    """
    Build an AGG archive holding ``entries`` in order.

    Payloads follow the record block (after ``padding`` zero bytes) and the
    name block closes the file.
    """
    count = len(entries)
    offset = 2 + count * 12 + padding

    records = []
    body = []
    for _, payload in entries:
        records.append(struct.pack("<III", unknown, offset, len(payload)))
        body.append(payload)
        offset += len(payload)

    names = [encode_name(name, max_filename_size) for name, _ in entries]

    return (
        struct.pack("<H", count)
        + b"".join(records)
        + b"\x00" * padding
        + b"".join(body)
        + b"".join(names)
    )


def build_raw_agg(records: Iterable[Tuple[int, int, int]], names: Iterable[str],
                  body: bytes = b"", max_filename_size: int = 15,
                  count: Optional[int] = None) -> bytes:
    """Build an archive from explicit (unknown, offset, size) records."""
    records = list(records)
    names = list(names)
    if count is None:
        count = len(records)
    return (
        struct.pack("<H", count)
        + b"".join(struct.pack("<III", *record) for record in records)
        + body
        + b"".join(encode_name(name, max_filename_size) for name in names)
    )


def write_agg(path: Path, entries: Sequence[Tuple[str, bytes]], **kwargs) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(build_agg(entries, **kwargs))
    return path


def write_png(path: Path, size: Tuple[int, int], color=(255, 0, 0, 255), mode: str = "RGBA") -> Path:
    """Write a solid-colour image and return its path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new(mode, size, color).save(path, format="PNG")
    return path


def rgba_bytes(size: Tuple[int, int], color=(255, 0, 0, 255)) -> bytes:
    """Expected RGBA payload of a solid-colour image."""
    return bytes(color) * (size[0] * size[1])


def _png_chunk(chunk_type: bytes, data: bytes) -> bytes:
    return (
        struct.pack(">I", len(data))
        + chunk_type
        + data
        + struct.pack(">I", zlib.crc32(chunk_type + data) & 0xFFFFFFFF)
    )


def write_oversized_png(path: Path, width: int = 60000, height: int = 60000) -> Path:
    """
    Write a PNG whose header claims huge dimensions but carries no pixel data.

    Pillow refuses to open it as a decompression bomb.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    header = struct.pack(">IIBBBBB", width, height, 8, 6, 0, 0, 0)
    path.write_bytes(
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IEND", b"")
    )
    return path
