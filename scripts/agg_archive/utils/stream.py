"""
Seekable little-endian byte source used to read archive structures.
"""

import io
import os
import struct
from pathlib import Path
from typing import BinaryIO, Optional, Union

from ..errors import ArchiveIOError


_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")


class ByteSource:
    """
    Random-access reader over a file or an in-memory buffer.

    All multi-byte integers are little-endian. Every read is exact: running
    past the end of the data raises ArchiveIOError instead of returning a
    short buffer.
    """

    def __init__(self, handle: BinaryIO, size: int, name: Optional[str] = None):
        self._handle = handle
        self._size = size
        self.name = name

    @classmethod
    def open(cls, path: Union[str, Path]) -> "ByteSource":
        """Open a file for binary reading."""
        path = str(path)
        try:
            handle = open(path, "rb")
            size = os.fstat(handle.fileno()).st_size
        except OSError as e:
            raise ArchiveIOError(f"Cannot open '{path}': {e}", path=path) from e
        return cls(handle, size, name=path)

    @classmethod
    def from_bytes(cls, data: bytes, name: Optional[str] = None) -> "ByteSource":
        """Wrap an in-memory buffer."""
        return cls(io.BytesIO(data), len(data), name=name)

    def size(self) -> int:
        return self._size

    def tell(self) -> int:
        return self._handle.tell()

    def seek(self, position: int) -> None:
        if position < 0 or position > self._size:
            raise ArchiveIOError(
                f"Seek to {position} outside of 0..{self._size}", path=self.name
            )
        try:
            self._handle.seek(position)
        except (OSError, ValueError) as e:
            raise ArchiveIOError(f"Seek to {position} failed: {e}", path=self.name) from e

    def read_raw(self, count: int) -> bytes:
        """Read exactly ``count`` bytes."""
        if count < 0:
            raise ArchiveIOError(f"Negative read size {count}", path=self.name)
        try:
            data = self._handle.read(count)
        except (OSError, ValueError) as e:
            raise ArchiveIOError(f"Read of {count} bytes failed: {e}", path=self.name) from e
        if len(data) != count:
            raise ArchiveIOError(
                f"Unexpected end of data: wanted {count} bytes, got {len(data)}",
                path=self.name,
            )
        return data

    def read_u8(self) -> int:
        return self.read_raw(1)[0]

    def read_u16le(self) -> int:
        return _U16.unpack(self.read_raw(2))[0]

    def read_u32le(self) -> int:
        return _U32.unpack(self.read_raw(4))[0]

    def read_string(self, width: int) -> str:
        """
        Read a fixed-width text field.

        Exactly ``width`` bytes are consumed; the text ends at the first NUL.
        """
        raw = self.read_raw(width)
        end = raw.find(b"\x00")
        if end >= 0:
            raw = raw[:end]
        return raw.decode("latin-1")

    def sub_source(self, count: int) -> "ByteSource":
        """Read ``count`` bytes into a new in-memory source."""
        return ByteSource.from_bytes(self.read_raw(count), name=self.name)

    def close(self) -> None:
        self._handle.close()

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def __enter__(self) -> "ByteSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
