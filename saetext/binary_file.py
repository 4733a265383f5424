"""
Image access for the text extractor and patcher.

Everything the engines need from the ROM: sized reads that fail on a
truncated image, 4-byte little-endian pointers, and bounds checks on pointer
targets and on the free region.
"""
import os
import struct
import warnings
from io import BytesIO
from typing import Optional, IO


class InvalidPointerError(ValueError):
    """Raised when a pointer or region falls outside the image."""
    pass


class BinaryFile:
    """ROM image opened for extraction ("rb") or patching ("r+b")."""

    def __init__(self, file_path: Optional[str] = None, mode: str = "rb"):
        """
        :param file_path: Image path, None when wrapping bytes with from_bytes
        :param mode: "rb" to extract, "r+b" to patch in place
        """
        if file_path is not None and mode not in ("rb", "r+b"):
            warnings.warn(f"Mode '{mode}' is not advised for a ROM image")
        self.file_path = file_path
        self.mode = mode
        self.file: Optional[IO[bytes]] = None
        self._size = 0

    def __enter__(self):
        """Open the image; its size is measured once for bounds checks."""
        if self.file is None:
            self.file = open(self.file_path, self.mode)
            self._size = self.file.seek(0, os.SEEK_END)
            self.file.seek(0)
        return self

    def __exit__(self, *args):
        # In-memory images stay readable after the block
        if self.file_path is not None:
            self.file.close()

    @property
    def size(self) -> int:
        return self._size

    def read(self, num_bytes: int) -> bytes:
        """Read up to num_bytes bytes; shorter at end of file."""
        return self.file.read(num_bytes)

    def read_exact(self, num_bytes: int) -> bytes:
        """
        Read exactly num_bytes bytes.

        :raises InvalidPointerError: If the image ends first
        """
        start = self.file.tell()
        data = self.file.read(num_bytes)
        if len(data) != num_bytes:
            raise InvalidPointerError(
                f"Unexpected end of file at 0x{start:x}: wanted {num_bytes} "
                f"bytes, got {len(data)}"
            )
        return data

    def read_int(self) -> int:
        """Read a 4-byte little-endian pointer."""
        return struct.unpack("<I", self.read_exact(4))[0]

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> None:
        self.file.seek(offset, whence)

    def tell(self) -> int:
        return self.file.tell()

    def write(self, value: bytes) -> None:
        self.file.write(value)

    def write_int(self, value: int) -> None:
        """Write a 4-byte little-endian pointer."""
        self.file.write(struct.pack("<I", value))

    def validate_offset(self, offset: int, context: str = "") -> None:
        """
        Check that a pointer target lies inside the image.

        :raises InvalidPointerError: If it does not
        """
        if not 0 <= offset < self._size:
            ctx = f" ({context})" if context else ""
            raise InvalidPointerError(
                f"Pointer offset 0x{offset:x} is outside the image "
                f"(0x0 - 0x{self._size - 1:x}){ctx}"
            )

    def validate_region(self, start: int, end: int, context: str = "") -> None:
        """
        Check that the half-open region [start, end) lies inside the image.

        :raises InvalidPointerError: If any part of it does not
        """
        if start < 0 or end > self._size or end < start:
            ctx = f" ({context})" if context else ""
            raise InvalidPointerError(
                f"Region 0x{start:x}-0x{end:x} does not fit in an image of "
                f"0x{self._size:x} bytes{ctx}"
            )

    @classmethod
    def from_bytes(cls, data: bytes) -> "BinaryFile":
        """
        Wrap a copy of an image held in memory, open for patching.

        Tests use it to patch without touching the disk; ``getvalue()``
        returns the patched image.
        """
        bfile = cls(mode="r+b")
        bfile.file = BytesIO(data)
        bfile._size = len(data)
        return bfile

    def getvalue(self) -> bytes:
        """Content of an in-memory image."""
        return self.file.getvalue()
