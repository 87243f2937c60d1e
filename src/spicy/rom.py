"""In-memory ROM image.

The image starts as CODE_START bytes of fill data (the header and boot code
area, left untouched by this tool) and grows as binaries are written into it.
"""

import logging
from typing import BinaryIO

from .errors import AllocationError, BuildIOError

# Offset of the first byte of game code in the cartridge image
CODE_START = 0x1000


class RomImage:
    """Growable byte buffer initialized with a fill byte."""

    def __init__(self, fill_byte: int = 0x00, size: int = CODE_START):
        """Create a blank image.

        Args:
            fill_byte: Value of every byte not yet written (0x00 - 0xff)
            size: Initial image size in bytes

        Raises:
            AllocationError: If fill_byte is out of range or allocation fails
        """
        if not isinstance(fill_byte, int) or not 0 <= fill_byte <= 0xFF:
            raise AllocationError(f"invalid fill byte: {fill_byte!r} (expected 0x00 - 0xff)")
        if size < 0:
            raise AllocationError(f"invalid image size: {size}")
        self.fill_byte = fill_byte
        try:
            self._data = bytearray([fill_byte]) * size
        except MemoryError as e:
            raise AllocationError(f"could not allocate {size} bytes") from e

    def __len__(self) -> int:
        return len(self._data)

    def read(self, offset: int, length: int) -> bytes:
        return bytes(self._data[offset:offset + length])

    def write_at(self, data: bytes, offset: int) -> int:
        """Write bytes at an absolute offset, growing the image if needed.

        Returns:
            Number of bytes written
        """
        if offset < 0:
            raise BuildIOError(f"invalid ROM offset: {offset}")
        end = offset + len(data)
        if end > len(self._data):
            self._data.extend([self.fill_byte] * (end - len(self._data)))
        self._data[offset:end] = data
        logging.debug(f"Wrote {len(data)} bytes at 0x{offset:x}")
        return len(data)

    def save(self, writer: BinaryIO) -> int:
        """Serialize the image to a binary writer at its current position.

        Returns:
            Number of bytes written
        """
        return writer.write(self._data)
