"""Bounds-checked byte reader and LEB128 decoding."""

from .errors import (
    IntegerOverflowError,
    InvalidNameError,
    UnexpectedEndOfInputError,
)


class BinaryReader:
    """A reader for binary data with position tracking.

    The reader never reads outside ``[position, end)``. Positions are absolute
    offsets into ``data``, so a reader framed on a section reports errors
    relative to the whole module. A failed read leaves the position where it
    was; the reader should be abandoned afterwards.
    """

    def __init__(self, data: bytes, position: int = 0, end: int | None = None) -> None:
        self.data = data
        self.position = position
        self.end = len(data) if end is None else end

    def read_byte(self) -> int:
        """Read a single byte."""
        if self.position >= self.end:
            raise UnexpectedEndOfInputError(
                "Unexpected end of data", offset=self.position
            )
        byte = self.data[self.position]
        self.position += 1
        return byte

    def read_bytes(self, n: int) -> bytes:
        """Read n bytes."""
        if self.position + n > self.end:
            raise UnexpectedEndOfInputError(
                f"Unexpected end of data: wanted {n} bytes, "
                f"{self.remaining()} available",
                offset=self.position,
            )
        result = self.data[self.position : self.position + n]
        self.position += n
        return result

    def sub_reader(self, n: int) -> "BinaryReader":
        """Split off a reader for the next n bytes and skip past them."""
        if self.position + n > self.end:
            raise UnexpectedEndOfInputError(
                f"Unexpected end of data: wanted {n} bytes, "
                f"{self.remaining()} available",
                offset=self.position,
            )
        sub = BinaryReader(self.data, self.position, self.position + n)
        self.position += n
        return sub

    def eof(self) -> bool:
        """Check if at end of data."""
        return self.position >= self.end

    def remaining(self) -> int:
        """Return number of remaining bytes."""
        return self.end - self.position


def decode_unsigned_leb128(reader: BinaryReader) -> int:
    """Decode an unsigned 32-bit LEB128 integer."""
    start = reader.position
    result = 0
    shift = 0
    while True:
        byte = reader.read_byte()
        if shift == 28 and byte & 0x70:
            # Fifth byte may only carry the top four bits of a u32
            raise IntegerOverflowError("LEB128 integer exceeds 32 bits", offset=start)
        result |= (byte & 0x7F) << shift
        if (byte & 0x80) == 0:
            break
        shift += 7
        if shift > 31:
            raise IntegerOverflowError("LEB128 integer too long", offset=start)
    return result


def decode_name(reader: BinaryReader) -> str:
    """Decode a UTF-8 name (length-prefixed byte vector)."""
    length = decode_unsigned_leb128(reader)
    start = reader.position
    data = reader.read_bytes(length)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidNameError(f"Invalid UTF-8 in name: {e}", offset=start) from e
