import struct


class OutOfBoundsError(Exception):
    """Raised when a fixed-width read falls outside the buffer."""

    def __init__(self, offset: int, width: int, length: int) -> None:
        super().__init__(
            f"Read of {width} byte(s) at offset {offset} exceeds buffer of {length} byte(s)"
        )
        self.offset = offset
        self.width = width
        self.length = length


class ByteCursor:
    """Bounds-checked fixed-width reads at absolute offsets."""

    def __init__(self, data: bytes) -> None:
        self._data = data

    def __len__(self) -> int:
        return len(self._data)

    def _check(self, offset: int, width: int) -> None:
        if offset < 0 or offset + width > len(self._data):
            raise OutOfBoundsError(offset, width, len(self._data))

    def read_u8(self, offset: int) -> int:
        self._check(offset, 1)
        return self._data[offset]

    def read_u32_be(self, offset: int) -> int:
        self._check(offset, 4)
        return struct.unpack_from(">I", self._data, offset)[0]

    def starts_with(self, prefix: bytes) -> bool:
        if len(self._data) < len(prefix):
            return False
        return self._data[: len(prefix)] == prefix
