"""Forward-only cursor over contract state bytes, plus the matching writer."""

from typing import Callable, List, Optional, Tuple, TypeVar

from construct import BytesInteger, ConstructError, Int8ul, Int32ul, Int64ul

T = TypeVar("T")

U128 = BytesInteger(16, swapped=True)


class DecodeError(ValueError):
    """Raised when state bytes are malformed or truncated."""

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} (offset {offset})")
        self.offset = offset


class UnexpectedEndError(DecodeError):
    """Raised when fewer bytes remain than the next value needs."""


class InvalidTagError(DecodeError):
    """Raised when a tag byte matches none of the expected variants."""

    def __init__(self, tag: int, offset: int) -> None:
        super().__init__(f"Invalid tag {tag}", offset)
        self.tag = tag


class InvalidUtf8Error(DecodeError):
    """Raised when a length-prefixed string is not valid UTF-8."""


class EncodeError(ValueError):
    """Raised when a value does not fit its wire encoding."""


class BinaryReader:
    """Reads little-endian primitives and advances the cursor.

    The cursor never moves backwards. A failed read leaves the cursor where
    the failing value started, so ``offset`` on the raised error points at it.
    """

    def __init__(self, data: bytes, offset: int = 0) -> None:
        self._data = bytes(data)
        self._offset = offset

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def read_u8(self) -> int:
        return self._read_int(Int8ul, 1)

    def read_u32(self) -> int:
        return self._read_int(Int32ul, 4)

    def read_u64(self) -> int:
        return self._read_int(Int64ul, 8)

    def read_u128(self) -> int:
        return self._read_int(U128, 16)

    def read_fixed_bytes(self, length: int) -> bytes:
        return self._take(length)

    def read_string(self) -> str:
        start = self._offset
        length = self.read_u32()
        raw = self._take(length, start=start)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            self._offset = start
            raise InvalidUtf8Error("String is not valid UTF-8", start) from exc

    def read_option(self, read_value: Callable[[], T]) -> Optional[T]:
        start = self._offset
        flag = self.read_u8()
        if flag == 0:
            return None
        if flag == 1:
            return read_value()
        self._offset = start
        raise InvalidTagError(flag, start)

    def read_array(self, read_item: Callable[[], T]) -> Tuple[T, ...]:
        count = self.read_u32()
        items: List[T] = []
        for _ in range(count):
            items.append(read_item())
        return tuple(items)

    def _read_int(self, fmt, width: int) -> int:
        raw = self._take(width)
        return fmt.parse(raw)

    def _take(self, length: int, start: Optional[int] = None) -> bytes:
        if length > self.remaining:
            offset = self._offset if start is None else start
            self._offset = offset
            raise UnexpectedEndError(
                f"Needed {length} bytes, {self.remaining} remain", offset
            )
        chunk = self._data[self._offset : self._offset + length]
        self._offset += length
        return chunk


class BinaryWriter:
    """Builds the same wire format ``BinaryReader`` consumes."""

    def __init__(self) -> None:
        self._chunks: List[bytes] = []

    def write_u8(self, value: int) -> "BinaryWriter":
        return self._write_int(Int8ul, value)

    def write_u32(self, value: int) -> "BinaryWriter":
        return self._write_int(Int32ul, value)

    def write_u64(self, value: int) -> "BinaryWriter":
        return self._write_int(Int64ul, value)

    def write_u128(self, value: int) -> "BinaryWriter":
        return self._write_int(U128, value)

    def write_fixed_bytes(self, value: bytes, length: int) -> "BinaryWriter":
        if len(value) != length:
            raise EncodeError(f"Expected {length} bytes, got {len(value)}.")
        self._chunks.append(bytes(value))
        return self

    def write_string(self, value: str) -> "BinaryWriter":
        encoded = value.encode("utf-8")
        self.write_u32(len(encoded))
        self._chunks.append(encoded)
        return self

    def write_option(
        self, value: Optional[T], write_value: Callable[[T], object]
    ) -> "BinaryWriter":
        if value is None:
            return self.write_u8(0)
        self.write_u8(1)
        write_value(value)
        return self

    def to_bytes(self) -> bytes:
        return b"".join(self._chunks)

    def _write_int(self, fmt, value: int) -> "BinaryWriter":
        if value < 0:
            raise EncodeError("Unsigned integers must be non-negative.")
        try:
            self._chunks.append(fmt.build(value))
        except ConstructError as exc:
            raise EncodeError(f"Value {value} does not fit its encoding.") from exc
        return self
