"""Big-endian primitive reader over a (possibly gzip-wrapped) byte stream."""

from __future__ import annotations

import gzip
import io
import logging
import os
import struct
import zlib
from typing import BinaryIO, Union

from graphdump.core.exceptions import DecodeError, TruncatedStream

logger = logging.getLogger(__name__)

Source = Union[str, os.PathLike, bytes, bytearray, BinaryIO]

GZIP_MAGIC = b"\x1f\x8b"

_SKIP_CHUNK = 64 * 1024

_SINT8 = struct.Struct(">b")
_UINT8 = struct.Struct(">B")
_SINT16 = struct.Struct(">h")
_UINT16 = struct.Struct(">H")
_SINT32 = struct.Struct(">i")
_SINT64 = struct.Struct(">q")
_FLOAT32 = struct.Struct(">f")
_FLOAT64 = struct.Struct(">d")


def open_stream(source: Source) -> tuple[BinaryIO, BinaryIO]:
    """Open a byte source for reading, decompressing gzip transparently.

    ``source`` may be a path, raw bytes, or an open binary file object. The
    gzip magic is detected by peeking, so non-seekable streams work too.
    Returns the stream to read from and the underlying stream to close.
    """
    if isinstance(source, (bytes, bytearray)):
        raw: BinaryIO = io.BytesIO(bytes(source))
    elif isinstance(source, (str, os.PathLike)):
        raw = open(source, "rb")
    else:
        raw = source

    if hasattr(raw, "peek"):
        buffered = raw
    else:
        buffered = io.BufferedReader(raw)  # type: ignore[arg-type,assignment]
    head = buffered.peek(len(GZIP_MAGIC))[: len(GZIP_MAGIC)]  # type: ignore[attr-defined]
    if head == GZIP_MAGIC:
        logger.debug("Detected gzip-compressed stream")
        return gzip.GzipFile(fileobj=buffered, mode="rb"), buffered  # type: ignore[return-value]
    return buffered, buffered


class BinaryReader:
    """Reads fixed-width big-endian values and tracks the byte offset.

    The offset counts bytes of the decompressed stream. A short read raises
    TruncatedStream; there is no partial result.
    """

    def __init__(self, source: Source) -> None:
        self._stream, self._raw = open_stream(source)
        self._source = source
        self._owns = not hasattr(source, "read")
        self.offset = 0
        self._closed = False

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._stream is not self._raw:
            self._stream.close()
        if self._owns:
            self._raw.close()
        elif self._raw is not self._source:
            # Release our buffer without closing the caller's stream.
            self._raw.detach()  # type: ignore[attr-defined]

    def __enter__(self) -> BinaryReader:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def read_bytes(self, count: int) -> bytes:
        if count < 0:
            raise TruncatedStream(f"Negative length {count}", self.offset)
        try:
            data = self._stream.read(count)
        except (OSError, EOFError, zlib.error) as e:
            raise TruncatedStream(f"Cannot read {count} bytes: {e}", self.offset) from e
        if len(data) != count:
            raise TruncatedStream(
                f"Expected {count} bytes, stream ended after {len(data)}", self.offset
            )
        self.offset += count
        return data

    def skip(self, count: int) -> None:
        """Skip ``count`` bytes in bounded chunks, never buffering them all."""
        while count > 0:
            chunk = min(count, _SKIP_CHUNK)
            self.read_bytes(chunk)
            count -= chunk

    def at_end(self) -> bool:
        """True when no bytes remain."""
        try:
            if hasattr(self._stream, "peek"):
                return not self._stream.peek(1)  # type: ignore[attr-defined]
        except (OSError, EOFError, zlib.error) as e:
            raise TruncatedStream(f"Cannot read stream: {e}", self.offset) from e
        return False

    def _unpack(self, fmt: struct.Struct) -> int | float:
        return fmt.unpack(self.read_bytes(fmt.size))[0]

    def read_sint8(self) -> int:
        return int(self._unpack(_SINT8))

    def read_uint8(self) -> int:
        return int(self._unpack(_UINT8))

    def read_sint16(self) -> int:
        return int(self._unpack(_SINT16))

    def read_uint16(self) -> int:
        return int(self._unpack(_UINT16))

    def read_sint32(self) -> int:
        return int(self._unpack(_SINT32))

    def read_sint64(self) -> int:
        return int(self._unpack(_SINT64))

    def read_float32(self) -> float:
        return float(self._unpack(_FLOAT32))

    def read_float64(self) -> float:
        return float(self._unpack(_FLOAT64))

    def read_bool(self) -> bool:
        return self.read_uint8() != 0

    def read_utf8(self, length: int) -> str:
        offset = self.offset
        data = self.read_bytes(length)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Invalid UTF-8 string: {e}", offset) from e
