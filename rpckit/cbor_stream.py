"""Length-prefixed CBOR message streams."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Optional

import cbor2

from .streams import MsgReadStream, MsgStream, MsgWriteStream, RpcError, UnexpectedEof
from .varint import from_varint, to_varint, varint_len

_READ_SIZE = 65536
_MAX_U32 = 0xFFFFFFFF

Decoder = Callable[[Any], Any]


class InvalidCborMessage(RpcError):
    """A well-formed CBOR message that does not have the expected shape."""

    def __init__(self, value: Any) -> None:
        super().__init__(f"invalid CBOR message: {value!r}")
        self.value = value


def encode_frame(msg: Any, varint: bool = True) -> bytes:
    """Encode ``msg`` as CBOR preceded by its length (varint or 4-byte big endian)."""
    try:
        body = cbor2.dumps(msg)
    except (TypeError, ValueError) as exc:
        raise RpcError(f"failed to encode CBOR message: {exc}") from exc
    if varint:
        prefix = to_varint(len(body))
    else:
        if len(body) > _MAX_U32:
            raise RpcError(f"message too large for 32-bit length: {len(body)} bytes")
        prefix = len(body).to_bytes(4, "big")
    return prefix + body


class _FrameBuffer:
    """Received bytes not yet consumed as complete frames."""

    def __init__(self, varint: bool) -> None:
        self.varint = varint
        self.data = bytearray()

    def take_frame(self) -> Optional[bytes]:
        if not self.data:
            return None
        prefix_len = varint_len(self.data[0]) if self.varint else 4
        if len(self.data) < prefix_len:
            return None
        if self.varint:
            length = from_varint(self.data)
        else:
            length = int.from_bytes(self.data[:4], "big")
        end = prefix_len + length
        if len(self.data) < end:
            return None
        body = bytes(self.data[prefix_len:end])
        del self.data[:end]
        return body

    async def recv(self, reader: Any, decode: Optional[Decoder]) -> Optional[Any]:
        while True:
            body = self.take_frame()
            if body is not None:
                return _decode(body, decode)
            chunk = await reader.read(_READ_SIZE)
            if not chunk:
                if self.data:
                    raise UnexpectedEof("connection closed in the middle of a message")
                return None
            self.data.extend(chunk)


def _decode(body: bytes, decode: Optional[Decoder]) -> Any:
    try:
        value = cbor2.loads(body)
    except cbor2.CBORDecodeError as exc:
        raise RpcError(f"failed to decode CBOR message: {exc}") from exc
    if decode is None:
        return value
    try:
        return decode(value)
    except Exception as exc:
        raise InvalidCborMessage(value) from exc


async def _send(writer: Any, msg: Any, varint: bool) -> None:
    writer.write(encode_frame(msg, varint))
    await writer.drain()


async def _shutdown_writer(writer: Any) -> None:
    can_write_eof = getattr(writer, "can_write_eof", None)
    if can_write_eof is not None and can_write_eof():
        writer.write_eof()
        await writer.drain()
        return
    writer.close()
    wait_closed = getattr(writer, "wait_closed", None)
    if wait_closed is not None:
        await wait_closed()


class CborReadStream(MsgReadStream):
    """Read half of a CBOR stream."""

    def __init__(
        self,
        reader: Any,
        *,
        varint: bool = True,
        decode: Optional[Decoder] = None,
        buffer: Optional[_FrameBuffer] = None,
    ) -> None:
        self.reader = reader
        self.decode = decode
        self._buffer = buffer if buffer is not None else _FrameBuffer(varint)

    @property
    def varint(self) -> bool:
        return self._buffer.varint

    async def recv(self) -> Optional[Any]:
        return await self._buffer.recv(self.reader, self.decode)


class CborWriteStream(MsgWriteStream):
    """Write half of a CBOR stream."""

    def __init__(self, writer: Any, *, varint: bool = True) -> None:
        self.writer = writer
        self.varint = varint

    async def send(self, msg: Any) -> None:
        await _send(self.writer, msg, self.varint)

    async def shutdown(self) -> None:
        await _shutdown_writer(self.writer)


class CborStream(MsgStream):
    """Bidirectional stream of length-prefixed CBOR messages.

    ``varint=False`` selects the older 4-byte big-endian length prefix.
    ``decode`` is applied to each received value; if it raises, the message
    is reported as :class:`InvalidCborMessage`.
    """

    def __init__(
        self,
        reader: Any,
        writer: Any,
        *,
        varint: bool = True,
        decode: Optional[Decoder] = None,
    ) -> None:
        self.reader = reader
        self.writer = writer
        self.decode = decode
        self._buffer = _FrameBuffer(varint)

    @property
    def varint(self) -> bool:
        return self._buffer.varint

    async def recv(self) -> Optional[Any]:
        return await self._buffer.recv(self.reader, self.decode)

    async def send(self, msg: Any) -> None:
        await _send(self.writer, msg, self.varint)

    async def shutdown(self) -> None:
        await _shutdown_writer(self.writer)

    def split(self) -> tuple[CborReadStream, CborWriteStream]:
        read = CborReadStream(self.reader, decode=self.decode, buffer=self._buffer)
        write = CborWriteStream(self.writer, varint=self.varint)
        return read, write

    @classmethod
    def unsplit(cls, read: CborReadStream, write: CborWriteStream) -> CborStream:
        stream = cls(read.reader, write.writer, varint=read.varint, decode=read.decode)
        stream._buffer = read._buffer
        return stream