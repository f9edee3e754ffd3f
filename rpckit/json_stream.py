"""Newline-delimited JSON message streams."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any, Optional

from .streams import MsgReadStream, MsgStream, MsgWriteStream, RpcError, UnexpectedEof
from .tracectx import TraceCtx

_READ_SIZE = 65536

ContextExtractor = Callable[[Any], Optional[TraceCtx]]


class _LineBuffer:
    """Received bytes not yet consumed as complete lines."""

    def __init__(self) -> None:
        self.data = bytearray()
        self.seek_pos = 0

    async def recv(self, reader: Any) -> Optional[Any]:
        while True:
            index = self.data.find(b"\n", self.seek_pos)
            if index >= 0:
                line = bytes(self.data[:index])
                self.seek_pos = 0
                del self.data[: index + 1]
                return _decode(line)
            self.seek_pos = len(self.data)
            chunk = await reader.read(_READ_SIZE)
            if not chunk:
                if self.data:
                    raise UnexpectedEof("connection closed in the middle of a message")
                return None
            self.data.extend(chunk)


def _decode(line: bytes) -> Any:
    try:
        return json.loads(line)
    except ValueError as exc:
        raise RpcError(f"failed to decode JSON message: {exc}") from exc


def _encode(msg: Any) -> bytes:
    try:
        text = json.dumps(msg, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise RpcError(f"failed to encode JSON message: {exc}") from exc
    return text.encode("utf-8") + b"\n"


async def _send(writer: Any, msg: Any) -> None:
    writer.write(_encode(msg))
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


class JsonReadStream(MsgReadStream):
    """Read half of a JSON stream."""

    def __init__(
        self,
        reader: Any,
        ctx: Optional[ContextExtractor] = None,
        *,
        buffer: Optional[_LineBuffer] = None,
    ) -> None:
        self.reader = reader
        self.ctx = ctx
        self._buffer = buffer if buffer is not None else _LineBuffer()

    async def recv(self) -> Optional[Any]:
        return await self._buffer.recv(self.reader)

    def with_context_extractor(self, extractor: ContextExtractor) -> JsonReadStream:
        return JsonReadStream(self.reader, extractor, buffer=self._buffer)


class JsonWriteStream(MsgWriteStream):
    """Write half of a JSON stream."""

    def __init__(self, writer: Any) -> None:
        self.writer = writer

    async def send(self, msg: Any) -> None:
        await _send(self.writer, msg)

    async def shutdown(self) -> None:
        await _shutdown_writer(self.writer)


class JsonStream(MsgStream):
    """Bidirectional stream of JSON messages, one per line."""

    def __init__(
        self,
        reader: Any,
        writer: Any,
        ctx: Optional[ContextExtractor] = None,
    ) -> None:
        self.reader = reader
        self.writer = writer
        self.ctx = ctx
        self._buffer = _LineBuffer()

    async def recv(self) -> Optional[Any]:
        return await self._buffer.recv(self.reader)

    async def send(self, msg: Any) -> None:
        await _send(self.writer, msg)

    async def shutdown(self) -> None:
        await _shutdown_writer(self.writer)

    def split(self) -> tuple[JsonReadStream, JsonWriteStream]:
        return (
            JsonReadStream(self.reader, self.ctx, buffer=self._buffer),
            JsonWriteStream(self.writer),
        )

    @classmethod
    def unsplit(cls, read: JsonReadStream, write: JsonWriteStream) -> JsonStream:
        stream = cls(read.reader, write.writer, read.ctx)
        stream._buffer = read._buffer
        return stream

    def with_context_extractor(self, extractor: ContextExtractor) -> JsonStream:
        stream = JsonStream(self.reader, self.writer, extractor)
        stream._buffer = self._buffer
        return stream