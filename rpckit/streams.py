"""Message stream abstractions shared by all transports."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from typing import Any, Optional

from .tracectx import TraceCtx

_CLOSED = object()


class RpcError(Exception):
    """Base class of all errors raised by the RPC layer."""


class UnexpectedEof(RpcError):
    """The peer closed the connection in the middle of a message."""


class SendQueueError(RpcError):
    """A message was sent on a closed in-process queue."""


class Protocol:
    """Marker base class naming the request/response protocol of a service."""

    __slots__ = ()


@dataclass
class StreamPair:
    """A bidirectional byte connection made of a reader and a writer half."""

    reader: Any
    writer: Any

    def split(self) -> tuple[Any, Any]:
        """Return the read and write halves."""
        return self.reader, self.writer

    @classmethod
    def unsplit(cls, reader: Any, writer: Any) -> StreamPair:
        """Join a read and a write half back into one connection."""
        return cls(reader, writer)


class MsgReadStream(ABC):
    """A source of decoded messages; ``recv`` returns None at end of stream."""

    @abstractmethod
    async def recv(self) -> Optional[Any]:
        """Receive the next message, or None when the stream has ended."""

    def with_context_extractor(
        self, extractor: Callable[[Any], Optional[TraceCtx]]
    ) -> MsgReadStream:
        """Return a stream that uses ``extractor`` for trace contexts."""
        return self

    def map(self, func: Callable[[Any], Any]) -> MapReadStream:
        """Return a stream that applies ``func`` to every received message."""
        return MapReadStream(self, func)

    async def __aiter__(self) -> AsyncIterator[Any]:
        while (msg := await self.recv()) is not None:
            yield msg


class MsgWriteStream(ABC):
    """A sink for messages."""

    @abstractmethod
    async def send(self, msg: Any) -> None:
        """Send one message."""

    @abstractmethod
    async def shutdown(self) -> None:
        """Close the sending side."""

    def map(self, func: Callable[[Any], Any]) -> MapWriteStream:
        """Return a sink that applies ``func`` to every message before sending."""
        return MapWriteStream(self, func)


class MsgStream(MsgReadStream, MsgWriteStream):
    """A bidirectional message stream that can be split into halves."""

    @abstractmethod
    def split(self) -> tuple[MsgReadStream, MsgWriteStream]:
        """Split into independent read and write halves."""

    @classmethod
    @abstractmethod
    def unsplit(cls, read: MsgReadStream, write: MsgWriteStream) -> MsgStream:
        """Rejoin halves produced by ``split``."""


class MapReadStream(MsgReadStream):
    """A read stream transforming every message of an inner stream."""

    def __init__(self, inner: MsgReadStream, func: Callable[[Any], Any]) -> None:
        self.inner = inner
        self.func = func

    async def recv(self) -> Optional[Any]:
        msg = await self.inner.recv()
        return None if msg is None else self.func(msg)


class MapWriteStream(MsgWriteStream):
    """A write stream transforming every message before passing it on."""

    def __init__(self, inner: MsgWriteStream, func: Callable[[Any], Any]) -> None:
        self.inner = inner
        self.func = func

    async def send(self, msg: Any) -> None:
        await self.inner.send(self.func(msg))

    async def shutdown(self) -> None:
        await self.inner.shutdown()


class QueueReadStream(MsgReadStream):
    """Receiving end of an in-process message queue."""

    def __init__(self, queue: asyncio.Queue) -> None:
        self.queue = queue
        self._closed = False

    async def recv(self) -> Optional[Any]:
        if self._closed:
            return None
        msg = await self.queue.get()
        if msg is _CLOSED:
            self._closed = True
            return None
        return msg


class QueueWriteStream(MsgWriteStream):
    """Sending end of an in-process message queue; shutdown ends the receiver."""

    def __init__(self, queue: asyncio.Queue) -> None:
        self.queue = queue
        self._closed = False

    async def send(self, msg: Any) -> None:
        if self._closed:
            raise SendQueueError("failed to send on closed queue")
        await self.queue.put(msg)

    async def shutdown(self) -> None:
        if not self._closed:
            self._closed = True
            await self.queue.put(_CLOSED)