import asyncio

import pytest

from rpckit.streams import (
    MsgStream,
    QueueReadStream,
    QueueWriteStream,
    SendQueueError,
    StreamPair,
)
from rpckit.tracectx import TraceCtx


def _queue_pair():
    queue = asyncio.Queue()
    return QueueReadStream(queue), QueueWriteStream(queue)


@pytest.mark.asyncio
async def test_queue_round_trip_preserves_order():
    reader, writer = _queue_pair()
    for msg in ["ping", {"ping": 1}, [1, 2]]:
        await writer.send(msg)
    assert [await reader.recv() for _ in range(3)] == ["ping", {"ping": 1}, [1, 2]]


@pytest.mark.asyncio
async def test_shutdown_ends_reader():
    reader, writer = _queue_pair()
    await writer.send("last")
    await writer.shutdown()
    assert await reader.recv() == "last"
    assert await reader.recv() is None
    assert await reader.recv() is None


@pytest.mark.asyncio
async def test_send_after_shutdown_raises():
    _, writer = _queue_pair()
    await writer.shutdown()
    with pytest.raises(SendQueueError):
        await writer.send("late")


@pytest.mark.asyncio
async def test_async_iteration_stops_at_end():
    reader, writer = _queue_pair()
    for msg in ("a", "b", "c"):
        await writer.send(msg)
    await writer.shutdown()
    assert [msg async for msg in reader] == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_map_read_stream():
    reader, writer = _queue_pair()
    mapped = reader.map(lambda m: ("wrapped", m))
    await writer.send(21)
    await writer.shutdown()
    assert await mapped.recv() == ("wrapped", 21)
    assert await mapped.recv() is None


@pytest.mark.asyncio
async def test_map_write_stream_and_shutdown():
    reader, writer = _queue_pair()
    mapped = writer.map(str.upper)
    await mapped.send("ping")
    await mapped.shutdown()
    assert await reader.recv() == "PING"
    assert await reader.recv() is None


@pytest.mark.asyncio
async def test_with_context_extractor_keeps_stream_working():
    reader, writer = _queue_pair()
    extracted = reader.with_context_extractor(lambda m: TraceCtx())
    await writer.send("msg")
    assert await extracted.recv() == "msg"


def test_stream_pair_split_and_unsplit():
    read_half, write_half = object(), object()
    pair = StreamPair(read_half, write_half)
    assert pair.split() == (read_half, write_half)
    assert StreamPair.unsplit(*pair.split()) == pair


def test_msg_stream_is_abstract():
    with pytest.raises(TypeError):
        MsgStream()