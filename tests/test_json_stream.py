import asyncio
import socket

import pytest

from rpckit.json_stream import JsonReadStream, JsonStream, JsonWriteStream
from rpckit.streams import RpcError, UnexpectedEof
from rpckit.tracectx import TraceCtx


class _Sink:
    def __init__(self):
        self.data = bytearray()
        self.eof = False
        self.closed = False

    def write(self, chunk):
        self.data.extend(chunk)

    async def drain(self):
        pass

    def can_write_eof(self):
        return True

    def write_eof(self):
        self.eof = True

    def close(self):
        self.closed = True

    async def wait_closed(self):
        pass


class _NoEofSink(_Sink):
    def can_write_eof(self):
        return False


class _ChunkReader:
    def __init__(self, data, size=1):
        self._chunks = [data[i : i + size] for i in range(0, len(data), size)]

    async def read(self, n):
        return self._chunks.pop(0) if self._chunks else b""


def _reader(data):
    reader = asyncio.StreamReader()
    reader.feed_data(data)
    reader.feed_eof()
    return reader


def _extract(msg):
    return TraceCtx({"traceparent": str(msg)})


@pytest.mark.asyncio
async def test_send_writes_compact_line():
    sink = _Sink()
    await JsonWriteStream(sink).send({"a": 1})
    assert bytes(sink.data) == b'{"a":1}\n'


@pytest.mark.asyncio
async def test_send_keeps_non_ascii_as_utf8():
    sink = _Sink()
    await JsonWriteStream(sink).send("café")
    assert "café".encode("utf-8") in bytes(sink.data)


@pytest.mark.asyncio
async def test_send_nan_raises():
    with pytest.raises(RpcError):
        await JsonWriteStream(_Sink()).send(float("nan"))


@pytest.mark.asyncio
async def test_round_trip_through_bytes():
    sink = _Sink()
    writer = JsonStream(_reader(b""), sink)
    messages = [{"ping": 1}, [1, "two", None, True], "line\nbreak", 3.5]
    for msg in messages:
        await writer.send(msg)
    reader = JsonStream(_reader(bytes(sink.data)), _Sink())
    assert [await reader.recv() for _ in messages] == messages
    assert await reader.recv() is None


@pytest.mark.asyncio
async def test_byte_at_a_time_reads():
    stream = JsonReadStream(_ChunkReader(b'{"x":[1,2]}\n"y"\n'))
    assert await stream.recv() == {"x": [1, 2]}
    assert await stream.recv() == "y"
    assert await stream.recv() is None


@pytest.mark.asyncio
async def test_partial_line_at_eof_raises():
    stream = JsonReadStream(_reader(b'{"a":1}'))
    with pytest.raises(UnexpectedEof):
        await stream.recv()


@pytest.mark.asyncio
async def test_invalid_line_raises_and_stream_continues():
    stream = JsonReadStream(_reader(b"not json\n[1]\n"))
    with pytest.raises(RpcError):
        await stream.recv()
    assert await stream.recv() == [1]


@pytest.mark.asyncio
async def test_empty_line_is_an_error():
    stream = JsonReadStream(_reader(b"\n"))
    with pytest.raises(RpcError):
        await stream.recv()


@pytest.mark.asyncio
async def test_split_and_unsplit_keep_buffer_and_context():
    sink = _Sink()
    stream = JsonStream(_reader(b"1\n2\n3\n"), sink, _extract)
    assert await stream.recv() == 1
    read, write = stream.split()
    assert read.ctx is _extract
    assert await read.recv() == 2
    await write.send(9)
    joined = JsonStream.unsplit(read, write)
    assert joined.ctx is _extract
    assert joined.writer is sink
    assert await joined.recv() == 3
    assert await joined.recv() is None


@pytest.mark.asyncio
async def test_with_context_extractor_preserves_buffer():
    stream = JsonStream(_reader(b"1\n2\n"), _Sink())
    assert await stream.recv() == 1
    traced = stream.with_context_extractor(_extract)
    assert traced.ctx is _extract
    assert traced.ctx(5).get("traceparent") == "5"
    assert await traced.recv() == 2


@pytest.mark.asyncio
async def test_read_half_with_context_extractor_preserves_buffer():
    read, _ = JsonStream(_reader(b"1\n2\n"), _Sink()).split()
    assert await read.recv() == 1
    traced = read.with_context_extractor(_extract)
    assert traced.ctx is _extract
    assert await traced.recv() == 2


@pytest.mark.asyncio
async def test_shutdown_uses_eof_or_close():
    sink = _Sink()
    await JsonWriteStream(sink).shutdown()
    assert sink.eof is True
    closing = _NoEofSink()
    await JsonStream(_reader(b""), closing).shutdown()
    assert closing.closed is True
    assert closing.eof is False


@pytest.mark.asyncio
async def test_socket_pair_round_trip_and_shutdown():
    left, right = socket.socketpair()
    r1, w1 = await asyncio.open_connection(sock=left)
    r2, w2 = await asyncio.open_connection(sock=right)
    try:
        client = JsonStream(r1, w1)
        server = JsonStream(r2, w2)
        for i in range(50):
            await client.send({"ping": i})
            request = await server.recv()
            await server.send({"pong": request["ping"]})
            assert await client.recv() == {"pong": i}
        await client.shutdown()
        assert await server.recv() is None
    finally:
        w1.close()
        w2.close()