# rpckit

`rpckit` collects the building blocks of a request/response protocol over
asynchronous byte streams:

- **Message streams** (`rpckit.streams`, `rpckit.json_stream`,
  `rpckit.cbor_stream`): newline-delimited JSON and length-prefixed CBOR on top
  of asyncio reader/writer pairs, plus in-process queue streams and mapping
  adapters.
- **Length prefixes** (`rpckit.varint`): a compact variable-length encoding of
  unsigned 64-bit integers.
- **Mutual TLS** (`rpckit.tls`): `ssl.SSLContext` objects built from a CA
  certificate, a certificate chain and a private key, and helpers that read
  the common name and organization of a peer certificate.
- **Interface definitions** (`rpckit.definition`, `rpckit.attributes`,
  `rpckit.request`): read an interface from a class of method declarations,
  encode calls as externally tagged request values and decode them back.
- **Code generation** (`rpckit.javascript`, `rpckit.pycodegen`): JavaScript
  and Python service dispatchers and client stubs for an interface.
- Small utilities: `rpckit.template`, `rpckit.case_conversion`,
  `rpckit.tracectx`, `rpckit.abortable`.

## Installation

```
pip install rpckit
```

To run the test suite:

```
pip install "rpckit[test]"
pytest
```

## Message streams

`JsonStream` and `CborStream` wrap an asyncio `StreamReader`/`StreamWriter`
pair. `recv()` returns the next message, or `None` when the peer closed the
connection cleanly; a connection closed in the middle of a message raises
`UnexpectedEof`. All stream errors derive from `rpckit.streams.RpcError`.

```python
import asyncio
from rpckit.json_stream import JsonStream


async def echo(reader, writer):
    stream = JsonStream(reader, writer)
    async for msg in stream:
        await stream.send(msg)
    await stream.shutdown()


async def main():
    server = await asyncio.start_server(echo, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    reader, writer = await asyncio.open_connection("127.0.0.1", port)
    client = JsonStream(reader, writer)
    await client.send({"ping": {"i": 123}})
    print(await client.recv())   # {'ping': {'i': 123}}
```

`CborStream(reader, writer, varint=True, decode=None)` frames every CBOR
message with a varint length; `varint=False` uses a 4-byte big-endian length
instead. If a `decode` callable is given and raises on a received value, the
message is reported as `InvalidCborMessage`. `encode_frame(msg, varint)`
returns the bytes of one frame.

Both stream types can be `split()` into read and write halves
(`JsonReadStream`/`JsonWriteStream`, `CborReadStream`/`CborWriteStream`) and
joined again with `unsplit(read, write)`; bytes already buffered move with the
read half. Any read stream has `map(func)` and any write stream `map(func)` to
transform messages on the way through. `QueueReadStream` and
`QueueWriteStream` carry messages over an `asyncio.Queue`; shutting down the
writer makes the reader return `None`, and sending afterwards raises
`SendQueueError`.

## Length prefixes

```python
from rpckit.varint import to_varint, from_varint, varint_len

prefix = to_varint(300)          # b"\xf1<"
assert from_varint(prefix) == 300
assert varint_len(prefix[0]) == 2
```

Values up to 240 take one byte, up to 2287 two bytes, up to 67823 three bytes;
larger values store their big-endian bytes after a length marker.

## Mutual TLS

```python
from rpckit.tls import tls_server_config, tls_client_config

server_ctx = tls_server_config("ca.crt", "server.crt", "server.key")
client_ctx = tls_client_config("ca.crt", "client.crt", "client.key")
```

The server context requires client certificates signed by the CA; the client
context trusts only the CA. Both present the certificate chain followed by the
CA certificate. Unreadable files, missing certificates or keys and rejected
material raise `TlsConfigError`. `read_certs(path)` and `read_key(path)` read
PEM files; `common_name(der)` and `organization(der)` read a certificate's
subject. Subclass `TlsStreamExt` and implement `peer_certificate()` to get
`peer_common_name()`, `peer_organization()` and `peer_org_and_cn()`.

## Interfaces, requests and generated code

```python
from rpckit.attributes import ServiceAttrs
from rpckit.definition import ServiceDefinition
from rpckit.javascript import javascript_stub
from rpckit.pycodegen import python_service
from rpckit.request import request_to_value, value_to_request


class PingPongService:
    async def ping(self, i: int) -> int: ...


definition = ServiceDefinition.from_class(PingPongService)
ping = definition.method("ping")

value = request_to_value(ping, {"i": 123})       # {"ping": {"i": 123}}
method, args = value_to_request(definition, value)

attrs = ServiceAttrs.from_option({"session": True})
print(javascript_stub(attrs, definition))
print(python_service(attrs, definition))
```

A method without arguments is encoded as its bare snake-case name. Invalid
request values raise `RequestDecodeError`; a class that cannot serve as an
interface raises `DefinitionError`. `Attributes.from_options(...)` and
`ServiceAttrs.from_option(...)` accept the interface options (`msg_type`,
`err_type`, `proto_type`, `service`, `stub`, `log_errors`; and `session`,
`shutdown`, `extra_args` such as `"session: TestSession"`, `javascript`,
`python`, `lock_debug_task_names`) and raise `AttributeError_` for unknown or
malformed ones. Generated code appends an underscore to names reserved in the
target language.

## Utilities

- `Template.parse(text).fill(variables)` substitutes `{{name}}` placeholders;
  a placeholder alone on its line repeats the line's indentation and trailing
  whitespace for each line of its value. A missing variable raises
  `TemplateError`.
- `pascal_case("test_method")` gives `"TestMethod"`, `snake_case("TestMethod")`
  gives `"test_method"`.
- `TraceCtx` holds optional propagation headers; `set_parent()` makes it the
  current task's context and `TraceCtx.current()` reads it back.
- `abortable(event, awaitable)` returns the awaitable's result, or `None` if
  the event is set first; `abortable_sleep(event, seconds)` returns whether
  the full time passed.

## What it does not do

`rpckit` does not contain a service runtime: there is no handler object that
dispatches decoded requests to an implementation, no client stub that performs
calls over a connection, and no ready-made server or client with connection
management, sessions or shutdown. The pieces above — streams, TLS contexts and
request encoding — are meant to be put together by the application.