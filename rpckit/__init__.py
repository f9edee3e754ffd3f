"""Asynchronous RPC building blocks: message streams, TLS helpers, request encoding and code generation."""

__version__ = "0.1.0"