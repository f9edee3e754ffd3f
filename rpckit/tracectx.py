"""Trace context carried alongside requests."""

from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Any, Optional

_parent: ContextVar[Optional[dict[str, str]]] = ContextVar("rpckit_trace_parent", default=None)


@dataclass
class TraceCtx:
    """A propagated trace context: absent, or a map of string headers."""

    context: Optional[dict[str, str]] = None

    @classmethod
    def current(cls) -> TraceCtx:
        """Return the context in effect for the current task; empty when none was set."""
        parent = _parent.get()
        return cls(None if parent is None else dict(parent))

    def set_parent(self) -> Token:
        """Make this context the one in effect for the current task.

        Returns the token that restores the previous context when passed
        to the underlying context variable's ``reset``.
        """
        return _parent.set(None if self.context is None else dict(self.context))

    def set(self, key: str, value: str) -> None:
        """Store a propagation header."""
        if self.context is None:
            self.context = {}
        self.context[key] = value

    def get(self, key: str) -> Optional[str]:
        """Return a propagation header, or None."""
        if self.context is None:
            return None
        return self.context.get(key)

    def keys(self) -> list[str]:
        """Return the names of all propagation headers."""
        return [] if self.context is None else list(self.context)

    def to_wire(self) -> Optional[dict[str, str]]:
        """Return the serialisable form: None or a dict of strings."""
        return None if self.context is None else dict(self.context)

    @classmethod
    def from_wire(cls, value: Any) -> TraceCtx:
        """Build a context from its serialised form."""
        if value is None:
            return cls()
        if not isinstance(value, dict):
            raise TypeError(f"trace context must be an object or null, not {type(value).__name__}")
        for key, item in value.items():
            if not isinstance(key, str) or not isinstance(item, str):
                raise TypeError("trace context entries must map strings to strings")
        return cls(dict(value))