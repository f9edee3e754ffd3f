"""Options that select what an RPC interface definition generates."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

_OPEN = "<([{"
_CLOSE = ">)]}"
_SELF_FORMS = {"self", "&self", "&mut self", "mut self"}


class AttributeError_(Exception):
    """Raised when interface options are malformed."""


def _split_top_level(text: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    previous = ""
    for char in text:
        if char in _OPEN:
            depth += 1
        elif char in _CLOSE and not (char == ">" and previous == "-"):
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
        previous = char
    parts.append("".join(current))
    return parts


@dataclass(frozen=True)
class ExtraArgs:
    """Additional arguments passed to every handler method."""

    names: tuple[str, ...]
    types: tuple[str, ...]
    signature: tuple[str, ...]

    @classmethod
    def parse(cls, text: str) -> ExtraArgs:
        """Parse a non-empty ``name: type, ...`` argument list."""
        parts = [part.strip() for part in _split_top_level(text)]
        if len(parts) > 1 and not parts[-1]:
            parts.pop()
        if not parts or not all(parts):
            raise AttributeError_(f"invalid extra_args: {text!r}")

        names: list[str] = []
        types: list[str] = []
        signature: list[str] = []
        for part in parts:
            if part in _SELF_FORMS:
                raise AttributeError_("extra_args cannot contain self")
            if ":" not in part:
                raise AttributeError_(f"extra_args argument needs a type: {part!r}")
            pattern, arg_type = (piece.strip() for piece in part.split(":", 1))
            name = pattern[4:].strip() if pattern.startswith("mut ") else pattern
            if name == "self":
                raise AttributeError_("extra_args cannot contain self")
            if not name.isidentifier() or name == "_":
                raise AttributeError_(
                    "extra_args arguments must have identifiers, not patterns"
                )
            if not arg_type:
                raise AttributeError_(f"extra_args argument needs a type: {part!r}")
            names.append(name)
            types.append(arg_type)
            signature.append(f"{pattern}: {arg_type}")
        return cls(tuple(names), tuple(types), tuple(signature))


@dataclass(frozen=True)
class JsAttrs:
    """Options for generated JavaScript code."""

    req_method: Optional[str] = None


@dataclass(frozen=True)
class PyAttrs:
    """Options for generated Python code."""


def _check_keys(options: Mapping[str, Any], allowed: set[str], where: str) -> None:
    unknown = sorted(set(options) - allowed)
    if unknown:
        raise AttributeError_(f"unknown {where} option(s): {', '.join(unknown)}")


def _flag(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise AttributeError_(f"option '{name}' must be a boolean")
    return value


def _opt_str(name: str, value: Any) -> Optional[str]:
    if value is not None and not isinstance(value, str):
        raise AttributeError_(f"option '{name}' must be a string")
    return value


def _js_attrs(value: Any) -> Optional[JsAttrs]:
    if value is None or value is False:
        return None
    if value is True:
        return JsAttrs()
    if isinstance(value, JsAttrs):
        return value
    if isinstance(value, Mapping):
        _check_keys(value, {"req_method"}, "javascript")
        return JsAttrs(_opt_str("req_method", value.get("req_method")))
    raise AttributeError_("option 'javascript' must be a boolean or a mapping")


def _py_attrs(value: Any) -> Optional[PyAttrs]:
    if value is None or value is False:
        return None
    if value is True or isinstance(value, PyAttrs):
        return PyAttrs()
    if isinstance(value, Mapping):
        _check_keys(value, set(), "python")
        return PyAttrs()
    raise AttributeError_("option 'python' must be a boolean or a mapping")


def _extra_args(value: Any) -> Optional[ExtraArgs]:
    if value is None or isinstance(value, ExtraArgs):
        return value
    if isinstance(value, str):
        return ExtraArgs.parse(value)
    raise AttributeError_("option 'extra_args' must be a string")


_SERVICE_KEYS = {
    "session",
    "shutdown",
    "extra_args",
    "javascript",
    "python",
    "lock_debug_task_names",
}


@dataclass(frozen=True)
class ServiceAttrs:
    """Options for a generated service handler or client stub."""

    session: bool = False
    shutdown: bool = False
    extra_args: Optional[ExtraArgs] = None
    javascript: Optional[JsAttrs] = None
    python: Optional[PyAttrs] = None
    lock_debug_task_names: bool = False

    @classmethod
    def from_option(cls, value: Any) -> Optional[ServiceAttrs]:
        """Interpret an option value: True for defaults, a mapping of settings, or None/False for absent."""
        if value is None or value is False:
            return None
        if value is True:
            return cls()
        if isinstance(value, ServiceAttrs):
            return value
        if not isinstance(value, Mapping):
            raise AttributeError_("service options must be a boolean or a mapping")
        _check_keys(value, _SERVICE_KEYS, "service")
        return cls(
            session=_flag("session", value.get("session", False)),
            shutdown=_flag("shutdown", value.get("shutdown", False)),
            extra_args=_extra_args(value.get("extra_args")),
            javascript=_js_attrs(value.get("javascript")),
            python=_py_attrs(value.get("python")),
            lock_debug_task_names=_flag(
                "lock_debug_task_names", value.get("lock_debug_task_names", False)
            ),
        )


_TOP_KEYS = {"msg_type", "err_type", "proto_type", "service", "stub", "log_errors"}


@dataclass(frozen=True)
class Attributes:
    """Top-level options of an RPC interface definition."""

    msg_type: Optional[str] = None
    err_type: Optional[str] = None
    proto_type: Optional[str] = None
    service: Optional[ServiceAttrs] = None
    stub: Optional[ServiceAttrs] = None
    log_errors: bool = False

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> Attributes:
        """Build attributes from keyword options, rejecting unknown names."""
        _check_keys(options, _TOP_KEYS, "rpc")
        return cls(
            msg_type=_opt_str("msg_type", options.get("msg_type")),
            err_type=_opt_str("err_type", options.get("err_type")),
            proto_type=_opt_str("proto_type", options.get("proto_type")),
            service=ServiceAttrs.from_option(options.get("service")),
            stub=ServiceAttrs.from_option(options.get("stub")),
            log_errors=_flag("log_errors", options.get("log_errors", False)),
        )