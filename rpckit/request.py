"""Encoding requests as externally tagged values and decoding them back."""

from __future__ import annotations

import types
from collections.abc import Mapping, Sequence
from typing import Any, Union, get_args, get_origin

from .definition import Method, ServiceDefinition

_UNION_TYPES: tuple[Any, ...] = (Union, types.UnionType)


class RequestDecodeError(Exception):
    """Raised when a value is not a valid request of an interface."""


def request_to_value(method: Method, args: Union[Mapping[str, Any], Sequence[Any]] = ()) -> Any:
    """Encode a call of ``method``: a bare name, or ``{name: {arg: value}}``."""
    if isinstance(args, Mapping):
        missing = [name for name in method.arg_list if name not in args]
        unexpected = [name for name in args if name not in method.arg_list]
        if missing:
            raise TypeError(f"{method.fn_name}() missing argument(s): {', '.join(missing)}")
        if unexpected:
            raise TypeError(
                f"{method.fn_name}() got unexpected argument(s): {', '.join(map(str, unexpected))}"
            )
        values = {name: args[name] for name in method.arg_list}
    else:
        positional = list(args)
        if len(positional) != len(method.arg_list):
            raise TypeError(
                f"{method.fn_name}() takes {len(method.arg_list)} argument(s), "
                f"{len(positional)} given"
            )
        values = dict(zip(method.arg_list, positional))

    if not method.arg_list:
        return method.wire_name
    return {method.wire_name: values}


def _is_optional(annotation: Any) -> bool:
    if annotation is None:
        return False
    if isinstance(annotation, str):
        compact = annotation.replace(" ", "")
        return (
            compact.startswith("Optional[")
            or compact.startswith("typing.Optional[")
            or "|None" in compact
            or compact.startswith("None|")
        )
    if get_origin(annotation) in _UNION_TYPES:
        return type(None) in get_args(annotation)
    return False


def _describe(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return f"boolean `{str(value).lower()}`"
    if isinstance(value, (int, float)):
        return f"number `{value}`"
    if isinstance(value, str):
        return f"string {value!r}"
    if isinstance(value, Mapping):
        return "map"
    if isinstance(value, (list, tuple)):
        return "sequence"
    return type(value).__name__


def _find(definition: ServiceDefinition, tag: str) -> Method:
    for method in definition.methods:
        if method.wire_name == tag:
            return method
    expected = ", ".join(f"`{method.wire_name}`" for method in definition.methods)
    raise RequestDecodeError(f"unknown variant `{tag}`, expected one of {expected}")


def _struct_args(method: Method, content: Any) -> dict[str, Any]:
    if isinstance(content, Mapping):
        result: dict[str, Any] = {}
        for name in method.arg_list:
            if name in content:
                result[name] = content[name]
            elif _is_optional(method.annotations.get(name)):
                result[name] = None
            else:
                raise RequestDecodeError(f"missing field `{name}`")
        return result
    if isinstance(content, (list, tuple)):
        if len(content) != len(method.arg_list):
            raise RequestDecodeError(
                f"invalid length {len(content)}, expected struct variant "
                f"{method.var_name} with {len(method.arg_list)} elements"
            )
        return dict(zip(method.arg_list, content))
    raise RequestDecodeError(
        f"invalid type: {_describe(content)}, expected struct variant {method.var_name}"
    )


def value_to_request(definition: ServiceDefinition, value: Any) -> tuple[Method, dict[str, Any]]:
    """Decode a request value into the method it names and its arguments."""
    if isinstance(value, str):
        tag, content, has_content = value, None, False
    elif isinstance(value, Mapping):
        if len(value) != 1:
            raise RequestDecodeError(
                f"invalid value: map with {len(value)} entries, expected map with a single key"
            )
        ((tag, content),) = value.items()
        has_content = True
        if not isinstance(tag, str):
            raise RequestDecodeError(f"invalid type: {_describe(tag)}, expected variant identifier")
    else:
        raise RequestDecodeError(
            f"invalid type: {_describe(value)}, expected enum {definition.service_name}"
        )

    method = _find(definition, tag)
    if not method.arg_list:
        if has_content and content is not None:
            raise RequestDecodeError(f"invalid type: {_describe(content)}, expected unit")
        return method, {}
    if not has_content:
        raise RequestDecodeError("invalid type: unit variant, expected struct variant")
    return method, _struct_args(method, content)