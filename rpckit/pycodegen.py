"""Generation of Python service dispatchers and client stubs."""

from __future__ import annotations

from .attributes import ServiceAttrs
from .definition import ServiceDefinition

RESERVED = frozenset(
    {"as", "except", "with", "assert", "finally", "yield", "break", "for", "class", "from"}
)


def unreserved(name: str) -> str:
    """Append an underscore to names that clash with Python keywords."""
    return f"{name}_" if name in RESERVED else name


def _extra_names(attrs: ServiceAttrs) -> list[str]:
    return [] if attrs.extra_args is None else list(attrs.extra_args.names)


def python_service(attrs: ServiceAttrs, definition: ServiceDefinition) -> str:
    """Return Python statements dispatching ``req`` to methods of ``self``."""
    extra = [unreserved(name) for name in _extra_names(attrs)]
    parts = []
    for method in definition.methods:
        name = method.fn_name
        operator = "in" if method.arg_list else "=="
        args = ["session"] if attrs.session else []
        args.extend(extra)
        args.extend(f"req['{name}']['{arg}']" for arg in method.arg_list)
        parts.append(
            f"if '{name}' {operator} req:\n"
            f"    if not callable(getattr(self, '{name}', None)):\n"
            f"        raise Exception('Request not implemented: {name}')\n"
            f"    return self.{unreserved(name)}({', '.join(args)})\n\n"
        )
    parts.append("raise Exception('Request not implemented: ' + req)\n")
    return "".join(parts)


def python_stub(attrs: ServiceAttrs, definition: ServiceDefinition) -> str:
    """Return Python client methods that send one request each."""
    extra = [unreserved(name) for name in _extra_names(attrs)]
    prefix = "".join(f"{arg}, " for arg in extra)
    parts = []
    for method in definition.methods:
        name = unreserved(method.fn_name)
        params = ["self", *extra, *(unreserved(arg) for arg in method.arg_list), "ctx = {}"]
        if method.arg_list:
            body = "{" + ", ".join(f"'{arg}': {unreserved(arg)}" for arg in method.arg_list) + "}"
        else:
            body = "None"
        parts.append(
            f"def {name}({', '.join(params)}):\n"
            f"    return self.__request({prefix}\"{name}\", {body}, ctx)\n\n"
        )
    return "".join(parts)