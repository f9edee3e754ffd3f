"""Generation of JavaScript service dispatchers and client stubs."""

from __future__ import annotations

from collections.abc import Iterable

from .attributes import ServiceAttrs
from .definition import Method, ServiceDefinition

RESERVED = frozenset(
    {
        "abstract",
        "arguments",
        "await",
        "boolean",
        "break",
        "byte",
        "case",
        "catch",
        "char",
        "class",
        "const",
        "continue",
        "debugger",
        "default",
        "delete",
        "do",
        "double",
        "else",
        "enum",
        "eval",
        "export",
        "extends",
        "false",
        "final",
        "finally",
        "float",
        "for",
        "function",
        "goto",
        "if",
        "implements",
        "import",
        "in",
        "instanceof",
        "int",
        "interface",
        "let",
        "long",
        "native",
        "new",
        "null",
        "package",
        "private",
        "protected",
        "public",
        "return",
        "short",
        "static",
        "super",
        "switch",
        "synchronized",
        "this",
        "throw",
        "throws",
        "transient",
        "true",
        "try",
        "typeof",
        "var",
        "void",
        "volatile",
        "while",
        "with",
        "yield",
    }
)


def unreserved(name: str) -> str:
    """Append an underscore to names that are reserved words in JavaScript."""
    return f"{name}_" if name in RESERVED else name


def _extra_names(attrs: ServiceAttrs) -> list[str]:
    return [] if attrs.extra_args is None else list(attrs.extra_args.names)


def _dispatch(method: Method, attrs: ServiceAttrs, extra: Iterable[str]) -> str:
    name = method.fn_name
    operator = "in" if method.arg_list else "=="
    args = ["session"] if attrs.session else []
    args.extend(unreserved(arg) for arg in extra)
    args.extend(f"req['{name}']['{arg}']" for arg in method.arg_list)
    return (
        f"if ('{name}' {operator} req) {{\n"
        f"    if (!('{name}' in this.service))\n"
        f"        throw 'Request not implemented: {name}';\n"
        f"    return this.service.{unreserved(name)}({', '.join(args)});\n"
        "}\n\n"
    )


def javascript_service(attrs: ServiceAttrs, definition: ServiceDefinition) -> str:
    """Return JavaScript that dispatches a request object to ``this.service``."""
    extra = [unreserved(name) for name in _extra_names(attrs)]
    parts = [_dispatch(method, attrs, extra) for method in definition.methods]
    parts.append('throw "Unsupported request: " + req;\n')
    return "".join(parts)


def _request_body(arg_list: tuple[str, ...]) -> str:
    if not arg_list:
        return "null"
    if len(arg_list) == 1:
        arg = arg_list[0]
        entry = f"'{arg}': {unreserved(arg)}" if arg in RESERVED else arg
        return "{" + entry + "}"
    return "{\n        " + ", ".join(arg_list) + "}"


def javascript_stub(attrs: ServiceAttrs, definition: ServiceDefinition) -> str:
    """Return JavaScript client methods that send one request each."""
    extra = _extra_names(attrs)
    req_method = "request"
    if attrs.javascript is not None and attrs.javascript.req_method is not None:
        req_method = attrs.javascript.req_method

    prefix = "".join(f"{unreserved(arg)}, " for arg in extra)
    parts = []
    for method in definition.methods:
        params = [unreserved(arg) for arg in (*extra, *method.arg_list)]
        params.append("ctx = {}")
        parts.append(
            f"async {unreserved(method.fn_name)}({', '.join(params)}) {{\n"
            f"    return await this.{req_method}({prefix}\"{method.fn_name}\", "
            f"{_request_body(method.arg_list)}, ctx);\n"
            "}\n\n"
        )
    return "".join(parts)