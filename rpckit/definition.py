"""Reading an RPC interface from a class of method declarations."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from .case_conversion import pascal_case, snake_case


class DefinitionError(Exception):
    """Raised when a class cannot serve as an RPC interface definition."""


@dataclass(frozen=True)
class Method:
    """One request of an interface: its name, variant name and arguments."""

    fn_name: str
    var_name: str
    arg_list: tuple[str, ...]
    function: Optional[Callable[..., Any]] = field(default=None, compare=False, repr=False)
    annotations: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)
    returns: Any = field(default=None, compare=False, repr=False)
    is_async: bool = True

    @property
    def fields(self) -> tuple[str, ...]:
        return self.arg_list

    @property
    def wire_name(self) -> str:
        """Name of the request variant as it appears on the wire."""
        return snake_case(self.var_name)


def _method(name: str, func: Callable[..., Any]) -> Method:
    code = func.__code__
    positional = code.co_argcount
    named = positional + code.co_kwonlyargcount
    if positional == 0:
        raise DefinitionError(f"rpc method '{name}' must take self as first argument")

    if code.co_flags & (inspect.CO_VARARGS | inspect.CO_VARKEYWORDS):
        variadic = code.co_varnames[named]
        raise DefinitionError(
            f"rpc method '{name}' cannot take variable arguments ('{variadic}')"
        )

    args = tuple(code.co_varnames[1:named])
    hints = dict(getattr(func, "__annotations__", None) or {})
    returns = hints.pop("return", None)
    annotations = {arg: hints[arg] for arg in args if arg in hints}

    return Method(
        fn_name=name,
        var_name=pascal_case(name),
        arg_list=args,
        function=func,
        annotations=annotations,
        returns=returns,
        is_async=inspect.iscoroutinefunction(func),
    )


@dataclass(frozen=True)
class ServiceDefinition:
    """An interface name and its methods in declaration order."""

    service_name: str
    methods: tuple[Method, ...]

    @classmethod
    def from_class(cls, service_cls: type) -> ServiceDefinition:
        """Collect the methods declared directly in ``service_cls``."""
        if not inspect.isclass(service_cls):
            raise DefinitionError(f"rpc interface must be a class, not {service_cls!r}")
        methods = []
        for name, value in vars(service_cls).items():
            if name.startswith("__") and name.endswith("__"):
                continue
            if inspect.isfunction(value):
                methods.append(_method(name, value))
            else:
                raise DefinitionError(f"Unexpected item in rpc trait: '{name}'")
        return cls(service_cls.__name__, tuple(methods))

    def method(self, fn_name: str) -> Method:
        """Return the method called ``fn_name``; KeyError if there is none."""
        for method in self.methods:
            if method.fn_name == fn_name:
                return method
        raise KeyError(fn_name)

    def __iter__(self) -> Iterator[Method]:
        return iter(self.methods)