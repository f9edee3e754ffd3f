import pytest

from rpckit.definition import DefinitionError, ServiceDefinition


class ExampleService:
    """A service."""

    async def echo(self, arg1: str) -> str:
        ...


def test_basic_method():
    definition = ServiceDefinition.from_class(ExampleService)
    assert definition.service_name == "ExampleService"
    (method,) = definition.methods
    assert method.fn_name == "echo"
    assert method.var_name == "Echo"
    assert method.arg_list == ("arg1",)
    assert method.fields == method.arg_list
    assert method.wire_name == "echo"
    assert method.is_async is True
    assert method.annotations == {"arg1": str}
    assert method.returns is str


def test_methods_keep_declaration_order():
    class Service:
        def zeta(self):
            ...

        def alpha(self, a, b, *, c):
            ...

    definition = ServiceDefinition.from_class(Service)
    assert [m.fn_name for m in definition] == ["zeta", "alpha"]
    assert definition.method("alpha").arg_list == ("a", "b", "c")
    assert definition.method("zeta").arg_list == ()
    assert definition.method("zeta").is_async is False


def test_unknown_method_lookup():
    definition = ServiceDefinition.from_class(ExampleService)
    with pytest.raises(KeyError):
        definition.method("missing")


def test_non_method_item_rejected():
    class Service:
        limit = 3

    with pytest.raises(DefinitionError, match="Unexpected item"):
        ServiceDefinition.from_class(Service)


def test_classmethod_rejected():
    class Service:
        @classmethod
        def make(cls):
            ...

    with pytest.raises(DefinitionError):
        ServiceDefinition.from_class(Service)


def test_variadic_arguments_rejected():
    class Service:
        def call(self, *args):
            ...

    with pytest.raises(DefinitionError, match="variable"):
        ServiceDefinition.from_class(Service)


def test_method_without_self_rejected():
    class Service:
        def call(*, value):
            ...

    with pytest.raises(DefinitionError, match="self"):
        ServiceDefinition.from_class(Service)


def test_non_class_rejected():
    with pytest.raises(DefinitionError):
        ServiceDefinition.from_class(ExampleService())


def test_empty_service():
    class Empty:
        pass

    assert ServiceDefinition.from_class(Empty).methods == ()