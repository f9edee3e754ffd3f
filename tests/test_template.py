import pytest

from rpckit.template import Indented, Template, TemplateError, Text, Variable


def test_parse_inline_variable():
    tmpl = Template.parse("Hello {{name}}!")
    assert tmpl.elements == (Text("Hello "), Variable("name"), Text("!"))


def test_fill_inline_variable():
    tmpl = Template.parse("Hello {{name}}!")
    assert tmpl.fill({"name": "world"}) == "Hello world!"


def test_parse_indented_variable():
    tmpl = Template.parse("class X:\n    {{body}}\nend")
    assert tmpl.elements == (
        Text("class X:\n"),
        Indented("    ", "body", "\n"),
        Text("end"),
    )


def test_fill_indented_repeats_indent_per_line():
    tmpl = Template.parse("class X:\n    {{body}}\nend")
    assert tmpl.fill({"body": "a\nb"}) == "class X:\n    a\n    b\nend"


def test_indented_at_end_of_input():
    tmpl = Template.parse("\t{{body}}")
    assert tmpl.elements == (Indented("\t", "body", ""),)
    assert tmpl.fill({"body": "x\ny\n"}) == "\tx\ty"


def test_indented_with_empty_value_emits_nothing():
    tmpl = Template.parse("x\n  {{body}}\ny")
    assert tmpl.fill({"body": ""}) == "x\ny"


def test_text_without_placeholders_is_unchanged():
    source = "no placeholders here\n{ not {{ one }} either }\n"
    assert Template.parse(source).fill({}) == source


def test_invalid_variable_name_is_text():
    source = "value: {{a-b}}"
    tmpl = Template.parse(source)
    assert all(isinstance(e, Text) for e in tmpl.elements)
    assert tmpl.fill({"a": "1"}) == source


def test_missing_variable_raises():
    tmpl = Template.parse("Hello {{name}}")
    with pytest.raises(TemplateError):
        tmpl.fill({})


def test_missing_indented_variable_raises():
    tmpl = Template.parse("  {{body}}\n")
    with pytest.raises(TemplateError):
        tmpl.fill({"other": "x"})


def test_empty_template():
    tmpl = Template.parse("")
    assert tmpl.elements == ()
    assert tmpl.fill({}) == ""