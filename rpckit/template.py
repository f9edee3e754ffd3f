"""Minimal text templates used to generate API definitions."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Union

_VARIABLE = re.compile(r"\{\{([^\W_]+)\}\}")
_INDENTED = re.compile(r"([ \t]*)\{\{([^\W_]+)\}\}([ \t]*(?:\n|\Z))")


class TemplateError(Exception):
    """Raised when a template cannot be filled."""


@dataclass(frozen=True)
class Text:
    """Literal text copied to the output."""

    text: str


@dataclass(frozen=True)
class Variable:
    """A ``{{name}}`` placeholder inside a line."""

    name: str


@dataclass(frozen=True)
class Indented:
    """A placeholder alone on its line; every value line gets the surroundings."""

    indent: str
    name: str
    end: str


Element = Union[Text, Variable, Indented]


def _lines(value: str) -> list[str]:
    if not value:
        return []
    parts = value.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


@dataclass(frozen=True)
class Template:
    """A parsed template: a sequence of text and placeholder elements."""

    elements: tuple[Element, ...]

    @classmethod
    def parse(cls, text: str) -> Template:
        """Parse template text into its elements."""
        elements: list[Element] = []
        start = 0
        pos = 0
        new_line = True

        while pos < len(text):
            if new_line:
                match = _INDENTED.match(text, pos)
                if match:
                    if pos > start:
                        elements.append(Text(text[start:pos]))
                    elements.append(Indented(*match.groups()))
                    start = pos = match.end()
                    continue

            match = _VARIABLE.match(text, pos)
            if match:
                if pos > start:
                    elements.append(Text(text[start:pos]))
                elements.append(Variable(match.group(1)))
                start = pos = match.end()
                continue

            new_line = text[pos] == "\n"
            pos += 1

        if pos > start:
            elements.append(Text(text[start:pos]))
        return cls(tuple(elements))

    def fill(self, variables: Mapping[str, str]) -> str:
        """Substitute every placeholder; missing variables raise TemplateError."""
        output: list[str] = []
        for element in self.elements:
            if isinstance(element, Text):
                output.append(element.text)
                continue
            try:
                value = variables[element.name]
            except KeyError:
                raise TemplateError(
                    f"Missing template variable '{element.name}'"
                ) from None
            if isinstance(element, Variable):
                output.append(value)
            else:
                output.extend(
                    f"{element.indent}{line}{element.end}" for line in _lines(value)
                )
        return "".join(output)