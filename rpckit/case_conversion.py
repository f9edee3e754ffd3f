"""Identifier case conversion."""

from __future__ import annotations


def pascal_case(val: str) -> str:
    """Convert ``snake_case`` to ``PascalCase``."""
    return "".join(word[0].upper() + word[1:] for word in val.split("_") if word)


def snake_case(val: str) -> str:
    """Convert ``PascalCase`` or ``camelCase`` to ``snake_case``."""
    out: list[str] = []
    for char in val:
        if char.isupper():
            if out:
                out.append("_")
            out.append(char.lower())
        else:
            out.append(char)
    return "".join(out)