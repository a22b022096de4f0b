"""Metric and filter expressions.

Rule expressions are nested lists such as ``["sum", ["dimension", "Income"]]``
or ``["=", ["dimension", "Category"], "Widget"]``. They are parsed into a
small tagged variant:

- Literal: any value that is not a list (numbers, strings, None)
- DimensionRef: ``["dimension", <identifier>]``
- Compound: ``[<op>, *args]``; a head that is not a string is parsed too

so that dimension forms can be collected and rewritten without untyped
tree walking.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Tuple, Union

DIMENSION_OP = "dimension"

PLACEHOLDER_RE = re.compile(r"\[\[(\w+)\]\]")


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class DimensionRef:
    name: str


@dataclass(frozen=True)
class Compound:
    op: Union[str, "Expression"]
    args: Tuple["Expression", ...]


Expression = Union[Literal, DimensionRef, Compound]


def is_dimension_form(form: Any) -> bool:
    """True for ``["dimension", name]`` (head is case-insensitive)."""
    return (
        isinstance(form, (list, tuple))
        and len(form) == 2
        and isinstance(form[0], str)
        and form[0].lower() == DIMENSION_OP
        and isinstance(form[1], str)
    )


def parse(form: Any) -> Expression:
    """Parse a raw nested-list form into an Expression."""
    if isinstance(form, (Literal, DimensionRef, Compound)):
        return form
    if is_dimension_form(form):
        return DimensionRef(form[1])
    if isinstance(form, (list, tuple)) and form:
        head = form[0] if isinstance(form[0], str) else parse(form[0])
        return Compound(head, tuple(parse(arg) for arg in form[1:]))
    if isinstance(form, (list, tuple)):
        return Literal([])
    return Literal(form)


def rewrite(expr: Expression, resolve: Callable[[str], Any]) -> Any:
    """Render `expr` back to plain lists, replacing dimension refs via `resolve`."""
    if isinstance(expr, DimensionRef):
        return resolve(expr.name)
    if isinstance(expr, Compound):
        op = expr.op if isinstance(expr.op, str) else rewrite(expr.op, resolve)
        return [op, *(rewrite(arg, resolve) for arg in expr.args)]
    return expr.value


def to_form(expr: Expression) -> Any:
    """Render `expr` back to its raw nested-list form."""
    return rewrite(expr, lambda name: [DIMENSION_OP, name])


def template_identifiers(text: str) -> List[str]:
    """Identifiers named by ``[[identifier]]`` placeholders, in order."""
    return PLACEHOLDER_RE.findall(text)


def _walk(form: Any) -> Iterator[str]:
    if isinstance(form, DimensionRef):
        yield form.name
    elif isinstance(form, Compound):
        yield from _walk(form.op)
        for arg in form.args:
            yield from _walk(arg)
    elif isinstance(form, Literal):
        yield from _walk(form.value)
    elif is_dimension_form(form):
        yield form[1]
    elif isinstance(form, str):
        yield from template_identifiers(form)
    elif isinstance(form, dict):
        for value in form.values():
            yield from _walk(value)
    elif isinstance(form, (list, tuple, set, frozenset)):
        for item in form:
            yield from _walk(item)
    elif hasattr(form, "expression"):
        # Metric and filter definitions
        yield from _walk(form.expression)


def collect_dimensions(*forms: Any) -> List[str]:
    """Distinct dimension identifiers referenced anywhere in `forms`.

    Walks expressions, raw lists, dicts, definitions and strings (strings
    contribute their placeholder identifiers). Order is first occurrence.

    Examples:
        >>> collect_dimensions(["sum", ["dimension", "Income"]], "by [[Category]]")
        ['Income', 'Category']
    """
    seen: List[str] = []
    for name in _walk(list(forms)):
        if name not in seen:
            seen.append(name)
    return seen


__all__ = [
    "Literal",
    "DimensionRef",
    "Compound",
    "Expression",
    "is_dimension_form",
    "parse",
    "rewrite",
    "to_form",
    "template_identifiers",
    "collect_dimensions",
]
