"""Fill ``[[identifier]]`` placeholders in titles, descriptions and raw SQL."""

from __future__ import annotations

import re
from typing import Any, Mapping, Union

from autodash.binding.matching import filter_tables
from autodash.core.enums import ReferenceMode
from autodash.core.expressions import PLACEHOLDER_RE
from autodash.core.models import Context
from .references import to_reference


def resolve_identifier(context: Context, bindings: Mapping[str, Any], identifier: str) -> Any:
    """Bound object for `identifier`, else the first table of its inferred type, else the text."""
    if identifier in bindings:
        return bindings[identifier]
    tables = filter_tables(context.hierarchy.qualify(identifier), context)
    if tables:
        return tables[0]
    return identifier


def fill_template(
    mode: Union[ReferenceMode, str],
    context: Context,
    bindings: Mapping[str, Any],
    template: str,
) -> str:
    """Substitute every placeholder in `template` with its reference in `mode`.

    Unresolvable identifiers degrade to their raw text.

    Examples:
        >>> fill_template("string", context, {"Category": field}, "Sales by [[Category]]")
        'Sales by Product Category'
    """

    def substitute(match: "re.Match[str]") -> str:
        value = resolve_identifier(context, bindings, match.group(1))
        return str(to_reference(mode, value, context))

    return PLACEHOLDER_RE.sub(substitute, template)


__all__ = ["fill_template", "resolve_identifier"]
