"""References to schema objects for injection into queries and text.

A bound Field or Table renders differently depending on where it goes:
- MBQL: structured field reference (``["field-id", id]`` or ``["fk->", a, b]``)
- STRING: display name, for titles and descriptions
- NATIVE: ``table.column`` or the table name, for raw SQL templates

Any other value (a literal from a template) passes through unchanged.
"""

from __future__ import annotations

from typing import Any, Union

from autodash.core.enums import ReferenceMode
from autodash.core.models import Field, Table, TableLookup


def to_reference(mode: Union[ReferenceMode, str], obj: Any, tables: TableLookup) -> Any:
    """Render `obj` in `mode`.

    Args:
        mode: Output mode (enum or its string value).
        obj: A Field, a Table, or any literal.
        tables: Table lookup, needed for native field references.

    Raises:
        ValueError: If `mode` is not a ReferenceMode value.

    Examples:
        >>> to_reference(ReferenceMode.MBQL, Field(7, "total", "type/Float", 1), None)
        ['field-id', 7]
        >>> to_reference(ReferenceMode.STRING, "literal", None)
        'literal'
    """
    mode = ReferenceMode(mode)
    if isinstance(obj, (Field, Table)):
        return obj.reference(mode, tables)
    return obj


__all__ = ["to_reference"]
