"""Query construction public API.

Turns bound schema objects into references, fills text and SQL templates,
and assembles structured or native query specifications.
"""

from .references import to_reference
from .templates import fill_template, resolve_identifier
from .plan import build_order_by, infer_source_table, build_structured_query, build_native_query

__all__ = [
    "to_reference",
    "fill_template",
    "resolve_identifier",
    "build_order_by",
    "infer_source_table",
    "build_structured_query",
    "build_native_query",
]
