"""Match abstract type specifications against concrete fields and tables."""

from __future__ import annotations

from typing import List, Sequence

from autodash.config import is_ga_dimension
from autodash.core.models import Context, Field, SchemaObject, Table
from autodash.rules.models import DimensionDef


def filter_fields(fieldspec: str, table: Table, context: Context) -> List[Field]:
    """Fields of `table` matching `fieldspec`, one copy per table link.

    GA dimensions match by exact field name; anything else matches fields
    whose effective type is-a `fieldspec`. A table reached through several
    foreign keys yields each matching field once per link.
    """
    if is_ga_dimension(fieldspec):
        fields = [f for f in context.metadata.get_fields(table.id) if f.name == fieldspec]
    else:
        fields = [
            f
            for f in context.metadata.get_fields(table.id)
            if context.hierarchy.is_a(f.effective_type, fieldspec)
        ]
    return [f.with_link(link) for link in table.links for f in fields]


def filter_tables(tablespec: str, context: Context) -> List[Table]:
    """Tables in the context whose entity type is-a `tablespec`."""
    return [t for t in context.tables if context.hierarchy.is_a(t.entity_type, tablespec)]


def field_candidates(context: Context, definition: DimensionDef) -> List[SchemaObject]:
    """All schema objects satisfying a dimension definition.

    - With `links_to`, keep only matches living in a table linked from a
      table of that entity type.
    - With `(tablespec, fieldspec)`, search every table matching `tablespec`.
    - With a single `(spec,)`, the dimension is scoped to the root table: the
      root table itself when its entity type is-a `spec`, otherwise the root
      table's fields matching `spec`.
    """
    if definition.links_to:
        linked_ids = {
            link
            for table in filter_tables(definition.links_to, context)
            for link in table.links
        }
        candidates = field_candidates(
            context, DimensionDef(field_type=definition.field_type, score=definition.score)
        )
        return [c for c in candidates if c.id in linked_ids]

    field_type: Sequence[str] = definition.field_type
    if len(field_type) > 1 and field_type[1]:
        tablespec, fieldspec = field_type[0], field_type[1]
        return [
            f
            for table in filter_tables(tablespec, context)
            for f in filter_fields(fieldspec, table, context)
        ]

    root = context.root_table
    if root is None or not field_type:
        return []
    spec = field_type[0]
    if context.hierarchy.is_a(root.entity_type, spec):
        return [root]
    return list(filter_fields(spec, root, context))


__all__ = ["filter_fields", "filter_tables", "field_candidates"]
