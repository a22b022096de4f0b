"""Build query specifications from bound dimensions, metrics and filters.

Two forms are produced, both plain JSON-serializable dicts:

- structured: ``{"type": "query", "database": ..., "query": {...}}`` with
  source_table, filter, breakout, aggregation, limit and order_by
- native: ``{"type": "native", "database": ..., "native": {"query": sql}}``
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from autodash.core.enums import ReferenceMode, SortDirection
from autodash.core.expressions import Compound, DimensionRef, Expression, Literal, collect_dimensions, rewrite
from autodash.core.models import Context, owner_table_id
from autodash.rules.models import FilterDef, MetricDef
from autodash.schema.provider import MetadataProvider
from .references import to_reference
from .templates import fill_template

logger = logging.getLogger(__name__)

OrderBy = List[Tuple[str, Expression]]


def build_order_by(
    dimensions: Sequence[str],
    metrics: Sequence[str],
    order_by: Sequence[Tuple[str, str]],
) -> OrderBy:
    """Resolve card ordering against its dimension and metric identifiers.

    Dimensions order by their field reference, metrics by their position in
    the aggregation list. Identifiers naming neither are dropped.
    """
    out: OrderBy = []
    for identifier, ordering in order_by:
        direction = SortDirection.from_rule(ordering).value
        if identifier in dimensions:
            out.append((direction, DimensionRef(identifier)))
        elif identifier in metrics:
            index = list(metrics).index(identifier)
            out.append((direction, Compound("aggregate-field", (Literal(index),))))
        else:
            logger.warning("Ignoring order_by on unknown identifier: %s", identifier)
    return out


def infer_source_table(objects: Sequence[Any], metadata: MetadataProvider) -> Optional[int]:
    """Pick the source table for a set of bound fields.

    Fields sharing one table use it, unless reached through a link, in
    which case the table owning the link (the many side of the join) is
    the source. When fields disagree, the first linked field decides.
    """
    objects = [o for o in objects if owner_table_id(o) is not None]
    if not objects:
        return None

    def link_table(obj: Any) -> Optional[int]:
        link = getattr(obj, "link", None)
        return None if link is None else metadata.get_field(link).table_id

    sources = {owner_table_id(o) for o in objects}
    if len(sources) > 1:
        for obj in objects:
            table_id = link_table(obj)
            if table_id is not None:
                return table_id
    first = objects[0]
    table_id = link_table(first)
    return table_id if table_id is not None else owner_table_id(first)


def build_structured_query(
    context: Context,
    bindings: Mapping[str, Any],
    filters: Sequence[FilterDef],
    metrics: Sequence[MetricDef],
    dimensions: Sequence[str],
    limit: Optional[int] = None,
    order_by: Optional[OrderBy] = None,
) -> Dict[str, Any]:
    """Assemble a structured query, replacing dimension forms with field references.

    Args:
        context: Generation context (database, metadata).
        bindings: Identifier -> bound Field/Table for this candidate.
        filters: Filter definitions; several are combined with "and".
        metrics: Metric definitions, in aggregation order.
        dimensions: Breakout dimension identifiers.
        limit: Optional row limit.
        order_by: Output of `build_order_by`.

    Raises:
        KeyError: If a referenced dimension has no binding.
    """

    def resolve(name: str) -> Any:
        return to_reference(ReferenceMode.MBQL, bindings[name], context)

    breakout = [DimensionRef(d) for d in dimensions]
    used = collect_dimensions(list(metrics), breakout, list(filters))
    source_table = infer_source_table([bindings[name] for name in used], context.metadata)
    if source_table is None:
        source_table = context.root_table_id

    query: Dict[str, Any] = {"source_table": source_table}
    if filters:
        clauses = [rewrite(f.expression, resolve) for f in filters]
        query["filter"] = clauses[0] if len(clauses) == 1 else ["and", *clauses]
    if breakout:
        query["breakout"] = [rewrite(d, resolve) for d in breakout]
    if metrics:
        query["aggregation"] = [rewrite(m.expression, resolve) for m in metrics]
    if limit:
        query["limit"] = limit
    if order_by:
        query["order_by"] = [[direction, rewrite(target, resolve)] for direction, target in order_by]

    return {"type": "query", "database": context.database_id, "query": query}


def build_native_query(context: Context, bindings: Mapping[str, Any], template: str) -> Dict[str, Any]:
    """Fill a raw SQL template with native references."""
    return {
        "type": "native",
        "database": context.database_id,
        "native": {"query": fill_template(ReferenceMode.NATIVE, context, bindings, template)},
    }


__all__ = [
    "build_order_by",
    "infer_source_table",
    "build_structured_query",
    "build_native_query",
]
