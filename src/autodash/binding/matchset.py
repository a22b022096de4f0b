"""Per-dimension binding choices for dimensions used together in one card."""

from __future__ import annotations

from typing import Dict, List, Sequence, Set, Tuple

from autodash.core.models import Context, SchemaObject, owner_table_id
from .matching import filter_tables


def used_tables(context: Context, identifiers: Sequence[str]) -> Set[int]:
    """Ids of the tables touched by the matches of `identifiers`."""
    tables: Set[int] = set()
    for identifier in identifiers:
        binding = context.dimensions.get(identifier)
        if binding is None:
            continue
        tables.update(owner_table_id(m) for m in binding.matches)
    return tables


def _link_table(context: Context, obj: SchemaObject) -> int:
    return context.metadata.get_field(obj.link).table_id  # type: ignore[union-attr]


def matchset(context: Context, identifiers: Sequence[str]) -> List[List[SchemaObject]]:
    """Return the applicable bindings for each identifier, in order.

    The same field reached through several links is reduced to one join
    path: the unlinked variant when the card only touches one table,
    otherwise the variants whose link lives in a touched table. An
    identifier without matches falls back to tables of its inferred type.
    """
    touched = used_tables(context, identifiers)
    choices: List[List[SchemaObject]] = []
    for identifier in identifiers:
        binding = context.dimensions.get(identifier)
        if binding is None or not binding.matches:
            choices.append(filter_tables(context.hierarchy.qualify(identifier), context))
            continue

        groups: Dict[Tuple[str, int], List[SchemaObject]] = {}
        for match in binding.matches:
            groups.setdefault((type(match).__name__, match.id), []).append(match)

        options: List[SchemaObject] = []
        for variants in groups.values():
            if len(variants) == 1:
                options.extend(variants)
            elif len(touched) == 1:
                options.extend(v for v in variants if getattr(v, "link", None) is None)
            else:
                options.extend(
                    v
                    for v in variants
                    if getattr(v, "link", None) is not None and _link_table(context, v) in touched
                )
        choices.append(options)
    return choices


__all__ = ["used_tables", "matchset"]
