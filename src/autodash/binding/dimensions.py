"""Bind rule dimensions to their matching schema objects."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Tuple

from autodash.core.models import Context, DimensionBinding
from autodash.rules.models import DimensionDef
from .matching import field_candidates

logger = logging.getLogger(__name__)


def make_binding(context: Context, definition: DimensionDef) -> DimensionBinding:
    return DimensionBinding(
        matches=field_candidates(context, definition),
        field_type=tuple(definition.field_type),
        score=definition.score,
    )


def prefer_binding(a: DimensionBinding, b: DimensionBinding) -> DimensionBinding:
    """Pick between two bindings of the same identifier.

    The side with matches wins; otherwise the higher score, and the earlier
    declaration (`a`) on a tie.
    """
    if a.matched != b.matched:
        return a if a.matched else b
    return b if (b.score or 0) > (a.score or 0) else a


def bind_dimensions(
    context: Context, dimensions: Iterable[Tuple[str, DimensionDef]]
) -> Dict[str, DimensionBinding]:
    """Resolve every (identifier, definition) pair, merging duplicate identifiers."""
    bound: Dict[str, DimensionBinding] = {}
    for identifier, definition in dimensions:
        binding = make_binding(context, definition)
        if identifier in bound:
            binding = prefer_binding(bound[identifier], binding)
        bound[identifier] = binding
    return bound


__all__ = ["make_binding", "prefer_binding", "bind_dimensions"]
