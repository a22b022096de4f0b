"""Pick one definition per metric/filter identifier among its overloads."""

from __future__ import annotations

from functools import reduce
from typing import Dict, Iterable, Mapping, Tuple, TypeVar

from autodash.core.expressions import collect_dimensions
from autodash.core.models import DimensionBinding
from autodash.rules.models import Definition

D = TypeVar("D", bound=Definition)


def has_matches(dimensions: Mapping[str, DimensionBinding], definition: Definition) -> bool:
    """True when every dimension the definition references has at least one match."""
    for name in collect_dimensions(definition.expression):
        binding = dimensions.get(name)
        if binding is None or not binding.matched:
            return False
    return True


def resolve_overloading(
    dimensions: Mapping[str, DimensionBinding],
    definitions: Iterable[Tuple[str, D]],
) -> Dict[str, D]:
    """Find, per identifier, the best overloaded definition.

    Definitions whose dimensions all match beat those that don't; among
    equals the higher score wins, the earlier declaration on a tie.
    """

    def better(a: D, b: D) -> D:
        a_ok, b_ok = has_matches(dimensions, a), has_matches(dimensions, b)
        if a_ok != b_ok:
            return a if a_ok else b
        return b if (b.score or 0) > (a.score or 0) else a

    groups: Dict[str, list] = {}
    for identifier, definition in definitions:
        groups.setdefault(identifier, []).append(definition)
    return {identifier: reduce(better, group) for identifier, group in groups.items()}


__all__ = ["has_matches", "resolve_overloading"]
