"""Rule data models.

A rule describes, for one table entity type, the abstract dimensions,
metrics and filters worth looking at and the card templates combining them.
Dimensions, metrics, filters and cards are kept as ordered (name, value)
pairs because names may repeat: duplicate dimensions are merged, duplicate
metrics/filters are overloads, duplicate cards compete for the best score.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from autodash.core.expressions import Expression


@dataclass(frozen=True)
class DimensionDef:
    """A typed slot resolved against concrete fields or tables.

    Attributes:
        field_type: `(tablespec, fieldspec)` or `(spec,)` for a root-table
            scoped dimension.
        score: Declared relevance score (0..MAX_SCORE).
        links_to: Optional entity type the matched field's table must be
            reachable from.
    """

    field_type: Tuple[str, ...]
    score: Optional[float] = None
    links_to: Optional[str] = None


@dataclass(frozen=True)
class Definition:
    """Shared shape of metric and filter definitions."""

    expression: Expression
    score: Optional[float] = None


@dataclass(frozen=True)
class MetricDef(Definition):
    """Aggregation expression, e.g. `["sum", ["dimension", "Income"]]`."""


@dataclass(frozen=True)
class FilterDef(Definition):
    """Boolean expression applied as a query filter."""


@dataclass(frozen=True)
class CardTemplate:
    """A parameterized card referencing dimensions/metrics/filters by name."""

    title: str
    score: float = 0.0
    description: Optional[str] = None
    dimensions: Tuple[str, ...] = ()
    metrics: Tuple[str, ...] = ()
    filters: Tuple[str, ...] = ()
    order_by: Tuple[Tuple[str, str], ...] = ()
    limit: Optional[int] = None
    query: Optional[str] = None
    visualization: Optional[Any] = None


@dataclass
class Rule:
    """Heuristic for tables of one entity type."""

    table_type: str
    title: str
    description: Optional[str] = None
    dimensions: List[Tuple[str, DimensionDef]] = field(default_factory=list)
    metrics: List[Tuple[str, MetricDef]] = field(default_factory=list)
    filters: List[Tuple[str, FilterDef]] = field(default_factory=list)
    cards: List[Tuple[str, CardTemplate]] = field(default_factory=list)
    source: Optional[str] = None

    def summary(self) -> Dict[str, Any]:
        return {
            "table_type": self.table_type,
            "title": self.title,
            "dimensions": len(self.dimensions),
            "metrics": len(self.metrics),
            "filters": len(self.filters),
            "cards": len(self.cards),
            "source": self.source,
        }


__all__ = [
    "DimensionDef",
    "Definition",
    "MetricDef",
    "FilterDef",
    "CardTemplate",
    "Rule",
]
