"""Schema and generation data models.

This module defines the core data structures shared by the pipeline:
- Field, Table: schema objects bound to rule dimensions
- DimensionBinding: resolved matches for one rule dimension
- Context: per-root-table state built once per invocation
- CardCandidate: one concrete, executable card produced from a template
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Protocol, Tuple, Union

from .enums import ReferenceMode

if TYPE_CHECKING:
    from autodash.core.hierarchy import TypeHierarchy
    from autodash.rules.models import FilterDef, MetricDef
    from autodash.schema.provider import MetadataProvider


class TableLookup(Protocol):
    """Anything able to return a Table by id (the metadata provider)."""

    def get_table(self, table_id: int) -> "Table": ...


@dataclass(frozen=True)
class Field:
    """A column of a table.

    Attributes:
        id: Field id in the metadata store.
        name: Physical column name.
        display_name: Human-readable name used in titles.
        base_type: Storage type tag (e.g. "type/Integer").
        special_type: Semantic type tag (e.g. "type/FK"), if known.
        table_id: Owning table id.
        fk_target_field_id: Field this column references, for foreign keys.
        link: Foreign-key field traversed to reach this field's table from
            the root table; None for root-table fields.
    """

    id: int
    name: str
    base_type: str
    table_id: int
    special_type: Optional[str] = None
    fk_target_field_id: Optional[int] = None
    display_name: Optional[str] = None
    link: Optional[int] = None

    @property
    def effective_type(self) -> str:
        """Semantic type when present, else the storage type."""
        return self.special_type or self.base_type

    @property
    def owner_table_id(self) -> int:
        return self.table_id

    def with_link(self, link: Optional[int]) -> "Field":
        return replace(self, link=link)

    def reference(self, mode: ReferenceMode, tables: TableLookup) -> Any:
        if mode == ReferenceMode.MBQL:
            if self.link is not None:
                return ["fk->", self.link, self.id]
            if self.fk_target_field_id is not None:
                return ["fk->", self.id, self.fk_target_field_id]
            return ["field-id", self.id]
        if mode == ReferenceMode.NATIVE:
            return f"{tables.get_table(self.table_id).name}.{self.name}"
        return self.display_name or self.name


@dataclass(frozen=True)
class Table:
    """A table reachable from the root table.

    Attributes:
        id: Table id in the metadata store.
        name: Physical table name.
        entity_type: Entity type tag (e.g. "entity/TransactionTable").
        db_id: Owning database id.
        display_name: Human-readable name used in titles.
        links: Every foreign-key field id through which this table is
            reachable from the root; None stands for the root itself.
    """

    id: int
    name: str
    db_id: int
    entity_type: Optional[str] = None
    display_name: Optional[str] = None
    links: Tuple[Optional[int], ...] = ()

    @property
    def owner_table_id(self) -> int:
        return self.id

    def with_links(self, links: Tuple[Optional[int], ...]) -> "Table":
        return replace(self, links=tuple(links))

    def reference(self, mode: ReferenceMode, tables: TableLookup) -> Any:
        if mode == ReferenceMode.NATIVE:
            return self.name
        if mode == ReferenceMode.STRING:
            return self.display_name or self.name
        # Structured queries refer to tables by id.
        return self.id


SchemaObject = Union[Field, Table]


@dataclass
class DimensionBinding:
    """Resolved matches for one rule dimension."""

    matches: List[SchemaObject]
    field_type: Tuple[str, ...]
    score: Optional[float] = None

    @property
    def matched(self) -> bool:
        return bool(self.matches)


@dataclass
class Context:
    """Per-invocation state built once for a root table.

    Holds the reachable table universe, resolved dimension bindings and the
    metric/filter definitions chosen by overload resolution. Nothing here
    outlives a single `automagic_dashboard` call.
    """

    root_table_id: int
    database_id: int
    tables: List[Table]
    metadata: "MetadataProvider"
    hierarchy: "TypeHierarchy"
    dimensions: Dict[str, DimensionBinding] = field(default_factory=dict)
    metrics: Dict[str, "MetricDef"] = field(default_factory=dict)
    filters: Dict[str, "FilterDef"] = field(default_factory=dict)

    @property
    def root_table(self) -> Optional[Table]:
        for table in self.tables:
            if table.id == self.root_table_id:
                return table
        return None

    def get_table(self, table_id: int) -> Table:
        return self.metadata.get_table(table_id)


Binding = Mapping[str, SchemaObject]


@dataclass
class CardCandidate:
    """A concrete card: a bound query plus its resolved metadata and score."""

    card_id: str
    title: str
    score: float
    query: Dict[str, Any]
    description: Optional[str] = None
    visualization: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "card_id": self.card_id,
            "title": self.title,
            "description": self.description,
            "score": self.score,
            "visualization": self.visualization,
            "query": self.query,
        }


def owner_table_id(obj: Any) -> Optional[int]:
    """Table id a bound object lives in (a table's own id); None for literals."""
    return getattr(obj, "owner_table_id", None)


__all__ = [
    "Field",
    "Table",
    "SchemaObject",
    "DimensionBinding",
    "Context",
    "Binding",
    "CardCandidate",
    "owner_table_id",
]
