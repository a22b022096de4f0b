"""Type hierarchy: a DAG of type tags with is-a and ancestor queries.

Edges point from a tag to each of its direct parents. A tag may have several
parents (diamonds are fine) and the graph may have several roots. The graph
is built once at startup; ancestor sets are memoized per tag.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

import networkx as nx
import yaml

from autodash.config import ENTITY_PREFIX, TYPE_PREFIX, is_ga_dimension
from .types import DEFAULT_TYPES

logger = logging.getLogger(__name__)


class TypeHierarchy:
    """Directed acyclic graph of type tags."""

    def __init__(self, parents: Optional[Mapping[str, Iterable[str]]] = None) -> None:
        self._graph: nx.DiGraph = nx.DiGraph()
        self._ancestors: Dict[str, FrozenSet[str]] = {}
        for tag, tag_parents in (parents or {}).items():
            self._add(tag, tag_parents)
        self._check_acyclic()

    @classmethod
    def from_yaml(cls, path: Path, *, extend_default: bool = True) -> "TypeHierarchy":
        """Load a hierarchy from YAML (`types: {tag: [parent, ...]}`).

        When `extend_default` is True the file extends the built-in types.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file is malformed or introduces a cycle.
        """
        if not path.exists():
            raise FileNotFoundError(f"Type hierarchy file not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        entries = data.get("types", data) if isinstance(data, dict) else None
        if not isinstance(entries, dict):
            raise ValueError(f"Type hierarchy file {path} must map tags to parent lists")
        parents: Dict[str, list] = dict(DEFAULT_TYPES) if extend_default else {}
        for tag, tag_parents in entries.items():
            if isinstance(tag_parents, str):
                tag_parents = [tag_parents]
            parents[str(tag)] = list(parents.get(str(tag), [])) + [str(p) for p in tag_parents or []]
        return cls(parents)

    def _add(self, tag: str, parents: Iterable[str]) -> None:
        self._graph.add_node(tag)
        for parent in parents:
            if parent == tag:
                raise ValueError(f"Type {tag!r} cannot derive from itself")
            self._graph.add_edge(tag, parent)

    def _check_acyclic(self) -> None:
        if not nx.is_directed_acyclic_graph(self._graph):
            cycle = nx.find_cycle(self._graph)
            raise ValueError(f"Type hierarchy contains a cycle: {cycle}")

    def derive(self, tag: str, parent: str) -> None:
        """Declare `tag` a direct subtype of `parent`."""
        self._add(tag, [parent])
        try:
            self._check_acyclic()
        except ValueError:
            self._graph.remove_edge(tag, parent)
            raise
        self._ancestors.clear()

    def __contains__(self, tag: object) -> bool:
        return tag in self._graph

    def ancestors(self, tag: str) -> FrozenSet[str]:
        """All transitive parents of `tag` (not including `tag` itself)."""
        cached = self._ancestors.get(tag)
        if cached is None:
            cached = frozenset(nx.descendants(self._graph, tag)) if tag in self._graph else frozenset()
            self._ancestors[tag] = cached
        return cached

    def is_a(self, tag: Optional[str], candidate: Optional[str]) -> bool:
        """True when `tag` equals `candidate` or descends from it."""
        if tag is None or candidate is None:
            return False
        return tag == candidate or candidate in self.ancestors(tag)

    def qualify(self, name: str, default_prefix: str = TYPE_PREFIX) -> str:
        """Turn a bare type name into a namespaced tag.

        Names that already carry a namespace, and GA dimension names, are
        returned as-is. Otherwise the first known tag among "entity/<name>"
        and "type/<name>" wins, falling back to `default_prefix + name`.

        Examples:
            >>> h = default_hierarchy()
            >>> h.qualify("GenericTable")
            'entity/GenericTable'
            >>> h.qualify("FK")
            'type/FK'
        """
        name = str(name)
        if "/" in name or is_ga_dimension(name):
            return name
        for prefix in (ENTITY_PREFIX, TYPE_PREFIX):
            if f"{prefix}{name}" in self._graph:
                return f"{prefix}{name}"
        return f"{default_prefix}{name}"


def default_hierarchy() -> TypeHierarchy:
    """Hierarchy built from the built-in field and entity types."""
    return TypeHierarchy(DEFAULT_TYPES)


__all__ = ["TypeHierarchy", "default_hierarchy"]
