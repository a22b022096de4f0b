"""Load and query rule definitions from YAML."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import yaml

from autodash.config import ENTITY_PREFIX, TYPE_PREFIX
from autodash.core.expressions import Expression, parse
from autodash.core.hierarchy import TypeHierarchy, default_hierarchy
from .models import CardTemplate, DimensionDef, FilterDef, MetricDef, Rule

logger = logging.getLogger(__name__)

RULE_SUFFIXES = (".yaml", ".yml")


def _entries(data: Dict[str, Any], key: str, source: str) -> List[Tuple[str, Any]]:
    """Ordered (name, body) pairs from a list of single-key mappings (or a mapping)."""
    raw = data.get(key) or []
    if isinstance(raw, dict):
        raw = [{k: v} for k, v in raw.items()]
    if not isinstance(raw, list):
        raise ValueError(f"{source}: '{key}' must be a list of single-key mappings")
    out: List[Tuple[str, Any]] = []
    for item in raw:
        if not isinstance(item, dict) or len(item) != 1:
            raise ValueError(f"{source}: every '{key}' entry must be a single-key mapping, got {item!r}")
        (name, body), = item.items()
        out.append((str(name), body))
    for name, body in out:
        if body is not None and not isinstance(body, dict):
            raise ValueError(f"{source}: '{key}' entry {name!r} must map to a mapping")
    return [(name, body or {}) for name, body in out]


def _score(body: Dict[str, Any], source: str, name: str) -> Optional[float]:
    score = body.get("score")
    if score is None:
        return None
    try:
        return float(score)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{source}: invalid score for {name!r}: {score!r}") from e


def _expression(body: Dict[str, Any], key: str, source: str, name: str) -> Expression:
    if body.get(key) is None:
        raise ValueError(f"{source}: {key} {name!r} has no '{key}' expression")
    return parse(body[key])


def _names(value: Any) -> Tuple[str, ...]:
    """Card identifier lists accept plain names or single-key mappings."""
    out: List[str] = []
    for item in value or []:
        if isinstance(item, dict):
            out.extend(str(k) for k in item)
        else:
            out.append(str(item))
    return tuple(out)


def _order_by(value: Any) -> Tuple[Tuple[str, str], ...]:
    """`- Identifier: ascending|descending` entries; a bare name sorts ascending."""
    out: List[Tuple[str, str]] = []
    for item in value or []:
        if isinstance(item, dict):
            out.extend((str(k), str(v)) for k, v in item.items())
        else:
            out.append((str(item), "ascending"))
    return tuple(out)


class RuleSet:
    """An explicit, caller-owned collection of rules.

    Load once (e.g. at startup) with `RuleSet.from_path` and pass it to
    `automagic_dashboard`; nothing is cached globally.
    """

    def __init__(self, rules: Iterable[Rule]) -> None:
        self._rules: List[Rule] = list(rules)

    @classmethod
    def from_path(cls, path: Path, hierarchy: Optional[TypeHierarchy] = None) -> "RuleSet":
        """Load a rule file, or every *.yaml / *.yml file in a directory (sorted by name).

        Raises:
            FileNotFoundError: If `path` does not exist.
            ValueError: If a rule file is malformed.
        """
        if not path.exists():
            raise FileNotFoundError(f"Rules path not found: {path}")
        hierarchy = hierarchy or default_hierarchy()
        files = (
            sorted(p for p in path.iterdir() if p.suffix in RULE_SUFFIXES)
            if path.is_dir()
            else [path]
        )
        rules = [cls.load_rule(f, hierarchy) for f in files]
        logger.debug("Loaded %d rules from %s", len(rules), path)
        return cls(rules)

    @staticmethod
    def load_rule(path: Path, hierarchy: TypeHierarchy) -> Rule:
        """Parse one rule file."""
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return RuleSet.parse_rule(data, hierarchy, source=str(path))

    @staticmethod
    def parse_rule(data: Dict[str, Any], hierarchy: TypeHierarchy, source: str = "<rule>") -> Rule:
        """Build a Rule from its YAML mapping, qualifying bare type names."""
        if not isinstance(data, dict):
            raise ValueError(f"{source}: rule must be a mapping")
        if not data.get("table_type"):
            raise ValueError(f"{source}: missing 'table_type'")

        dimensions: List[Tuple[str, DimensionDef]] = []
        for name, body in _entries(data, "dimensions", source):
            field_type = body.get("field_type")
            if isinstance(field_type, str):
                field_type = [field_type]
            if not isinstance(field_type, list) or not 1 <= len(field_type) <= 2:
                raise ValueError(f"{source}: dimension {name!r} needs field_type [tablespec, fieldspec?]")
            if len(field_type) == 2:
                qualified = (
                    hierarchy.qualify(field_type[0], ENTITY_PREFIX),
                    hierarchy.qualify(field_type[1], TYPE_PREFIX),
                )
            else:
                qualified = (hierarchy.qualify(field_type[0], TYPE_PREFIX),)
            links_to = body.get("links_to")
            dimensions.append(
                (
                    name,
                    DimensionDef(
                        field_type=qualified,
                        score=_score(body, source, name),
                        links_to=hierarchy.qualify(links_to, ENTITY_PREFIX) if links_to else None,
                    ),
                )
            )

        metrics = [
            (name, MetricDef(expression=_expression(body, "metric", source, name), score=_score(body, source, name)))
            for name, body in _entries(data, "metrics", source)
        ]
        filters = [
            (name, FilterDef(expression=_expression(body, "filter", source, name), score=_score(body, source, name)))
            for name, body in _entries(data, "filters", source)
        ]

        cards: List[Tuple[str, CardTemplate]] = []
        for name, body in _entries(data, "cards", source):
            order_by = _order_by(body.get("order_by"))
            limit = body.get("limit")
            cards.append(
                (
                    name,
                    CardTemplate(
                        title=str(body.get("title", name)),
                        description=body.get("description"),
                        score=_score(body, source, name) or 0.0,
                        dimensions=_names(body.get("dimensions")),
                        metrics=_names(body.get("metrics")),
                        filters=_names(body.get("filters")),
                        order_by=order_by,
                        limit=int(limit) if limit is not None else None,
                        query=body.get("query"),
                        visualization=body.get("visualization"),
                    ),
                )
            )

        return Rule(
            table_type=hierarchy.qualify(data["table_type"], ENTITY_PREFIX),
            title=str(data.get("title", data["table_type"])),
            description=data.get("description"),
            dimensions=dimensions,
            metrics=metrics,
            filters=filters,
            cards=cards,
            source=source,
        )

    def load_rules(self) -> List[Rule]:
        """Return all rules."""
        return list(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)


__all__ = ["RuleSet"]
