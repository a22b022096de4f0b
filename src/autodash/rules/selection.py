"""Pick the most specific rule applicable to a table."""

from __future__ import annotations

from typing import Iterable, List, Optional

from autodash.config import DEFAULT_TABLE_TYPE
from autodash.core.hierarchy import TypeHierarchy
from autodash.core.models import Table
from .models import Rule


def applicable_rules(rules: Iterable[Rule], table: Table, hierarchy: TypeHierarchy) -> List[Rule]:
    """Rules whose table type is the table's entity type or one of its ancestors."""
    entity_type = table.entity_type or DEFAULT_TABLE_TYPE
    return [r for r in rules if hierarchy.is_a(entity_type, r.table_type)]


def specificity(rule: Rule, hierarchy: TypeHierarchy) -> int:
    """Length of the ancestor chain of the rule's table type."""
    return len(hierarchy.ancestors(rule.table_type))


def best_matching_rule(
    rules: Iterable[Rule], table: Table, hierarchy: TypeHierarchy
) -> Optional[Rule]:
    """Most specific applicable rule, the first declared on a tie; None if none applies.

    Examples:
        >>> best_matching_rule(rules, Table(1, "orders", 1, "entity/TransactionTable"), h).table_type
        'entity/TransactionTable'
    """
    candidates = applicable_rules(rules, table, hierarchy)
    if not candidates:
        return None
    return max(candidates, key=lambda r: specificity(r, hierarchy))


__all__ = ["applicable_rules", "specificity", "best_matching_rule"]
