"""Rule definitions: models, the YAML-backed RuleSet, and rule selection.

Usage:
    >>> from pathlib import Path
    >>> from autodash.rules import RuleSet, best_matching_rule
    >>> rules = RuleSet.from_path(Path("config/rules"))
    >>> rule = best_matching_rule(rules, table, hierarchy)
"""

from .models import CardTemplate, DimensionDef, FilterDef, MetricDef, Rule
from .registry import RuleSet
from .selection import applicable_rules, best_matching_rule, specificity

__all__ = [
    "CardTemplate",
    "DimensionDef",
    "FilterDef",
    "MetricDef",
    "Rule",
    "RuleSet",
    "applicable_rules",
    "best_matching_rule",
    "specificity",
]
