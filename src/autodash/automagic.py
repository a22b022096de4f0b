"""Automatic dashboard generation for a root table.

The entry point is `automagic_dashboard`:

1. pick the most specific rule for the table's entity type,
2. build a `Context` (reachable tables, dimension bindings, the chosen
   metric and filter overloads),
3. generate card candidates for every card template of the rule,
4. hand the surviving candidates to a dashboard sink.

Everything is computed per call; nothing is cached between invocations.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from autodash.binding.candidates import card_candidates
from autodash.binding.dimensions import bind_dimensions
from autodash.binding.overloads import resolve_overloading
from autodash.config import DEFAULT_TABLE_TYPE, get_max_candidates
from autodash.core.enums import ReferenceMode
from autodash.core.hierarchy import TypeHierarchy, default_hierarchy
from autodash.core.models import CardCandidate, Context, Table
from autodash.core.query.templates import fill_template
from autodash.dashboard import DashboardSink, InMemoryDashboardSink
from autodash.permissions import AllowAllPermissions, PermissionChecker
from autodash.rules.models import Rule
from autodash.rules.registry import RuleSet
from autodash.rules.selection import best_matching_rule
from autodash.schema.graph import tableset
from autodash.schema.provider import MetadataProvider

logger = logging.getLogger(__name__)


def _describe(obj) -> str:
    return getattr(obj, "name", str(obj))


def build_context(
    root: Table, rule: Rule, metadata: MetadataProvider, hierarchy: TypeHierarchy
) -> Context:
    """Bind a rule to the schema around `root`.

    Args:
        root: Table the dashboard is generated for.
        rule: Rule selected for the table.
        metadata: Schema metadata provider.
        hierarchy: Type hierarchy used for every is-a test.

    Returns:
        Context with reachable tables, dimension bindings and the metric and
        filter definitions chosen among overloads.
    """
    if root.entity_type is None:
        root = Table(
            id=root.id,
            name=root.name,
            db_id=root.db_id,
            entity_type=DEFAULT_TABLE_TYPE,
            display_name=root.display_name,
            links=root.links,
        )
    context = Context(
        root_table_id=root.id,
        database_id=root.db_id,
        tables=tableset(root, metadata),
        metadata=metadata,
        hierarchy=hierarchy,
    )
    context.dimensions = bind_dimensions(context, rule.dimensions)
    context.metrics = resolve_overloading(context.dimensions, rule.metrics)
    context.filters = resolve_overloading(context.dimensions, rule.filters)

    for identifier, binding in context.dimensions.items():
        logger.debug(
            "Dimension %s -> %s",
            identifier,
            ", ".join(_describe(m) for m in binding.matches) or "(no matches)",
        )
    for identifier, metric in context.metrics.items():
        logger.debug("Metric %s -> %s", identifier, metric.expression)
    for identifier, flt in context.filters.items():
        logger.debug("Filter %s -> %s", identifier, flt.expression)
    return context


def generate_cards(
    context: Context,
    rule: Rule,
    permissions: PermissionChecker,
    max_candidates: Optional[int],
) -> List[CardCandidate]:
    """Candidates for every card template of the rule.

    Card identifiers declared more than once compete: the group whose best
    candidate scores highest is kept, the earlier declaration on a tie.
    Identifiers without candidates are dropped.
    """
    groups: Dict[str, List[CardCandidate]] = {}
    for card_id, card in rule.cards:
        candidates = card_candidates(
            context, card_id, card, permissions, max_candidates=max_candidates
        )
        if not candidates:
            logger.debug("Card %s yields no candidates", card_id)
            continue
        best = max(c.score for c in candidates)
        current = groups.get(card_id)
        if current is None or best > max(c.score for c in current):
            groups[card_id] = candidates
    return [candidate for group in groups.values() for candidate in group]


def automagic_dashboard(
    root: Table,
    *,
    rules: RuleSet,
    metadata: MetadataProvider,
    hierarchy: Optional[TypeHierarchy] = None,
    permissions: Optional[PermissionChecker] = None,
    sink: Optional[DashboardSink] = None,
    max_candidates: Optional[int] = None,
) -> Optional[int]:
    """Generate and persist a dashboard for `root`.

    Args:
        root: Root table.
        rules: Rule set to choose from.
        metadata: Schema metadata provider.
        hierarchy: Type hierarchy; the built-in one when omitted.
        permissions: Permission checker; everything allowed when omitted.
        sink: Dashboard sink; an in-memory sink when omitted.
        max_candidates: Per-card cap on enumerated combinations; the
            configured default when omitted.

    Returns:
        The id assigned by the sink, or None when no card yields a candidate.

    Raises:
        ValueError: If no rule applies to the table, or the cap is invalid.
    """
    hierarchy = hierarchy or default_hierarchy()
    permissions = permissions or AllowAllPermissions()
    sink = sink if sink is not None else InMemoryDashboardSink()
    cap = get_max_candidates(max_candidates)

    rule = best_matching_rule(rules, root, hierarchy)
    if rule is None:
        raise ValueError(
            f"No applicable rule for table {root.name} "
            f"(entity type {root.entity_type or DEFAULT_TABLE_TYPE})"
        )
    logger.info("Applying heuristic %s to table %s.", rule.source or rule.table_type, root.name)

    context = build_context(root, rule, metadata, hierarchy)
    cards = generate_cards(context, rule, permissions, cap)
    if not cards:
        logger.info("No viable cards for table %s", root.name)
        return None

    title = fill_template(ReferenceMode.STRING, context, {}, rule.title)
    description = (
        fill_template(ReferenceMode.STRING, context, {}, rule.description)
        if rule.description
        else None
    )
    dashboard_id = sink.create_dashboard(title, description, cards)
    logger.info("Created dashboard %s with %d cards", dashboard_id, len(cards))
    return dashboard_id


__all__ = ["build_context", "generate_cards", "automagic_dashboard"]
