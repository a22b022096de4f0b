"""Generate concrete card candidates from one card template."""

from __future__ import annotations

import logging
from itertools import islice, product
from statistics import mean
from typing import List, Optional, Sequence

from autodash.config import MAX_SCORE
from autodash.core.enums import ReferenceMode
from autodash.core.expressions import DimensionRef, collect_dimensions
from autodash.core.models import CardCandidate, Context
from autodash.core.query.plan import build_native_query, build_order_by, build_structured_query
from autodash.core.query.templates import fill_template
from autodash.permissions import PermissionChecker
from autodash.rules.models import CardTemplate, Definition
from .matchset import matchset

logger = logging.getLogger(__name__)


def card_score(context: Context, card: CardTemplate, definitions: Sequence[Definition]) -> float:
    """Card score scaled by the mean score of what it references.

    Cards with a raw query keep their declared score. Otherwise the base
    score is multiplied by mean(referenced scores) / MAX_SCORE; when nothing
    referenced carries a score the base score is used as-is.
    """
    if card.query:
        return max(float(card.score), 0.0)
    scores = [
        context.dimensions[d].score
        for d in card.dimensions
        if d in context.dimensions and context.dimensions[d].score is not None
    ]
    scores.extend(d.score for d in definitions if d.score is not None)
    if not scores:
        return max(float(card.score), 0.0)
    return max(float(card.score) * mean(scores) / MAX_SCORE, 0.0)


def card_candidates(
    context: Context,
    card_id: str,
    card: CardTemplate,
    permissions: PermissionChecker,
    *,
    max_candidates: Optional[int] = None,
) -> List[CardCandidate]:
    """All candidates for a card template.

    Enumerates the cartesian product of per-dimension match sets, builds a
    query for each combination and keeps those the permission checker
    allows. At most `max_candidates` combinations are enumerated (None for
    no cap).
    """
    missing = [m for m in card.metrics if m not in context.metrics]
    missing += [f for f in card.filters if f not in context.filters]
    if missing:
        logger.warning("Card %s references undefined metrics/filters: %s", card_id, ", ".join(missing))
        return []

    order_by = build_order_by(card.dimensions, card.metrics, card.order_by)
    metrics = [context.metrics[m] for m in card.metrics]
    filters = [context.filters[f] for f in card.filters]
    score = card_score(context, card, [*metrics, *filters])
    breakout = [DimensionRef(d) for d in card.dimensions]
    used = collect_dimensions(breakout, metrics, filters, card.query)

    combinations = product(*matchset(context, used))
    if max_candidates is not None:
        selected = list(islice(combinations, max_candidates))
        if next(combinations, None) is not None:
            logger.warning("Card %s truncated to %d candidates", card_id, max_candidates)
    else:
        selected = list(combinations)

    out: List[CardCandidate] = []
    for instantiation in selected:
        bindings = dict(zip(used, instantiation))
        if card.query:
            query = build_native_query(context, bindings, card.query)
        else:
            query = build_structured_query(
                context, bindings, filters, metrics, card.dimensions, card.limit, order_by
            )
        if not permissions.has_write_permission(query):
            continue
        out.append(
            CardCandidate(
                card_id=card_id,
                title=fill_template(ReferenceMode.STRING, context, bindings, card.title),
                description=(
                    fill_template(ReferenceMode.STRING, context, bindings, card.description)
                    if card.description
                    else card.description
                ),
                score=score,
                query=query,
                visualization=card.visualization,
            )
        )
    logger.debug("Card %s: %d candidates from %d combinations", card_id, len(out), len(selected))
    return out


__all__ = ["card_score", "card_candidates"]
