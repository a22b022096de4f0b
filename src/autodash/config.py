"""Tunable constants for dashboard generation.

This module centralizes scoring bounds, default type tags and the cap on
candidate enumeration. Adjust these constants to tune how aggressively
cards are generated on large, highly connected schemas.

Type tag namespaces:
    - "entity/...": table entity types (e.g. "entity/TransactionTable")
    - "type/...": field types (e.g. "type/DateTime", "type/FK")
    - "ga:...": GA-style dimensions, matched by exact field name
"""

from __future__ import annotations

from typing import Optional

# ============================================================================
# SCORING
# ============================================================================

# Upper bound for every score declared in a rule. Card scores are scaled by
# (mean referenced score / MAX_SCORE) so they stay comparable across rules.
MAX_SCORE = 100


# ============================================================================
# TYPE TAGS
# ============================================================================

DEFAULT_TABLE_TYPE = "entity/GenericTable"

ENTITY_PREFIX = "entity/"
TYPE_PREFIX = "type/"
GA_DIMENSION_PREFIX = "ga:"


# ============================================================================
# ENUMERATION LIMITS
# ============================================================================

# Maximum number of candidates built for one card template. Enumeration is
# lazy and stops at the cap (first-N in cartesian order). None disables it.
MAX_CANDIDATES_PER_CARD: Optional[int] = 250


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================


def is_ga_dimension(spec: object) -> bool:
    """Return True when `spec` names a GA-style dimension.

    Examples:
        >>> is_ga_dimension("ga:country")
        True
        >>> is_ga_dimension("type/Country")
        False
    """
    return isinstance(spec, str) and spec.startswith(GA_DIMENSION_PREFIX)


def get_max_candidates(value: Optional[int] = None) -> Optional[int]:
    """Resolve the candidate cap, falling back to MAX_CANDIDATES_PER_CARD.

    Args:
        value: Explicit cap, or None for the configured default. Zero or
            negative values are rejected.

    Raises:
        ValueError: If `value` is not a positive integer.
    """
    if value is None:
        return MAX_CANDIDATES_PER_CARD
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"Invalid candidate cap: {value!r}. Must be a positive integer.")
    return value
