"""autodash: rule-driven automatic dashboards for database tables.

Given a root table, the most specific rule for its entity type is bound to
the surrounding schema and turned into scored card candidates, which are
then persisted through a dashboard sink.
"""

__all__ = [
    "__version__",
    "automagic_dashboard",
    "RuleSet",
    "SchemaMetadata",
    "TypeHierarchy",
]

__version__ = "0.1.0"

from .automagic import automagic_dashboard  # noqa: E402
from .core.hierarchy import TypeHierarchy  # noqa: E402
from .rules.registry import RuleSet  # noqa: E402
from .schema.provider import SchemaMetadata  # noqa: E402
