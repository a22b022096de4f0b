"""Schema graph: the tables reachable from a root table.

Foreign keys are treated as bidirectional edges, one hop deep: a table is
reachable when it references the root or is referenced by it. Each
reachable table records the foreign-key field ids ("links") used to reach
it; the root itself is always present with a `None` link.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from autodash.core.models import Table
from .provider import MetadataProvider

logger = logging.getLogger(__name__)


def tableset(root: Table, metadata: MetadataProvider) -> List[Table]:
    """Return the root table and every table one foreign key away from it.

    Args:
        root: Table to start from.
        metadata: Provider for foreign keys and table rows of the root's database.

    Returns:
        Tables in discovery order (root first), each appearing once with
        its `links` populated. Duplicate link entries are collapsed.
    """
    links: Dict[int, List[Optional[int]]] = {root.id: [None]}
    tables: Dict[int, Table] = {root.id: root}

    def reach(table_id: int, link: int) -> None:
        if table_id not in tables:
            tables[table_id] = metadata.get_table(table_id)
            links[table_id] = []
        if link not in links[table_id]:
            links[table_id].append(link)

    for field_id, source_id, target_id in metadata.get_foreign_keys(root.db_id):
        if source_id == root.id:
            reach(target_id, field_id)
        if target_id == root.id:
            reach(source_id, field_id)

    result = [table.with_links(tuple(links[table_id])) for table_id, table in tables.items()]
    logger.debug(
        "Table %s reaches %d tables: %s",
        root.name,
        len(result),
        ", ".join(t.name for t in result),
    )
    return result


__all__ = ["tableset"]
