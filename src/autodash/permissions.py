"""Permission checks for generated queries.

Card candidates are only kept when the current user could save the query.
The checker is a collaborator: implement the `PermissionChecker` protocol
(duck typing, no base class needed) to plug in a real permission store.

Example:
    ```python
    class ReadOnlyAnalyst:
        def has_write_permission(self, query: dict) -> bool:
            return query["type"] == "query"
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, Optional, Protocol, Set

if TYPE_CHECKING:
    from autodash.schema.provider import MetadataProvider


class PermissionChecker(Protocol):
    """Protocol for deciding whether a query may be saved as a card."""

    def has_write_permission(self, query: Dict[str, Any]) -> bool:
        """Return True if the query may be saved.

        Args:
            query: Structured or native query dict as built by
                `autodash.core.query.plan`.

        Raises:
            Any error of the underlying permission store; it propagates.
        """
        ...


class AllowAllPermissions:
    """Grants everything (single-user or offline use)."""

    def has_write_permission(self, query: Dict[str, Any]) -> bool:
        return True


def _field_ids(form: Any) -> Iterator[int]:
    """Field ids named by ``["field-id", id]`` and ``["fk->", link, id]`` references."""
    if isinstance(form, dict):
        for value in form.values():
            yield from _field_ids(value)
    elif isinstance(form, (list, tuple)):
        if len(form) == 2 and form[0] == "field-id":
            yield form[1]
        elif len(form) == 3 and form[0] == "fk->":
            yield form[1]
            yield form[2]
        else:
            for item in form:
                yield from _field_ids(item)


class TablePermissions:
    """Grants structured queries on readable tables and native queries on allowed databases.

    A structured query is granted only when every table it touches is
    readable: its source table and the tables owning each referenced field,
    including both sides of every ``fk->`` join.

    Args:
        readable_table_ids: Tables whose data may be queried. None grants all tables.
        native_database_ids: Databases allowing raw SQL. Empty denies all native queries.
        metadata: Provider used to find the table owning a referenced field.
            Required when `readable_table_ids` restricts access.

    Raises:
        ValueError: If tables are restricted but no metadata provider is given.
    """

    def __init__(
        self,
        readable_table_ids: Optional[Iterable[int]] = None,
        native_database_ids: Iterable[int] = (),
        metadata: Optional["MetadataProvider"] = None,
    ) -> None:
        if readable_table_ids is not None and metadata is None:
            raise ValueError("TablePermissions needs a metadata provider to restrict tables")
        self.readable_table_ids = None if readable_table_ids is None else set(readable_table_ids)
        self.native_database_ids = set(native_database_ids)
        self.metadata = metadata

    def query_tables(self, query: Dict[str, Any]) -> Set[int]:
        """Ids of every table a structured query reads."""
        inner = query.get("query") or {}
        tables = {inner.get("source_table")}
        for field_id in _field_ids(inner):
            tables.add(self.metadata.get_field(field_id).table_id)
        return tables

    def has_write_permission(self, query: Dict[str, Any]) -> bool:
        if query.get("type") == "native":
            return query.get("database") in self.native_database_ids
        if self.readable_table_ids is None:
            return True
        return self.query_tables(query) <= self.readable_table_ids


__all__ = ["PermissionChecker", "AllowAllPermissions", "TablePermissions"]
