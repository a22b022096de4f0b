"""Schema metadata provider.

The pipeline only reads schema metadata through the `MetadataProvider`
protocol. `SchemaMetadata` is a pandas-backed implementation holding one
frame of tables and one frame of fields, loadable from records or from a
directory with `tables.csv` and `fields.csv`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Protocol, Tuple, Union

import pandas as pd

from autodash.core.models import Field, Table

logger = logging.getLogger(__name__)

TABLE_COLUMNS = ["id", "name", "display_name", "entity_type", "db_id"]
FIELD_COLUMNS = [
    "id",
    "name",
    "display_name",
    "base_type",
    "special_type",
    "table_id",
    "fk_target_field_id",
]

ForeignKey = Tuple[int, int, int]  # (field_id, source_table_id, target_table_id)


class MetadataProvider(Protocol):
    """Read-only access to tables, fields and foreign keys."""

    def get_table(self, table_id: int) -> Table:
        """Return the table with id `table_id`.

        Raises:
            KeyError: If no such table exists.
        """
        ...

    def get_field(self, field_id: int) -> Field:
        """Return the field with id `field_id`.

        Raises:
            KeyError: If no such field exists.
        """
        ...

    def get_fields(self, table_id: int) -> List[Field]:
        """Return all fields of table `table_id`, in id order."""
        ...

    def get_foreign_keys(self, db_id: int) -> List[ForeignKey]:
        """Return every foreign key between tables of database `db_id`."""
        ...


def _optional(value: Any) -> Any:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def _optional_int(value: Any) -> Optional[int]:
    value = _optional(value)
    return None if value is None else int(value)


def _optional_str(value: Any) -> Optional[str]:
    value = _optional(value)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class SchemaMetadata:
    """pandas-backed metadata store for one or more databases."""

    def __init__(self, tables: pd.DataFrame, fields: pd.DataFrame) -> None:
        missing = [c for c in ("id", "name", "db_id") if c not in tables.columns]
        if missing:
            raise ValueError(f"Tables frame is missing columns: {', '.join(missing)}")
        missing = [c for c in ("id", "name", "base_type", "table_id") if c not in fields.columns]
        if missing:
            raise ValueError(f"Fields frame is missing columns: {', '.join(missing)}")

        self.tables = tables.reindex(columns=TABLE_COLUMNS).copy()
        self.fields = fields.reindex(columns=FIELD_COLUMNS).copy()
        self.tables["id"] = self.tables["id"].astype("int64")
        self.tables["db_id"] = self.tables["db_id"].astype("int64")
        self.fields["id"] = self.fields["id"].astype("int64")
        self.fields["table_id"] = self.fields["table_id"].astype("int64")
        self.fields["fk_target_field_id"] = self.fields["fk_target_field_id"].astype("Int64")
        self.tables = self.tables.set_index("id", drop=False).rename_axis(None).sort_index()
        self.fields = self.fields.set_index("id", drop=False).rename_axis(None).sort_index()

    @classmethod
    def from_records(
        cls,
        tables: Iterable[Mapping[str, Any]],
        fields: Iterable[Mapping[str, Any]],
    ) -> "SchemaMetadata":
        return cls(
            pd.DataFrame(list(tables), columns=TABLE_COLUMNS),
            pd.DataFrame(list(fields), columns=FIELD_COLUMNS),
        )

    @classmethod
    def from_csv(cls, directory: Path) -> "SchemaMetadata":
        """Load `tables.csv` and `fields.csv` from `directory`.

        Raises:
            FileNotFoundError: If the directory or either file is missing.
            ValueError: If a file cannot be parsed.
        """
        tables_path = directory / "tables.csv"
        fields_path = directory / "fields.csv"
        for path in (tables_path, fields_path):
            if not path.exists():
                raise FileNotFoundError(f"Schema file not found: {path}")
        try:
            tables = pd.read_csv(tables_path, encoding="utf-8-sig")
            fields = pd.read_csv(fields_path, encoding="utf-8-sig")
        except (OSError, pd.errors.ParserError) as e:
            raise ValueError(f"Failed to read schema files in {directory}: {e}") from e
        logger.debug("Loaded %d tables and %d fields from %s", len(tables), len(fields), directory)
        return cls(tables, fields)

    # ------------------------------------------------------------------
    # MetadataProvider
    # ------------------------------------------------------------------

    def get_table(self, table_id: int) -> Table:
        try:
            row = self.tables.loc[int(table_id)]
        except KeyError:
            raise KeyError(f"Unknown table id: {table_id}") from None
        return self._table(row)

    def get_field(self, field_id: int) -> Field:
        try:
            row = self.fields.loc[int(field_id)]
        except KeyError:
            raise KeyError(f"Unknown field id: {field_id}") from None
        return self._field(row)

    def get_fields(self, table_id: int) -> List[Field]:
        rows = self.fields[self.fields["table_id"] == int(table_id)]
        return [self._field(row) for _, row in rows.iterrows()]

    def get_foreign_keys(self, db_id: int) -> List[ForeignKey]:
        table_ids = self.tables.index[self.tables["db_id"] == int(db_id)]
        fks = self.fields[
            self.fields["table_id"].isin(table_ids) & self.fields["fk_target_field_id"].notna()
        ]
        targets = self.fields[["id", "table_id"]].rename(
            columns={"id": "fk_target_field_id", "table_id": "target_table_id"}
        )
        merged = fks.reset_index(drop=True).merge(
            targets.reset_index(drop=True), on="fk_target_field_id", how="inner"
        )
        dangling = len(fks) - len(merged)
        if dangling:
            logger.warning("Ignoring %d foreign keys pointing at unknown fields", dangling)
        return [
            (int(r["id"]), int(r["table_id"]), int(r["target_table_id"]))
            for _, r in merged.sort_values("id").iterrows()
        ]

    # ------------------------------------------------------------------
    # Lookups used by the CLI
    # ------------------------------------------------------------------

    def find_table(self, name_or_id: Union[str, int]) -> Table:
        """Find a table by id or (case-insensitive) name.

        Raises:
            KeyError: If nothing matches.
        """
        text = str(name_or_id).strip()
        if text.isdigit() and int(text) in self.tables.index:
            return self.get_table(int(text))
        matches = self.tables[self.tables["name"].astype(str).str.lower() == text.lower()]
        if matches.empty:
            raise KeyError(f"Unknown table: {name_or_id}")
        return self._table(matches.iloc[0])

    @staticmethod
    def _table(row: pd.Series) -> Table:
        return Table(
            id=int(row["id"]),
            name=str(row["name"]),
            db_id=int(row["db_id"]),
            entity_type=_optional_str(row.get("entity_type")),
            display_name=_optional_str(row.get("display_name")),
        )

    @staticmethod
    def _field(row: pd.Series) -> Field:
        return Field(
            id=int(row["id"]),
            name=str(row["name"]),
            base_type=str(row["base_type"]),
            table_id=int(row["table_id"]),
            special_type=_optional_str(row.get("special_type")),
            fk_target_field_id=_optional_int(row.get("fk_target_field_id")),
            display_name=_optional_str(row.get("display_name")),
        )


__all__ = ["MetadataProvider", "SchemaMetadata", "ForeignKey"]
