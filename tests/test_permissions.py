"""Tests for the bundled permission checkers."""

import pytest

from autodash.permissions import AllowAllPermissions, TablePermissions

from conftest import CUSTOMERS, CUSTOMERS_ID, CUSTOMERS_NAME, ORDERS, ORDERS_CUSTOMER_ID, ORDERS_TOTAL

STRUCTURED = {
    "type": "query",
    "database": 1,
    "query": {"source_table": ORDERS, "aggregation": [["sum", ["field-id", ORDERS_TOTAL]]]},
}
JOINED = {
    "type": "query",
    "database": 1,
    "query": {
        "source_table": ORDERS,
        "breakout": [["fk->", ORDERS_CUSTOMER_ID, CUSTOMERS_NAME]],
        "aggregation": [["sum", ["field-id", ORDERS_TOTAL]]],
        "order_by": [["desc", ["aggregate-field", 0]]],
    },
}
NATIVE = {"type": "native", "database": 1, "native": {"query": "SELECT 1"}}


class TestAllowAllPermissions:
    def test_allows_everything(self):
        checker = AllowAllPermissions()
        assert checker.has_write_permission(STRUCTURED)
        assert checker.has_write_permission(NATIVE)


class TestTablePermissions:
    def test_readable_table(self, metadata):
        assert TablePermissions([ORDERS], metadata=metadata).has_write_permission(STRUCTURED)
        assert not TablePermissions([CUSTOMERS], metadata=metadata).has_write_permission(STRUCTURED)

    def test_all_tables_when_unrestricted(self):
        assert TablePermissions().has_write_permission(STRUCTURED)
        assert TablePermissions().has_write_permission(JOINED)

    def test_join_into_unreadable_table_denied(self, metadata):
        """A breakout through a foreign key reads the joined table too."""
        assert not TablePermissions([ORDERS], metadata=metadata).has_write_permission(JOINED)
        assert TablePermissions([ORDERS, CUSTOMERS], metadata=metadata).has_write_permission(JOINED)

    def test_query_tables(self, metadata):
        checker = TablePermissions([ORDERS], metadata=metadata)
        assert checker.query_tables(JOINED) == {ORDERS, CUSTOMERS}
        assert checker.query_tables(STRUCTURED) == {ORDERS}

    def test_fk_reference_on_source_field_checks_target_table(self, metadata):
        query = {
            "type": "query",
            "database": 1,
            "query": {"source_table": ORDERS, "breakout": [["fk->", ORDERS_CUSTOMER_ID, CUSTOMERS_ID]]},
        }
        assert not TablePermissions([ORDERS], metadata=metadata).has_write_permission(query)

    def test_restriction_requires_metadata(self):
        with pytest.raises(ValueError, match="metadata provider"):
            TablePermissions(readable_table_ids=[ORDERS])

    def test_native_requires_database_access(self):
        assert not TablePermissions().has_write_permission(NATIVE)
        assert TablePermissions(native_database_ids=[1]).has_write_permission(NATIVE)
        assert not TablePermissions(native_database_ids=[2]).has_write_permission(NATIVE)
