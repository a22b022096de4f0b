"""Tests for matching type specifications against fields and tables."""

from autodash.core.models import Context
from autodash.binding.matching import field_candidates, filter_fields, filter_tables
from autodash.rules.models import DimensionDef
from autodash.schema.graph import tableset
from autodash.schema.provider import SchemaMetadata

from conftest import CUSTOMERS, CUSTOMERS_NAME, ORDERS, ORDERS_CREATED_AT, ORDERS_CUSTOMER_ID


def _table(context, table_id):
    return next(t for t in context.tables if t.id == table_id)


class TestFilterFields:
    def test_type_tag_uses_is_a(self, context):
        fields = filter_fields("type/Category", _table(context, CUSTOMERS), context)
        assert [(f.id, f.link) for f in fields] == [(CUSTOMERS_NAME, ORDERS_CUSTOMER_ID)]

    def test_every_match_satisfies_is_a(self, context):
        for table in context.tables:
            for field in filter_fields("type/Number", table, context):
                assert context.hierarchy.is_a(field.effective_type, "type/Number")

    def test_root_fields_have_no_link(self, context):
        fields = filter_fields("type/FK", _table(context, ORDERS), context)
        assert [(f.id, f.link) for f in fields] == [(ORDERS_CUSTOMER_ID, None)]

    def test_ga_dimension_matches_exact_name(self, hierarchy):
        metadata = SchemaMetadata.from_records(
            [{"id": 1, "name": "ga_sessions", "display_name": None,
              "entity_type": "entity/GoogleAnalyticsTable", "db_id": 1}],
            [
                {"id": 1, "name": "ga:country", "display_name": None, "base_type": "type/Text",
                 "special_type": None, "table_id": 1, "fk_target_field_id": None},
                {"id": 2, "name": "ga:countryIsoCode", "display_name": None,
                 "base_type": "type/Text", "special_type": None, "table_id": 1,
                 "fk_target_field_id": None},
            ],
        )
        root = metadata.get_table(1)
        context = Context(1, 1, tableset(root, metadata), metadata, hierarchy)
        fields = filter_fields("ga:country", context.tables[0], context)
        assert [f.id for f in fields] == [1]


class TestFilterTables:
    def test_generic_matches_all(self, context):
        assert [t.id for t in filter_tables("entity/GenericTable", context)] == [ORDERS, CUSTOMERS]

    def test_specific(self, context):
        assert [t.id for t in filter_tables("entity/UserTable", context)] == [CUSTOMERS]


class TestFieldCandidates:
    def test_table_and_field_spec(self, context):
        matches = field_candidates(context, DimensionDef(("entity/GenericTable", "type/FK")))
        assert [m.id for m in matches] == [ORDERS_CUSTOMER_ID]

    def test_single_spec_matches_root_fields(self, context):
        matches = field_candidates(context, DimensionDef(("type/DateTime",)))
        assert [m.id for m in matches] == [ORDERS_CREATED_AT]

    def test_single_spec_matching_root_entity_binds_table(self, context):
        matches = field_candidates(context, DimensionDef(("entity/TransactionTable",)))
        assert [(type(m).__name__, m.id) for m in matches] == [("Table", ORDERS)]

    def test_links_to_keeps_fields_linking_to_that_entity(self, context):
        definition = DimensionDef(("entity/GenericTable", "type/FK"), links_to="entity/UserTable")
        assert [m.id for m in field_candidates(context, definition)] == [ORDERS_CUSTOMER_ID]

    def test_links_to_without_linked_table(self, context):
        definition = DimensionDef(("entity/GenericTable", "type/FK"), links_to="entity/ProductTable")
        assert field_candidates(context, definition) == []

    def test_no_match(self, context):
        assert field_candidates(context, DimensionDef(("entity/GenericTable", "type/Country"))) == []
