"""End-to-end tests for dashboard generation."""

from unittest.mock import MagicMock

import pytest

from autodash.automagic import automagic_dashboard, build_context, generate_cards
from autodash.core.models import Table
from autodash.dashboard import InMemoryDashboardSink
from autodash.permissions import AllowAllPermissions, TablePermissions
from autodash.rules.registry import RuleSet

from conftest import (
    CUSTOMERS,
    CUSTOMERS_ID,
    ORDERS,
    ORDERS_CREATED_AT,
    ORDERS_CUSTOMER_ID,
    SAMPLE_RULE,
)


def _ruleset(hierarchy, *rules):
    return RuleSet(RuleSet.parse_rule(r, hierarchy) for r in rules)


class TestBuildContext:
    def test_orders_customers_context(self, orders, sample_rule, metadata, hierarchy):
        context = build_context(orders, sample_rule, metadata, hierarchy)
        assert [(t.id, t.links) for t in context.tables] == [
            (ORDERS, (None,)),
            (CUSTOMERS, (ORDERS_CUSTOMER_ID,)),
        ]
        assert [m.id for m in context.dimensions["Customer"].matches] == [ORDERS_CUSTOMER_ID]
        assert [m.id for m in context.dimensions["CreatedAt"].matches] == [ORDERS_CREATED_AT]
        assert list(context.metrics) == ["Count"]

    def test_missing_entity_type_defaults_to_generic(self, sample_rule, metadata, hierarchy):
        root = Table(id=ORDERS, name="orders", db_id=1)
        context = build_context(root, sample_rule, metadata, hierarchy)
        assert context.root_table.entity_type == "entity/GenericTable"


class TestAutomagicDashboard:
    def test_orders_by_customer(self, orders, metadata, hierarchy):
        sink = InMemoryDashboardSink()
        dashboard_id = automagic_dashboard(
            orders, rules=_ruleset(hierarchy, SAMPLE_RULE), metadata=metadata, sink=sink
        )

        assert dashboard_id == 1
        dashboard = sink.dashboards[1]
        assert dashboard["title"] == "A look at Orders"
        assert dashboard["description"] == "Orders broken down by customer"
        (card,) = dashboard["cards"]
        assert card["card_id"] == "OrdersByCustomer"
        assert card["title"] == "Orders per Customer ID"
        assert card["score"] == pytest.approx(90.0)
        assert card["query"] == {
            "type": "query",
            "database": 1,
            "query": {
                "source_table": ORDERS,
                "breakout": [["fk->", ORDERS_CUSTOMER_ID, CUSTOMERS_ID]],
                "aggregation": [["count"]],
            },
        }

    def test_no_applicable_rule(self, orders, metadata, hierarchy):
        rules = _ruleset(hierarchy, {"table_type": "UserTable"})
        with pytest.raises(ValueError, match="No applicable rule for table orders"):
            automagic_dashboard(orders, rules=rules, metadata=metadata)

    def test_no_candidates_returns_none(self, orders, metadata, hierarchy):
        rule = {
            "table_type": "GenericTable",
            "dimensions": [{"Country": {"field_type": ["GenericTable", "Country"]}}],
            "metrics": [{"Count": {"metric": ["count"]}}],
            "cards": [{"ByCountry": {"title": "t", "dimensions": ["Country"], "metrics": ["Count"]}}],
        }
        sink = MagicMock()
        result = automagic_dashboard(
            orders, rules=_ruleset(hierarchy, rule), metadata=metadata, sink=sink
        )
        assert result is None
        sink.create_dashboard.assert_not_called()

    def test_permission_denied_everywhere_returns_none(self, orders, metadata, hierarchy):
        result = automagic_dashboard(
            orders,
            rules=_ruleset(hierarchy, SAMPLE_RULE),
            metadata=metadata,
            permissions=TablePermissions([], metadata=metadata),
        )
        assert result is None

    def test_most_specific_rule_applied(self, orders, metadata, hierarchy, caplog):
        specific = dict(SAMPLE_RULE, table_type="TransactionTable", title="Transactions")
        sink = InMemoryDashboardSink()
        caplog.set_level("INFO")
        automagic_dashboard(
            orders,
            rules=_ruleset(hierarchy, SAMPLE_RULE, specific),
            metadata=metadata,
            sink=sink,
        )
        assert sink.dashboards[1]["title"] == "Transactions"
        assert "Applying heuristic" in caplog.text

    def test_invalid_cap(self, orders, metadata, hierarchy):
        with pytest.raises(ValueError, match="Invalid candidate cap"):
            automagic_dashboard(
                orders, rules=_ruleset(hierarchy, SAMPLE_RULE), metadata=metadata, max_candidates=0
            )

    def test_metadata_errors_propagate(self, orders, sample_rule, hierarchy):
        metadata = MagicMock()
        metadata.get_foreign_keys.side_effect = ConnectionError("metadata unavailable")
        with pytest.raises(ConnectionError):
            automagic_dashboard(orders, rules=RuleSet([sample_rule]), metadata=metadata)


class TestGenerateCards:
    def test_duplicate_card_keeps_best_group(self, orders, metadata, hierarchy):
        rule = RuleSet.parse_rule(
            {
                "table_type": "GenericTable",
                "metrics": [{"Count": {"metric": ["count"]}}],
                "cards": [
                    {"Rowcount": {"title": "first", "metrics": ["Count"], "score": 40}},
                    {"Rowcount": {"title": "second", "metrics": ["Count"], "score": 80}},
                    {"Rowcount": {"title": "third", "metrics": ["Count"], "score": 80}},
                ],
            },
            hierarchy,
        )
        context = build_context(orders, rule, metadata, hierarchy)
        cards = generate_cards(context, rule, AllowAllPermissions(), None)
        assert [(c.card_id, c.title) for c in cards] == [("Rowcount", "second")]

    def test_cards_without_candidates_dropped(self, orders, metadata, hierarchy):
        rule = RuleSet.parse_rule(
            {
                "table_type": "GenericTable",
                "metrics": [{"Count": {"metric": ["count"]}}],
                "cards": [
                    {"Rowcount": {"title": "rows", "metrics": ["Count"]}},
                    {"Broken": {"title": "broken", "metrics": ["Missing"]}},
                ],
            },
            hierarchy,
        )
        context = build_context(orders, rule, metadata, hierarchy)
        cards = generate_cards(context, rule, AllowAllPermissions(), 10)
        assert [c.card_id for c in cards] == ["Rowcount"]
