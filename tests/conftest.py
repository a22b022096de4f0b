"""Shared pytest fixtures: a small Orders/Customers schema, the built-in type
hierarchy and a rule exercising it."""

from typing import Any, Dict, List

import pytest

from autodash.core.hierarchy import TypeHierarchy, default_hierarchy
from autodash.core.models import Context, Table
from autodash.rules.models import Rule
from autodash.rules.registry import RuleSet
from autodash.schema.graph import tableset
from autodash.schema.provider import SchemaMetadata

ORDERS = 1
CUSTOMERS = 2

ORDERS_ID = 10
ORDERS_CUSTOMER_ID = 11
ORDERS_TOTAL = 12
ORDERS_CREATED_AT = 13
CUSTOMERS_ID = 20
CUSTOMERS_NAME = 21

TABLE_RECORDS: List[Dict[str, Any]] = [
    {
        "id": ORDERS,
        "name": "orders",
        "display_name": "Orders",
        "entity_type": "entity/TransactionTable",
        "db_id": 1,
    },
    {
        "id": CUSTOMERS,
        "name": "customers",
        "display_name": "Customers",
        "entity_type": "entity/UserTable",
        "db_id": 1,
    },
]

FIELD_RECORDS: List[Dict[str, Any]] = [
    {"id": ORDERS_ID, "name": "id", "display_name": "ID", "base_type": "type/Integer",
     "special_type": "type/PK", "table_id": ORDERS, "fk_target_field_id": None},
    {"id": ORDERS_CUSTOMER_ID, "name": "customer_id", "display_name": "Customer ID",
     "base_type": "type/Integer", "special_type": "type/FK", "table_id": ORDERS,
     "fk_target_field_id": CUSTOMERS_ID},
    {"id": ORDERS_TOTAL, "name": "total", "display_name": "Total", "base_type": "type/Float",
     "special_type": "type/Income", "table_id": ORDERS, "fk_target_field_id": None},
    {"id": ORDERS_CREATED_AT, "name": "created_at", "display_name": "Created At",
     "base_type": "type/DateTime", "special_type": None, "table_id": ORDERS,
     "fk_target_field_id": None},
    {"id": CUSTOMERS_ID, "name": "id", "display_name": "ID", "base_type": "type/Integer",
     "special_type": "type/PK", "table_id": CUSTOMERS, "fk_target_field_id": None},
    {"id": CUSTOMERS_NAME, "name": "name", "display_name": "Name", "base_type": "type/Text",
     "special_type": "type/Name", "table_id": CUSTOMERS, "fk_target_field_id": None},
]

SAMPLE_RULE: Dict[str, Any] = {
    "table_type": "GenericTable",
    "title": "A look at [[GenericTable]]",
    "description": "Orders broken down by customer",
    "dimensions": [
        {"Customer": {"field_type": ["GenericTable", "FK"], "score": 100}},
        {"CreatedAt": {"field_type": ["DateTime"], "score": 80}},
    ],
    "metrics": [
        {"Count": {"metric": ["count"], "score": 100}},
    ],
    "cards": [
        {
            "OrdersByCustomer": {
                "title": "[[GenericTable]] per [[Customer]]",
                "dimensions": ["Customer"],
                "metrics": ["Count"],
                "score": 90,
            }
        },
    ],
}


@pytest.fixture
def metadata() -> SchemaMetadata:
    """Orders(id, customer_id, total, created_at) -> Customers(id, name)."""
    return SchemaMetadata.from_records(TABLE_RECORDS, FIELD_RECORDS)


@pytest.fixture
def hierarchy() -> TypeHierarchy:
    return default_hierarchy()


@pytest.fixture
def orders(metadata: SchemaMetadata) -> Table:  # pylint: disable=redefined-outer-name
    return metadata.get_table(ORDERS)


@pytest.fixture
def sample_rule(hierarchy: TypeHierarchy) -> Rule:  # pylint: disable=redefined-outer-name
    return RuleSet.parse_rule(SAMPLE_RULE, hierarchy, source="sample")


@pytest.fixture
def context(metadata, hierarchy, orders) -> Context:  # pylint: disable=redefined-outer-name
    """Context rooted at Orders with no dimensions bound yet."""
    return Context(
        root_table_id=orders.id,
        database_id=orders.db_id,
        tables=tableset(orders, metadata),
        metadata=metadata,
        hierarchy=hierarchy,
    )
