"""Built-in type hierarchy definitions.

Maps each type tag to its direct parents. Field types live under "type/",
table entity types under "entity/". Used by `default_hierarchy()`; custom
hierarchies can extend this mapping from YAML.
"""

from __future__ import annotations

from typing import Dict, List

FIELD_TYPES: Dict[str, List[str]] = {
    # Storage types
    "type/Number": ["type/*"],
    "type/Integer": ["type/Number"],
    "type/BigInteger": ["type/Integer"],
    "type/Float": ["type/Number"],
    "type/Decimal": ["type/Float"],
    "type/Text": ["type/*"],
    "type/Boolean": ["type/*"],
    "type/DateTime": ["type/*"],
    "type/Date": ["type/DateTime"],
    "type/Time": ["type/DateTime"],
    "type/Collection": ["type/*"],
    "type/Dictionary": ["type/Collection"],
    "type/Array": ["type/Collection"],
    # Semantic types
    "type/Special": ["type/*"],
    "type/PK": ["type/Special"],
    "type/FK": ["type/Special"],
    "type/Category": ["type/Special"],
    "type/Name": ["type/Category", "type/Text"],
    "type/Title": ["type/Category", "type/Text"],
    "type/Enum": ["type/Category"],
    "type/Country": ["type/Category"],
    "type/State": ["type/Category"],
    "type/City": ["type/Category"],
    "type/ZipCode": ["type/Category"],
    "type/Coordinate": ["type/Float", "type/Special"],
    "type/Latitude": ["type/Coordinate"],
    "type/Longitude": ["type/Coordinate"],
    "type/Income": ["type/Number", "type/Special"],
    "type/Discount": ["type/Number", "type/Special"],
    "type/Quantity": ["type/Integer", "type/Special"],
    "type/Score": ["type/Number", "type/Special"],
    "type/Email": ["type/Text", "type/Special"],
    "type/URL": ["type/Text", "type/Special"],
    "type/Description": ["type/Text", "type/Special"],
    "type/CreationTimestamp": ["type/DateTime", "type/Special"],
    "type/JoinTimestamp": ["type/DateTime", "type/Special"],
    "type/UNIXTimestamp": ["type/Integer", "type/DateTime"],
    "type/UNIXTimestampSeconds": ["type/UNIXTimestamp"],
    "type/UNIXTimestampMilliseconds": ["type/UNIXTimestamp"],
}

ENTITY_TYPES: Dict[str, List[str]] = {
    "entity/GenericTable": ["entity/*"],
    "entity/UserTable": ["entity/GenericTable"],
    "entity/CompanyTable": ["entity/GenericTable"],
    "entity/ProductTable": ["entity/GenericTable"],
    "entity/SubscriptionTable": ["entity/GenericTable"],
    "entity/EventTable": ["entity/GenericTable"],
    "entity/TransactionTable": ["entity/EventTable"],
    "entity/GoogleAnalyticsTable": ["entity/GenericTable"],
}

DEFAULT_TYPES: Dict[str, List[str]] = {**FIELD_TYPES, **ENTITY_TYPES}

__all__ = ["FIELD_TYPES", "ENTITY_TYPES", "DEFAULT_TYPES"]
