"""Core enumerations used across the package."""

from __future__ import annotations

from enum import Enum


class ReferenceMode(str, Enum):
    """Output modes for turning schema objects into references.

    Values are strings to ease serialization and CLI interchange.
    """

    MBQL = "mbql"
    STRING = "string"
    NATIVE = "native"


class SortDirection(str, Enum):
    """Ordering directions emitted in structured queries."""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def from_rule(cls, ordering: str) -> "SortDirection":
        """Map a rule ordering word ("ascending"/"descending") to a direction.

        Anything other than "ascending" sorts descending.
        """
        return cls.ASC if str(ordering).strip().lower() == "ascending" else cls.DESC


__all__ = ["ReferenceMode", "SortDirection"]
