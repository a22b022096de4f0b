"""Schema metadata access and schema graph construction."""

from .graph import tableset
from .provider import MetadataProvider, SchemaMetadata

__all__ = ["MetadataProvider", "SchemaMetadata", "tableset"]
