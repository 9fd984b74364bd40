"""Content catalog: partitioned folder trees of learning content."""

from content_catalog.catalogs import CATALOGS, get_schema
from content_catalog.core.tree.navigation import NavigationCursor
from content_catalog.engine import CatalogEngine, build_engine
from content_catalog.models.node import Address, ContentItem, Node
from content_catalog.models.schema import PartitionSchema, SelectorAxis, SelectorValue

__all__ = [
    "CATALOGS",
    "Address",
    "CatalogEngine",
    "ContentItem",
    "NavigationCursor",
    "Node",
    "PartitionSchema",
    "SelectorAxis",
    "SelectorValue",
    "build_engine",
    "get_schema",
]
