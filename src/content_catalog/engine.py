"""Wire one catalog's stores and operations over a single connection."""

import sqlite3
from dataclasses import dataclass

from content_catalog.catalogs import get_schema
from content_catalog.core.exporter.serializer import ExportSerializer
from content_catalog.core.importer.reconciler import ImportReconciler
from content_catalog.core.items.mover import CrossTreeMover
from content_catalog.core.items.store import ItemStore
from content_catalog.core.tree.counts import CountAggregator
from content_catalog.core.tree.navigation import NavigationCursor
from content_catalog.core.tree.reorder import SiblingReorderer
from content_catalog.core.tree.store import TreeStore
from content_catalog.models.schema import PartitionSchema


@dataclass(frozen=True)
class CatalogEngine:
    """Every component of one catalog, sharing one connection."""

    schema: PartitionSchema
    tree: TreeStore
    items: ItemStore
    counts: CountAggregator
    reorderer: SiblingReorderer
    mover: CrossTreeMover
    exporter: ExportSerializer
    importer: ImportReconciler

    def cursor(self) -> NavigationCursor:
        """A fresh cursor at the root."""
        return NavigationCursor(self.tree)


def build_engine(conn: sqlite3.Connection, schema: PartitionSchema | str) -> CatalogEngine:
    """Build the engine for a schema, or for a built-in catalog by name."""
    if isinstance(schema, str):
        schema = get_schema(schema)
    tree = TreeStore(conn, schema)
    items = ItemStore(conn, tree)
    return CatalogEngine(
        schema=schema,
        tree=tree,
        items=items,
        counts=CountAggregator(tree, items),
        reorderer=SiblingReorderer(tree),
        mover=CrossTreeMover(items),
        exporter=ExportSerializer(tree, items),
        importer=ImportReconciler(tree, items),
    )
