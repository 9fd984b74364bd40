"""Replay a Snapshot into a catalog without duplicating nodes or items."""

import sqlite3

from loguru import logger

from content_catalog.core.items.store import ItemStore
from content_catalog.core.tree.store import TreeStore
from content_catalog.errors import CatalogError, ImportRecordError, SnapshotFormatError
from content_catalog.models.snapshot import ImportReport, ItemRecord, NodeRecord, Snapshot


def order_parents_first(nodes: tuple[NodeRecord, ...]) -> list[NodeRecord]:
    """Sort records so every node comes after its parent.

    Records are grouped by their depth in the snapshot (roots first), keeping
    their exported order within a depth. A record whose parent key is not in
    the snapshot keeps depth 0; the import reports it.
    """
    by_key = {n.natural_key: n for n in nodes}

    def depth(record: NodeRecord) -> int:
        result = 0
        seen = {record.natural_key}
        parent_key = record.parent_natural_key
        while parent_key in by_key and parent_key not in seen:
            seen.add(parent_key)
            result += 1
            parent_key = by_key[parent_key].parent_natural_key
        return result

    return sorted(nodes, key=depth)


class ImportReconciler:
    """Imports snapshots into one catalog's stores.

    Nodes are matched by name among the children of their (already resolved)
    parent; items by the catalog's item key within their destination
    container. Re-running an import therefore creates nothing new. Nothing is
    rolled back: a failed record is reported and the rest continue.
    """

    def __init__(self, tree: TreeStore, items: ItemStore) -> None:
        self.tree = tree
        self.items = items
        self.schema = tree.schema

    def import_snapshot(self, snapshot: Snapshot, created_by: str) -> ImportReport:
        if snapshot.type != self.schema.name:
            msg = f"Snapshot is for {snapshot.type!r}, not {self.schema.name!r}"
            raise SnapshotFormatError(msg)

        report = ImportReport()
        key_to_id: dict[str, str] = {}

        for record in order_parents_first(snapshot.nodes):
            try:
                self._import_node(record, key_to_id, created_by, report)
            except ImportRecordError as e:
                self._record_error(report, e)
            except (CatalogError, sqlite3.Error) as e:
                self._record_error(
                    report,
                    ImportRecordError(str(e), record_kind="node", natural_key=record.natural_key),
                )

        for item_record in snapshot.items:
            try:
                self._import_item(item_record, key_to_id, created_by, report)
            except (CatalogError, sqlite3.Error) as e:
                self._record_error(
                    report,
                    ImportRecordError(
                        str(e), record_kind="item", natural_key=item_record.node_natural_key
                    ),
                )

        logger.info(
            "Import into {}: nodes {} created/{} skipped, items {} created/{} skipped, {} error(s)",
            self.schema.name,
            report.nodes_created, report.nodes_skipped,
            report.items_created, report.items_skipped,
            len(report.errors),
        )
        return report

    @staticmethod
    def _record_error(report: ImportReport, error: ImportRecordError) -> None:
        logger.warning("Import {} {!r} failed: {}", error.record_kind, error.natural_key, error)
        report.errors.append(error)

    def _import_node(
        self,
        record: NodeRecord,
        key_to_id: dict[str, str],
        created_by: str,
        report: ImportReport,
    ) -> None:
        address = self.schema.address(record.partition, **record.selectors)

        parent_id: str | None = None
        if record.parent_natural_key is not None:
            parent_id = key_to_id.get(record.parent_natural_key)
            if parent_id is None:
                msg = f"Parent {record.parent_natural_key!r} was not imported"
                raise ImportRecordError(msg, record_kind="node", natural_key=record.natural_key)

        # Stored names are trimmed, so compare trimmed names.
        name = record.name.strip()
        existing = next(
            (n for n in self.tree.list_children(address, parent_id) if n.name == name),
            None,
        )
        if existing is not None:
            key_to_id[record.natural_key] = existing.id
            report.nodes_skipped += 1
            return

        node = self.tree.create_node(address, parent_id, name, created_by)
        if record.locked or record.hidden:
            self.tree.set_flags(node.id, locked=record.locked, hidden=record.hidden)
        key_to_id[record.natural_key] = node.id
        report.nodes_created += 1

    def _import_item(
        self,
        record: ItemRecord,
        key_to_id: dict[str, str],
        created_by: str,
        report: ImportReport,
    ) -> None:
        address = self.schema.address(record.partition, **record.selectors)

        node_id: str | None = None
        if record.node_natural_key is not None:
            node_id = key_to_id.get(record.node_natural_key)
            if node_id is None:
                # Unknown owner: file the item as unfiled instead of keeping a dead reference.
                logger.warning(
                    "Item owner {!r} unknown, importing as unfiled in {}",
                    record.node_natural_key, address.key,
                )

        key = self.schema.item_key(record.payload)
        if any(
            self.schema.item_key(existing.payload) == key
            for existing in self.items.list_at(address, node_id)
        ):
            report.items_skipped += 1
            return

        self.items.create(address, node_id, record.payload, created_by)
        report.items_created += 1
