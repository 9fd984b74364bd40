"""Leaf item storage keyed by container address and optional node."""

import json
import sqlite3
import time
import uuid
from typing import Any

from loguru import logger

from content_catalog.core.tree.store import TreeStore
from content_catalog.errors import InvalidDestination, InvalidSelection, NotFound
from content_catalog.models.node import Address, ContentItem

_ITEM_COLUMNS = "id, partition, selectors, node_id, payload, created_by, created_at"


def _row_to_item(row: tuple) -> ContentItem:
    return ContentItem(
        id=row[0],
        address=Address.from_columns(row[1], row[2]),
        node_id=row[3],
        payload=json.loads(row[4]),
        created_by=row[5],
        created_at=row[6],
    )


def _dump_payload(payload: dict[str, Any]) -> str:
    return json.dumps(payload, sort_keys=True, ensure_ascii=False)


class ItemStore:
    """Items of one catalog.

    A container holds either items or child nodes, never both: items can only
    be placed on a node without children, or left unfiled in an address
    without root nodes.
    """

    def __init__(self, conn: sqlite3.Connection, tree: TreeStore) -> None:
        self.conn = conn
        self.tree = tree
        self.schema = tree.schema

    def get(self, item_id: str) -> ContentItem:
        row = self.conn.execute(
            f"SELECT {_ITEM_COLUMNS} FROM items WHERE catalog = ? AND id = ?",
            (self.schema.name, item_id),
        ).fetchone()
        if row is None:
            msg = f"Item {item_id!r} not found in {self.schema.name}"
            raise NotFound(msg)
        return _row_to_item(row)

    def check_destination(self, address: Address, node_id: str | None) -> None:
        """Raise InvalidDestination unless the container can hold items now."""
        try:
            self.schema.validate_address(address)
        except InvalidSelection as e:
            raise InvalidDestination(str(e)) from e

        if node_id is None:
            if self.tree.has_children(address, None):
                msg = f"{address.key!r} has folders; items must go into one of them"
                raise InvalidDestination(msg)
            return

        node = self.tree.find_node(node_id)
        if node is None:
            msg = f"Destination node {node_id!r} not found"
            raise InvalidDestination(msg)
        if node.address != address:
            msg = f"Destination node {node.name!r} is in {node.address.key!r}, not {address.key!r}"
            raise InvalidDestination(msg)
        if self.tree.has_children(address, node_id):
            msg = f"{node.name!r} has sub-folders; items must go into one of them"
            raise InvalidDestination(msg)

    def create(
        self,
        address: Address,
        node_id: str | None,
        payload: dict[str, Any],
        created_by: str,
    ) -> ContentItem:
        self.check_destination(address, node_id)
        item = ContentItem(
            id=uuid.uuid4().hex,
            address=address,
            node_id=node_id,
            payload=dict(payload),
            created_by=created_by,
            created_at=int(time.time() * 1000),
        )
        self.conn.execute(
            f"INSERT INTO items (catalog, {_ITEM_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                self.schema.name, item.id, address.partition, address.selector_key,
                node_id, _dump_payload(item.payload), created_by, item.created_at,
            ),
        )
        self.conn.commit()
        logger.debug("Created item {} in {} node={}", item.id, address.key, node_id)
        return item

    def update(self, item_id: str, partial_payload: dict[str, Any]) -> None:
        """Shallow-merge ``partial_payload`` into the stored payload."""
        item = self.get(item_id)
        payload = {**item.payload, **partial_payload}
        self.conn.execute(
            "UPDATE items SET payload = ? WHERE catalog = ? AND id = ?",
            (_dump_payload(payload), self.schema.name, item_id),
        )
        self.conn.commit()

    def delete(self, item_id: str) -> None:
        self.get(item_id)
        self.conn.execute(
            "DELETE FROM items WHERE catalog = ? AND id = ?",
            (self.schema.name, item_id),
        )
        self.conn.commit()
        logger.debug("Deleted item {}", item_id)

    def relocate(self, item_id: str, address: Address, node_id: str | None) -> None:
        """Rewrite an item's address and node in one statement (no checks)."""
        self.conn.execute(
            "UPDATE items SET partition = ?, selectors = ?, node_id = ? "
            "WHERE catalog = ? AND id = ?",
            (address.partition, address.selector_key, node_id, self.schema.name, item_id),
        )
        self.conn.commit()

    def list_by_node(self, node_id: str) -> tuple[ContentItem, ...]:
        rows = self.conn.execute(
            f"SELECT {_ITEM_COLUMNS} FROM items WHERE catalog = ? AND node_id = ? "
            "ORDER BY created_at, rowid",
            (self.schema.name, node_id),
        ).fetchall()
        return tuple(_row_to_item(r) for r in rows)

    def list_unfiled(self, address: Address) -> tuple[ContentItem, ...]:
        rows = self.conn.execute(
            f"SELECT {_ITEM_COLUMNS} FROM items "
            "WHERE catalog = ? AND partition = ? AND selectors = ? AND node_id IS NULL "
            "ORDER BY created_at, rowid",
            (self.schema.name, address.partition, address.selector_key),
        ).fetchall()
        return tuple(_row_to_item(r) for r in rows)

    def list_at(self, address: Address, node_id: str | None) -> tuple[ContentItem, ...]:
        """Items directly in a container: a node's items, or the unfiled ones."""
        if node_id is None:
            return self.list_unfiled(address)
        return self.list_by_node(node_id)

    def count_at(self, address: Address, node_id: str | None) -> int:
        row = self.conn.execute(
            "SELECT COUNT(*) FROM items "
            "WHERE catalog = ? AND partition = ? AND selectors = ? AND node_id IS ?",
            (self.schema.name, address.partition, address.selector_key, node_id),
        ).fetchone()
        return row[0]

    def count_grouped(self, address: Address) -> dict[str | None, int]:
        """Direct item counts per node id (None for unfiled) within an address."""
        rows = self.conn.execute(
            "SELECT node_id, COUNT(*) FROM items "
            "WHERE catalog = ? AND partition = ? AND selectors = ? GROUP BY node_id",
            (self.schema.name, address.partition, address.selector_key),
        ).fetchall()
        return {node_id: count for node_id, count in rows}

    def count_by_partition(self) -> dict[str, int]:
        rows = self.conn.execute(
            "SELECT partition, COUNT(*) FROM items WHERE catalog = ? GROUP BY partition",
            (self.schema.name,),
        ).fetchall()
        return {partition: count for partition, count in rows}
