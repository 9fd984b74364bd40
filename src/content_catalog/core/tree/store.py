"""Node storage: creation, renaming, cascading delete and ordered listing."""

import sqlite3
import time
import uuid
from collections import deque
from collections.abc import Iterable

from loguru import logger

from content_catalog.errors import InvalidName, InvalidParent, NotFound, PartialCascadeFailure
from content_catalog.models.node import Address, Node
from content_catalog.models.schema import PartitionSchema

_NODE_COLUMNS = (
    "id, partition, selectors, parent_id, name, sort_order, "
    "locked, hidden, created_by, created_at"
)


def _row_to_node(row: tuple) -> Node:
    return Node(
        id=row[0],
        address=Address.from_columns(row[1], row[2]),
        parent_id=row[3],
        name=row[4],
        order=row[5],
        locked=bool(row[6]),
        hidden=bool(row[7]),
        created_by=row[8],
        created_at=row[9],
    )


def _now_ms() -> int:
    return int(time.time() * 1000)


class TreeStore:
    """Nodes of one catalog, grouped into ordered sibling groups.

    Sibling ``order`` values are kept dense (``1..N``) after every mutation.
    """

    def __init__(self, conn: sqlite3.Connection, schema: PartitionSchema) -> None:
        self.conn = conn
        self.schema = schema

    def find_node(self, node_id: str) -> Node | None:
        row = self.conn.execute(
            f"SELECT {_NODE_COLUMNS} FROM nodes WHERE catalog = ? AND id = ?",
            (self.schema.name, node_id),
        ).fetchone()
        return _row_to_node(row) if row else None

    def get_node(self, node_id: str) -> Node:
        node = self.find_node(node_id)
        if node is None:
            msg = f"Node {node_id!r} not found in {self.schema.name}"
            raise NotFound(msg)
        return node

    def depth_of(self, node: Node) -> int:
        """Number of ancestors above ``node`` (0 for a root node)."""
        depth = 0
        parent_id = node.parent_id
        while parent_id is not None:
            parent = self.get_node(parent_id)
            parent_id = parent.parent_id
            depth += 1
        return depth

    def create_node(
        self,
        address: Address,
        parent_id: str | None,
        name: str,
        created_by: str,
    ) -> Node:
        """Append a node to the end of its sibling group."""
        self.schema.validate_address(address)
        name = name.strip()
        if not name:
            msg = "Node name must not be empty"
            raise InvalidName(msg)
        if self.schema.max_depth == 0:
            msg = f"Catalog {self.schema.name} holds items only, no nodes"
            raise InvalidParent(msg)

        if parent_id is not None:
            parent = self.find_node(parent_id)
            if parent is None:
                msg = f"Parent node {parent_id!r} not found"
                raise InvalidParent(msg)
            if parent.address != address:
                msg = f"Parent {parent_id!r} is in {parent.address.key!r}, not {address.key!r}"
                raise InvalidParent(msg)
            if self.depth_of(parent) + 1 >= self.schema.max_depth:
                msg = (
                    f"Cannot nest under {parent.name!r}: {self.schema.name} allows "
                    f"{self.schema.max_depth} level(s)"
                )
                raise InvalidParent(msg)

        row = self.conn.execute(
            "SELECT COALESCE(MAX(sort_order), 0) FROM nodes "
            "WHERE catalog = ? AND partition = ? AND selectors = ? AND parent_id IS ?",
            (self.schema.name, address.partition, address.selector_key, parent_id),
        ).fetchone()
        node = Node(
            id=uuid.uuid4().hex,
            address=address,
            parent_id=parent_id,
            name=name,
            order=row[0] + 1,
            created_by=created_by,
            created_at=_now_ms(),
        )
        self.conn.execute(
            f"INSERT INTO nodes (catalog, {_NODE_COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                self.schema.name, node.id, address.partition, address.selector_key,
                node.parent_id, node.name, node.order, int(node.locked), int(node.hidden),
                node.created_by, node.created_at,
            ),
        )
        self.conn.commit()
        logger.debug("Created node {} ({!r}) in {}", node.id, node.name, address.key)
        return node

    def rename_node(self, node_id: str, name: str) -> None:
        name = name.strip()
        if not name:
            msg = "Node name must not be empty"
            raise InvalidName(msg)
        self.get_node(node_id)
        self.conn.execute(
            "UPDATE nodes SET name = ? WHERE catalog = ? AND id = ?",
            (name, self.schema.name, node_id),
        )
        self.conn.commit()

    def set_flags(
        self,
        node_id: str,
        *,
        locked: bool | None = None,
        hidden: bool | None = None,
    ) -> Node:
        """Set the locked/hidden flags; None leaves a flag unchanged."""
        node = self.get_node(node_id)
        new_locked = node.locked if locked is None else locked
        new_hidden = node.hidden if hidden is None else hidden
        self.conn.execute(
            "UPDATE nodes SET locked = ?, hidden = ? WHERE catalog = ? AND id = ?",
            (int(new_locked), int(new_hidden), self.schema.name, node_id),
        )
        self.conn.commit()
        return self.get_node(node_id)

    def toggle_lock(self, node_id: str) -> bool:
        """Flip the locked flag and return its new value."""
        return self.set_flags(node_id, locked=not self.get_node(node_id).locked).locked

    def toggle_hide(self, node_id: str) -> bool:
        """Flip the hidden flag and return its new value."""
        return self.set_flags(node_id, hidden=not self.get_node(node_id).hidden).hidden

    def subtree_ids(self, node_id: str) -> list[str]:
        """Ids of ``node_id`` and all its descendants, parents first.

        Descendants already gone from the store are simply not listed.
        """
        result: list[str] = []
        todo: deque[str] = deque([node_id])
        while todo:
            current = todo.popleft()
            result.append(current)
            rows = self.conn.execute(
                "SELECT id FROM nodes WHERE catalog = ? AND parent_id = ? ORDER BY sort_order",
                (self.schema.name, current),
            ).fetchall()
            todo.extend(r[0] for r in rows)
        return result

    def delete_node(self, node_id: str) -> None:
        """Delete a node, its whole subtree and every item attached to it.

        Runs in one transaction. On a database error nothing is removed and
        PartialCascadeFailure lists the ids still present.
        """
        node = self.get_node(node_id)
        ids = self.subtree_ids(node.id)
        try:
            self.conn.executemany(
                "DELETE FROM items WHERE catalog = ? AND node_id = ?",
                [(self.schema.name, i) for i in ids],
            )
            # Children before parents
            self.conn.executemany(
                "DELETE FROM nodes WHERE catalog = ? AND id = ?",
                [(self.schema.name, i) for i in reversed(ids)],
            )
            self._renumber(node.address, node.parent_id)
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            remaining = {i for i in ids if self.find_node(i) is not None}
            logger.error("Cascade delete of {} failed: {}", node_id, e)
            msg = f"Delete of {node.name!r} stopped: {len(remaining)} node(s) remain"
            raise PartialCascadeFailure(
                msg, completed=set(ids) - remaining, remaining=remaining
            ) from e
        logger.debug("Deleted node {} ({!r}) with {} node(s)", node.id, node.name, len(ids))

    def _renumber(self, address: Address, parent_id: str | None) -> None:
        """Rewrite one sibling group's order to 1..N. Caller commits."""
        siblings = self.list_children(address, parent_id)
        self._write_orders(
            (n.id, i) for i, n in enumerate(siblings, start=1) if n.order != i
        )

    def _write_orders(self, assignments: Iterable[tuple[str, int]]) -> None:
        self.conn.executemany(
            "UPDATE nodes SET sort_order = ? WHERE catalog = ? AND id = ?",
            [(order, self.schema.name, node_id) for node_id, order in assignments],
        )

    def set_orders(self, assignments: list[tuple[str, int]]) -> None:
        """Persist several ``(node_id, order)`` pairs in one transaction."""
        if not assignments:
            return
        try:
            self._write_orders(assignments)
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            msg = f"Reorder of {len(assignments)} node(s) failed"
            raise PartialCascadeFailure(
                msg, remaining=[node_id for node_id, _ in assignments]
            ) from e

    def list_children(self, address: Address, parent_id: str | None) -> tuple[Node, ...]:
        """Direct children of ``parent_id`` (roots when None), ordered by ``order``."""
        rows = self.conn.execute(
            f"SELECT {_NODE_COLUMNS} FROM nodes "
            "WHERE catalog = ? AND partition = ? AND selectors = ? AND parent_id IS ? "
            "ORDER BY sort_order, created_at",
            (self.schema.name, address.partition, address.selector_key, parent_id),
        ).fetchall()
        return tuple(_row_to_node(r) for r in rows)

    def list_roots(self, address: Address) -> tuple[Node, ...]:
        return self.list_children(address, None)

    def has_children(self, address: Address, node_id: str | None) -> bool:
        row = self.conn.execute(
            "SELECT 1 FROM nodes "
            "WHERE catalog = ? AND partition = ? AND selectors = ? AND parent_id IS ? LIMIT 1",
            (self.schema.name, address.partition, address.selector_key, node_id),
        ).fetchone()
        return row is not None

    def list_nodes(self, address: Address) -> tuple[Node, ...]:
        """Every node of an address, ordered by parent then ``order``."""
        rows = self.conn.execute(
            f"SELECT {_NODE_COLUMNS} FROM nodes "
            "WHERE catalog = ? AND partition = ? AND selectors = ? "
            "ORDER BY parent_id, sort_order",
            (self.schema.name, address.partition, address.selector_key),
        ).fetchall()
        return tuple(_row_to_node(r) for r in rows)

    def list_addresses(self) -> tuple[Address, ...]:
        """Every address holding at least one node or item, sorted by key."""
        rows = self.conn.execute(
            "SELECT partition, selectors FROM nodes WHERE catalog = ? "
            "UNION SELECT partition, selectors FROM items WHERE catalog = ?",
            (self.schema.name, self.schema.name),
        ).fetchall()
        return tuple(sorted((Address.from_columns(p, s) for p, s in rows), key=lambda a: a.key))
