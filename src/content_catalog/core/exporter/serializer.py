"""Flatten subtrees and their items into a natural-keyed Snapshot."""

from collections.abc import Iterable
from datetime import UTC, datetime

from loguru import logger

from content_catalog.core.items.store import ItemStore
from content_catalog.core.tree.store import TreeStore
from content_catalog.models.node import Address, Node
from content_catalog.models.snapshot import ItemRecord, NodeRecord, Snapshot


def _escape(name: str) -> str:
    return name.replace("%", "%25").replace("/", "%2F")


def natural_key(address: Address, path: Iterable[str]) -> str:
    """Id-free identity of a node: its address key plus the names leading to it."""
    return "/".join((address.key, *(_escape(name) for name in path)))


class ExportSerializer:
    """Builds Snapshots from a catalog's TreeStore and ItemStore."""

    def __init__(self, tree: TreeStore, items: ItemStore) -> None:
        self.tree = tree
        self.items = items

    def export_subtree(self, root_node_ids: Iterable[str]) -> Snapshot:
        """Export the given nodes, their descendants and all attached items.

        Each root is exported as a root: its ``parent_natural_key`` is None.
        A root that is a descendant of another listed root is exported once.
        """
        nodes: list[NodeRecord] = []
        items: list[ItemRecord] = []
        seen: set[str] = set()
        for root_id in root_node_ids:
            root = self.tree.get_node(root_id)
            self._walk(root, None, (), nodes, items, seen)
        return self._snapshot(nodes, items)

    def export_address(self, address: Address) -> Snapshot:
        """Export every node and item of one address, unfiled items included."""
        nodes: list[NodeRecord] = []
        items: list[ItemRecord] = []
        self._collect_address(address, nodes, items)
        return self._snapshot(nodes, items)

    def export_all(self) -> Snapshot:
        """Export the whole catalog, address by address."""
        nodes: list[NodeRecord] = []
        items: list[ItemRecord] = []
        for address in self.tree.list_addresses():
            self._collect_address(address, nodes, items)
        return self._snapshot(nodes, items)

    def _collect_address(
        self,
        address: Address,
        nodes: list[NodeRecord],
        items: list[ItemRecord],
    ) -> None:
        seen: set[str] = set()
        for root in self.tree.list_roots(address):
            self._walk(root, None, (), nodes, items, seen)
        items.extend(
            self._item_record(item.payload, address, None)
            for item in self.items.list_unfiled(address)
        )

    def _walk(
        self,
        node: Node,
        parent_key: str | None,
        parent_path: tuple[str, ...],
        nodes: list[NodeRecord],
        items: list[ItemRecord],
        seen: set[str],
    ) -> None:
        if node.id in seen:
            return
        seen.add(node.id)
        path = (*parent_path, node.name)
        key = natural_key(node.address, path)
        nodes.append(
            NodeRecord(
                natural_key=key,
                parent_natural_key=parent_key,
                name=node.name,
                partition=node.address.partition,
                selectors=node.address.selector_dict(),
                order=node.order,
                locked=node.locked,
                hidden=node.hidden,
            )
        )
        items.extend(
            self._item_record(item.payload, node.address, key)
            for item in self.items.list_by_node(node.id)
        )
        for child in self.tree.list_children(node.address, node.id):
            self._walk(child, key, path, nodes, items, seen)

    @staticmethod
    def _item_record(payload: dict, address: Address, node_key: str | None) -> ItemRecord:
        return ItemRecord(
            node_natural_key=node_key,
            partition=address.partition,
            selectors=address.selector_dict(),
            payload=payload,
        )

    def _snapshot(self, nodes: list[NodeRecord], items: list[ItemRecord]) -> Snapshot:
        logger.info(
            "Exported {} node(s) and {} item(s) from {}",
            len(nodes), len(items), self.tree.schema.name,
        )
        return Snapshot(
            type=self.tree.schema.name,
            nodes=tuple(nodes),
            items=tuple(items),
            exported_at=datetime.now(UTC).isoformat(timespec="seconds"),
        )
