"""Recursive item counts for nodes, sibling lists and partitions."""

from collections import defaultdict

from content_catalog.core.items.store import ItemStore
from content_catalog.core.tree.store import TreeStore
from content_catalog.models.node import Address


class CountAggregator:
    """Counts items reachable under a node, directly or through descendants."""

    def __init__(self, tree: TreeStore, items: ItemStore) -> None:
        self.tree = tree
        self.items = items

    def count_under(self, address: Address, node_id: str | None = None) -> int:
        """Items at ``node_id`` (the unfiled bucket when None) plus all descendants."""
        total = 0
        stack: list[str | None] = [node_id]
        while stack:
            current = stack.pop()
            total += self.items.count_at(address, current)
            stack.extend(child.id for child in self.tree.list_children(address, current))
        return total

    def count_siblings(self, address: Address, parent_id: str | None = None) -> dict[str, int]:
        """Recursive counts for every child of ``parent_id`` in one pass.

        Loads the address's nodes and grouped item counts once, so shared
        subtrees are not re-queried per row.
        """
        children: defaultdict[str | None, list[str]] = defaultdict(list)
        for node in self.tree.list_nodes(address):
            children[node.parent_id].append(node.id)
        direct = self.items.count_grouped(address)

        totals: dict[str, int] = {}
        for sibling_id in children[parent_id]:
            # Post-order walk: a node's total is known once all children are.
            stack: list[tuple[str, bool]] = [(sibling_id, False)]
            while stack:
                current, expanded = stack.pop()
                if current in totals:
                    continue
                if expanded:
                    totals[current] = direct.get(current, 0) + sum(
                        totals[c] for c in children[current]
                    )
                    continue
                stack.append((current, True))
                stack.extend((c, False) for c in children[current] if c not in totals)
        return {sibling_id: totals[sibling_id] for sibling_id in children[parent_id]}

    def count_by_partition(self) -> dict[str, int]:
        """Item totals for every partition value of the catalog (0 when empty)."""
        grouped = self.items.count_by_partition()
        return {
            value: grouped.get(value, 0)
            for value in self.tree.schema.partition_axis.domain()
        }
