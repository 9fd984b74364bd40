"""Drag-and-drop reordering within one sibling group."""

from collections.abc import Sequence

from loguru import logger

from content_catalog.core.tree.store import TreeStore
from content_catalog.errors import InvalidParent, NotFound
from content_catalog.models.node import Node


def reorder_siblings(
    siblings: Sequence[Node],
    dragged_id: str,
    target_id: str,
) -> list[tuple[str, int]]:
    """Return the full ``(node_id, order)`` assignment after a drop.

    ``siblings`` must be sorted by order. The dragged node is removed and
    re-inserted at the target's original index, then every node gets
    ``order = index + 1``.
    """
    ids = [n.id for n in siblings]
    if dragged_id not in ids or target_id not in ids:
        msg = f"Both {dragged_id!r} and {target_id!r} must be in the sibling list"
        raise NotFound(msg)
    if dragged_id == target_id:
        return [(node_id, i) for i, node_id in enumerate(ids, start=1)]

    target_index = ids.index(target_id)
    ids.remove(dragged_id)
    ids.insert(target_index, dragged_id)
    return [(node_id, i) for i, node_id in enumerate(ids, start=1)]


class SiblingReorderer:
    """Persists drag-and-drop reorders through a TreeStore."""

    def __init__(self, tree: TreeStore) -> None:
        self.tree = tree

    def reorder(self, dragged_id: str, target_id: str) -> list[tuple[str, int]]:
        """Move ``dragged_id`` to ``target_id``'s position.

        Returns the ``(node_id, order)`` pairs that were written. Dropping a
        node onto itself writes nothing.
        """
        dragged = self.tree.get_node(dragged_id)
        if dragged_id == target_id:
            return []
        target = self.tree.get_node(target_id)
        if (dragged.address, dragged.parent_id) != (target.address, target.parent_id):
            msg = f"{dragged.name!r} and {target.name!r} are not siblings"
            raise InvalidParent(msg)

        siblings = self.tree.list_children(dragged.address, dragged.parent_id)
        current = {n.id: n.order for n in siblings}
        changed = [
            (node_id, order)
            for node_id, order in reorder_siblings(siblings, dragged_id, target_id)
            if current[node_id] != order
        ]
        self.tree.set_orders(changed)
        logger.debug(
            "Reordered {!r} onto {!r}: {} row(s) rewritten", dragged.name, target.name, len(changed)
        )
        return changed
