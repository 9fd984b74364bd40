"""Render an address's folder tree as markdown."""

import io

from content_catalog.core.items.store import ItemStore
from content_catalog.core.tree.counts import CountAggregator
from content_catalog.core.tree.store import TreeStore
from content_catalog.models.node import Address, Node


def _flags(node: Node) -> str:
    marks = []
    if node.locked:
        marks.append("locked")
    if node.hidden:
        marks.append("hidden")
    return f" [{', '.join(marks)}]" if marks else ""


def render_address_as_markdown(
    tree: TreeStore,
    items: ItemStore,
    *,
    address: Address,
    include_items: bool = False,
    max_depth: int | None = None,
) -> str:
    """Render every node of an address as an indented bullet list.

    Args:
        tree: Node store of the catalog.
        items: Item store of the catalog.
        address: The container address to render.
        include_items: Also list items under leaf-bearing containers.
        max_depth: Max node levels to include (None = unlimited).

    Returns:
        Markdown string; each node shows its recursive item count.
    """
    counts = CountAggregator(tree, items)
    schema = tree.schema
    out = io.StringIO()

    def write_items(node_id: str | None, depth: int) -> None:
        indent = "    " * depth
        for item in items.list_at(address, node_id):
            out.write(f"{indent}- {schema.item_key(item.payload)}  (id={item.id})\n")

    def write_level(parent_id: str | None, depth: int) -> None:
        totals = counts.count_siblings(address, parent_id)
        indent = "    " * depth
        for node in tree.list_children(address, parent_id):
            out.write(f"{indent}- {node.name} ({totals[node.id]}){_flags(node)}  id={node.id}\n")
            if max_depth is not None and depth + 1 >= max_depth:
                continue
            if tree.has_children(address, node.id):
                write_level(node.id, depth + 1)
            elif include_items:
                write_items(node.id, depth + 1)

    out.write(f"# {schema.name} {address.key} ({counts.count_under(address)})\n\n")
    write_level(None, 0)
    if include_items and not tree.has_children(address, None):
        write_items(None, 0)
    return out.getvalue()
