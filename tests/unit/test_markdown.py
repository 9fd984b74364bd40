"""Tests for markdown rendering of an address's tree."""

from content_catalog.core.tree.markdown import render_address_as_markdown
from content_catalog.engine import CatalogEngine
from content_catalog.models.node import Address, Node

N5 = Address("N5")


def test_render_nodes_with_counts_and_flags(
    vocab: CatalogEngine, lesson_tree: dict[str, Node]
) -> None:
    vocab.tree.toggle_hide(lesson_tree["bai2"].id)

    md = render_address_as_markdown(vocab.tree, vocab.items, address=N5)

    lines = md.splitlines()
    assert lines[0] == "# vocabulary N5 (3)"
    assert lines[2].startswith("- Bài 1 (3)  id=")
    assert lines[3].startswith("    - Kanji (3)  id=")
    assert lines[4].startswith("- Bài 2 (0) [hidden]  id=")
    assert "学校" not in md


def test_render_items_under_leaf_nodes(
    vocab: CatalogEngine, lesson_tree: dict[str, Node]
) -> None:
    md = render_address_as_markdown(vocab.tree, vocab.items, address=N5, include_items=True)
    assert "        - 学校  (id=" in md


def test_render_max_depth_stops_at_roots(
    vocab: CatalogEngine, lesson_tree: dict[str, Node]
) -> None:
    md = render_address_as_markdown(
        vocab.tree, vocab.items, address=N5, include_items=True, max_depth=1
    )
    assert "Bài 1 (3)" in md
    assert "Kanji" not in md
    assert "学校" not in md


def test_render_unfiled_items(vocab: CatalogEngine) -> None:
    vocab.items.create(Address("N3"), None, {"vocabulary": "経済"}, "t1")
    md = render_address_as_markdown(
        vocab.tree, vocab.items, address=Address("N3"), include_items=True
    )
    assert md.splitlines()[0] == "# vocabulary N3 (1)"
    assert "- 経済  (id=" in md
