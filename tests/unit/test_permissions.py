"""Tests for the default permission rule."""

from content_catalog.engine import CatalogEngine
from content_catalog.models.node import Node
from content_catalog.permissions import owner_or_superadmin
from content_catalog.protocols import PermissionPredicate


def test_owner_or_superadmin(vocab: CatalogEngine, lesson_tree: dict[str, Node]) -> None:
    can_modify = owner_or_superadmin(["root-admin"])
    item = vocab.items.list_by_node(lesson_tree["kanji"].id)[0]

    assert isinstance(can_modify, PermissionPredicate)
    assert can_modify("sensei-1", lesson_tree["bai1"])
    assert can_modify("sensei-1", item)
    assert can_modify("root-admin", item)
    assert not can_modify("sensei-2", lesson_tree["bai1"])
    assert not can_modify("sensei-2", item)
