"""Tests for moving items across partitions and folders."""

import pytest

from content_catalog.core.items.mover import CrossTreeMover
from content_catalog.core.items.store import ItemStore
from content_catalog.core.tree.store import TreeStore
from content_catalog.engine import CatalogEngine
from content_catalog.errors import InvalidDestination, PartialCascadeFailure
from content_catalog.models.node import Address, Node
from tests.unit.fakes import FailingConnection

N5 = Address("N5")
N4 = Address("N4")


def test_move_items_to_other_partition_folder(
    vocab: CatalogEngine, lesson_tree: dict[str, Node]
) -> None:
    kanji = lesson_tree["kanji"]
    target = vocab.tree.create_node(N4, None, "Bài 26", "t1")
    ids = [i.id for i in vocab.items.list_by_node(kanji.id)][:2]

    report = vocab.mover.move(ids, N4, target.id)

    assert sorted(report.moved) == sorted(ids)
    assert report.unchanged == ()
    assert {i.id for i in vocab.items.list_by_node(target.id)} == set(ids)
    assert all(i.address == N4 for i in vocab.items.list_by_node(target.id))
    assert vocab.counts.count_under(N5, lesson_tree["bai1"].id) == 1


def test_move_to_current_location_short_circuits(
    vocab: CatalogEngine, lesson_tree: dict[str, Node]
) -> None:
    kanji = lesson_tree["kanji"]
    ids = [i.id for i in vocab.items.list_by_node(kanji.id)]
    report = vocab.mover.move(ids, N5, kanji.id)
    assert report.moved == ()
    assert sorted(report.unchanged) == sorted(ids)


def test_move_rejects_non_leaf_destinations(
    vocab: CatalogEngine, lesson_tree: dict[str, Node]
) -> None:
    ids = [i.id for i in vocab.items.list_by_node(lesson_tree["kanji"].id)]
    with pytest.raises(InvalidDestination):
        vocab.mover.move(ids, N5, lesson_tree["bai1"].id)
    with pytest.raises(InvalidDestination):
        vocab.mover.move(ids, N5, None)
    with pytest.raises(InvalidDestination):
        vocab.mover.move(ids, Address("N0"), None)


def test_move_to_unfiled_bucket_of_empty_partition(
    vocab: CatalogEngine, lesson_tree: dict[str, Node]
) -> None:
    ids = [i.id for i in vocab.items.list_by_node(lesson_tree["kanji"].id)]
    vocab.mover.move(ids, Address("N3"), None)
    assert len(vocab.items.list_unfiled(Address("N3"))) == 3


def test_move_reports_missing_items_but_moves_the_rest(
    vocab: CatalogEngine, lesson_tree: dict[str, Node]
) -> None:
    ids = [i.id for i in vocab.items.list_by_node(lesson_tree["kanji"].id)]

    with pytest.raises(PartialCascadeFailure) as excinfo:
        vocab.mover.move([*ids, "ghost"], N5, lesson_tree["bai2"].id)

    assert excinfo.value.remaining == {"ghost"}
    assert excinfo.value.completed == set(ids)
    assert len(vocab.items.list_by_node(lesson_tree["bai2"].id)) == 3


def test_move_write_failure_leaves_item_for_retry(
    vocab: CatalogEngine, lesson_tree: dict[str, Node]
) -> None:
    failing = FailingConnection(vocab.tree.conn, "UPDATE items SET partition")
    tree = TreeStore(failing, vocab.schema)  # type: ignore[arg-type]
    mover = CrossTreeMover(ItemStore(failing, tree))  # type: ignore[arg-type]
    ids = [i.id for i in vocab.items.list_by_node(lesson_tree["kanji"].id)]
    bai2 = lesson_tree["bai2"]

    with pytest.raises(PartialCascadeFailure) as excinfo:
        mover.move(ids, N5, bai2.id)
    assert len(excinfo.value.remaining) == 1
    assert len(excinfo.value.completed) == 2

    report = mover.move(excinfo.value.remaining, N5, bai2.id)
    assert len(report.moved) == 1
    assert len(vocab.items.list_by_node(bai2.id)) == 3
