"""Shared test fixtures."""

import sqlite3
from collections.abc import Iterator

import pytest

from content_catalog.core.database.schema import create_schema
from content_catalog.engine import CatalogEngine, build_engine
from content_catalog.models.node import Address, Node

N5 = Address("N5")


@pytest.fixture
def conn() -> Iterator[sqlite3.Connection]:
    """An in-memory database with the catalog schema."""
    connection = sqlite3.connect(":memory:")
    create_schema(connection)
    yield connection
    connection.close()


@pytest.fixture
def vocab(conn: sqlite3.Connection) -> CatalogEngine:
    """The vocabulary catalog: level partitions, two folder levels."""
    return build_engine(conn, "vocabulary")


@pytest.fixture
def jlpt(conn: sqlite3.Connection) -> CatalogEngine:
    """The JLPT catalog: level x category, one folder level."""
    return build_engine(conn, "jlpt")


@pytest.fixture
def lesson_tree(vocab: CatalogEngine) -> dict[str, Node]:
    """N5 with "Bài 1" > "Kanji" (3 words) and an empty "Bài 2"."""
    bai1 = vocab.tree.create_node(N5, None, "Bài 1", "sensei-1")
    kanji = vocab.tree.create_node(N5, bai1.id, "Kanji", "sensei-1")
    for word in ("学校", "先生", "学生"):
        vocab.items.create(N5, kanji.id, {"vocabulary": word, "meaning": "..."}, "sensei-1")
    bai2 = vocab.tree.create_node(N5, None, "Bài 2", "sensei-1")
    return {"bai1": bai1, "kanji": kanji, "bai2": bai2}

