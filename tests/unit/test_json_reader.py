"""Tests for snapshot parsing and validation."""

import json
from pathlib import Path

import pytest

from content_catalog.core.importer.json_reader import parse_snapshot, read_snapshot
from content_catalog.errors import SnapshotFormatError

VALID = {
    "version": "1.0",
    "type": "vocabulary",
    "exported_at": "2024-05-01T00:00:00+00:00",
    "nodes": [
        {
            "natural_key": "N5/Bài 1",
            "parent_natural_key": None,
            "name": "Bài 1",
            "partition": "N5",
            "selectors": {},
            "order": 1,
            "locked": True,
        }
    ],
    "items": [
        {
            "node_natural_key": "N5/Bài 1",
            "partition": "N5",
            "payload": {"vocabulary": "水"},
        }
    ],
}


def test_parse_valid_snapshot() -> None:
    snapshot = parse_snapshot(VALID)

    assert snapshot.type == "vocabulary"
    assert snapshot.version == "1.0"
    assert snapshot.nodes[0].locked is True
    assert snapshot.nodes[0].hidden is False
    assert snapshot.items[0].payload == {"vocabulary": "水"}
    assert snapshot.items[0].selectors == {}


def test_parse_snapshot_without_records() -> None:
    snapshot = parse_snapshot({"version": "1.0", "type": "kanji"})
    assert snapshot.nodes == ()
    assert snapshot.items == ()


@pytest.mark.parametrize(
    "data",
    [
        [],
        "text",
        {"type": "vocabulary"},
        {"version": "1.0"},
        {"version": "1.0", "type": "vocabulary", "nodes": {}},
        {"version": "1.0", "type": "vocabulary", "items": [{"partition": "N5"}]},
        {"version": "1.0", "type": "vocabulary", "nodes": [{"name": "x"}]},
        {
            "version": "1.0",
            "type": "vocabulary",
            "nodes": [{"natural_key": "N5/5", "name": 5, "partition": "N5"}],
        },
        {
            "version": "1.0",
            "type": "vocabulary",
            "nodes": [{"natural_key": "N5/A", "name": "A", "partition": "N5"}],
            "items": [{"node_natural_key": "N5/A", "partition": 5, "payload": {}}],
        },
        {
            "version": "1.0",
            "type": "vocabulary",
            "items": [{"node_natural_key": 7, "partition": "N5", "payload": {}}],
        },
    ],
)
def test_parse_rejects_malformed_documents(data: object) -> None:
    with pytest.raises(SnapshotFormatError):
        parse_snapshot(data)


def test_read_snapshot_from_file(tmp_path: Path) -> None:
    path = tmp_path / "export.json"
    path.write_text(json.dumps(VALID, ensure_ascii=False), encoding="utf-8")

    assert read_snapshot(path).nodes[0].name == "Bài 1"


def test_read_snapshot_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(SnapshotFormatError, match="not valid JSON"):
        read_snapshot(path)
