"""Tests for the content catalog CLI."""

import json
import re
import sqlite3
from pathlib import Path

from typer.testing import CliRunner

from content_catalog.cli import app
from content_catalog.core.database.schema import get_metadata

runner = CliRunner()

_ID = re.compile(r"id=([0-9a-f]{32})")


def _invoke(data: Path, *args: str) -> str:
    result = runner.invoke(app, [*args, "--data-dir", str(data)])
    assert result.exit_code == 0, result.output
    return result.output


def _created_id(output: str) -> str:
    match = _ID.search(output)
    assert match is not None, output
    return match.group(1)


def _setup_lesson(data: Path) -> dict[str, str]:
    """Helper: N5 "Bài 1" > "Kanji" with two words, plus "Bài 2"."""
    _invoke(data, "init")
    bai1 = _created_id(_invoke(data, "add-node", "vocabulary", "N5", "Bài 1"))
    kanji = _created_id(
        _invoke(data, "add-node", "vocabulary", "N5", "Kanji", "--parent", bai1)
    )
    for word in ("学校", "先生"):
        payload = json.dumps({"vocabulary": word}, ensure_ascii=False)
        _invoke(data, "add-item", "vocabulary", "N5", payload, "--node", kanji)
    bai2 = _created_id(_invoke(data, "add-node", "vocabulary", "N5", "Bài 2"))
    return {"bai1": bai1, "kanji": kanji, "bai2": bai2}


def test_init_creates_database(tmp_path: Path) -> None:
    output = _invoke(tmp_path, "init")
    assert (tmp_path / "catalog.db").exists()
    assert "ready" in output


def test_commands_require_database(tmp_path: Path) -> None:
    result = runner.invoke(app, ["ls", "vocabulary", "--data-dir", str(tmp_path)])
    assert result.exit_code == 1


def test_catalogs_lists_shapes() -> None:
    result = runner.invoke(app, ["catalogs"])
    assert result.exit_code == 0
    assert "jlpt: level x category, 1 folder level(s)" in result.output
    assert "vocabulary: level, 2 folder level(s)" in result.output


def test_ls_drills_down_with_counts(tmp_path: Path) -> None:
    _setup_lesson(tmp_path)

    root = _invoke(tmp_path, "ls", "vocabulary")
    assert "Tất cả" in root
    assert "N5: N5 (2)" in root
    assert "N4: N4 (0)" in root

    level = _invoke(tmp_path, "ls", "vocabulary", "N5")
    assert "1. Bài 1 (2)" in level
    assert "2. Bài 2 (0)" in level

    leaf = _invoke(tmp_path, "ls", "vocabulary", "N5", "Bài 1", "Kanji")
    assert "Tất cả > N5 > Bài 1 > Kanji" in leaf
    assert "2 item(s)" in leaf
    assert "学校" in leaf


def test_ls_unknown_folder_fails(tmp_path: Path) -> None:
    _setup_lesson(tmp_path)
    result = runner.invoke(
        app, ["ls", "vocabulary", "N5", "Bài 9", "--data-dir", str(tmp_path)]
    )
    assert result.exit_code == 1


def test_add_item_rejects_folder_with_children(tmp_path: Path) -> None:
    ids = _setup_lesson(tmp_path)
    result = runner.invoke(
        app,
        [
            "add-item", "vocabulary", "N5", '{"vocabulary": "x"}',
            "--node", ids["bai1"], "--data-dir", str(tmp_path),
        ],
    )
    assert result.exit_code == 1


def test_add_item_rejects_non_object_payload(tmp_path: Path) -> None:
    _invoke(tmp_path, "init")
    result = runner.invoke(
        app, ["add-item", "vocabulary", "N3", "[1, 2]", "--data-dir", str(tmp_path)]
    )
    assert result.exit_code == 1


def test_selector_catalog_needs_axis_values(tmp_path: Path) -> None:
    _invoke(tmp_path, "init")
    output = _invoke(tmp_path, "add-node", "jlpt", "N3", "Đề 1", "-s", "category=grammar")
    assert "order 1" in output

    result = runner.invoke(app, ["add-node", "jlpt", "N3", "Đề 2", "--data-dir", str(tmp_path)])
    assert result.exit_code == 1
    result = runner.invoke(
        app, ["add-node", "jlpt", "N3", "Đề 2", "-s", "category", "--data-dir", str(tmp_path)]
    )
    assert result.exit_code == 1


def test_tree_renders_markdown(tmp_path: Path) -> None:
    _setup_lesson(tmp_path)
    output = _invoke(tmp_path, "tree", "vocabulary", "N5", "--items")
    assert "# vocabulary N5 (2)" in output
    assert "- Bài 1 (2)" in output
    assert "    - Kanji (2)" in output
    assert "        - 先生" in output


def test_reorder_rename_toggle_and_delete(tmp_path: Path) -> None:
    ids = _setup_lesson(tmp_path)

    _invoke(tmp_path, "reorder", "vocabulary", ids["bai2"], ids["bai1"])
    level = _invoke(tmp_path, "ls", "vocabulary", "N5")
    assert "1. Bài 2 (0)" in level

    _invoke(tmp_path, "rename", "vocabulary", ids["bai2"], "Bài 0")
    assert "locked=True" in _invoke(tmp_path, "toggle", "vocabulary", ids["bai2"], "lock")

    _invoke(tmp_path, "delete", "vocabulary", ids["bai1"])
    level = _invoke(tmp_path, "ls", "vocabulary", "N5")
    assert "1. Bài 0 (0)" in level
    assert "Bài 1" not in level


def test_move_items_between_folders(tmp_path: Path) -> None:
    ids = _setup_lesson(tmp_path)
    leaf = _invoke(tmp_path, "ls", "vocabulary", "N5", "Bài 1", "Kanji")
    item_ids = _ID.findall(leaf)

    output = _invoke(tmp_path, "move", "vocabulary", "N5", *item_ids, "--node", ids["bai2"])

    assert "Moved 2 item(s)" in output
    assert "2 item(s)" in _invoke(tmp_path, "ls", "vocabulary", "N5", "Bài 2")


def test_export_import_round_trip(tmp_path: Path) -> None:
    """Exported lessons import into a fresh database, then skip on re-import."""
    ids = _setup_lesson(tmp_path / "source")
    snapshot = tmp_path / "bai1.json"
    _invoke(tmp_path / "source", "export", "vocabulary", ids["bai1"], "--output", str(snapshot))
    assert json.loads(snapshot.read_text(encoding="utf-8"))["type"] == "vocabulary"

    target = tmp_path / "target"
    _invoke(target, "init")
    first = _invoke(target, "import", str(snapshot))
    assert "Folders: 2 created, 0 skipped; items: 2 created, 0 skipped" in first

    second = _invoke(target, "import", str(snapshot))
    assert "Folders: 0 created, 2 skipped; items: 0 created, 2 skipped" in second

    conn = sqlite3.connect(str(target / "catalog.db"))
    try:
        assert get_metadata(conn, "last_import_at:vocabulary") is not None
    finally:
        conn.close()


def test_import_rejects_malformed_snapshot(tmp_path: Path) -> None:
    _invoke(tmp_path, "init")
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"type": "vocabulary"}), encoding="utf-8")

    result = runner.invoke(app, ["import", str(bad), "--data-dir", str(tmp_path)])
    assert result.exit_code == 1
