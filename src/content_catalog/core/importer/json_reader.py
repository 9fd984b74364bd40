"""Parse snapshot documents into domain models."""

import json
from pathlib import Path
from typing import Any

from content_catalog.errors import SnapshotFormatError
from content_catalog.models.snapshot import ItemRecord, NodeRecord, Snapshot


def parse_snapshot(data: Any) -> Snapshot:
    """Validate a decoded snapshot document and build a Snapshot.

    Args:
        data: Decoded JSON, as written by ``write_snapshot``.

    Returns:
        The Snapshot with node and item records.
    """
    if not isinstance(data, dict):
        msg = "Snapshot must be a JSON object"
        raise SnapshotFormatError(msg)
    if not data.get("version") or not data.get("type"):
        msg = "Invalid snapshot: missing version or type"
        raise SnapshotFormatError(msg)
    for field in ("nodes", "items"):
        if not isinstance(data.get(field, []), list):
            msg = f"Invalid snapshot: {field!r} must be a list"
            raise SnapshotFormatError(msg)

    try:
        nodes = tuple(NodeRecord.from_dict(n) for n in data.get("nodes", []))
        items = tuple(ItemRecord.from_dict(i) for i in data.get("items", []))
    except (KeyError, TypeError, ValueError) as e:
        msg = f"Invalid snapshot record: {e!r}"
        raise SnapshotFormatError(msg) from e

    return Snapshot(
        type=data["type"],
        nodes=nodes,
        items=items,
        version=str(data["version"]),
        exported_at=data.get("exported_at", ""),
    )


def read_snapshot(path: Path) -> Snapshot:
    """Read and validate a snapshot file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        msg = f"{path} is not valid JSON: {e}"
        raise SnapshotFormatError(msg) from e
    return parse_snapshot(data)
