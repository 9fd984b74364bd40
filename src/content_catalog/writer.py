"""Write snapshot documents to disk."""

import json
from datetime import date
from pathlib import Path

from loguru import logger

from content_catalog.models.snapshot import Snapshot


def export_filename(catalog: str, *, today: date | None = None) -> str:
    """Default snapshot filename, e.g. ``vocabulary-export-2024-05-01.json``."""
    day = today or date.today()
    return f"{catalog}-export-{day.isoformat()}.json"


def write_snapshot(path: Path, snapshot: Snapshot) -> bool:
    """Write ``snapshot`` as JSON.

    Do not rewrite the file if its contents are already the same.

    Returns:
        True if the file was created or changed.
    """
    contents = json.dumps(snapshot.to_dict(), sort_keys=True, indent=4, ensure_ascii=False) + "\n"
    try:
        with open(path, encoding="utf-8") as f:
            if f.read() == contents:
                logger.debug("Snapshot {} unchanged", path)
                return False
        action = "update"
    except (FileNotFoundError, UnicodeDecodeError):
        action = "create"

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(contents)
    logger.info("Wrote snapshot ({}) {}", action, path)
    return True
