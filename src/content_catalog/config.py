"""Configuration constants for the content catalog."""

from pathlib import Path

# Directory with the catalog database. First directory which is found is used.
DATA_DIRECTORIES: list[Path] = [
    Path("~/.local/share/content-catalog").expanduser(),
    Path("~/.content-catalog").expanduser(),
    Path("~/.config/content-catalog").expanduser(),
]

# Used when none of DATA_DIRECTORIES exists yet.
DEFAULT_DATA_DIR: Path = DATA_DIRECTORIES[0]

DB_FILENAME: str = "catalog.db"

# Written into every snapshot header, checked on import.
EXPORT_VERSION: str = "1.0"

# First breadcrumb entry, shown for the empty cursor.
ROOT_LABEL: str = "Tất cả"


def resolve_data_directory() -> Path:
    """Return the first existing data directory, or the default one."""
    for candidate in DATA_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return DEFAULT_DATA_DIR
