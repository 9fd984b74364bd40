"""Domain models for the content catalog."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Address:
    """A container address: partition value plus ordered selector values."""

    partition: str
    selectors: tuple[tuple[str, str], ...] = ()

    @property
    def selector_key(self) -> str:
        """Canonical ``axis=value;axis=value`` form stored in the database."""
        return ";".join(f"{axis}={value}" for axis, value in self.selectors)

    @property
    def key(self) -> str:
        if not self.selectors:
            return self.partition
        return f"{self.partition}|{self.selector_key}"

    def selector_dict(self) -> dict[str, str]:
        return dict(self.selectors)

    @classmethod
    def from_columns(cls, partition: str, selectors: str) -> "Address":
        """Rebuild an address from its stored ``partition``/``selectors`` columns."""
        if not selectors:
            return cls(partition)
        pairs = tuple(
            (axis, value)
            for axis, _, value in (part.partition("=") for part in selectors.split(";"))
        )
        return cls(partition, pairs)


@dataclass(frozen=True)
class Node:
    """A folder or lesson inside one container address."""

    id: str
    address: Address
    parent_id: str | None
    name: str
    order: int
    created_by: str
    created_at: int
    locked: bool = False
    hidden: bool = False


@dataclass(frozen=True)
class ContentItem:
    """A leaf item. ``node_id`` is None for unfiled items."""

    id: str
    address: Address
    node_id: str | None
    payload: dict[str, Any]
    created_by: str
    created_at: int
