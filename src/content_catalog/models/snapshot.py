"""Portable snapshot records and operation reports."""

from dataclasses import dataclass, field
from typing import Any

from content_catalog.config import EXPORT_VERSION
from content_catalog.errors import ImportRecordError


def _str_field(data: dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        msg = f"{key!r} must be a string, got {type(value).__name__}"
        raise TypeError(msg)
    return value


def _optional_str_field(data: dict[str, Any], key: str) -> str | None:
    if data.get(key) is None:
        return None
    return _str_field(data, key)


@dataclass(frozen=True)
class NodeRecord:
    """An exported node, identified by natural key instead of database id."""

    natural_key: str
    parent_natural_key: str | None
    name: str
    partition: str
    selectors: dict[str, str] = field(default_factory=dict)
    order: int = 0
    locked: bool = False
    hidden: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "natural_key": self.natural_key,
            "parent_natural_key": self.parent_natural_key,
            "name": self.name,
            "partition": self.partition,
            "selectors": dict(self.selectors),
            "order": self.order,
            "locked": self.locked,
            "hidden": self.hidden,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NodeRecord":
        return cls(
            natural_key=_str_field(data, "natural_key"),
            parent_natural_key=_optional_str_field(data, "parent_natural_key"),
            name=_str_field(data, "name"),
            partition=_str_field(data, "partition"),
            selectors=dict(data.get("selectors") or {}),
            order=int(data.get("order", 0)),
            locked=bool(data.get("locked", False)),
            hidden=bool(data.get("hidden", False)),
        )


@dataclass(frozen=True)
class ItemRecord:
    """An exported item. ``node_natural_key`` is None for unfiled items."""

    node_natural_key: str | None
    partition: str
    payload: dict[str, Any]
    selectors: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "node_natural_key": self.node_natural_key,
            "partition": self.partition,
            "selectors": dict(self.selectors),
            "payload": self.payload,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ItemRecord":
        return cls(
            node_natural_key=_optional_str_field(data, "node_natural_key"),
            partition=_str_field(data, "partition"),
            payload=dict(data["payload"]),
            selectors=dict(data.get("selectors") or {}),
        )


@dataclass(frozen=True)
class Snapshot:
    """A natural-keyed export of nodes and items from one catalog."""

    type: str
    nodes: tuple[NodeRecord, ...] = ()
    items: tuple[ItemRecord, ...] = ()
    version: str = EXPORT_VERSION
    exported_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "type": self.type,
            "exported_at": self.exported_at,
            "nodes": [n.to_dict() for n in self.nodes],
            "items": [i.to_dict() for i in self.items],
        }


@dataclass
class ImportReport:
    """Summary of one import run."""

    nodes_created: int = 0
    items_created: int = 0
    nodes_skipped: int = 0
    items_skipped: int = 0
    errors: list[ImportRecordError] = field(default_factory=list)


@dataclass(frozen=True)
class MoveReport:
    """Items relocated by a move, and items already at the destination."""

    moved: tuple[str, ...] = ()
    unchanged: tuple[str, ...] = ()
