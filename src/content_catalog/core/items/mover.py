"""Move items to another partition, selector address or node."""

import sqlite3
from collections.abc import Iterable

from loguru import logger

from content_catalog.core.items.store import ItemStore
from content_catalog.errors import NotFound, PartialCascadeFailure
from content_catalog.models.node import Address
from content_catalog.models.snapshot import MoveReport


class CrossTreeMover:
    """Relocates items to a leaf-bearing container."""

    def __init__(self, items: ItemStore) -> None:
        self.items = items

    def move(
        self,
        item_ids: Iterable[str],
        address: Address,
        node_id: str | None = None,
    ) -> MoveReport:
        """Move every item in ``item_ids`` to ``(address, node_id)``.

        The destination is validated once up front (InvalidDestination).
        Each item is then rewritten on its own; failures do not stop the
        others and are raised together as PartialCascadeFailure.
        """
        self.items.check_destination(address, node_id)

        moved: list[str] = []
        unchanged: list[str] = []
        failed: dict[str, str] = {}
        for item_id in sorted(set(item_ids)):
            try:
                item = self.items.get(item_id)
            except NotFound as e:
                failed[item_id] = str(e)
                continue
            if item.address == address and item.node_id == node_id:
                unchanged.append(item_id)
                continue
            try:
                self.items.relocate(item_id, address, node_id)
            except sqlite3.Error as e:
                self.items.conn.rollback()
                failed[item_id] = str(e)
                continue
            moved.append(item_id)

        if failed:
            for item_id, reason in failed.items():
                logger.warning("Could not move item {}: {}", item_id, reason)
            msg = f"Moved {len(moved)} item(s), {len(failed)} failed"
            raise PartialCascadeFailure(
                msg, completed=[*moved, *unchanged], remaining=failed.keys()
            )

        logger.debug(
            "Moved {} item(s) to {} node={} ({} already there)",
            len(moved), address.key, node_id, len(unchanged),
        )
        return MoveReport(moved=tuple(moved), unchanged=tuple(unchanged))
