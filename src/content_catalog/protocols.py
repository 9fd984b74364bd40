"""Protocols for collaborators supplied by catalog adapters."""

from typing import Protocol, runtime_checkable

from content_catalog.models.node import ContentItem, Node


@runtime_checkable
class PermissionPredicate(Protocol):
    """Decides whether an actor may mutate a record.

    The engine never calls this; adapters check it before invoking a mutation.
    """

    def __call__(self, actor_id: str, record: Node | ContentItem) -> bool:
        """Return True if ``actor_id`` may modify ``record``."""
        ...
