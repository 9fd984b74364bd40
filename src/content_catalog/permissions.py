"""Default permission rule for catalog adapters."""

from collections.abc import Iterable

from content_catalog.models.node import ContentItem, Node
from content_catalog.protocols import PermissionPredicate


def owner_or_superadmin(superadmins: Iterable[str]) -> PermissionPredicate:
    """Superadmins may modify anything; everyone else only what they created."""
    admins = frozenset(superadmins)

    def can_modify(actor_id: str, record: Node | ContentItem) -> bool:
        return actor_id in admins or record.created_by == actor_id

    return can_modify
