"""Typed errors raised by the catalog engine."""

from collections.abc import Iterable


class CatalogError(Exception):
    """Base class for all catalog engine errors."""


class NotFound(CatalogError):
    """A node or item id is unknown to the store."""


class InvalidParent(CatalogError):
    """A parent reference would break the catalog's nesting rules."""


class InvalidSelection(CatalogError):
    """A selector value is outside its axis domain."""


class InvalidName(CatalogError):
    """A node name is empty after trimming whitespace."""


class CursorOverflow(CatalogError):
    """The cursor is already at the catalog's maximum depth."""


class CursorUnderflow(CatalogError):
    """The cursor is at the root and cannot go back."""


class InvalidDestination(CatalogError):
    """A container cannot hold items directly."""


class SnapshotFormatError(CatalogError):
    """A snapshot document is malformed or belongs to another catalog."""


class PartialCascadeFailure(CatalogError):
    """A multi-record delete or move stopped partway.

    ``remaining`` holds the ids that still need work. Re-invoking the same
    call with those ids is safe.
    """

    def __init__(
        self,
        msg: str,
        *,
        completed: Iterable[str] = (),
        remaining: Iterable[str] = (),
    ) -> None:
        super().__init__(msg)
        self.completed = frozenset(completed)
        self.remaining = frozenset(remaining)


class ImportRecordError(CatalogError):
    """One snapshot record could not be resolved or created."""

    def __init__(self, msg: str, *, record_kind: str, natural_key: str | None) -> None:
        super().__init__(msg)
        self.record_kind = record_kind
        self.natural_key = natural_key
