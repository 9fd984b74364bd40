"""Static description of a catalog's shape."""

import json
from dataclasses import dataclass
from typing import Any

from content_catalog.errors import InvalidSelection
from content_catalog.models.node import Address


@dataclass(frozen=True)
class SelectorValue:
    """One value of a finite selector domain, with its display label."""

    value: str
    label: str


@dataclass(frozen=True)
class SelectorAxis:
    """A finite-domain axis such as level, category or topic."""

    name: str
    label: str
    values: tuple[SelectorValue, ...]

    def __contains__(self, value: object) -> bool:
        return any(v.value == value for v in self.values)

    def label_for(self, value: str) -> str:
        for v in self.values:
            if v.value == value:
                return v.label
        msg = f"{value!r} is not a valid {self.name} (expected one of {self.domain()!r})"
        raise InvalidSelection(msg)

    def domain(self) -> tuple[str, ...]:
        return tuple(v.value for v in self.values)


@dataclass(frozen=True)
class PartitionSchema:
    """Shape of one catalog.

    The partition axis roots every tree. Selector axes are crossed with it to
    form the container address. ``max_depth`` is the number of node levels
    allowed below an address (0, 1 or 2).
    """

    name: str
    partition_axis: SelectorAxis
    selectors: tuple[SelectorAxis, ...] = ()
    max_depth: int = 1
    item_key_field: str = "title"

    def __post_init__(self) -> None:
        if self.max_depth not in (0, 1, 2):
            msg = f"max_depth must be 0, 1 or 2, got {self.max_depth!r}"
            raise ValueError(msg)

    @property
    def axes(self) -> tuple[SelectorAxis, ...]:
        """The partition axis followed by every selector axis."""
        return (self.partition_axis, *self.selectors)

    @property
    def cursor_depth(self) -> int:
        """Maximum number of navigation frames."""
        return len(self.axes) + self.max_depth

    def address(self, partition: str, **selectors: str) -> Address:
        """Build a validated address with selectors in schema order."""
        self.partition_axis.label_for(partition)
        unknown = set(selectors) - {axis.name for axis in self.selectors}
        if unknown:
            msg = f"Unknown selector axes for {self.name}: {sorted(unknown)!r}"
            raise InvalidSelection(msg)
        pairs = []
        for axis in self.selectors:
            if axis.name not in selectors:
                msg = f"Missing {axis.name} selector for {self.name}"
                raise InvalidSelection(msg)
            axis.label_for(selectors[axis.name])
            pairs.append((axis.name, selectors[axis.name]))
        return Address(partition, tuple(pairs))

    def validate_address(self, address: Address) -> Address:
        """Raise InvalidSelection unless address is legal for this schema."""
        normalized = self.address(address.partition, **address.selector_dict())
        if normalized != address:
            msg = f"Selectors of {address.key!r} are not in {self.name} axis order"
            raise InvalidSelection(msg)
        return address

    def item_key(self, payload: dict[str, Any]) -> str:
        """Natural key of an item payload, used for import de-duplication."""
        value = payload.get(self.item_key_field)
        if value is None:
            return json.dumps(payload, sort_keys=True, ensure_ascii=False)
        return str(value)
