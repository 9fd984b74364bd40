"""Drill-down cursor: selector frames, node frames and breadcrumbs."""

from dataclasses import dataclass
from enum import Enum

from content_catalog.config import ROOT_LABEL
from content_catalog.core.tree.store import TreeStore
from content_catalog.errors import CursorOverflow, CursorUnderflow, InvalidSelection, NotFound
from content_catalog.models.node import Address, Node
from content_catalog.models.schema import SelectorAxis


@dataclass(frozen=True)
class SelectorFrame:
    """A chosen value of one selector axis (level, category, topic...)."""

    axis: str
    value: str
    label: str


@dataclass(frozen=True)
class NodeFrame:
    """A chosen folder or lesson."""

    node_id: str
    name: str

    @property
    def label(self) -> str:
        return self.name


Frame = SelectorFrame | NodeFrame


class ContainerKind(Enum):
    SELECTOR = "selector"
    NODES = "nodes"
    ITEMS = "items"


@dataclass(frozen=True)
class Container:
    """What the cursor currently points at.

    SELECTOR: a value of ``axis`` must be chosen next; there is no address yet.
    NODES: child nodes exist here; items are not directly addressable.
    ITEMS: leaf-bearing; list and add items at ``(address, node_id)``.
    """

    kind: ContainerKind
    address: Address | None = None
    node_id: str | None = None
    axis: SelectorAxis | None = None

    @property
    def leaf_bearing(self) -> bool:
        return self.kind is ContainerKind.ITEMS


class NavigationCursor:
    """A stack of frames derived from a catalog's PartitionSchema.

    The first frames choose the partition and each selector axis in schema
    order; the remaining frames (up to ``max_depth``) choose nodes.
    """

    def __init__(self, tree: TreeStore) -> None:
        self.tree = tree
        self.schema = tree.schema
        self._frames: list[Frame] = []

    @property
    def frames(self) -> tuple[Frame, ...]:
        return tuple(self._frames)

    @property
    def depth(self) -> int:
        return len(self._frames)

    def can_go_back(self) -> bool:
        return bool(self._frames)

    def reset(self) -> None:
        self._frames.clear()

    def enter(self, selection: str | Node) -> Frame:
        """Push one frame.

        At a selector step ``selection`` is an axis value. At a node step it
        is a Node (or node id) among the current container's children.
        """
        if self.depth >= self.schema.cursor_depth:
            msg = f"Cursor already at max depth {self.schema.cursor_depth} for {self.schema.name}"
            raise CursorOverflow(msg)

        axes = self.schema.axes
        frame: Frame
        if self.depth < len(axes):
            axis = axes[self.depth]
            if isinstance(selection, Node):
                msg = f"Expected a {axis.name} value, got node {selection.name!r}"
                raise InvalidSelection(msg)
            frame = SelectorFrame(
                axis=axis.name, value=selection, label=axis.label_for(selection)
            )
        else:
            node_id = selection.id if isinstance(selection, Node) else selection
            children = self.tree.list_children(
                self._address_from_frames(), self._current_node_id()
            )
            match = next((c for c in children if c.id == node_id), None)
            if match is None:
                msg = f"Node {node_id!r} is not a child of the current container"
                raise NotFound(msg)
            frame = NodeFrame(node_id=match.id, name=match.name)

        self._frames.append(frame)
        return frame

    def back(self) -> Frame:
        """Pop the last frame. Check ``can_go_back()`` first."""
        if not self._frames:
            msg = "Cursor is at the root"
            raise CursorUnderflow(msg)
        return self._frames.pop()

    def breadcrumb(self) -> tuple[str, ...]:
        """One display label per frame."""
        return tuple(frame.label for frame in self._frames)

    def breadcrumb_path(self, separator: str = " > ") -> str:
        """The breadcrumb trail prefixed with the root label."""
        return separator.join((ROOT_LABEL, *self.breadcrumb()))

    def current_address(self) -> Address | None:
        """The container address, once every selector axis has a value."""
        n_axes = len(self.schema.axes)
        if self.depth < n_axes:
            return None
        return self._address_from_frames()

    def _address_from_frames(self) -> Address:
        """Build the address from the selector frames. Only valid past the axes."""
        partition, *selectors = (f for f in self._frames if isinstance(f, SelectorFrame))
        return Address(partition.value, tuple((f.axis, f.value) for f in selectors))

    def _current_node_id(self) -> str | None:
        if self._frames and isinstance(self._frames[-1], NodeFrame):
            return self._frames[-1].node_id
        return None

    def current_container(self) -> Container:
        """Resolve where list/add operations apply right now.

        Whether a node or address holds items or child nodes is decided by
        whether it currently has children.
        """
        axes = self.schema.axes
        if self.depth < len(axes):
            return Container(ContainerKind.SELECTOR, axis=axes[self.depth])

        address = self._address_from_frames()
        node_id = self._current_node_id()
        node_levels = self.depth - len(axes)
        if node_levels >= self.schema.max_depth:
            return Container(ContainerKind.ITEMS, address, node_id)
        if self.tree.has_children(address, node_id):
            return Container(ContainerKind.NODES, address, node_id)
        return Container(ContainerKind.ITEMS, address, node_id)
