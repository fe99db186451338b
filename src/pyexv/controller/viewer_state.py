"""Viewer state: selection, visibility and isolation over a scene graph.

The store keeps an id-to-node map and a cache of the mesh ids below every
node, both rebuilt whenever a new object map is set. Every transition
builds a fresh hidden set and swaps it in before any signal is emitted, so
connected slots never observe a half-applied change.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from enum import Enum

from PyQt6.QtCore import QObject, pyqtSignal

from pyexv.model.hierarchy import HierarchyItem
from pyexv.model.node import SceneNode

logger = logging.getLogger(__name__)


class IsolationMode(Enum):
    """Active isolation mode."""

    NONE = "none"
    GLOBAL = "global"  # Keyed off the current selection
    INDIVIDUAL = "individual"  # Keyed off an explicit node id


def coerce_explosion_factor(value: object) -> float:
    """Coerce arbitrary input into an explosion factor in [0, 1].

    Non-numeric and non-finite input yields 0.

    Args:
        value: Raw factor (number, numeric string, ...)

    Returns:
        Clamped explosion factor
    """
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(parsed):
        return 0.0
    return min(max(parsed, 0.0), 1.0)


def build_mesh_descendants_cache(object_map: Mapping[str, SceneNode]) -> dict[str, list[str]]:
    """Map every node id to the ids of the meshes in its subtree.

    A mesh maps to itself.

    Args:
        object_map: Dictionary mapping node ids to nodes

    Returns:
        Dictionary mapping node ids to mesh ids in traversal order
    """
    cache: dict[str, list[str]] = {}
    for node_id, node in object_map.items():
        if node.is_mesh:
            cache[node_id] = [node_id]
        else:
            cache[node_id] = [child.id for child in node.traverse() if child.is_mesh]
    return cache


class ViewerState(QObject):
    """Selection, visibility, isolation and explosion state of the viewer."""

    # Signals for UI updates
    loading_changed = pyqtSignal(bool)
    items_changed = pyqtSignal(object)  # Emits list of HierarchyItem
    selection_changed = pyqtSignal(object)  # Emits selected id or None
    hovered_object_changed = pyqtSignal(object)  # Emits hovered node or None
    hidden_objects_changed = pyqtSignal(object)  # Emits frozenset of hidden ids
    isolation_changed = pyqtSignal(object)  # Emits IsolationMode
    explosion_factor_changed = pyqtSignal(float)

    def __init__(self) -> None:
        """Initialize an empty viewer state."""
        super().__init__()

        self._object_map: dict[str, SceneNode] = {}
        self._mesh_descendants: dict[str, list[str]] = {}

        self._is_loading = True
        self._items: list[HierarchyItem] = []

        # Selection state
        self._selected_item: str | None = None
        self._selected_id: str | None = None
        self._selected_ids: list[str] = []
        self._hovered_object: SceneNode | None = None

        # Visibility & isolation state
        self._hidden_objects: frozenset[str] = frozenset()
        self._isolation_mode = IsolationMode.NONE
        self._individual_isolated_id: str | None = None

        self._explosion_factor = 0.0

    # Properties

    @property
    def is_loading(self) -> bool:
        """Whether the model is still loading."""
        return self._is_loading

    @property
    def items(self) -> list[HierarchyItem]:
        """Hierarchy tree for panel rendering."""
        return list(self._items)

    @property
    def selected_item(self) -> str | None:
        """Display name of the selected node."""
        return self._selected_item

    @property
    def selected_id(self) -> str | None:
        """Id of the selected node."""
        return self._selected_id

    @property
    def selected_ids(self) -> list[str]:
        """Mesh ids below the selected node."""
        return list(self._selected_ids)

    @property
    def hovered_object(self) -> SceneNode | None:
        """Node currently under the pointer."""
        return self._hovered_object

    @property
    def hidden_objects(self) -> frozenset[str]:
        """Ids of hidden nodes."""
        return self._hidden_objects

    @property
    def isolation_mode(self) -> IsolationMode:
        """Currently active isolation mode."""
        return self._isolation_mode

    @property
    def individual_isolated_id(self) -> str | None:
        """Id of the individually isolated node."""
        return self._individual_isolated_id

    @property
    def explosion_factor(self) -> float:
        """Explosion progress from 0 (assembled) to 1 (fully exploded)."""
        return self._explosion_factor

    # Loading & data

    def set_loading(self, loading: bool) -> None:
        """Update the loading flag."""
        self._is_loading = bool(loading)
        self.loading_changed.emit(self._is_loading)

    def set_items(self, items: Iterable[HierarchyItem] | None) -> None:
        """Store the hierarchy tree built from the scene."""
        self._items = list(items or [])
        self.items_changed.emit(self.items)

    def set_object_map(self, object_map: Mapping[str, SceneNode] | None) -> None:
        """Replace the id-to-node map and rebuild the mesh descendants cache.

        Called once per scene load. Selection, hover, visibility and
        isolation refer to the previous scene and are reset.

        Args:
            object_map: Dictionary mapping node ids to nodes
        """
        self._object_map = dict(object_map or {})
        self._mesh_descendants = build_mesh_descendants_cache(self._object_map)

        self._selected_item = None
        self._selected_id = None
        self._selected_ids = []
        self._hovered_object = None
        self._hidden_objects = frozenset()
        self._isolation_mode = IsolationMode.NONE
        self._individual_isolated_id = None

        logger.debug(f"Object map rebuilt with {len(self._object_map)} nodes")

        self.selection_changed.emit(None)
        self.hovered_object_changed.emit(None)
        self.hidden_objects_changed.emit(self._hidden_objects)
        self.isolation_changed.emit(self._isolation_mode)

    # Explosion

    def set_explosion_factor(self, value: object) -> None:
        """Set the explosion factor, clamped to [0, 1] (non-finite -> 0)."""
        self._explosion_factor = coerce_explosion_factor(value)
        self.explosion_factor_changed.emit(self._explosion_factor)

    def reset_explosion(self) -> None:
        """Return the explosion factor to 0."""
        self.set_explosion_factor(0.0)

    # Visibility

    def toggle_visibility(self, node_id: str) -> None:
        """Hide or show a node together with all its descendants.

        Unknown ids are ignored.

        Args:
            node_id: Id of the node to toggle
        """
        node = self._object_map.get(node_id)
        if node is None:
            return

        subtree = {child.id for child in node.traverse()}
        if node_id in self._hidden_objects:
            hidden = self._hidden_objects - subtree
        else:
            hidden = self._hidden_objects | subtree

        self._set_hidden(frozenset(hidden))

    def is_object_visible(self, node_id: str) -> bool:
        """Check if a node is not hidden."""
        return node_id not in self._hidden_objects

    def show_all(self) -> None:
        """Show every node and leave any isolation mode."""
        self._set_hidden(frozenset(), IsolationMode.NONE, None)

    # Isolation

    def toggle_isolation_mode(self) -> None:
        """Toggle isolation of the current selection.

        Entering hides everything except the selected node, its descendants
        and its ancestors. Leaving (or toggling while an individual
        isolation is active) shows everything. Without a selection and
        without active isolation nothing happens.
        """
        if self._isolation_mode == IsolationMode.GLOBAL:
            logger.debug("Leaving global isolation")
            self._set_hidden(frozenset(), IsolationMode.NONE, None)
        elif self._selected_id is not None:
            logger.debug(f"Entering global isolation on {self._selected_id}")
            self._set_hidden(self._isolation_hidden_set(self._selected_id), IsolationMode.GLOBAL, None)
        elif self._isolation_mode == IsolationMode.INDIVIDUAL:
            logger.debug("Leaving individual isolation")
            self._set_hidden(frozenset(), IsolationMode.NONE, None)

    def toggle_individual_isolation(self, node_id: str) -> None:
        """Isolate a specific node, or leave isolation if it already is.

        Unknown ids are ignored.

        Args:
            node_id: Id of the node to isolate
        """
        if self._isolation_mode == IsolationMode.INDIVIDUAL and self._individual_isolated_id == node_id:
            logger.debug(f"Leaving individual isolation of {node_id}")
            self._set_hidden(frozenset(), IsolationMode.NONE, None)
            return

        if node_id not in self._object_map:
            return

        logger.debug(f"Entering individual isolation on {node_id}")
        self._set_hidden(self._isolation_hidden_set(node_id), IsolationMode.INDIVIDUAL, node_id)

    def is_individually_isolated(self, node_id: str) -> bool:
        """Check if a node is the individually isolated one."""
        return self._individual_isolated_id is not None and self._individual_isolated_id == node_id

    def _isolation_hidden_set(self, node_id: str) -> frozenset[str]:
        """Everything except the node's subtree and its ancestors."""
        node = self._object_map.get(node_id)
        if node is None:
            return frozenset()

        visible = {child.id for child in node.traverse()}
        visible.update(ancestor.id for ancestor in node.ancestors())
        return frozenset(uuid for uuid in self._object_map if uuid not in visible)

    def _set_hidden(
        self,
        hidden: frozenset[str],
        mode: IsolationMode | None = None,
        individual_id: str | None = None,
    ) -> None:
        """Swap in a new hidden set (and isolation mode), then notify.

        Only values that actually changed are announced.
        """
        hidden_changed = hidden != self._hidden_objects
        isolation_changed = mode is not None and (
            mode != self._isolation_mode or individual_id != self._individual_isolated_id
        )

        if hidden_changed:
            self._hidden_objects = hidden
        if mode is not None:
            self._isolation_mode = mode
            self._individual_isolated_id = individual_id

        if hidden_changed:
            self.hidden_objects_changed.emit(self._hidden_objects)
        if isolation_changed:
            self.isolation_changed.emit(self._isolation_mode)

    # Selection

    def set_selected_object(self, node: SceneNode | None) -> None:
        """Select a node picked in the viewport.

        Nodes missing from the object map clear the selection.

        Args:
            node: Picked node, or None to clear
        """
        self._select(node.id if node is not None else None)

    def set_selected_by_id(self, node_id: str | None) -> None:
        """Select a node by id (from the hierarchy panel).

        Unknown ids clear the selection.

        Args:
            node_id: Id of the node, or None to clear
        """
        self._select(node_id)

    def clear_selection(self) -> None:
        """Clear all selection state."""
        self._select(None)

    def _select(self, node_id: str | None) -> None:
        node = self._object_map.get(node_id) if node_id is not None else None
        if node is None:
            self._selected_item = None
            self._selected_id = None
            self._selected_ids = []
        else:
            self._selected_item = node.name or node.id or "(unnamed)"
            self._selected_id = node.id
            self._selected_ids = self.get_descendant_mesh_ids(node.id)

        self.selection_changed.emit(self._selected_id)

    def set_hovered_object(self, node: SceneNode | None) -> None:
        """Record the node under the pointer (None when nothing is hovered)."""
        if node is self._hovered_object:
            return
        self._hovered_object = node
        self.hovered_object_changed.emit(node)

    # Queries

    def get_descendant_mesh_ids(self, node_id: str) -> list[str]:
        """Get the cached mesh ids below a node (empty for unknown ids)."""
        return list(self._mesh_descendants.get(node_id, []))

    def get_object_by_id(self, node_id: str) -> SceneNode | None:
        """Get a node by id."""
        return self._object_map.get(node_id)

    def get_objects_by_ids(self, node_ids: Iterable[str] | None) -> list[SceneNode]:
        """Get the nodes for a list of ids, skipping unknown ids."""
        return [self._object_map[node_id] for node_id in (node_ids or []) if node_id in self._object_map]
