"""Pointer input handling for object picking.

Ray casting itself happens outside this package: each event carries the
list of nodes hit by the pointer ray, nearest first. The handler resolves
the topmost visible node and turns pointer events into click and hover
callbacks.
"""

from collections.abc import Sequence
from typing import Callable

from pyexv.model.node import SceneNode


def find_first_visible(hits: Sequence[SceneNode] | None) -> SceneNode | None:
    """Find the nearest hit node that is not hidden.

    Args:
        hits: Nodes under the pointer, nearest first

    Returns:
        First visible node, or None if every hit is hidden or there are none
    """
    for node in hits or ():
        if node is not None and node.visible:
            return node
    return None


class PickInputHandler:
    """Handler for pointer pick and hover events.

    Connects viewport pointer events to selection and hover updates.
    """

    def __init__(self) -> None:
        """Initialize the pick input handler."""
        # Callbacks
        self._on_node_clicked: Callable[[SceneNode | None], None] | None = None
        self._on_node_hovered: Callable[[SceneNode | None], None] | None = None

        # Hover detection
        self._hovered_node: SceneNode | None = None

    @property
    def hovered_node(self) -> SceneNode | None:
        """Node currently reported as hovered."""
        return self._hovered_node

    # Public API

    def set_node_clicked_callback(self, callback: Callable[[SceneNode | None], None]) -> None:
        """Set callback for node click events.

        Args:
            callback: Function receiving the picked node (None for a miss)
        """
        self._on_node_clicked = callback

    def set_node_hovered_callback(self, callback: Callable[[SceneNode | None], None]) -> None:
        """Set callback for hover changes.

        Args:
            callback: Function receiving the hovered node (None when cleared)
        """
        self._on_node_hovered = callback

    # Pointer event handlers

    def click_event(self, hits: Sequence[SceneNode] | None) -> bool:
        """Handle a click on the model.

        Args:
            hits: Nodes under the pointer, nearest first

        Returns:
            True if a visible node was picked
        """
        node = find_first_visible(hits)
        if node is None:
            return False

        self.clear_hover()
        if self._on_node_clicked:
            self._on_node_clicked(node)
        return True

    def pointer_over_event(self, hits: Sequence[SceneNode] | None) -> bool:
        """Handle the pointer entering a node.

        Args:
            hits: Nodes under the pointer, nearest first

        Returns:
            True if the hovered node changed
        """
        node = find_first_visible(hits)
        if node is None or node is self._hovered_node:
            return False

        self._set_hover(node)
        return True

    def pointer_out_event(self, hits: Sequence[SceneNode] | None) -> bool:
        """Handle the pointer leaving a node.

        Hover moves to the next visible node still under the pointer, or is
        cleared when there is none.

        Args:
            hits: Nodes still under the pointer, nearest first

        Returns:
            True if the hovered node changed
        """
        node = find_first_visible(hits)
        if node is None:
            return self.clear_hover()
        if node is not self._hovered_node:
            self._set_hover(node)
            return True
        return False

    def pointer_missed_event(self) -> None:
        """Handle a click on empty space: clears selection and hover."""
        self.clear_hover()
        if self._on_node_clicked:
            self._on_node_clicked(None)

    def clear_hover(self) -> bool:
        """Clear the hovered node.

        Returns:
            True if a node was hovered
        """
        if self._hovered_node is None:
            return False
        self._set_hover(None)
        return True

    def _set_hover(self, node: SceneNode | None) -> None:
        self._hovered_node = node
        if self._on_node_hovered:
            self._on_node_hovered(node)
