"""Main controller for the viewer core.

Coordinates the scene graph, the explosion effect and the viewer state:
loads and unloads scenes, forwards pick and hover input to the state,
mirrors the hidden set onto node visibility flags, and applies the current
explosion factor once per frame.
"""

import logging

from PyQt6.QtCore import QObject, pyqtSignal

from pyexv.controller.explosion_effect import ExplosionEffect
from pyexv.controller.input_handler import PickInputHandler
from pyexv.controller.viewer_state import ViewerState
from pyexv.layout.config import ExplosionConfig
from pyexv.layout.engine import ExplosionEngine
from pyexv.model.hierarchy import build_hierarchy
from pyexv.model.node import SceneNode

logger = logging.getLogger(__name__)


class Controller(QObject):
    """Viewer controller.

    Manages the scene lifecycle and coordinates between layers.
    """

    # Signals for UI updates
    scene_loaded = pyqtSignal(int)  # Emits node count
    scene_unloaded = pyqtSignal()

    def __init__(self, state: ViewerState | None = None, config: ExplosionConfig | None = None) -> None:
        """Initialize controller.

        Args:
            state: Viewer state to drive (a new one if None)
            config: Explosion configuration (defaults if None)
        """
        super().__init__()

        self._state = state or ViewerState()
        self._effect = ExplosionEffect(ExplosionEngine(config))
        self._input_handler = PickInputHandler()

        # Scene data
        self._root: SceneNode | None = None
        self._nodes: dict[str, SceneNode] = {}

        self._connect_signals()
        self._connect_input_handler()

    def _connect_signals(self) -> None:
        """Connect state signals."""
        self._state.hidden_objects_changed.connect(self._on_hidden_objects_changed)

    def _connect_input_handler(self) -> None:
        """Connect input handler callbacks."""
        self._input_handler.set_node_clicked_callback(self._state.set_selected_object)
        self._input_handler.set_node_hovered_callback(self._state.set_hovered_object)

    # Properties

    @property
    def state(self) -> ViewerState:
        """Viewer state driven by this controller."""
        return self._state

    @property
    def effect(self) -> ExplosionEffect:
        """Explosion effect of the loaded scene."""
        return self._effect

    @property
    def input_handler(self) -> PickInputHandler:
        """Pick input handler fed by the viewport."""
        return self._input_handler

    @property
    def root(self) -> SceneNode | None:
        """Root of the loaded scene."""
        return self._root

    # Scene management

    def load_scene(self, root: SceneNode) -> None:
        """Load a scene: index nodes, build the hierarchy and explosion targets.

        Args:
            root: Root node of the scene
        """
        if self._root is not None:
            self.unload_scene()

        self._state.set_loading(True)
        self._root = root
        self._nodes = {node.id: node for node in root.traverse()}

        self._state.set_object_map(self._nodes)
        self._state.set_items(build_hierarchy(root))
        self._effect.attach(root)
        self._effect.update(self._state.explosion_factor)

        self._state.set_loading(False)
        logger.debug(f"Loaded scene with {len(self._nodes)} nodes")
        self.scene_loaded.emit(len(self._nodes))

    def unload_scene(self) -> None:
        """Unload the scene, restoring every moved node to its initial position."""
        if self._root is None:
            return

        self._effect.detach()
        self._input_handler.clear_hover()
        for node in self._nodes.values():
            node.visible = True

        self._root = None
        self._nodes = {}
        self._state.set_object_map({})
        self._state.set_items([])
        self.scene_unloaded.emit()

    def tick(self) -> None:
        """Frame update: apply the current explosion factor to the scene."""
        self._effect.update(self._state.explosion_factor)

    # Visibility

    def _on_hidden_objects_changed(self, hidden: frozenset[str]) -> None:
        """Mirror the hidden set onto node visibility flags.

        Selection and hover pointing at a node that just became hidden are
        cleared.

        Args:
            hidden: Ids of hidden nodes
        """
        for node_id, node in self._nodes.items():
            node.visible = node_id not in hidden

        if self._state.selected_id is not None and self._state.selected_id in hidden:
            self._state.clear_selection()

        hovered = self._input_handler.hovered_node
        if hovered is not None and hovered.id in hidden:
            self._input_handler.clear_hover()

        # Hover may also be set on the state directly
        hovered = self._state.hovered_object
        if hovered is not None and hovered.id in hidden:
            self._state.set_hovered_object(None)
