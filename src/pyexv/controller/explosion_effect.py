"""Per-frame application of cached explosion targets to a scene."""

import logging

from pyexv.controller.viewer_state import coerce_explosion_factor
from pyexv.layout.engine import ExplosionEngine, ExplosionLayout
from pyexv.model.node import SceneNode

logger = logging.getLogger(__name__)


class ExplosionEffect:
    """Moves explosion nodes according to a scalar explosion factor.

    Targets are computed once when a scene is attached. Each frame only
    reads the cached layout, and detaching puts every moved node back at
    its captured initial position.
    """

    def __init__(self, engine: ExplosionEngine | None = None) -> None:
        """Initialize the effect.

        Args:
            engine: Engine used to compute targets (default engine if None)
        """
        self._engine = engine or ExplosionEngine()
        self._scene: SceneNode | None = None
        self._layout = ExplosionLayout()

    @property
    def scene(self) -> SceneNode | None:
        """Attached scene root."""
        return self._scene

    @property
    def layout(self) -> ExplosionLayout:
        """Cached layout of the attached scene."""
        return self._layout

    def attach(self, scene: SceneNode) -> None:
        """Compute and cache targets for a scene, replacing any previous one.

        Args:
            scene: Scene root
        """
        self.detach()
        self._scene = scene
        self._layout = self._engine.calculate_targets(scene)
        logger.debug(f"Attached explosion effect with {len(self._layout.targets)} targets")

    def update(self, explosion_factor: object) -> None:
        """Position every target for the given explosion factor.

        Args:
            explosion_factor: Explosion progress, coerced into [0, 1]
        """
        factor = coerce_explosion_factor(explosion_factor)
        world_distance = self._layout.max_distance * factor
        for target in self._layout.targets:
            target.node.position = target.position_at(world_distance)

    def detach(self) -> None:
        """Restore initial positions and drop the cached targets."""
        for target in self._layout.targets:
            target.node.position = target.initial_position.copy()
        self._layout = ExplosionLayout()
        self._scene = None
