"""Layout engine for exploded views of static models."""

import logging
import math
from dataclasses import dataclass, field

import numpy as np

from pyexv.errors import LayoutError
from pyexv.layout.config import ExplosionConfig
from pyexv.layout.overlap import resolve_projected_overlaps
from pyexv.layout.selection import pick_explosion_nodes
from pyexv.layout.targets import ModelBounds, WorldTarget, build_world_targets
from pyexv.layout.vector import max_abs_scale_component, to_local_direction
from pyexv.model.node import SceneNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExplosionTarget:
    """Parent-local animation data for one explosion node.

    Attributes:
        node: Node moved by the explosion
        initial_position: Local position captured when the layout was built
        direction: Unit travel direction in the parent's local space
        local_distance_multiplier: Local units travelled per world unit of
            explosion distance (crowding, spread and parent scale combined)
    """

    node: SceneNode
    initial_position: np.ndarray
    direction: np.ndarray
    local_distance_multiplier: float

    def position_at(self, world_distance: float) -> np.ndarray:
        """Local position after travelling ``world_distance`` world units."""
        return self.initial_position + self.direction * (world_distance * self.local_distance_multiplier)


@dataclass
class ExplosionLayout:
    """Result of an explosion layout operation.

    Attributes:
        targets: Compiled per-node targets
        max_distance: Full travel distance in world units
    """

    targets: list[ExplosionTarget] = field(default_factory=list)
    max_distance: float = 0.0

    def positions_at(self, factor: float) -> dict[str, np.ndarray]:
        """Compute local positions for an explosion factor without moving nodes.

        Args:
            factor: Explosion progress in [0, 1]

        Returns:
            Dictionary mapping node ids to local positions
        """
        world_distance = self.max_distance * factor
        return {target.node.id: target.position_at(world_distance) for target in self.targets}


def compile_local_targets(world_targets: list[WorldTarget], epsilon: float) -> list[ExplosionTarget]:
    """Convert resolved world descriptors into parent-local targets.

    Args:
        world_targets: Resolved world-space descriptors
        epsilon: Threshold for degenerate vectors and scales

    Returns:
        Explosion targets in the same order

    Raises:
        LayoutError: If a descriptor's node has no parent
    """
    targets = []
    for entry in world_targets:
        parent = entry.node.parent
        if parent is None:
            raise LayoutError(f"explosion node '{entry.node.id}' has no parent")

        direction = to_local_direction(parent, entry.world_center, entry.direction, epsilon)
        parent_scale = max_abs_scale_component(parent.world_scale, epsilon)
        multiplier = (1.0 / parent_scale) * entry.crowding_multiplier * entry.spread_gain

        targets.append(ExplosionTarget(
            node=entry.node,
            initial_position=entry.node.position.copy(),
            direction=direction,
            local_distance_multiplier=max(multiplier, 0.0) if math.isfinite(multiplier) else 0.0,
        ))
    return targets


class ExplosionEngine:
    """Engine for calculating exploded-view targets of a scene."""

    def __init__(self, config: ExplosionConfig | None = None) -> None:
        """Initialize the explosion engine.

        Args:
            config: Explosion configuration (uses defaults if None)
        """
        self.config = config or ExplosionConfig()

    def calculate_targets(self, root: SceneNode) -> ExplosionLayout:
        """Calculate explosion targets for every explosion node of a scene.

        Args:
            root: Root node of the scene

        Returns:
            ExplosionLayout with compiled targets and the travel distance
        """
        model = ModelBounds.from_root(root, self.config)
        nodes = [node for node in pick_explosion_nodes(root) if node.parent is not None]

        world_targets = build_world_targets(nodes, model, self.config)
        adjustments = resolve_projected_overlaps(world_targets, model.max_distance, model.radius, self.config)
        targets = compile_local_targets(world_targets, self.config.epsilon)

        logger.debug(
            f"Computed {len(targets)} explosion targets "
            f"(radius={model.radius:.3f}, max_distance={model.max_distance:.3f}, "
            f"overlap adjustments={adjustments})"
        )
        return ExplosionLayout(targets=targets, max_distance=model.max_distance)
