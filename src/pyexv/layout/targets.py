"""World-space explosion targets.

For every explosion node a direction away from the model center is built,
bent away from close neighbors and spread laterally among siblings. The
resulting descriptors are refined by the overlap resolver and then compiled
into parent-local targets by the engine.
"""

import math
from collections import defaultdict
from dataclasses import dataclass

import numpy as np

from pyexv.layout.box import BoundingBox
from pyexv.layout.config import ExplosionConfig
from pyexv.layout.vector import deterministic_direction, normalize, perpendicular_direction
from pyexv.model.node import SceneNode


@dataclass
class ModelBounds:
    """Model-wide bounds used across the layout.

    Attributes:
        center: World-space center of the model
        radius: Half of the longest model edge (1.0 for a flat, empty or non-finite model)
        max_distance: Full travel distance in world units
    """

    center: np.ndarray
    radius: float
    max_distance: float

    @classmethod
    def from_root(cls, root: SceneNode, config: ExplosionConfig) -> "ModelBounds":
        box = BoundingBox.from_node(root)
        radius = box.radius
        if not math.isfinite(radius) or radius <= 0.0:
            radius = 1.0
        return cls(center=box.center, radius=radius, max_distance=radius * config.max_distance_factor)


@dataclass
class WorldTarget:
    """Mutable per-node descriptor used while the layout is computed.

    Attributes:
        node: Explosion node
        world_center: Center of the node's world bounds
        radius: Half of the longest edge of the node's world bounds
        direction: Unit world-space travel direction
        crowding_multiplier: Travel multiplier from neighbor proximity (>= 1)
        spread_gain: Travel multiplier added by overlap resolution (>= 1)
    """

    node: SceneNode
    world_center: np.ndarray
    radius: float
    direction: np.ndarray
    crowding_multiplier: float = 1.0
    spread_gain: float = 1.0

    def travel_distance(self, max_distance: float) -> float:
        """World travel distance at full explosion."""
        return max_distance * self.crowding_multiplier * self.spread_gain


def node_bounds(node: SceneNode) -> tuple[np.ndarray, float]:
    """Get the world center and radius of a node's subtree.

    A subtree without meshes is centered on the node's world origin with a
    zero radius.
    """
    box = BoundingBox.from_node(node)
    if box.is_empty:
        return node.world_position, 0.0
    return box.center, box.radius


def sibling_offsets(nodes: list[SceneNode]) -> list[float]:
    """Assign each node an offset in [-1, 1] among nodes sharing its parent.

    Siblings are ordered by name, then id, and spaced evenly around zero. A
    node without siblings gets zero.

    Args:
        nodes: Explosion nodes (each with a parent)

    Returns:
        Offsets aligned with ``nodes``
    """
    indices_by_parent: dict[str, list[int]] = defaultdict(list)
    for index, node in enumerate(nodes):
        indices_by_parent[node.parent.id].append(index)

    offsets = [0.0] * len(nodes)
    for indices in indices_by_parent.values():
        if len(indices) <= 1:
            continue
        ordered = sorted(indices, key=lambda i: (nodes[i].name or "", nodes[i].id))
        half = (len(ordered) - 1) / 2
        for order, index in enumerate(ordered):
            offsets[index] = (order - half) / max(half, 1)
    return offsets


def build_world_targets(
    nodes: list[SceneNode],
    model: ModelBounds,
    config: ExplosionConfig,
) -> list[WorldTarget]:
    """Build world-space descriptors for the explosion nodes.

    Args:
        nodes: Explosion nodes (each with a parent)
        model: Model-wide bounds
        config: Explosion configuration

    Returns:
        One WorldTarget per node, in the same order
    """
    eps = config.epsilon
    neighbor_radius = max(model.radius * config.neighbor_radius_factor, config.min_neighbor_radius)
    bounds = [node_bounds(node) for node in nodes]
    offsets = sibling_offsets(nodes)

    targets: list[WorldTarget] = []
    for index, node in enumerate(nodes):
        center, radius = bounds[index]
        direction = normalize(center - model.center, fallback=deterministic_direction(node.id, eps), epsilon=eps)

        repulsion = np.zeros(3)
        crowding_score = 0.0
        for other_index, other in enumerate(nodes):
            if other_index == index:
                continue
            delta = center - bounds[other_index][0]
            distance = float(np.linalg.norm(delta))
            if not math.isfinite(distance) or distance > neighbor_radius:
                continue

            safe_distance = max(distance, eps)
            weight = (1.0 - safe_distance / neighbor_radius) ** 2
            crowding_score += weight

            if distance <= eps:
                away = deterministic_direction(f"{node.id}:{other.id}", eps)
            else:
                away = delta / safe_distance
            repulsion += away * weight

        if np.dot(repulsion, repulsion) > eps:
            blended = direction + normalize(repulsion, epsilon=eps) * config.crowding_repulsion_weight
            direction = normalize(blended, fallback=direction, epsilon=eps)

        offset = offsets[index]
        if abs(offset) > eps:
            lateral = perpendicular_direction(direction, f"{node.parent.id}:{node.id}", eps)
            direction = normalize(direction + lateral * (offset * config.sibling_lateral_factor), fallback=direction, epsilon=eps)
            crowding_score += abs(offset) * config.sibling_crowding_factor

        crowding_multiplier = 1.0 + min(crowding_score, config.crowding_cap) * config.crowding_strength

        targets.append(WorldTarget(
            node=node,
            world_center=center,
            radius=radius,
            direction=direction,
            crowding_multiplier=crowding_multiplier,
        ))

    return targets
