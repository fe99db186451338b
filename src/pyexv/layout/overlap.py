"""Resolution of colliding explosion trajectories."""

import logging

import numpy as np

from pyexv.layout.config import ExplosionConfig
from pyexv.layout.targets import WorldTarget
from pyexv.layout.vector import deterministic_direction, normalize

logger = logging.getLogger(__name__)


def _closest_approach(
    left: WorldTarget,
    right: WorldTarget,
    max_distance: float,
    checkpoints: tuple[float, ...],
) -> tuple[float, np.ndarray]:
    """Smallest distance between two projected centers over the checkpoints."""
    left_travel = left.travel_distance(max_distance)
    right_travel = right.travel_distance(max_distance)

    best_distance = np.inf
    best_delta = np.zeros(3)
    for checkpoint in checkpoints:
        left_center = left.world_center + left.direction * (left_travel * checkpoint)
        right_center = right.world_center + right.direction * (right_travel * checkpoint)
        delta = left_center - right_center
        distance = float(np.linalg.norm(delta))
        if distance < best_distance:
            best_distance = distance
            best_delta = delta
    return best_distance, best_delta


def resolve_projected_overlaps(
    targets: list[WorldTarget],
    max_distance: float,
    model_radius: float,
    config: ExplosionConfig | None = None,
) -> int:
    """Push apart targets whose trajectories come too close.

    Every pair is compared at the configured fractions of travel. When the
    closest approach is below the minimum gap, both directions receive an
    opposite impulse along the separating axis and both spread gains grow
    with the overlap ratio. Effects compound over a fixed number of passes;
    residual overlap is possible for very dense clusters.

    Targets are updated in place.

    Args:
        targets: World-space descriptors
        max_distance: Full travel distance in world units
        model_radius: Model radius in world units
        config: Explosion configuration (defaults if None)

    Returns:
        Number of pair adjustments made
    """
    config = config or ExplosionConfig()
    if len(targets) < 2:
        return 0

    eps = config.epsilon
    base_gap = max(model_radius * config.overlap_min_gap_factor, config.overlap_min_gap_absolute)
    adjustments = 0

    for iteration in range(config.overlap_iterations):
        pass_adjustments = 0
        for left_index, left in enumerate(targets):
            for right in targets[left_index + 1:]:
                distance, delta = _closest_approach(left, right, max_distance, config.overlap_checkpoints)
                min_gap = max((left.radius + right.radius) * config.overlap_radius_scale, base_gap)
                if distance >= min_gap:
                    continue

                overlap_ratio = (min_gap - distance) / min_gap
                if distance <= eps:
                    axis = deterministic_direction(f"{left.node.id}:{right.node.id}", eps)
                else:
                    axis = delta / max(distance, eps)

                strength = config.overlap_separation_strength * overlap_ratio
                left.direction = normalize(left.direction + axis * strength, fallback=left.direction, epsilon=eps)
                right.direction = normalize(right.direction - axis * strength, fallback=right.direction, epsilon=eps)

                boost = 1.0 + overlap_ratio * config.overlap_spread_boost
                left.spread_gain *= boost
                right.spread_gain *= boost
                pass_adjustments += 1

        adjustments += pass_adjustments
        logger.debug(f"Overlap pass {iteration + 1}: {pass_adjustments} adjustments")
        if config.overlap_early_exit and pass_adjustments == 0:
            break

    return adjustments
