"""Configuration for the exploded-view layout."""

from dataclasses import dataclass

from pyexv.errors import ValidationError, validate_positive, validate_range
from pyexv.layout.vector import EPSILON


@dataclass
class ExplosionConfig:
    """Configuration for the explosion engine.

    Attributes:
        max_distance_factor: Full travel distance as a multiple of the model radius
        neighbor_radius_factor: Crowding detection radius as a multiple of the model radius
        min_neighbor_radius: Absolute floor for the crowding detection radius
        crowding_repulsion_weight: Weight of the neighbor repulsion blended into a direction
        sibling_lateral_factor: Lateral nudge applied per unit of sibling offset
        sibling_crowding_factor: Crowding score added per unit of sibling offset
        crowding_cap: Maximum crowding score used for the multiplier
        crowding_strength: Multiplier gained per crowding point
        overlap_iterations: Passes made by the overlap resolver
        overlap_early_exit: Stop resolving once a pass makes no adjustment
        overlap_min_gap_factor: Minimum trajectory gap as a fraction of the model radius
        overlap_min_gap_absolute: Absolute floor for the minimum trajectory gap
        overlap_radius_scale: Fraction of the summed node radii required as gap
        overlap_separation_strength: Direction impulse per unit of overlap ratio
        overlap_spread_boost: Spread gain added per unit of overlap ratio
        overlap_checkpoints: Fractions of travel at which trajectories are compared
        epsilon: Squared-length threshold for degenerate vectors
    """

    max_distance_factor: float = 1.25
    neighbor_radius_factor: float = 0.36
    min_neighbor_radius: float = 0.02
    crowding_repulsion_weight: float = 1.2
    sibling_lateral_factor: float = 0.62
    sibling_crowding_factor: float = 0.95
    crowding_cap: float = 3.5
    crowding_strength: float = 0.5
    overlap_iterations: int = 3
    overlap_early_exit: bool = False
    overlap_min_gap_factor: float = 0.04
    overlap_min_gap_absolute: float = 0.45
    overlap_radius_scale: float = 0.72
    overlap_separation_strength: float = 0.36
    overlap_spread_boost: float = 0.24
    overlap_checkpoints: tuple[float, ...] = (0.35, 0.65, 1.0)
    epsilon: float = EPSILON

    def __post_init__(self) -> None:
        validate_positive(self.max_distance_factor, "max_distance_factor")
        validate_positive(self.neighbor_radius_factor, "neighbor_radius_factor")
        validate_positive(self.min_neighbor_radius, "min_neighbor_radius")
        validate_positive(self.epsilon, "epsilon")
        if self.overlap_iterations < 0:
            raise ValidationError("overlap_iterations", self.overlap_iterations, "non-negative integer")

        self.overlap_checkpoints = tuple(float(value) for value in self.overlap_checkpoints)
        if not self.overlap_checkpoints:
            raise ValidationError("overlap_checkpoints", self.overlap_checkpoints, "at least one checkpoint")
        for checkpoint in self.overlap_checkpoints:
            if checkpoint <= 0:
                raise ValidationError("overlap_checkpoints", checkpoint, "value in (0, 1]")
            validate_range(checkpoint, 0.0, 1.0, "overlap_checkpoints")
