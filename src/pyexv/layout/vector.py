"""Vector helpers for exploded-view layout.

Every function here is pure and tolerates zero-length input: directions
that would degenerate are replaced by deterministic fallbacks so that no
NaN or infinite value reaches the layout.
"""

import numpy as np

from pyexv.model.node import SceneNode

EPSILON = 1e-10

X_AXIS = np.array([1.0, 0.0, 0.0])
Y_AXIS = np.array([0.0, 1.0, 0.0])


def _seed_hash(seed: str) -> int:
    """31-multiplier rolling hash over UTF-16 code units, kept to 32 bits."""
    data = seed.encode("utf-16-le", "surrogatepass")
    value = 0
    for index in range(0, len(data), 2):
        code_unit = data[index] | (data[index + 1] << 8)
        value = (value * 31 + code_unit) & 0xFFFFFFFF
    return value


def deterministic_direction(seed: str, epsilon: float = EPSILON) -> np.ndarray:
    """Build a repeatable pseudo-random unit direction from a seed string.

    The low three bytes of the seed hash map to the X, Y and Z components
    in [-1, 1]. The same seed yields the same vector on every run.

    Args:
        seed: Seed used to generate a stable direction
        epsilon: Squared-length threshold below which +X is returned

    Returns:
        Normalized direction vector
    """
    value = _seed_hash(seed)
    direction = np.array([
        ((value & 0xFF) / 255.0) * 2.0 - 1.0,
        (((value >> 8) & 0xFF) / 255.0) * 2.0 - 1.0,
        (((value >> 16) & 0xFF) / 255.0) * 2.0 - 1.0,
    ], dtype=np.float64)

    length_sq = float(np.dot(direction, direction))
    if length_sq <= epsilon:
        return X_AXIS.copy()
    return direction / np.sqrt(length_sq)


def normalize(vector: np.ndarray, fallback: np.ndarray | None = None, epsilon: float = EPSILON) -> np.ndarray:
    """Return a unit copy of ``vector``, or of ``fallback`` when it degenerates.

    Args:
        vector: Vector to normalize
        fallback: Replacement used when ``vector`` is near zero or not finite
        epsilon: Squared-length threshold

    Returns:
        Unit-length vector (+X when both inputs degenerate)
    """
    for candidate in (vector, fallback):
        if candidate is None:
            continue
        candidate = np.asarray(candidate, dtype=np.float64)
        length_sq = float(np.dot(candidate, candidate))
        if np.isfinite(length_sq) and length_sq > epsilon:
            return candidate / np.sqrt(length_sq)
    return X_AXIS.copy()


def perpendicular_direction(direction: np.ndarray, seed: str, epsilon: float = EPSILON) -> np.ndarray:
    """Build a unit vector orthogonal to ``direction``.

    A seeded direction is made orthogonal by Gram-Schmidt projection. When
    it is parallel to ``direction`` the cross product with a world axis is
    used instead, and +X is the last resort.

    Args:
        direction: Reference direction
        seed: Seed for the deterministic starting vector
        epsilon: Squared-length threshold

    Returns:
        Normalized perpendicular direction
    """
    reference = np.asarray(direction, dtype=np.float64)
    length_sq = float(np.dot(reference, reference))
    if np.isfinite(length_sq) and length_sq > epsilon:
        reference = reference / np.sqrt(length_sq)
    else:
        reference = np.zeros(3)

    seeded = deterministic_direction(seed, epsilon)
    perpendicular = seeded - reference * np.dot(seeded, reference)

    if np.dot(perpendicular, perpendicular) <= epsilon:
        axis = Y_AXIS if abs(reference[1]) < 0.9 else X_AXIS
        perpendicular = np.cross(reference, axis)

    if np.dot(perpendicular, perpendicular) <= epsilon:
        return X_AXIS.copy()

    return perpendicular / np.linalg.norm(perpendicular)


def to_local_direction(
    parent: SceneNode,
    world_origin: np.ndarray,
    world_direction: np.ndarray,
    epsilon: float = EPSILON,
) -> np.ndarray:
    """Convert a world direction into the local space of ``parent``.

    Both ``world_origin`` and ``world_origin + world_direction`` are moved
    into local space and differenced, which accounts for rotation and
    non-uniform scale. If the result collapses (singular scale) the world
    direction is used as-is.

    Args:
        parent: Node whose local frame is the target space
        world_origin: World-space origin point
        world_direction: World-space direction
        epsilon: Squared-length threshold

    Returns:
        Normalized local-space direction
    """
    world_origin = np.asarray(world_origin, dtype=np.float64)
    world_direction = np.asarray(world_direction, dtype=np.float64)

    local_origin = parent.world_to_local(world_origin)
    local_step = parent.world_to_local(world_origin + world_direction)
    return normalize(local_step - local_origin, fallback=world_direction, epsilon=epsilon)


def max_abs_scale_component(scale: np.ndarray, floor: float = EPSILON) -> float:
    """Return the largest absolute scale component, never below ``floor``.

    Non-finite components are ignored. A scale with no finite component
    counts as unit scale.
    """
    components = np.abs(np.asarray(scale, dtype=np.float64))
    components = components[np.isfinite(components)]
    if not components.size:
        return 1.0
    return max(float(np.max(components)), floor)
