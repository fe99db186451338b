"""World-space bounding boxes for scene nodes."""

from dataclasses import dataclass, field
from itertools import product

import numpy as np

from pyexv.model.node import SceneNode


@dataclass
class BoundingBox:
    """Axis-aligned bounding box in world space.

    An empty box has ``min_bounds`` at +inf and ``max_bounds`` at -inf.

    Attributes:
        min_bounds: Minimum corner [x, y, z]
        max_bounds: Maximum corner [x, y, z]
    """

    min_bounds: np.ndarray = field(default_factory=lambda: np.full(3, np.inf))
    max_bounds: np.ndarray = field(default_factory=lambda: np.full(3, -np.inf))

    @property
    def is_empty(self) -> bool:
        """Check if the box contains no point."""
        return bool(np.any(self.max_bounds < self.min_bounds))

    @property
    def center(self) -> np.ndarray:
        """Get the center point (origin for an empty box)."""
        if self.is_empty:
            return np.zeros(3)
        return (self.min_bounds + self.max_bounds) / 2.0

    @property
    def size(self) -> np.ndarray:
        """Get the edge lengths (zero for an empty box)."""
        if self.is_empty:
            return np.zeros(3)
        return self.max_bounds - self.min_bounds

    @property
    def radius(self) -> float:
        """Half of the longest edge."""
        return float(np.max(self.size)) * 0.5

    def expand_by_point(self, point: np.ndarray) -> None:
        """Grow the box to include a point.

        Args:
            point: World-space point [x, y, z]
        """
        self.min_bounds = np.minimum(self.min_bounds, point)
        self.max_bounds = np.maximum(self.max_bounds, point)

    def expand_by_node(self, node: SceneNode) -> None:
        """Grow the box to include every mesh in a subtree.

        Each mesh contributes the eight world-space corners of its geometry
        bounds, or its world origin when it has no geometry bounds. Corners
        with non-finite coordinates are skipped.

        Args:
            node: Root of the subtree to include
        """
        for mesh in node.traverse():
            if not mesh.is_mesh:
                continue
            matrix = mesh.world_matrix
            if mesh.geometry_bounds is None:
                origin = matrix[:3, 3]
                if np.all(np.isfinite(origin)):
                    self.expand_by_point(origin)
                continue
            low, high = mesh.geometry_bounds
            corners = np.array(list(product(*zip(low, high))), dtype=np.float64)
            homogeneous = np.hstack([corners, np.ones((8, 1))])
            world_corners = (matrix @ homogeneous.T).T[:, :3]
            world_corners = world_corners[np.all(np.isfinite(world_corners), axis=1)]
            if not len(world_corners):
                continue
            self.min_bounds = np.minimum(self.min_bounds, world_corners.min(axis=0))
            self.max_bounds = np.maximum(self.max_bounds, world_corners.max(axis=0))

    @classmethod
    def from_node(cls, node: SceneNode) -> "BoundingBox":
        """Create the world-space bounding box of a subtree.

        Args:
            node: Root of the subtree

        Returns:
            A new BoundingBox instance (empty when the subtree has no mesh)
        """
        box = cls()
        box.expand_by_node(node)
        return box
