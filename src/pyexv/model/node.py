"""Node class representing an entry of a 3D scene graph."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Self

import numpy as np


class NodeType(Enum):
    """Type of scene node."""

    MESH = "mesh"
    GROUP = "group"


def _vector(values, default: tuple[float, ...]) -> np.ndarray:
    if values is None:
        return np.array(default, dtype=np.float64)
    return np.asarray(values, dtype=np.float64).copy()


@dataclass(eq=False)
class SceneNode:
    """Represents a mesh or a group in a static model hierarchy.

    Topology is fixed once the scene is loaded. Only ``position`` (moved by
    the exploded view) and ``visible`` (driven by the viewer state) change
    during a session.

    Attributes:
        id: Unique identifier of the node
        name: Display name (may be empty)
        type: NodeType indicating whether the node is a renderable leaf
        position: Local translation [x, y, z]
        rotation: Local rotation quaternion [x, y, z, w]
        scale: Local scale [x, y, z]
        geometry_bounds: Local (min, max) corners of the mesh geometry
        children: Ordered child nodes
        parent: Parent node (None for root)
        visible: Visibility flag mirrored from the viewer state
    """

    id: str
    name: str = ""
    type: NodeType = NodeType.GROUP
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 0.0, 1.0]))
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))
    geometry_bounds: tuple[np.ndarray, np.ndarray] | None = None
    children: list[Self] = field(default_factory=list)
    parent: Self | None = None
    visible: bool = True

    def __post_init__(self) -> None:
        self.position = _vector(self.position, (0.0, 0.0, 0.0))
        self.rotation = _vector(self.rotation, (0.0, 0.0, 0.0, 1.0))
        self.scale = _vector(self.scale, (1.0, 1.0, 1.0))
        if self.geometry_bounds is not None:
            low, high = self.geometry_bounds
            self.geometry_bounds = (_vector(low, (0.0, 0.0, 0.0)), _vector(high, (0.0, 0.0, 0.0)))

    def __hash__(self) -> int:
        """Hash based on id."""
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        """Equality based on id."""
        if not isinstance(other, SceneNode):
            return NotImplemented
        return self.id == other.id

    @property
    def is_mesh(self) -> bool:
        """Check if this node is a renderable leaf."""
        return self.type == NodeType.MESH

    @property
    def depth(self) -> int:
        """Get the depth of this node in the tree (root = 0)."""
        depth = 0
        current = self.parent
        while current is not None:
            depth += 1
            current = current.parent
        return depth

    @property
    def mesh_count(self) -> int:
        """Get total number of meshes in this subtree."""
        return sum(1 for node in self.traverse() if node.is_mesh)

    def add_child(self, child: Self) -> None:
        """Attach a child node.

        Args:
            child: Child node to add
        """
        if child.parent is not None:
            child.parent.remove_child(child)
        child.parent = self
        self.children.append(child)

    def remove_child(self, child: Self) -> bool:
        """Detach a child node.

        Args:
            child: Child node to remove

        Returns:
            True if child was removed, False if not found
        """
        try:
            self.children.remove(child)
            child.parent = None
            return True
        except ValueError:
            return False

    def traverse(self) -> Iterator[Self]:
        """Iterate over this node and all descendants, depth first, pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def ancestors(self) -> Iterator[Self]:
        """Iterate from the parent up to the root."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def has_mesh_descendant(self) -> bool:
        """Check if this node or any descendant is a mesh."""
        return any(node.is_mesh for node in self.traverse())

    # Transforms

    @property
    def local_matrix(self) -> np.ndarray:
        """Compose the 4x4 local matrix from position, rotation and scale."""
        x, y, z, w = self.rotation
        norm = np.sqrt(x * x + y * y + z * z + w * w)
        if norm > 0.0:
            x, y, z, w = x / norm, y / norm, z / norm, w / norm
        else:
            x, y, z, w = 0.0, 0.0, 0.0, 1.0

        rotation = np.array([
            [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
            [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
            [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
        ], dtype=np.float64)

        matrix = np.identity(4, dtype=np.float64)
        matrix[:3, :3] = rotation * self.scale
        matrix[:3, 3] = self.position
        return matrix

    @property
    def world_matrix(self) -> np.ndarray:
        """Get the 4x4 world matrix (recomputed from current local transforms)."""
        matrix = self.local_matrix
        for ancestor in self.ancestors():
            matrix = ancestor.local_matrix @ matrix
        return matrix

    @property
    def world_position(self) -> np.ndarray:
        """Get the world-space origin of this node."""
        return self.world_matrix[:3, 3].copy()

    @property
    def world_scale(self) -> np.ndarray:
        """Get the world scale, decomposed from the world matrix.

        A negative determinant is folded into the X component.
        """
        matrix = self.world_matrix
        scale = np.linalg.norm(matrix[:3, :3], axis=0)
        if np.linalg.det(matrix[:3, :3]) < 0:
            scale[0] = -scale[0]
        return scale

    def local_to_world(self, point: np.ndarray) -> np.ndarray:
        """Transform a point from this node's local space into world space."""
        homogeneous = np.append(np.asarray(point, dtype=np.float64), 1.0)
        return (self.world_matrix @ homogeneous)[:3]

    def world_to_local(self, point: np.ndarray) -> np.ndarray:
        """Transform a world-space point into this node's local space.

        A singular world matrix inverts to the zero matrix, so every point
        maps to the local origin.
        """
        try:
            inverse = np.linalg.inv(self.world_matrix)
        except np.linalg.LinAlgError:
            inverse = np.zeros((4, 4), dtype=np.float64)
        homogeneous = np.append(np.asarray(point, dtype=np.float64), 1.0)
        return (inverse @ homogeneous)[:3]

    def __repr__(self) -> str:
        """String representation of the node."""
        return f"SceneNode({self.type.value}, {self.name or self.id}, depth={self.depth})"
