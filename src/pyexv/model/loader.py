"""Scene description loader.

Builds a SceneNode tree from nested mappings, typically parsed from a JSON
document::

    {
        "id": "root",
        "name": "Air motor",
        "type": "group",
        "children": [
            {
                "id": "rotor",
                "type": "mesh",
                "position": [0.0, 0.0, 1.0],
                "rotation": [0.0, 0.0, 0.0, 1.0],
                "scale": [1.0, 1.0, 1.0],
                "bounds": [[-0.5, -0.5, -0.5], [0.5, 0.5, 0.5]]
            }
        ]
    }
"""

import json
import logging
import math
import uuid
from collections.abc import Mapping
from pathlib import Path

from pyexv.errors import SceneError
from pyexv.model.node import NodeType, SceneNode

logger = logging.getLogger(__name__)


def _read_vector(data: Mapping, key: str, length: int, node_id: str) -> list[float] | None:
    value = data.get(key)
    if value is None:
        return None
    return _to_vector(value, key, length, node_id)


def _to_vector(value: object, key: str, length: int, node_id: str) -> list[float]:
    if not isinstance(value, (list, tuple)) or len(value) != length:
        raise SceneError(node_id, f"'{key}' must be a list of {length} numbers")
    try:
        vector = [float(component) for component in value]
    except (TypeError, ValueError):
        raise SceneError(node_id, f"'{key}' must be a list of {length} numbers")
    if not all(math.isfinite(component) for component in vector):
        raise SceneError(node_id, f"'{key}' must contain finite numbers")
    return vector


def _read_type(data: Mapping, node_id: str) -> NodeType:
    raw = data.get("type", NodeType.MESH.value if "bounds" in data else NodeType.GROUP.value)
    try:
        return NodeType(str(raw).lower())
    except ValueError:
        raise SceneError(node_id, f"unknown node type {raw!r}")


def _build_node(data: object, seen: set[str], parent: SceneNode | None) -> SceneNode:
    if not isinstance(data, Mapping):
        raise SceneError(parent.id if parent else "<root>", "node entries must be objects")

    node_id = str(data.get("id") or uuid.uuid4())
    if node_id in seen:
        raise SceneError(node_id, "duplicate node id")
    seen.add(node_id)

    bounds = data.get("bounds")
    geometry_bounds = None
    if bounds is not None:
        if not isinstance(bounds, (list, tuple)) or len(bounds) != 2:
            raise SceneError(node_id, "'bounds' must be [[min x, y, z], [max x, y, z]]")
        low = _to_vector(bounds[0], "bounds", 3, node_id)
        high = _to_vector(bounds[1], "bounds", 3, node_id)
        geometry_bounds = (low, high)

    node = SceneNode(
        id=node_id,
        name=str(data.get("name") or ""),
        type=_read_type(data, node_id),
        position=_read_vector(data, "position", 3, node_id),
        rotation=_read_vector(data, "rotation", 4, node_id),
        scale=_read_vector(data, "scale", 3, node_id),
        geometry_bounds=geometry_bounds,
    )
    if parent is not None:
        parent.add_child(node)

    children = data.get("children", [])
    if not isinstance(children, (list, tuple)):
        raise SceneError(node_id, "'children' must be a list")
    for child in children:
        _build_node(child, seen, node)

    return node


def scene_from_dict(data: Mapping) -> SceneNode:
    """Build a scene tree from a nested mapping.

    Args:
        data: Root node description

    Returns:
        The root SceneNode with all descendants attached

    Raises:
        SceneError: If the description is malformed
    """
    root = _build_node(data, set(), None)
    logger.debug(f"Built scene '{root.name or root.id}' with {sum(1 for _ in root.traverse())} nodes")
    return root


def load_scene(path: Path | str) -> SceneNode:
    """Load a scene description from a JSON file.

    Args:
        path: Path to the JSON document

    Returns:
        The root SceneNode

    Raises:
        SceneError: If the file cannot be read or is malformed
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except OSError as e:
        raise SceneError(path, str(e)) from e
    except json.JSONDecodeError as e:
        raise SceneError(path, f"invalid JSON: {e}") from e

    return scene_from_dict(data)
