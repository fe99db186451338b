"""Selection of the sub-trees that move as rigid units in an exploded view."""

from pyexv.model.node import SceneNode

# Below these counts the current decomposition is considered too coarse
MESH_PARENT_THRESHOLD = 6
FLAT_MESH_THRESHOLD = 3


def get_mesh_nodes(root: SceneNode) -> list[SceneNode]:
    """Collect every mesh in the tree, in traversal order."""
    return [node for node in root.traverse() if node.is_mesh]


def get_unique_mesh_parents(root: SceneNode) -> list[SceneNode]:
    """Collect the distinct immediate parents of every mesh, in traversal order."""
    parents: dict[str, SceneNode] = {}
    for node in root.traverse():
        if node.is_mesh and node.parent is not None and node.parent.id not in parents:
            parents[node.parent.id] = node.parent
    return list(parents.values())


def pick_explosion_nodes(root: SceneNode) -> list[SceneNode]:
    """Pick the explosion nodes for a model.

    Tries increasingly fine decompositions until enough groups are found:

    1. Children of the root that contain a mesh.
    2. With a single such child, that child's mesh-bearing children.
    3. With fewer than six groups, the unique parents of all meshes, if
       there are more of them.
    4. With fewer than three groups, every mesh on its own.

    Args:
        root: Root of the scene

    Returns:
        Explosion nodes (empty only when the scene has no mesh)
    """
    candidates = [child for child in root.children if child.has_mesh_descendant()]

    if len(candidates) == 1:
        nested = [child for child in candidates[0].children if child.has_mesh_descendant()]
        if nested:
            candidates = nested

    if len(candidates) < MESH_PARENT_THRESHOLD:
        mesh_parents = [node for node in get_unique_mesh_parents(root) if node.has_mesh_descendant()]
        if len(mesh_parents) > len(candidates):
            candidates = mesh_parents

    # Also covers an empty candidate list
    if len(candidates) < FLAT_MESH_THRESHOLD:
        candidates = get_mesh_nodes(root)

    return candidates
