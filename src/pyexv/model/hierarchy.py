"""Display tree built from a scene graph for hierarchy panels."""

from dataclasses import dataclass, field
from typing import Self

from pyexv.model.node import SceneNode


@dataclass
class HierarchyItem:
    """A renderable entry of the hierarchy tree.

    Attributes:
        id: Identifier of the scene node this item represents
        name: Display name
        children: Renderable child items
    """

    id: str
    name: str
    children: list[Self] = field(default_factory=list)


def _to_item(node: SceneNode) -> HierarchyItem | None:
    children = [item for item in (_to_item(child) for child in node.children) if item is not None]

    # Helpers and empty groups have nothing to show
    if not node.is_mesh and not children:
        return None

    return HierarchyItem(
        id=node.id,
        name=node.name or node.type.value or "(unnamed)",
        children=children,
    )


def build_hierarchy(root: SceneNode) -> list[HierarchyItem]:
    """Convert the children of a scene root into hierarchy items.

    Only meshes and nodes with renderable descendants are kept.

    Args:
        root: Scene root

    Returns:
        Top-level hierarchy items
    """
    return [item for item in (_to_item(child) for child in root.children) if item is not None]
