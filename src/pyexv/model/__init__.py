"""Model layer for pyexv.

This module contains the scene graph node, the loader that builds it from
scene descriptions, and the display tree used by hierarchy panels.
"""

from pyexv.model.hierarchy import HierarchyItem, build_hierarchy
from pyexv.model.loader import load_scene, scene_from_dict
from pyexv.model.node import NodeType, SceneNode

__all__ = [
    "NodeType",
    "SceneNode",
    "HierarchyItem",
    "build_hierarchy",
    "load_scene",
    "scene_from_dict",
]
