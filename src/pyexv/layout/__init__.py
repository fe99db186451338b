"""Layout engine for exploded views.

This module contains the algorithms that pick the moving sub-assemblies of
a model and compute, for each of them, a stable outward direction and
travel distance.
"""

from pyexv.layout.box import BoundingBox
from pyexv.layout.config import ExplosionConfig
from pyexv.layout.engine import ExplosionEngine, ExplosionLayout, ExplosionTarget

__all__ = ["BoundingBox", "ExplosionConfig", "ExplosionEngine", "ExplosionLayout", "ExplosionTarget"]
