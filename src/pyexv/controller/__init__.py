"""Controller layer for pyexv.

This module provides the state and coordination of the viewer core:

- ViewerState: Selection, visibility and isolation store
- ExplosionEffect: Per-frame application of explosion targets
- PickInputHandler: Pick and hover event processing
- Controller: Scene lifecycle coordinator
"""

from pyexv.controller.controller import Controller
from pyexv.controller.explosion_effect import ExplosionEffect
from pyexv.controller.input_handler import PickInputHandler, find_first_visible
from pyexv.controller.viewer_state import IsolationMode, ViewerState, coerce_explosion_factor

__all__ = [
    "Controller",
    "ExplosionEffect",
    "PickInputHandler",
    "find_first_visible",
    "IsolationMode",
    "ViewerState",
    "coerce_explosion_factor",
]
