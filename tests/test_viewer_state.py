#!/usr/bin/env python3
"""Unit tests for the viewer state store.

Tests:
- Mesh descendants cache
- Selection by object and by id
- Visibility toggles
- Global and individual isolation
- Explosion factor coercion
- Signal emission
"""

import sys
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from pyexv.controller.viewer_state import (
    IsolationMode,
    ViewerState,
    build_mesh_descendants_cache,
    coerce_explosion_factor,
)
from pyexv.model.loader import scene_from_dict
from pyexv.model.node import SceneNode

ALL_IDS = {"root", "body", "housing", "cover", "rotor", "shaft", "blades", "blade-1", "blade-2", "helper"}


def make_scene() -> SceneNode:
    return scene_from_dict({
        "id": "root",
        "name": "Fan",
        "children": [
            {
                "id": "body",
                "name": "Body",
                "children": [
                    {"id": "housing", "name": "Housing", "type": "mesh"},
                    {"id": "cover", "name": "Cover", "type": "mesh"},
                ],
            },
            {
                "id": "rotor",
                "name": "Rotor",
                "children": [
                    {"id": "shaft", "name": "Shaft", "type": "mesh"},
                    {
                        "id": "blades",
                        "children": [
                            {"id": "blade-1", "type": "mesh"},
                            {"id": "blade-2", "type": "mesh"},
                        ],
                    },
                ],
            },
            {"id": "helper", "name": "Helper", "type": "group"},
        ],
    })


def make_state() -> tuple[ViewerState, SceneNode]:
    root = make_scene()
    state = ViewerState()
    state.set_object_map({node.id: node for node in root.traverse()})
    return state, root


def assert_descendants_hidden(state: ViewerState, root: SceneNode) -> None:
    """Every descendant of a hidden node is hidden too."""
    for node in root.traverse():
        if not state.is_object_visible(node.id):
            for child in node.traverse():
                assert not state.is_object_visible(child.id), f"{child.id} visible below hidden {node.id}"


def test_mesh_descendants_cache():
    """Every node maps to the meshes in its subtree, meshes to themselves."""
    root = make_scene()
    cache = build_mesh_descendants_cache({node.id: node for node in root.traverse()})

    assert cache["root"] == ["housing", "cover", "shaft", "blade-1", "blade-2"]
    assert cache["body"] == ["housing", "cover"]
    assert cache["rotor"] == ["shaft", "blade-1", "blade-2"]
    assert cache["housing"] == ["housing"]
    assert cache["helper"] == []


def test_initial_state():
    """A fresh store is loading with nothing selected or hidden."""
    state = ViewerState()

    assert state.is_loading
    assert state.items == []
    assert state.selected_id is None
    assert state.hidden_objects == frozenset()
    assert state.isolation_mode == IsolationMode.NONE
    assert state.explosion_factor == 0.0
    assert state.get_descendant_mesh_ids("anything") == []


def test_select_by_id_expands_to_meshes():
    """Selecting a group selects the meshes below it."""
    state, _ = make_state()

    state.set_selected_by_id("rotor")

    assert state.selected_id == "rotor"
    assert state.selected_item == "Rotor"
    assert state.selected_ids == ["shaft", "blade-1", "blade-2"]

    print("✓ Selection expansion test passed")


def test_select_unnamed_node_uses_id():
    """Nodes without a name are displayed by id."""
    state, _ = make_state()

    state.set_selected_by_id("blades")

    assert state.selected_item == "blades"
    assert state.selected_ids == ["blade-1", "blade-2"]


def test_select_mesh_object():
    """Picking a mesh selects only that mesh."""
    state, root = make_state()
    housing = root.children[0].children[0]

    state.set_selected_object(housing)

    assert state.selected_id == "housing"
    assert state.selected_ids == ["housing"]


def test_select_unknown_or_none_clears():
    """Unknown ids, foreign nodes and None clear the selection."""
    state, _ = make_state()

    state.set_selected_by_id("body")
    state.set_selected_by_id("missing")
    assert state.selected_id is None
    assert state.selected_ids == []

    state.set_selected_by_id("body")
    state.set_selected_object(SceneNode(id="foreign"))
    assert state.selected_id is None

    state.set_selected_by_id("body")
    state.set_selected_object(None)
    assert state.selected_item is None
    assert state.selected_ids == []


def test_selected_ids_is_a_copy():
    """Callers cannot mutate the stored selection."""
    state, _ = make_state()
    state.set_selected_by_id("body")

    state.selected_ids.append("intruder")

    assert state.selected_ids == ["housing", "cover"]


def test_toggle_visibility_hides_subtree():
    """Hiding a node hides its whole subtree; toggling again shows it."""
    state, root = make_state()

    state.toggle_visibility("rotor")

    assert state.hidden_objects == {"rotor", "shaft", "blades", "blade-1", "blade-2"}
    assert not state.is_object_visible("blade-2")
    assert state.is_object_visible("body")
    assert_descendants_hidden(state, root)

    state.toggle_visibility("rotor")

    assert state.hidden_objects == frozenset()


def test_toggle_visibility_nested():
    """Showing a parent also shows descendants hidden on their own."""
    state, root = make_state()

    state.toggle_visibility("blades")
    state.toggle_visibility("rotor")
    assert_descendants_hidden(state, root)

    state.toggle_visibility("rotor")
    assert state.hidden_objects == frozenset()


def test_toggle_visibility_unknown_id():
    """Unknown ids leave the hidden set untouched."""
    state, _ = make_state()
    before = state.hidden_objects

    state.toggle_visibility("missing")

    assert state.hidden_objects is before


def test_hidden_set_is_replaced_not_mutated():
    """Every transition swaps in a new hidden set."""
    state, _ = make_state()
    state.toggle_visibility("body")
    snapshot = state.hidden_objects

    state.toggle_visibility("rotor")

    assert snapshot == {"body", "housing", "cover"}
    assert state.hidden_objects is not snapshot


def test_show_all_is_idempotent():
    """show_all clears hidden state and isolation, and repeats safely."""
    state, _ = make_state()
    state.toggle_visibility("body")
    state.toggle_individual_isolation("shaft")

    state.show_all()
    assert state.hidden_objects == frozenset()
    assert state.isolation_mode == IsolationMode.NONE
    assert state.individual_isolated_id is None

    state.show_all()
    assert state.hidden_objects == frozenset()


def test_toggle_isolation_without_selection_is_noop():
    """Global isolation needs a selection; manual hiding is kept."""
    state, _ = make_state()
    state.toggle_visibility("body")
    hidden = state.hidden_objects
    emitted = []
    state.hidden_objects_changed.connect(emitted.append)

    state.toggle_isolation_mode()

    assert state.isolation_mode == IsolationMode.NONE
    assert state.hidden_objects is hidden
    assert emitted == []


def test_global_isolation_of_selection():
    """Isolation hides everything but the selection, its subtree and ancestors."""
    state, root = make_state()
    state.set_selected_by_id("blades")

    state.toggle_isolation_mode()

    assert state.isolation_mode == IsolationMode.GLOBAL
    assert state.hidden_objects == {"body", "housing", "cover", "shaft", "helper"}
    assert state.is_object_visible("rotor")
    assert state.is_object_visible("root")
    assert_descendants_hidden(state, root)

    state.toggle_isolation_mode()

    assert state.isolation_mode == IsolationMode.NONE
    assert state.hidden_objects == frozenset()

    print("✓ Global isolation test passed")


def test_individual_isolation_toggle():
    """Toggling the isolated node twice returns to the normal view."""
    state, _ = make_state()

    state.toggle_individual_isolation("body")

    assert state.isolation_mode == IsolationMode.INDIVIDUAL
    assert state.is_individually_isolated("body")
    assert not state.is_individually_isolated("rotor")
    assert state.hidden_objects == ALL_IDS - {"root", "body", "housing", "cover"}

    state.toggle_individual_isolation("body")

    assert state.isolation_mode == IsolationMode.NONE
    assert state.individual_isolated_id is None
    assert state.hidden_objects == frozenset()


def test_individual_isolation_switches_target():
    """Isolating another node moves the isolation there."""
    state, _ = make_state()

    state.toggle_individual_isolation("body")
    state.toggle_individual_isolation("shaft")

    assert state.individual_isolated_id == "shaft"
    assert state.hidden_objects == ALL_IDS - {"root", "rotor", "shaft"}


def test_individual_isolation_unknown_id_is_noop():
    """Unknown ids do not enter isolation."""
    state, _ = make_state()

    state.toggle_individual_isolation("missing")

    assert state.isolation_mode == IsolationMode.NONE
    assert state.hidden_objects == frozenset()


def test_individual_replaces_global_isolation():
    """Individual isolation takes over from global isolation."""
    state, _ = make_state()
    state.set_selected_by_id("body")
    state.toggle_isolation_mode()

    state.toggle_individual_isolation("shaft")

    assert state.isolation_mode == IsolationMode.INDIVIDUAL
    assert state.hidden_objects == ALL_IDS - {"root", "rotor", "shaft"}


def test_global_isolation_toggle_leaves_individual():
    """Toggling global isolation with an individual isolation active enters global."""
    state, _ = make_state()
    state.toggle_individual_isolation("shaft")
    state.set_selected_by_id("body")

    state.toggle_isolation_mode()

    assert state.isolation_mode == IsolationMode.GLOBAL
    assert state.individual_isolated_id is None
    assert state.hidden_objects == ALL_IDS - {"root", "body", "housing", "cover"}


def test_global_toggle_without_selection_leaves_individual():
    """Without a selection, toggling global isolation leaves individual isolation."""
    state, _ = make_state()
    state.toggle_individual_isolation("shaft")

    state.toggle_isolation_mode()

    assert state.isolation_mode == IsolationMode.NONE
    assert state.hidden_objects == frozenset()


@pytest.mark.parametrize("value, expected", [
    (0.5, 0.5),
    (1.5, 1.0),
    (-3, 0.0),
    ("0.25", 0.25),
    (float("nan"), 0.0),
    (float("inf"), 0.0),
    (None, 0.0),
    ("abc", 0.0),
])
def test_coerce_explosion_factor(value, expected):
    """Factors are clamped to [0, 1] and garbage becomes 0."""
    assert coerce_explosion_factor(value) == expected


def test_explosion_factor_signal():
    """Setting the factor emits the coerced value; reset goes back to 0."""
    state = ViewerState()
    emitted = []
    state.explosion_factor_changed.connect(emitted.append)

    state.set_explosion_factor(2.0)
    state.reset_explosion()

    assert emitted == [1.0, 0.0]
    assert state.explosion_factor == 0.0


def test_signals_see_applied_state():
    """Slots observe the fully applied state when a signal arrives."""
    state, _ = make_state()
    state.set_selected_by_id("rotor")
    seen = []
    state.isolation_changed.connect(lambda mode: seen.append((mode, state.hidden_objects)))

    state.toggle_isolation_mode()

    assert seen == [(IsolationMode.GLOBAL, frozenset({"body", "housing", "cover", "helper"}))]


def test_isolation_signal_only_on_mode_change():
    """Plain visibility toggles do not emit isolation changes."""
    state, _ = make_state()
    modes = []
    hidden = []
    state.isolation_changed.connect(modes.append)
    state.hidden_objects_changed.connect(hidden.append)

    state.toggle_visibility("helper")
    state.toggle_individual_isolation("body")
    state.toggle_individual_isolation("body")

    assert modes == [IsolationMode.INDIVIDUAL, IsolationMode.NONE]
    assert len(hidden) == 3


def test_selection_and_hover_signals():
    """Selection and hover changes are announced."""
    state, root = make_state()
    selections = []
    hovers = []
    state.selection_changed.connect(selections.append)
    state.hovered_object_changed.connect(hovers.append)
    shaft = root.children[1].children[0]

    state.set_selected_by_id("shaft")
    state.clear_selection()
    state.set_hovered_object(shaft)
    state.set_hovered_object(shaft)
    state.set_hovered_object(None)

    assert selections == ["shaft", None]
    assert hovers == [shaft, None]
    assert state.hovered_object is None


def test_loading_and_items():
    """Loading flag and hierarchy items are stored and announced."""
    state = ViewerState()
    loading = []
    state.loading_changed.connect(loading.append)

    state.set_loading(False)
    state.set_items(None)

    assert loading == [False]
    assert not state.is_loading
    assert state.items == []


def test_object_lookup():
    """Nodes are found by id, unknown ids are skipped."""
    state, root = make_state()

    assert state.get_object_by_id("root") is root
    assert state.get_object_by_id("missing") is None
    assert [node.id for node in state.get_objects_by_ids(["shaft", "missing", "cover"])] == ["shaft", "cover"]
    assert state.get_objects_by_ids(None) == []


def test_set_object_map_resets_state():
    """A new object map starts from a clean selection and visibility state."""
    state, _ = make_state()
    state.set_selected_by_id("body")
    state.toggle_isolation_mode()
    state.set_hovered_object(state.get_object_by_id("cover"))

    other = scene_from_dict({"id": "other-root", "children": [{"id": "part", "type": "mesh"}]})
    state.set_object_map({node.id: node for node in other.traverse()})

    assert state.selected_id is None
    assert state.hovered_object is None
    assert state.hidden_objects == frozenset()
    assert state.isolation_mode == IsolationMode.NONE
    assert state.get_descendant_mesh_ids("other-root") == ["part"]
    assert state.get_descendant_mesh_ids("body") == []


def test_unchanged_hidden_set_is_not_announced():
    """Transitions that leave the hidden set as it was emit nothing for it."""
    state, _ = make_state()
    hidden = []
    modes = []
    state.hidden_objects_changed.connect(hidden.append)
    state.isolation_changed.connect(modes.append)

    state.show_all()
    state.toggle_visibility("body")
    state.show_all()
    state.show_all()

    assert hidden == [frozenset({"body", "housing", "cover"}), frozenset()]
    assert modes == []


def test_leaving_isolation_that_hid_nothing():
    """Isolating the root hides nothing; leaving only announces the mode."""
    state, _ = make_state()
    hidden = []
    modes = []
    state.hidden_objects_changed.connect(hidden.append)
    state.isolation_changed.connect(modes.append)

    state.set_selected_by_id("root")
    state.toggle_isolation_mode()
    state.toggle_isolation_mode()

    assert hidden == []
    assert modes == [IsolationMode.GLOBAL, IsolationMode.NONE]
