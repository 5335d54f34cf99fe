"""Tests for rendering definitions into UI nodes."""

import pytest

from sparklet.core import safe_json_dumps
from sparklet.engine import INVALID_PLACEHOLDER, binding_field


def view(elements, styles=None, **sections):
    return {**sections, "view": {"styles": styles or {}, "elements": elements}}


@pytest.mark.unit
def test_invalid_definition_shows_placeholder(make_instance):
    root = make_instance("{broken").render()

    placeholder = root.find("placeholder")
    assert placeholder is not None
    assert placeholder.text == INVALID_PLACEHOLDER


@pytest.mark.unit
def test_text_interpolation(make_instance):
    root = make_instance(view(
        [{"type": "text", "value": "Hi {{state.name}}"}],
        initialState={"name": "Ada"},
    )).render()
    assert root.find("text").text == "Hi Ada"


@pytest.mark.unit
def test_null_full_expression_renders_empty(make_instance):
    root = make_instance(view(
        [{"type": "text", "value": "{{state.missing}}"}],
    )).render()
    assert root.find("text").text == ""


@pytest.mark.unit
@pytest.mark.parametrize("visible,shown", [
    (None, True),
    (True, True),
    (False, False),
    ("false", False),
    ("{{state.flag}}", False),
    ("{{state.count}}", True),
    ("{{state.count > 5}}", False),
    ("{{state.broken.path}}", True),
])
def test_visibility(make_instance, visible, shown):
    element = {"type": "text", "value": "x"}
    if visible is not None:
        element["visible"] = visible
    root = make_instance(view([element], initialState={"flag": False, "count": 0})).render()
    assert (root.find("text") is not None) == shown


@pytest.mark.unit
def test_styles_resolved_and_unknown_style_ignored(make_instance):
    root = make_instance(view(
        [
            {"type": "text", "value": "a", "style": "title"},
            {"type": "text", "value": "b", "style": "nope"},
        ],
        styles={"title": {"fontSize": 20, "color": "{{state.color}}"}},
        initialState={"color": "red"},
    )).render()

    first, second = root.children
    assert first.style == {"fontSize": 20, "color": "red"}
    assert second.style == {}


@pytest.mark.unit
def test_display_none_collapses(make_instance):
    root = make_instance(view(
        [{"type": "text", "value": "a", "style": "hidden"}],
        styles={"hidden": {"display": "{{state.show ? 'flex' : 'none'}}"}},
        initialState={"show": False},
    )).render()

    style = root.find("text").style
    assert style["display"] == "none"
    assert style["height"] == 0
    assert style["opacity"] == 0
    assert style["overflow"] == "hidden"


@pytest.mark.unit
def test_unknown_element_renders_nothing(make_instance):
    root = make_instance(view([
        {"type": "slider"},
        {"type": "text", "value": "kept"},
    ])).render()
    assert [child.kind for child in root.children] == ["text"]


@pytest.mark.unit
def test_button_press_resolves_params_and_haptics(make_instance, haptics):
    instance = make_instance(view(
        [{"type": "button", "label": "Add {{state.step}}", "onPress": "add",
          "params": {"amount": "{{state.step}}", "note": "step {{state.step}}", "fixed": 1}}],
        initialState={"count": 0, "step": 2},
        actions={"add": "return {count: state.count + params.amount + params.fixed, note: params.note};"},
    ))

    button = instance.render().find("button")
    assert button.text == "Add 2"
    instance.press(button)

    assert instance.state == {"count": 3, "step": 2, "note": "step 2"}
    assert haptics.presses == 1


@pytest.mark.unit
def test_grid_cells(make_instance):
    instance = make_instance(view(
        [{"type": "grid", "dataSource": "state.cells", "onPress": "pick"}],
        initialState={"cells": ["a", 1, None]},
        actions={"pick": "return {picked: params.index};"},
    ))

    cells = instance.render().find_all("cell")
    assert [c.text for c in cells] == ["a", "1", "null"]
    assert [c.props["index"] for c in cells] == [0, 1, 2]

    instance.press(cells[2])
    assert instance.state["picked"] == 2


@pytest.mark.unit
def test_grid_with_non_list_source_is_empty(make_instance):
    root = make_instance(view(
        [{"type": "grid", "dataSource": "state.cells"}],
        initialState={"cells": "nope"},
    )).render()
    assert root.find("grid").children == []


@pytest.mark.unit
def test_input_binding(make_instance):
    instance = make_instance(view(
        [{"type": "input", "binding": "state.name", "placeholder": "Name", "secureTextEntry": True}],
        initialState={"name": ""},
    ))

    node = instance.render().find("input")
    assert node.props["value"] == ""
    assert node.props["placeholder"] == "Name"
    assert node.props["secure_text_entry"] is True
    assert node.props["auto_capitalize"] == "none"

    instance.type_text(node, "Ad")
    instance.type_text(node, "Ada")

    assert instance.state["name"] == "Ada"
    assert instance.render().find("input").props["value"] == "Ada"


@pytest.mark.unit
def test_binding_field():
    assert binding_field("state.cells") == "cells"
    assert binding_field("cells") == "cells"


@pytest.mark.unit
def test_render_has_no_side_effects(make_instance):
    instance = make_instance(view(
        [{"type": "text", "value": "{{state.items.sort()}}"}],
        initialState={"items": [2, 1]},
    ))
    instance.render()
    assert instance.state == {"items": [2, 1]}
    assert instance.store.version == 0


@pytest.mark.unit
def test_definition_text_round_trip_fixture(make_instance):
    """Definitions given as text and as dicts render the same."""
    definition = view([{"type": "text", "value": "same"}])
    from_dict = make_instance(definition).render()
    from_text = make_instance(safe_json_dumps(definition)).render()
    assert from_dict.find("text").text == from_text.find("text").text


@pytest.mark.unit
@pytest.mark.parametrize("value", [
    "{{" + "(" * 3000 + "1" + ")" * 3000 + "}}",
    "{{'a'.padStart(Infinity)}}",
    "{{'x'.repeat(40).split('').reduce(acc => [acc, acc], 'ab')}}",
])
def test_hostile_bindings_render_empty(make_instance, value):
    root = make_instance(view([
        {"type": "text", "value": value},
        {"type": "button", "label": value, "onPress": "go"},
    ])).render()
    assert root.find("text").text == ""
    assert root.find("button").text == ""


@pytest.mark.unit
def test_huge_number_renders_infinity(make_instance):
    root = make_instance(view(
        [{"type": "text", "value": "{{1" + "0" * 400 + " / 3}}"}],
    )).render()
    assert root.find("text").text == "Infinity"
