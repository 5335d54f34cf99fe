"""Definition document validation tests."""

import pytest
from returns.result import Failure, Success

from sparklet.core import validate_definition


@pytest.mark.unit
def test_valid_document():
    doc = {"initialState": {}, "actions": {"go": "return {};"}, "view": {"elements": []}}
    assert validate_definition(doc) == Success(doc)


@pytest.mark.unit
@pytest.mark.parametrize("doc,field", [
    ({"initialState": []}, "initialState"),
    ({"view": "x"}, "view"),
    ({"helpers": {"h": 1}}, "helpers.h"),
    ({"actions": {"a": None}}, "actions.a"),
    ({"view": {"styles": []}}, "view.styles"),
    ({"view": {"elements": {}}}, "view.elements"),
])
def test_invalid_sections(doc, field):
    result = validate_definition(doc)
    assert isinstance(result, Failure)
    assert result.failure().field == field


@pytest.mark.unit
def test_depth_checked():
    result = validate_definition({"initialState": {"a": {"b": {}}}}, max_depth=2)
    assert isinstance(result, Failure)
