import pytest

from kb_rag.application.tools.protocol import TOOLS_CALL, TOOLS_LIST, dispatch_protocol_call
from kb_rag.application.tools.registry import Tool, ToolRegistry
from kb_rag.domain.errors import NotFoundError, ValidationError

SCHEMA = {"type": "object", "properties": {"x": {"type": "number"}}, "required": ["x"]}


@pytest.fixture
def registry():
    reg = ToolRegistry()
    reg.register(
        Tool(name="double", description="2x", input_schema=SCHEMA, handler=lambda a: a["x"] * 2)
    )
    return reg


def test_tools_list(registry):
    out = dispatch_protocol_call(registry, TOOLS_LIST)
    assert out == {"tools": registry.list()}


def test_tools_call_invokes_named_tool(registry):
    params = {"name": "double", "arguments": {"x": 4}}
    assert dispatch_protocol_call(registry, TOOLS_CALL, params) == 8


def test_tools_call_without_arguments_is_validated(registry):
    with pytest.raises(ValidationError):
        dispatch_protocol_call(registry, TOOLS_CALL, {"name": "double"})


@pytest.mark.parametrize("params", [None, {}, {"name": ""}, {"name": 3}])
def test_malformed_params(registry, params):
    with pytest.raises(ValidationError):
        dispatch_protocol_call(registry, TOOLS_CALL, params)


def test_unknown_tool_and_unknown_method(registry):
    with pytest.raises(NotFoundError):
        dispatch_protocol_call(registry, TOOLS_CALL, {"name": "missing", "arguments": {}})
    with pytest.raises(NotFoundError):
        dispatch_protocol_call(registry, "resources/list")


@pytest.mark.parametrize("arguments", [[], "", 0, [1, 2]])
def test_non_object_arguments_are_rejected(arguments):
    reg = ToolRegistry()
    reg.register(
        Tool(
            name="noop",
            description="no fields",
            input_schema={"type": "object", "properties": {}},
            handler=lambda a: "ok",
        )
    )
    with pytest.raises(ValidationError, match="must be an object"):
        dispatch_protocol_call(reg, TOOLS_CALL, {"name": "noop", "arguments": arguments})


def test_missing_arguments_default_to_empty_object():
    reg = ToolRegistry()
    reg.register(
        Tool(
            name="noop",
            description="no fields",
            input_schema={"type": "object", "properties": {}},
            handler=lambda a: dict(a),
        )
    )
    assert dispatch_protocol_call(reg, TOOLS_CALL, {"name": "noop"}) == {}
    assert dispatch_protocol_call(reg, TOOLS_CALL, {"name": "noop", "arguments": None}) == {}
