"""Tests for tools/introspection.py and schema export in tools/base.py."""
from pydantic import BaseModel, Field

from app.tools.base import FunctionTool, ToolInput, export_schema
from app.tools.introspection import IntrospectionService
from app.tools.registry import ToolRegistry


class Address(BaseModel):
    city: str
    zip: str | None = None


class NestedInput(ToolInput):
    title: str = Field(description="字段名本身叫 title")
    address: Address
    tags: list[str] = []


class TestSingleToolScenario:
    def test_one_entry_matching_descriptor(self, registry, user_tool):
        tools = IntrospectionService(registry).list_tools()
        assert len(tools) == 1
        entry = tools[0]
        assert entry["id"] == user_tool.id == "user_tool"
        assert entry["name"] == "User Tool"
        assert entry["description"] == "Tool for user operations"

    def test_input_schema_describes_required_user_id(self, registry):
        entry = IntrospectionService(registry).list_tools()[0]
        schema = entry["inputSchema"]
        assert schema["type"] == "object"
        assert schema["properties"]["userId"]["type"] == "string"
        assert schema["required"] == ["userId"]
        assert schema["additionalProperties"] is False

    def test_output_schema_present_when_declared(self, registry):
        entry = IntrospectionService(registry).list_tools()[0]
        assert set(entry["outputSchema"]["properties"]) == {"id", "name"}


class TestListTools:
    def test_output_schema_omitted_when_not_declared(self):
        reg = ToolRegistry()
        reg.register([
            FunctionTool(id="a", name="A", description="", input_model=NestedInput, fn=lambda p, c: None),
        ])
        entry = IntrospectionService(reg).list_tools()[0]
        assert "outputSchema" not in entry

    def test_idempotent_and_order_stable(self):
        reg = ToolRegistry()
        reg.register([
            FunctionTool(id=i, name=i, description="", input_model=NestedInput, fn=lambda p, c: None)
            for i in ("z", "m", "a")
        ])
        svc = IntrospectionService(reg)
        first = svc.list_tools()
        second = svc.list_tools()
        assert first == second
        assert [t["id"] for t in first] == ["z", "m", "a"]


class TestExportSchema:
    def test_titles_stripped_but_title_field_kept(self):
        schema = export_schema(NestedInput)
        assert "title" not in schema
        assert "title" in schema["properties"]
        assert "title" not in schema["properties"]["title"]
        assert schema["properties"]["title"]["description"] == "字段名本身叫 title"

    def test_nested_structure_exported(self):
        schema = export_schema(NestedInput)
        assert set(schema["required"]) == {"title", "address"}
        address = schema["$defs"]["Address"]
        assert "title" not in address
        assert address["required"] == ["city"]
        assert schema["properties"]["tags"]["type"] == "array"
        assert schema["properties"]["tags"]["default"] == []
