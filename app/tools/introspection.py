"""
工具自省：按注册顺序导出每个工具的身份与 JSON Schema，供客户端发现
"""

from app.tools.registry import ToolRegistry


class IntrospectionService:
    """只读，可与工具调用并发使用"""

    def __init__(self, registry: ToolRegistry):
        self._registry = registry

    def list_tools(self) -> list[dict]:
        """[{id, name, description, inputSchema, outputSchema?}]，outputSchema 仅在工具声明时出现"""
        tools = []
        for tool in self._registry.list_all():
            entry = {
                "id": tool.id,
                "name": tool.name,
                "description": tool.description,
                "inputSchema": tool.input_schema(),
            }
            output_schema = tool.output_schema()
            if output_schema is not None:
                entry["outputSchema"] = output_schema
            tools.append(entry)
        return tools
