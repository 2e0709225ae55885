"""
工具系统：BaseTool 描述符 + ToolRegistry 注册中心 + ToolGateway 调用网关 + 自省 + 会话状态
"""

from app.tools.base import BaseTool, FunctionTool, ToolContext, ToolInput
from app.tools.gateway import ToolGateway
from app.tools.introspection import IntrospectionService
from app.tools.registry import ToolRegistry
from app.tools.session_state import SessionStateStore

__all__ = [
    "BaseTool",
    "FunctionTool",
    "ToolContext",
    "ToolInput",
    "ToolGateway",
    "IntrospectionService",
    "ToolRegistry",
    "SessionStateStore",
]
