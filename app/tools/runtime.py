"""
工具运行时装配：注册中心 + 会话状态 + 网关 + 自省，进程启动时创建一次

由 app.main 挂到 app.state.tools，路由通过依赖注入取用；
测试可直接构造独立实例，互不干扰。
"""

from dataclasses import dataclass

from fastapi import Request

from app.tools.gateway import ToolGateway
from app.tools.introspection import IntrospectionService
from app.tools.registry import ToolRegistry
from app.tools.session_state import SessionStateStore


@dataclass
class ToolRuntime:
    registry: ToolRegistry
    state: SessionStateStore
    gateway: ToolGateway
    introspection: IntrospectionService


def build_tool_runtime(registry: ToolRegistry, *, enforce_output_schema: bool = True) -> ToolRuntime:
    """基于已装配的注册中心构造运行时；注册中心在此冻结"""
    if not registry.frozen:
        registry.freeze()
    state = SessionStateStore()
    return ToolRuntime(
        registry=registry,
        state=state,
        gateway=ToolGateway(registry, state, enforce_output_schema=enforce_output_schema),
        introspection=IntrospectionService(registry),
    )


def get_tool_runtime(request: Request) -> ToolRuntime:
    """FastAPI 依赖注入：获取进程级工具运行时"""
    return request.app.state.tools
