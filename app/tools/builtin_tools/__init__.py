"""
内置工具集：汇总各工具来源模块，装配到 ToolRegistry

使用方式：
    from app.tools.builtin_tools import create_builtin_registry
    registry = create_builtin_registry(user_service)
"""

from app.services.user_service import UserService
from app.tools.builtin_tools.user_tools import user_tools
from app.tools.registry import ToolRegistry


def create_builtin_registry(users: UserService) -> ToolRegistry:
    """创建并注册所有内置工具的 Registry 实例，装配完成后冻结"""
    registry = ToolRegistry()

    # 用户管理工具
    registry.register(user_tools(users))

    registry.freeze()
    return registry
