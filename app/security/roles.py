"""
角色 → 权限映射

USER 只能浏览工具列表；ADMIN 拥有用户管理与工具执行的全部权限。
"""

from app.db.models.user import ROLE_ADMIN, ROLE_USER

GET_USERS = "getUsers"
MANAGE_USERS = "manageUsers"
GET_MCP = "getMcp"
MANAGE_MCP = "manageMcp"

ROLE_RIGHTS: dict[str, list[str]] = {
    ROLE_USER: [GET_MCP],
    ROLE_ADMIN: [GET_USERS, MANAGE_USERS, GET_MCP, MANAGE_MCP],
}


def rights_for(role: str) -> list[str]:
    """未知角色没有任何权限"""
    return ROLE_RIGHTS.get(role, [])
