"""
用户管理工具集：把 UserService 的 CRUD 能力以工具形式暴露给 /mcp

入参字段沿用前端的 camelCase（userId、sortBy），通过 alias 映射到 Python 属性。
UserService 抛出的业务错误（用户不存在、邮箱已占用）由网关转为 ExecutionFailed（400），文案保持不变。
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from app.db.models.user import ROLE_USER
from app.security.password import check_password_strength
from app.services.user_service import UserNotFoundError, UserService
from app.tools.base import BaseTool, ToolContext, ToolInput


# ── 入参模型 ──

class GetUserInput(ToolInput):
    user_id: str = Field(alias="userId", pattern=r"^\d+$", description="用户 ID（数字字符串）")


class ListUsersInput(ToolInput):
    name: str | None = Field(default=None, description="按姓名精确过滤")
    role: Literal["USER", "ADMIN"] | None = Field(default=None, description="按角色过滤")
    sort_by: str | None = Field(default=None, alias="sortBy", description="排序：field:asc 或 field:desc")
    limit: int | None = Field(default=None, ge=1, le=100, description="每页条数，默认 10")
    page: int | None = Field(default=None, ge=1, description="页码，从 1 开始")


class CreateUserInput(ToolInput):
    email: EmailStr
    password: str = Field(description="至少 8 位，包含字母和数字")
    name: str = Field(min_length=1)
    role: Literal["USER", "ADMIN"] = ROLE_USER

    @field_validator("password")
    @classmethod
    def _password_strength(cls, v: str) -> str:
        return check_password_strength(v)


class UpdateUserInput(ToolInput):
    user_id: str = Field(alias="userId", pattern=r"^\d+$", description="用户 ID（数字字符串）")
    email: EmailStr | None = None
    password: str | None = None
    name: str | None = Field(default=None, min_length=1)

    @field_validator("password")
    @classmethod
    def _password_strength(cls, v: str | None) -> str | None:
        return v if v is None else check_password_strength(v)

    @model_validator(mode="after")
    def _at_least_one_field(self) -> "UpdateUserInput":
        if self.email is None and self.password is None and self.name is None:
            raise ValueError("email / password / name 至少提供一个")
        return self


class DeleteUserInput(ToolInput):
    user_id: str = Field(alias="userId", pattern=r"^\d+$", description="用户 ID（数字字符串）")


# ── 结果模型 ──

class UserOutput(BaseModel):
    id: int
    email: str
    name: str | None = None
    role: str
    is_email_verified: bool
    created_at: datetime
    updated_at: datetime


class UserPageOutput(BaseModel):
    results: list[UserOutput]
    page: int
    limit: int
    total_pages: int
    total_results: int


class DeleteUserOutput(BaseModel):
    success: bool
    user_id: str = Field(alias="userId")


# ── 工具 ──

class _UserTool(BaseTool):
    """持有 UserService 的工具公共基类"""

    def __init__(self, users: UserService):
        self._users = users


class GetUserTool(_UserTool):
    """按 id 查询单个用户"""

    @property
    def id(self) -> str:
        return "user_tool"

    @property
    def name(self) -> str:
        return "User Tool"

    @property
    def description(self) -> str:
        return "按用户 ID 查询用户信息（不含密码）。用户不存在时返回执行失败。"

    @property
    def input_model(self) -> type[BaseModel]:
        return GetUserInput

    @property
    def output_model(self) -> type[BaseModel]:
        return UserOutput

    async def run(self, params: GetUserInput, ctx: ToolContext) -> dict:
        user = await self._users.get_user_by_id(int(params.user_id))
        if user is None:
            raise UserNotFoundError()
        return user


class ListUsersTool(_UserTool):
    """分页查询用户"""

    @property
    def id(self) -> str:
        return "list_users"

    @property
    def name(self) -> str:
        return "List Users"

    @property
    def description(self) -> str:
        return "分页查询用户，可按姓名、角色过滤，sortBy 形如 created_at:desc。"

    @property
    def input_model(self) -> type[BaseModel]:
        return ListUsersInput

    @property
    def output_model(self) -> type[BaseModel]:
        return UserPageOutput

    async def run(self, params: ListUsersInput, ctx: ToolContext) -> dict:
        return await self._users.query_users(
            name=params.name,
            role=params.role,
            sort_by=params.sort_by,
            limit=params.limit,
            page=params.page,
        )


class CreateUserTool(_UserTool):
    """创建用户"""

    @property
    def id(self) -> str:
        return "create_user"

    @property
    def name(self) -> str:
        return "Create User"

    @property
    def description(self) -> str:
        return "创建用户。邮箱必须唯一，密码至少 8 位且包含字母和数字。"

    @property
    def input_model(self) -> type[BaseModel]:
        return CreateUserInput

    @property
    def output_model(self) -> type[BaseModel]:
        return UserOutput

    async def run(self, params: CreateUserInput, ctx: ToolContext) -> dict:
        return await self._users.create_user(
            email=params.email,
            password=params.password,
            name=params.name,
            role=params.role,
        )


class UpdateUserTool(_UserTool):
    """更新用户"""

    @property
    def id(self) -> str:
        return "update_user"

    @property
    def name(self) -> str:
        return "Update User"

    @property
    def description(self) -> str:
        return "更新用户的邮箱、密码或姓名，至少提供一项。"

    @property
    def input_model(self) -> type[BaseModel]:
        return UpdateUserInput

    @property
    def output_model(self) -> type[BaseModel]:
        return UserOutput

    async def run(self, params: UpdateUserInput, ctx: ToolContext) -> dict:
        return await self._users.update_user_by_id(
            int(params.user_id),
            email=params.email,
            password=params.password,
            name=params.name,
        )


class DeleteUserTool(_UserTool):
    """删除用户"""

    @property
    def id(self) -> str:
        return "delete_user"

    @property
    def name(self) -> str:
        return "Delete User"

    @property
    def description(self) -> str:
        return "按用户 ID 删除用户。"

    @property
    def input_model(self) -> type[BaseModel]:
        return DeleteUserInput

    @property
    def output_model(self) -> type[BaseModel]:
        return DeleteUserOutput

    async def run(self, params: DeleteUserInput, ctx: ToolContext) -> dict:
        await self._users.delete_user_by_id(int(params.user_id))
        return {"success": True, "userId": params.user_id}


def user_tools(users: UserService) -> list[BaseTool]:
    """本模块贡献的工具组（顺序即自省顺序）"""
    return [
        GetUserTool(users),
        ListUsersTool(users),
        CreateUserTool(users),
        UpdateUserTool(users),
        DeleteUserTool(users),
    ]
