"""
/users 用户管理接口

- POST   /users            创建用户（manageUsers）
- GET    /users            分页查询（getUsers）
- GET    /users/{user_id}  查询单个（getUsers）
- PATCH  /users/{user_id}  更新（manageUsers）
- DELETE /users/{user_id}  删除（manageUsers）
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from app.config import get_settings
from app.security.auth import require_rights
from app.security.password import check_password_strength
from app.security.roles import GET_USERS, MANAGE_USERS
from app.services.user_service import UserNotFoundError, UserService, get_user_service

router = APIRouter(prefix="/users", tags=["用户"])
settings = get_settings()


# ── 请求模型 ──

class CreateUserRequest(BaseModel):
    email: EmailStr
    password: str
    name: str = Field(min_length=1)
    role: Literal["USER", "ADMIN"]

    @field_validator("password")
    @classmethod
    def _password_strength(cls, v: str) -> str:
        return check_password_strength(v)


class UpdateUserRequest(BaseModel):
    email: EmailStr | None = None
    password: str | None = None
    name: str | None = Field(default=None, min_length=1)

    @field_validator("password")
    @classmethod
    def _password_strength(cls, v: str | None) -> str | None:
        return v if v is None else check_password_strength(v)

    @model_validator(mode="after")
    def _at_least_one_field(self) -> "UpdateUserRequest":
        if self.email is None and self.password is None and self.name is None:
            raise ValueError("email / password / name 至少提供一个")
        return self


# ── 接口 ──

@router.post("", status_code=201, dependencies=[Depends(require_rights(MANAGE_USERS))])
async def create_user(body: CreateUserRequest, users: UserService = Depends(get_user_service)):
    return await users.create_user(
        email=body.email,
        password=body.password,
        name=body.name,
        role=body.role,
    )


@router.get("", dependencies=[Depends(require_rights(GET_USERS))])
async def list_users(
    name: str | None = None,
    role: Literal["USER", "ADMIN"] | None = None,
    sort_by: str | None = Query(default=None, description="field:asc 或 field:desc"),
    limit: int | None = Query(default=None, ge=1, le=settings.USER_PAGE_SIZE_MAX),
    page: int | None = Query(default=None, ge=1),
    users: UserService = Depends(get_user_service),
):
    return await users.query_users(name=name, role=role, sort_by=sort_by, limit=limit, page=page)


@router.get("/{user_id}", dependencies=[Depends(require_rights(GET_USERS))])
async def get_user(user_id: int, users: UserService = Depends(get_user_service)):
    user = await users.get_user_by_id(user_id)
    if user is None:
        raise UserNotFoundError()
    return user


@router.patch("/{user_id}", dependencies=[Depends(require_rights(MANAGE_USERS))])
async def update_user(
    user_id: int,
    body: UpdateUserRequest,
    users: UserService = Depends(get_user_service),
):
    return await users.update_user_by_id(user_id, **body.model_dump(exclude_none=True))


@router.delete(
    "/{user_id}",
    status_code=204,
    response_class=Response,
    dependencies=[Depends(require_rights(MANAGE_USERS))],
)
async def delete_user(user_id: int, users: UserService = Depends(get_user_service)):
    await users.delete_user_by_id(user_id)
    return Response(status_code=204)
