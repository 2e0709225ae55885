"""
登录接口：邮箱密码登录 + Token 签发 / 刷新 / 注销
"""

from datetime import datetime, timezone

import redis.asyncio as aioredis
import structlog
from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel, EmailStr

from app.cache.redis_client import RedisKeys, get_redis
from app.security.auth import (
    AuthenticatedUser,
    bearer_scheme,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_current_user,
)
from app.security.password import verify_password
from app.services.user_service import UserService, get_user_service

router = APIRouter(prefix="/auth", tags=["认证"])
log = structlog.get_logger()


# ── 请求/响应模型 ──

class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    refresh_token: str


def _issue_tokens(user_id: int, email: str, role: str) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(sub=str(user_id), email=email, role=role),
        refresh_token=create_refresh_token(sub=str(user_id)),
    )


# ── 接口 ──

@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, users: UserService = Depends(get_user_service)):
    """用户登录：校验密码，签发 JWT"""
    user = await users.get_user_by_email(body.email)
    if not user or not verify_password(body.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="邮箱或密码错误")

    log.info("用户登录成功", user_id=user.id, role=user.role)
    return _issue_tokens(user.id, user.email, user.role)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, users: UserService = Depends(get_user_service)):
    """刷新 Token：用 refresh_token 换取新的 access_token"""
    payload = decode_token(body.refresh_token)
    if payload.get("token_type") != "refresh":
        raise HTTPException(status_code=401, detail="Token 类型错误")

    # 查用户最新信息（角色可能已变更）
    user = await users.get_user_by_id(int(payload["sub"]))
    if not user:
        raise HTTPException(status_code=401, detail="用户不存在")

    return _issue_tokens(user["id"], user["email"], user["role"])


@router.post("/logout")
async def logout(
    user: AuthenticatedUser = Depends(get_current_user),
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    redis_conn: aioredis.Redis = Depends(get_redis),
):
    """注销：将当前 Token 加入黑名单"""
    payload = decode_token(credentials.credentials)

    jti = payload.get("jti")
    exp = payload.get("exp")
    if jti and exp:
        # 黑名单 TTL = token 剩余有效时间
        ttl = max(int(exp - datetime.now(timezone.utc).timestamp()), 1)
        await redis_conn.setex(RedisKeys.token_blacklist(jti), ttl, "1")

    log.info("用户注销", user_id=user.id)
    return {"message": "已注销"}
