"""
JWT 鉴权模块：Token 签发 / 校验 / 黑名单检查 / 权限校验
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import jwt
import redis.asyncio as aioredis
import structlog
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.cache.redis_client import RedisKeys, get_redis
from app.config import get_settings
from app.observability.context import user_id_var
from app.security.roles import rights_for
from app.services.user_service import UserService, get_user_service

settings = get_settings()
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthenticatedUser:
    """鉴权后的用户上下文，贯穿整个请求生命周期"""

    id: int
    email: str = ""
    role: str = "USER"
    permissions: list[str] = field(default_factory=list)

    def has_rights(self, *rights: str) -> bool:
        return all(r in self.permissions for r in rights)


def create_access_token(*, sub: str, email: str, role: str) -> str:
    """签发 access_token"""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": sub,
        "jti": str(uuid.uuid4()),
        "email": email,
        "role": role,
        "token_type": "access",
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_refresh_token(*, sub: str) -> str:
    """签发 refresh_token"""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": sub,
        "jti": str(uuid.uuid4()),
        "token_type": "refresh",
        "iat": now,
        "exp": now + timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """解码 JWT，失败统一转 401"""
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token 已过期")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="无效 Token")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    redis: aioredis.Redis = Depends(get_redis),
    users: UserService = Depends(get_user_service),
) -> AuthenticatedUser:
    """FastAPI 依赖注入：校验 JWT 并返回用户上下文"""
    if credentials is None:
        raise HTTPException(status_code=401, detail="请先登录")

    # 1. 解码 JWT
    payload = decode_token(credentials.credentials)
    if payload.get("token_type") != "access":
        raise HTTPException(status_code=401, detail="Token 类型错误")

    # 2. 检查黑名单（已注销的 Token）
    jti = payload.get("jti")
    if jti and await redis.exists(RedisKeys.token_blacklist(jti)):
        raise HTTPException(status_code=401, detail="Token 已注销")

    # 3. 以库中最新角色为准：降级或删除立即生效，不等 token 过期
    current = await users.get_user_by_id(int(payload["sub"]))
    if current is None:
        raise HTTPException(status_code=401, detail="用户不存在")

    role = current["role"]
    user = AuthenticatedUser(
        id=current["id"],
        email=current["email"],
        role=role,
        permissions=rights_for(role),
    )
    user_id_var.set(str(user.id))
    structlog.contextvars.bind_contextvars(user_id=user.id)
    return user


def require_rights(*rights: str):
    """
    生成权限校验依赖：未登录 401，角色缺少任一权限 403。

    用法：
        @router.get("/users", dependencies=[Depends(require_rights(GET_USERS))])
    """

    async def _checker(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        if not user.has_rights(*rights):
            raise HTTPException(status_code=403, detail="权限不足")
        return user

    return _checker
