"""
用户服务层：用户 CRUD + 分页查询 + 邮箱唯一性校验

供 /users 路由和用户类 MCP 工具共用。
对外返回的用户数据一律经过 User.to_safe_dict()，永不携带密码哈希。
"""

import math
from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import get_settings
from app.db.engine import async_session
from app.db.models.user import ROLE_USER, User
from app.errors import AppError
from app.security.password import hash_password

log = structlog.get_logger()
settings = get_settings()

# 允许排序的字段（白名单，防止按密码哈希等内部列排序）
SORTABLE_FIELDS = ("id", "email", "name", "role", "created_at", "updated_at")
UPDATABLE_FIELDS = ("email", "password", "name")


class UserNotFoundError(AppError):
    status_code = 404

    def __init__(self, message: str = "用户不存在"):
        super().__init__(message)


class EmailTakenError(AppError):
    status_code = 400

    def __init__(self, message: str = "邮箱已被占用"):
        super().__init__(message)


def parse_sort_by(sort_by: str | None):
    """解析 "field:asc|desc"，格式不合法或字段不在白名单时返回 None（走默认排序）"""
    if not sort_by:
        return None
    field, _, direction = sort_by.partition(":")
    if field not in SORTABLE_FIELDS or direction not in ("asc", "desc"):
        return None
    column = getattr(User, field)
    return column.asc() if direction == "asc" else column.desc()


class UserService:
    """用户持久化服务（无状态，持有 session 工厂）"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def create_user(
        self,
        email: str,
        password: str,
        name: str | None = None,
        role: str = ROLE_USER,
    ) -> dict[str, Any]:
        """创建用户，邮箱已存在时抛 EmailTakenError"""
        async with self._session_factory() as session:
            if await self._find_by_email(session, email):
                raise EmailTakenError()

            user = User(
                email=email,
                name=name,
                hashed_password=hash_password(password),
                role=role,
            )
            session.add(user)
            await self._commit_unique_email(session)
            # created_at / updated_at 由数据库生成，需回读
            await session.refresh(user)

        log.info("用户已创建", user_id=user.id, role=user.role)
        return user.to_safe_dict()

    async def query_users(
        self,
        *,
        name: str | None = None,
        role: str | None = None,
        sort_by: str | None = None,
        limit: int | None = None,
        page: int | None = None,
    ) -> dict[str, Any]:
        """
        分页查询用户。

        返回 {results, page, limit, total_pages, total_results}；
        page 从 1 开始，默认按 created_at 倒序。
        """
        page = page or 1
        limit = min(limit or settings.USER_PAGE_SIZE_DEFAULT, settings.USER_PAGE_SIZE_MAX)

        conditions = []
        if name is not None:
            conditions.append(User.name == name)
        if role is not None:
            conditions.append(User.role == role)

        order_by = parse_sort_by(sort_by)
        if order_by is None:
            order_by = User.created_at.desc()

        async with self._session_factory() as session:
            total_results = await session.scalar(
                select(func.count()).select_from(User).where(*conditions)
            )
            stmt = (
                select(User)
                .where(*conditions)
                .order_by(order_by, User.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            rows = (await session.execute(stmt)).scalars().all()

        total_results = total_results or 0
        return {
            "results": [u.to_safe_dict() for u in rows],
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total_results / limit),
            "total_results": total_results,
        }

    async def get_user_by_id(self, user_id: int) -> dict[str, Any] | None:
        async with self._session_factory() as session:
            user = await session.get(User, user_id)
        return user.to_safe_dict() if user else None

    async def get_user_by_email(self, email: str) -> User | None:
        """内部使用（登录校验），返回 ORM 对象，包含密码哈希"""
        async with self._session_factory() as session:
            return await self._find_by_email(session, email)

    async def update_user_by_id(self, user_id: int, **fields: Any) -> dict[str, Any]:
        """按 id 更新用户；仅接受 email / password / name，None 值视为未提供"""
        updates = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS and v is not None}

        async with self._session_factory() as session:
            user = await session.get(User, user_id)
            if not user:
                raise UserNotFoundError()

            new_email = updates.get("email")
            if new_email and new_email != user.email:
                if await self._find_by_email(session, new_email):
                    raise EmailTakenError()
                user.email = new_email

            if "name" in updates:
                user.name = updates["name"]
            if "password" in updates:
                user.hashed_password = hash_password(updates["password"])

            await self._commit_unique_email(session)
            await session.refresh(user)

        log.info("用户已更新", user_id=user_id, fields=sorted(updates))
        return user.to_safe_dict()

    async def delete_user_by_id(self, user_id: int) -> None:
        async with self._session_factory() as session:
            user = await session.get(User, user_id)
            if not user:
                raise UserNotFoundError()
            await session.delete(user)
            await session.commit()

        log.info("用户已删除", user_id=user_id)

    @staticmethod
    async def _commit_unique_email(session: AsyncSession) -> None:
        """提交；并发写入同一邮箱时由唯一约束兜底，转为 EmailTakenError"""
        try:
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            log.info("邮箱唯一约束冲突", error=str(e.orig))
            raise EmailTakenError() from e

    @staticmethod
    async def _find_by_email(session: AsyncSession, email: str) -> User | None:
        result = await session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()


# 单例
user_service = UserService(async_session)


async def get_user_service() -> UserService:
    """FastAPI 依赖注入：获取用户服务"""
    return user_service
