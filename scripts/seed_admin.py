"""
种子数据脚本：初始化管理员账号

运行方式：
    python scripts/seed_admin.py --email admin@example.com --password 'Admin12345' --name Admin

幂等设计：按邮箱判断是否已存在，存在则跳过，不会覆盖已有密码。
"""

import argparse
import asyncio
import sys
from pathlib import Path

# 确保项目根目录在 sys.path 中
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import structlog

from app.config import get_settings
from app.db.engine import engine
from app.db.models.user import ROLE_ADMIN
from app.observability.logging_config import setup_logging
from app.security.password import check_password_strength
from app.services.user_service import user_service

settings = get_settings()
log = structlog.get_logger()


async def seed(email: str, password: str, name: str) -> None:
    try:
        existing = await user_service.get_user_by_email(email)
        if existing:
            log.info("管理员已存在，跳过", email=email, user_id=existing.id)
            return

        user = await user_service.create_user(email=email, password=password, name=name, role=ROLE_ADMIN)
        log.info("管理员已创建", email=email, user_id=user["id"])
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="初始化管理员账号")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", default="Admin")
    args = parser.parse_args()

    setup_logging(env=settings.ENV)
    try:
        check_password_strength(args.password)
    except ValueError as e:
        parser.error(str(e))

    asyncio.run(seed(args.email, args.password, args.name))


if __name__ == "__main__":
    main()
