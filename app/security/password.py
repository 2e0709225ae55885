"""
密码工具：bcrypt 哈希 / 校验 + 密码强度规则
"""

import re

import bcrypt

PASSWORD_MIN_LENGTH = 8


def hash_password(password: str) -> str:
    """生成密码哈希"""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """校验密码"""
    return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())


def check_password_strength(password: str) -> str:
    """至少 8 位，且同时包含字母和数字；不满足时抛 ValueError（供 pydantic 校验器使用）"""
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"密码长度至少 {PASSWORD_MIN_LENGTH} 位")
    if not re.search(r"\d", password) or not re.search(r"[a-zA-Z]", password):
        raise ValueError("密码必须同时包含字母和数字")
    return password
