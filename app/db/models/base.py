"""
SQLAlchemy 声明基类：所有模型继承此 Base
schema 隔离由连接级 search_path 负责（见 app.db.engine），模型本身不绑定 schema
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """声明基类"""

    __abstract__ = True
