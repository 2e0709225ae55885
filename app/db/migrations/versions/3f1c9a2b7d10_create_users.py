"""create_users

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2026-10-12 10:21:07.418265
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False, comment='邮箱（登录名）'),
        sa.Column('name', sa.String(length=128), nullable=True, comment='姓名'),
        sa.Column('hashed_password', sa.String(length=256), nullable=False, comment='密码哈希'),
        sa.Column('role', sa.String(length=16), server_default='USER', nullable=False, comment='角色: USER/ADMIN'),
        sa.Column('is_email_verified', sa.Boolean(), server_default=sa.false(), nullable=False, comment='邮箱是否已验证'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False, comment='创建时间'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False, comment='更新时间'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )


def downgrade() -> None:
    op.drop_table('users')
