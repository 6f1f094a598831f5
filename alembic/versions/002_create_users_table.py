"""create users table

Revision ID: 002
Revises: 001
Create Date: 2025-06-02 10:30:00.000000

"""

from datetime import datetime, timezone
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from passlib.context import CryptContext

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("group_id", sa.Integer(), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"]),
    )
    op.create_index("ix_users_id", "users", ["id"], unique=False)
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # Get settings from environment (will be loaded by Alembic env.py)
    from qadesk.core.config import settings

    connection = op.get_bind()
    group_result = connection.execute(
        sa.text("SELECT id FROM groups WHERE name = :name").bindparams(
            name=settings.default_group_name
        )
    ).fetchone()

    if not group_result:
        raise ValueError("Default group not found. Make sure migration 001 has been run.")

    op.execute(
        sa.text(
            """
            INSERT INTO users (username, email, password_hash, group_id, is_admin, created_at)
            VALUES (:username, :email, :password_hash, :group_id, :is_admin, :created_at)
            """
        ).bindparams(
            username=settings.first_admin_username,
            email=settings.first_admin_email,
            password_hash=pwd_context.hash(settings.first_admin_password),
            group_id=group_result[0],
            is_admin=True,
            created_at=datetime.now(timezone.utc).replace(tzinfo=None),
        )
    )


def downgrade() -> None:
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
