"""create groups table

Revision ID: 001
Revises:
Create Date: 2025-06-02 10:00:00.000000

"""

from datetime import datetime, timezone
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "groups",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_groups_id", "groups", ["id"], unique=False)
    op.create_index("ix_groups_name", "groups", ["name"], unique=True)

    from qadesk.core.config import settings

    # The first administrator needs a group to belong to
    op.execute(
        sa.text(
            """
            INSERT INTO groups (name, description, created_at)
            VALUES (:name, :description, :created_at)
            """
        ).bindparams(
            name=settings.default_group_name,
            description="Default group for administrators",
            created_at=datetime.now(timezone.utc).replace(tzinfo=None),
        )
    )


def downgrade() -> None:
    op.drop_index("ix_groups_name", table_name="groups")
    op.drop_index("ix_groups_id", table_name="groups")
    op.drop_table("groups")
