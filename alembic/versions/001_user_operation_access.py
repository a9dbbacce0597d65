"""User operation access - one grant per (user, operation).

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "user_operation_access",
        sa.Column("id", sa.UUID(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("operation_id", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="viewer"),
        sa.Column("permissions", postgresql.JSONB(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "role IN ('owner', 'admin', 'viewer')", name="ck_user_operation_access_role"
        ),
        sa.UniqueConstraint(
            "user_id", "operation_id", name="uq_user_operation_access_user_operation"
        ),
    )
    op.create_index(
        "ix_user_operation_access_operation_id", "user_operation_access", ["operation_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_user_operation_access_operation_id", table_name="user_operation_access")
    op.drop_table("user_operation_access")
