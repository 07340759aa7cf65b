"""Allocation settings key-value table.

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 10:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "allocation_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("value", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_allocation_settings_id", "allocation_settings", ["id"])
    op.create_index("ix_allocation_settings_key", "allocation_settings", ["key"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_allocation_settings_key", table_name="allocation_settings")
    op.drop_index("ix_allocation_settings_id", table_name="allocation_settings")
    op.drop_table("allocation_settings")
