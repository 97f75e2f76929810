"""add divergences table

Revision ID: 5c2e7a91d4b0
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "5c2e7a91d4b0"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "divergences",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("operation", sa.String(length=16), nullable=False),
        sa.Column("item_id", sa.String(length=255), nullable=True),
        sa.Column("catalogue_state", sa.String(length=64), nullable=False),
        sa.Column("status_code", sa.Integer(), nullable=True),
        sa.Column("detail", sa.JSON(), nullable=False),
        sa.Column("resolved", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_divergences_item_id", "divergences", ["item_id"], unique=False)
    op.create_index("ix_divergences_resolved", "divergences", ["resolved"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_divergences_resolved", table_name="divergences")
    op.drop_index("ix_divergences_item_id", table_name="divergences")
    op.drop_table("divergences")
