"""Create intraday tables

Revision ID: 3f1a9c7d2b10
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f1a9c7d2b10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

INTRADAY_TABLES = ("intraday_5min", "intraday_1hour", "intraday_24hour")


def upgrade() -> None:
    for table_name in INTRADAY_TABLES:
        op.create_table(
            table_name,
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("date", sa.TIMESTAMP(timezone=True), nullable=False),
            sa.Column("symbol", sa.String(length=20), nullable=False),
            sa.Column("exchange", sa.String(length=20), nullable=True),
            sa.Column("open", sa.Float(), nullable=True),
            sa.Column("high", sa.Float(), nullable=True),
            sa.Column("low", sa.Float(), nullable=True),
            sa.Column("close", sa.Float(), nullable=True),
            sa.Column("last", sa.Float(), nullable=True),
            sa.Column("volume", sa.Float(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("symbol", "date", name=f"uq_{table_name}_symbol_date"),
        )
        op.create_index(
            op.f(f"ix_{table_name}_date"),
            table_name,
            ["date"],
            unique=False,
        )
        op.create_index(
            op.f(f"ix_{table_name}_symbol"),
            table_name,
            ["symbol"],
            unique=False,
        )


def downgrade() -> None:
    for table_name in reversed(INTRADAY_TABLES):
        op.drop_index(op.f(f"ix_{table_name}_symbol"), table_name=table_name)
        op.drop_index(op.f(f"ix_{table_name}_date"), table_name=table_name)
        op.drop_table(table_name)
