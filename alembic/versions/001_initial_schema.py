"""Initial schema — executed authorizations and the development token ledger.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # digest is the primary key: the unique violation is the replay signal
    op.create_table(
        "executed_authorizations",
        sa.Column("digest", sa.String(66), primary_key=True),
        sa.Column("sender", sa.String(42), nullable=False),
        sa.Column("recipient", sa.String(42), nullable=False),
        sa.Column("token", sa.String(42), nullable=False),
        sa.Column("amount", sa.String(78), nullable=False),
        sa.Column("nonce", sa.String(78), nullable=False),
        sa.Column("relayer", sa.String(42), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="consumed"),
        sa.Column("error_code", sa.String(50), nullable=True),
        sa.Column("executed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("settled_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_executed_authorizations_sender", "executed_authorizations", ["sender"],
    )

    op.create_table(
        "token_balances",
        sa.Column("token", sa.String(42), primary_key=True),
        sa.Column("owner", sa.String(42), primary_key=True),
        sa.Column("amount", sa.String(78), nullable=False, server_default="0"),
    )

    op.create_table(
        "token_allowances",
        sa.Column("token", sa.String(42), primary_key=True),
        sa.Column("owner", sa.String(42), primary_key=True),
        sa.Column("spender", sa.String(42), primary_key=True),
        sa.Column("amount", sa.String(78), nullable=False, server_default="0"),
    )


def downgrade() -> None:
    op.drop_table("token_allowances")
    op.drop_table("token_balances")
    op.drop_index("ix_executed_authorizations_sender", "executed_authorizations")
    op.drop_table("executed_authorizations")
