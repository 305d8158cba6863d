"""Add per-company join sequence.

- companies.member_seq counts joined users
- users.join_position stores each user's 1-based arrival order
- Backfill both from existing rows (created_at, id order)

Revision ID: 002_company_join_sequence
Revises: 001_initial
Create Date: 2026-10-12
"""

import sqlalchemy as sa
from alembic import op

revision = "002_company_join_sequence"
down_revision = "001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        "companies",
        sa.Column("member_seq", sa.Integer(), nullable=False, server_default="0"),
    )
    op.add_column(
        "users",
        sa.Column("join_position", sa.Integer(), nullable=True),
    )

    op.execute(
        """
        UPDATE users SET join_position = ranked.position
        FROM (
            SELECT id, ROW_NUMBER() OVER (
                PARTITION BY company_id ORDER BY created_at, id
            ) AS position
            FROM users
            WHERE company_id IS NOT NULL
        ) AS ranked
        WHERE users.id = ranked.id
        """
    )
    op.execute(
        """
        UPDATE companies SET member_seq = counts.total
        FROM (
            SELECT company_id, COUNT(*) AS total
            FROM users
            WHERE company_id IS NOT NULL
            GROUP BY company_id
        ) AS counts
        WHERE companies.id = counts.company_id
        """
    )

    op.create_unique_constraint(
        "uq_users_company_position",
        "users",
        ["company_id", "join_position"],
    )


def downgrade() -> None:
    op.drop_constraint("uq_users_company_position", "users", type_="unique")
    op.drop_column("users", "join_position")
    op.drop_column("companies", "member_seq")
