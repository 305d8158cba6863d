"""initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-09-28
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None

# Define enums once, referenced by columns with create_type=False
teamstatus_enum = postgresql.ENUM(
    "filling", "complete", "inactive", name="teamstatus", create_type=False
)
datamigrationstatus_enum = postgresql.ENUM(
    "completed", "failed", "pending", name="datamigrationstatus", create_type=False
)


def upgrade() -> None:
    bind = op.get_bind()
    for enum in [teamstatus_enum, datamigrationstatus_enum]:
        enum.create(bind, checkfirst=True)

    # --- companies ---
    op.create_table(
        "companies",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("group_size", sa.Integer(), nullable=False, server_default="4"),
        sa.Column(
            "group_size_changed_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "group_size >= 2 AND group_size <= 10", name="ck_companies_group_size"
        ),
    )

    # --- administrators ---
    op.create_table(
        "administrators",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), unique=True, nullable=False),
        sa.Column("group_size", sa.Integer(), nullable=False),
        sa.Column(
            "group_size_changed_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # --- admin_users ---
    op.create_table(
        "admin_users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(320), unique=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("assigned_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("first_name", sa.String(255), nullable=False),
        sa.Column("last_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), unique=True, nullable=False, index=True),
        sa.Column("phone", sa.String(64), nullable=False),
        sa.Column("address", sa.String(1024), nullable=False),
        sa.Column(
            "company_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("companies.id"),
            nullable=True,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    # Emails are unique regardless of case
    op.create_index("uq_users_email_lower", "users", [sa.text("lower(email)")], unique=True)

    # --- partnerships ---
    op.create_table(
        "partnerships",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("group_id", sa.String(64), nullable=False),
        sa.Column(
            "company_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("companies.id"),
            nullable=False,
        ),
        sa.Column("team_number", sa.Integer(), nullable=False),
        sa.Column(
            "leader_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column("status", teamstatus_enum, nullable=False, server_default="filling"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("company_id", "team_number", name="uq_partnerships_company_team"),
        sa.UniqueConstraint("company_id", "group_id", name="uq_partnerships_company_group"),
        sa.CheckConstraint(
            "team_number > 0 AND team_number <= 1000", name="ck_partnerships_team_number"
        ),
    )
    op.create_index(
        "uq_partnerships_filling_team",
        "partnerships",
        ["company_id"],
        unique=True,
        postgresql_where=sa.text("status = 'filling'"),
    )
    op.create_index(
        "uq_partnerships_active_leader",
        "partnerships",
        ["leader_id", "company_id"],
        unique=True,
        postgresql_where=sa.text("status IN ('filling', 'complete')"),
    )

    # --- partnership_members ---
    op.create_table(
        "partnership_members",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "partnership_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("partnerships.id"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint(
            "partnership_id", "user_id", name="uq_partnership_members_team_user"
        ),
    )
    op.create_index("ix_partnership_members_user_id", "partnership_members", ["user_id"])

    # --- partnership_history ---
    op.create_table(
        "partnership_history",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user1_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column(
            "user2_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column(
            "partnership_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("partnerships.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # --- app_data_migrations ---
    op.create_table(
        "app_data_migrations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("checksum", sa.String(128), nullable=False),
        sa.Column(
            "executed_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column("environment", sa.String(32), nullable=False),
        sa.Column(
            "status", datamigrationstatus_enum, nullable=False, server_default="completed"
        ),
        sa.Column("executed_by", sa.String(320), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("name", "environment", name="uq_app_data_migrations_name_env"),
    )


def downgrade() -> None:
    op.drop_table("app_data_migrations")
    op.drop_table("partnership_history")
    op.drop_index("ix_partnership_members_user_id", table_name="partnership_members")
    op.drop_table("partnership_members")
    op.drop_index("uq_partnerships_active_leader", table_name="partnerships")
    op.drop_index("uq_partnerships_filling_team", table_name="partnerships")
    op.drop_table("partnerships")
    op.drop_index("uq_users_email_lower", table_name="users")
    op.drop_table("users")
    op.drop_table("admin_users")
    op.drop_table("administrators")
    op.drop_table("companies")

    bind = op.get_bind()
    for enum in [datamigrationstatus_enum, teamstatus_enum]:
        enum.drop(bind, checkfirst=True)
