"""Initial schema - users, filmmakers, drafts, interests and profile events

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)

    op.create_table(
        "filmmakers",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("profile_url", sa.String(length=1024), nullable=True),
        sa.Column("raw_form_data", sa.JSON(), nullable=True),
        sa.Column("generated_bio", sa.Text(), nullable=True),
        sa.Column("style_vector", sa.JSON(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=True),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("current_city", sa.String(length=255), nullable=True),
        sa.Column("current_state", sa.String(length=255), nullable=True),
        sa.Column("roles_text", sa.String(length=512), nullable=True),
        sa.Column("genres_text", sa.String(length=512), nullable=True),
        sa.Column("open_to_collab", sa.Boolean(), nullable=True),
        sa.Column("profile_views", sa.Integer(), nullable=True),
        sa.Column("profile_clicks", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_filmmakers_user_id"), "filmmakers", ["user_id"], unique=True)
    op.create_index(op.f("ix_filmmakers_status"), "filmmakers", ["status"], unique=False)
    op.create_index(op.f("ix_filmmakers_open_to_collab"), "filmmakers", ["open_to_collab"], unique=False)
    op.create_index(op.f("ix_filmmakers_created_at"), "filmmakers", ["created_at"], unique=False)

    op.create_table(
        "profile_drafts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("draft_data", sa.JSON(), nullable=True),
        sa.Column("current_step", sa.Integer(), nullable=True),
        sa.Column("custom_roles", sa.JSON(), nullable=True),
        sa.Column("is_complete", sa.Boolean(), nullable=True),
        sa.Column("last_saved_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_profile_drafts_id"), "profile_drafts", ["id"], unique=False)
    op.create_index(op.f("ix_profile_drafts_user_id"), "profile_drafts", ["user_id"], unique=True)

    op.create_table(
        "interested_profiles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("inquirer_id", sa.Integer(), nullable=False),
        sa.Column("target_profile_id", sa.String(length=36), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=True),
        sa.Column("private_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["inquirer_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["target_profile_id"], ["filmmakers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("inquirer_id", "target_profile_id", name="uq_interest_inquirer_target"),
    )
    op.create_index(op.f("ix_interested_profiles_id"), "interested_profiles", ["id"], unique=False)
    op.create_index(op.f("ix_interested_profiles_inquirer_id"), "interested_profiles", ["inquirer_id"], unique=False)
    op.create_index(
        op.f("ix_interested_profiles_target_profile_id"), "interested_profiles", ["target_profile_id"], unique=False
    )

    op.create_table(
        "profile_events",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("filmmaker_id", sa.String(length=36), nullable=False),
        sa.Column("event_type", sa.String(length=10), nullable=False),
        sa.Column("click_type", sa.String(length=20), nullable=True),
        sa.Column("target_id", sa.String(length=255), nullable=True),
        sa.Column("referrer", sa.String(length=20), nullable=True),
        sa.Column("device", sa.String(length=20), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["filmmaker_id"], ["filmmakers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_profile_events_id"), "profile_events", ["id"], unique=False)
    op.create_index(op.f("ix_profile_events_filmmaker_id"), "profile_events", ["filmmaker_id"], unique=False)
    op.create_index(op.f("ix_profile_events_created_at"), "profile_events", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_table("profile_events")
    op.drop_table("interested_profiles")
    op.drop_table("profile_drafts")
    op.drop_table("filmmakers")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
