"""initial schema: accounts, audit trail and party records

Revision ID: 4a7e2c91d0b3
Revises:
Create Date: 2026-10-17 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4a7e2c91d0b3'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create account, audit and record tables."""
    conn = op.get_bind()
    existing_tables = set(sa.inspect(conn).get_table_names())

    # Accounts
    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("email", sa.String(320), nullable=False, unique=True),
            sa.Column("password_hash", sa.String(255), nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
    if "roles" not in existing_tables:
        op.create_table(
            "roles",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("key", sa.String(64), nullable=False, unique=True),
            sa.Column("name", sa.String(128), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
    if "permissions" not in existing_tables:
        op.create_table(
            "permissions",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("key", sa.String(128), nullable=False, unique=True),
            sa.Column("name", sa.String(128), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
    if "user_roles" not in existing_tables:
        op.create_table(
            "user_roles",
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
            sa.Column("role_id", sa.Integer(), sa.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
        )
    if "role_permissions" not in existing_tables:
        op.create_table(
            "role_permissions",
            sa.Column("role_id", sa.Integer(), sa.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
            sa.Column("permission_id", sa.Integer(), sa.ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
        )

    # Audit trail
    if "audit_events" not in existing_tables:
        op.create_table(
            "audit_events",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("request_id", sa.String(64), nullable=True),
            sa.Column("client_ip", sa.String(64), nullable=True),
            sa.Column("actor_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("actor_user_email", sa.String(320), nullable=True),
            sa.Column("action", sa.String(128), nullable=False),
            sa.Column("entity_type", sa.String(128), nullable=True),
            sa.Column("entity_id", sa.String(128), nullable=True),
            sa.Column("reason", sa.String(512), nullable=True),
            sa.Column("metadata_json", sa.Text(), nullable=True),
        )
        op.create_index("idx_audit_events_created_at", "audit_events", ["created_at"])
        op.create_index("idx_audit_events_action", "audit_events", ["action"])

    # Records
    if "committees" not in existing_tables:
        op.create_table(
            "committees",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(255), nullable=False, unique=True),
            sa.Column("description", sa.Text(), nullable=False),
            *_timestamps(),
        )
        op.create_index("idx_committees_name", "committees", ["name"])

    if "personnel" not in existing_tables:
        op.create_table(
            "personnel",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column("party_position", sa.String(255), nullable=False),
            sa.Column("student_council_position", sa.String(255), nullable=True),
            sa.Column("bio", sa.Text(), nullable=False),
            sa.Column("campus", sa.String(128), nullable=False),
            sa.Column("faculty", sa.String(255), nullable=False),
            sa.Column("year", sa.Integer(), nullable=False),
            sa.Column("gender", sa.String(32), nullable=False),
            sa.Column("profile_image_url", sa.Text(), nullable=True),
            sa.Column("committee_id", sa.Integer(), sa.ForeignKey("committees.id", ondelete="SET NULL"), nullable=True),
            *_timestamps(),
            sa.CheckConstraint("year > 0", name="ck_personnel_year_positive"),
        )
        op.create_index("idx_personnel_campus", "personnel", ["campus"])
        op.create_index("idx_personnel_committee", "personnel", ["committee_id"])
        op.create_index("idx_personnel_party_position", "personnel", ["party_position"])

    if "meetings" not in existing_tables:
        op.create_table(
            "meetings",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("date", sa.Date(), nullable=False),
            sa.Column("main_topic", sa.String(512), nullable=False),
            sa.Column("scope", sa.String(128), nullable=False),
            *_timestamps(),
        )
        op.create_index("idx_meetings_date", "meetings", ["date"])
        op.create_index("idx_meetings_scope", "meetings", ["scope"])

    if "meeting_attendance" not in existing_tables:
        op.create_table(
            "meeting_attendance",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("meeting_id", sa.Integer(), sa.ForeignKey("meetings.id", ondelete="CASCADE"), nullable=False),
            sa.Column("personnel_id", sa.Integer(), sa.ForeignKey("personnel.id", ondelete="CASCADE"), nullable=False),
            sa.Column("attended", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.UniqueConstraint("meeting_id", "personnel_id", name="uq_attendance_meeting_personnel"),
        )
        op.create_index("idx_attendance_meeting", "meeting_attendance", ["meeting_id"])
        op.create_index("idx_attendance_personnel", "meeting_attendance", ["personnel_id"])

    if "motions" not in existing_tables:
        op.create_table(
            "motions",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("title", sa.String(512), nullable=False),
            sa.Column("description", sa.Text(), nullable=False),
            sa.Column("voting_status", sa.String(16), nullable=False, server_default="Pending"),
            sa.Column("proposer_id", sa.Integer(), sa.ForeignKey("personnel.id", ondelete="RESTRICT"), nullable=False),
            sa.Column("meeting_id", sa.Integer(), sa.ForeignKey("meetings.id", ondelete="CASCADE"), nullable=False),
            *_timestamps(),
            sa.CheckConstraint("voting_status IN ('Passed', 'Failed', 'Pending')", name="ck_motions_voting_status"),
        )
        op.create_index("idx_motions_meeting", "motions", ["meeting_id"])
        op.create_index("idx_motions_proposer", "motions", ["proposer_id"])
        op.create_index("idx_motions_status", "motions", ["voting_status"])

    if "policies" not in existing_tables:
        op.create_table(
            "policies",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("title", sa.String(512), nullable=False),
            sa.Column("description", sa.Text(), nullable=False),
            *_timestamps(),
        )
        op.create_index("idx_policies_title", "policies", ["title"])

    if "news" not in existing_tables:
        op.create_table(
            "news",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("title", sa.String(512), nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("publish_date", sa.Date(), nullable=False),
            sa.Column("image_url", sa.Text(), nullable=True),
            *_timestamps(),
        )
        op.create_index("idx_news_publish_date", "news", ["publish_date"])

    if "events" not in existing_tables:
        op.create_table(
            "events",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("title", sa.String(512), nullable=False),
            sa.Column("description", sa.Text(), nullable=False),
            sa.Column("event_date", sa.Date(), nullable=False),
            sa.Column("location", sa.String(512), nullable=True),
            *_timestamps(),
        )
        op.create_index("idx_events_event_date", "events", ["event_date"])


def downgrade() -> None:
    for table in (
        "events",
        "news",
        "policies",
        "motions",
        "meeting_attendance",
        "meetings",
        "personnel",
        "committees",
        "audit_events",
        "role_permissions",
        "user_roles",
        "permissions",
        "roles",
        "users",
    ):
        op.drop_table(table)
