"""initial lockstep schema

Revision ID: 3f9c1a7d2b10
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "3f9c1a7d2b10"
down_revision = None
branch_labels = None
depends_on = None


def timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.current_timestamp(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.current_timestamp(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    rsvp_response_enum = postgresql.ENUM("in", "maybe", "out", name="rsvp_response_enum")
    rsvp_response_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "users",
        sa.Column("uuid", sa.UUID(), nullable=False),
        *timestamps(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("hashed_password", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("is_superuser", sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "events",
        sa.Column("uuid", sa.UUID(), nullable=False),
        *timestamps(),
        sa.Column("organiser_id", sa.UUID(), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("location", sa.String(500), nullable=True),
        sa.Column("timezone", sa.String(50), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("nudges_sent", sa.Integer(), server_default="0", nullable=False),
        sa.ForeignKeyConstraint(["organiser_id"], ["users.uuid"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index("ix_events_organiser_id", "events", ["organiser_id"])

    op.create_table(
        "blocks",
        sa.Column("uuid", sa.UUID(), nullable=False),
        *timestamps(),
        sa.Column("event_id", sa.UUID(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=True),
        sa.Column("location", sa.String(500), nullable=True),
        sa.Column("attendance_required", sa.Boolean(), nullable=True),
        sa.ForeignKeyConstraint(["event_id"], ["events.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index("ix_blocks_event_id", "blocks", ["event_id"])

    op.create_table(
        "questions",
        sa.Column("uuid", sa.UUID(), nullable=False),
        *timestamps(),
        sa.Column("event_id", sa.UUID(), nullable=False),
        sa.Column("prompt", sa.Text(), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("options", sa.JSON(), nullable=True),
        sa.Column("required", sa.Boolean(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["event_id"], ["events.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index("ix_questions_event_id", "questions", ["event_id"])

    op.create_table(
        "guests",
        sa.Column("uuid", sa.UUID(), nullable=False),
        *timestamps(),
        sa.Column("event_id", sa.UUID(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column(
            "status",
            sa.Enum("pending", "responded", "opted_out", name="guest_status_enum"),
            nullable=False,
        ),
        sa.Column("magic_token", sa.String(36), nullable=False),
        sa.Column("opted_out_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["event_id"], ["events.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index("ix_guests_event_id", "guests", ["event_id"])
    op.create_index("ix_guests_phone", "guests", ["phone"])
    op.create_index("ix_guests_status", "guests", ["status"])
    op.create_index("ix_guests_magic_token", "guests", ["magic_token"], unique=True)

    op.create_table(
        "rsvps",
        sa.Column("uuid", sa.UUID(), nullable=False),
        *timestamps(),
        sa.Column("guest_id", sa.UUID(), nullable=False),
        sa.Column("block_id", sa.UUID(), nullable=False),
        sa.Column(
            "response",
            postgresql.ENUM(name="rsvp_response_enum", create_type=False),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["guest_id"], ["guests.uuid"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["block_id"], ["blocks.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
        sa.UniqueConstraint("guest_id", "block_id", name="uq_rsvps_guest_block"),
    )
    op.create_index("ix_rsvps_guest_id", "rsvps", ["guest_id"])
    op.create_index("ix_rsvps_block_id", "rsvps", ["block_id"])

    op.create_table(
        "answers",
        sa.Column("uuid", sa.UUID(), nullable=False),
        *timestamps(),
        sa.Column("guest_id", sa.UUID(), nullable=False),
        sa.Column("question_id", sa.UUID(), nullable=False),
        sa.Column("value", sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(["guest_id"], ["guests.uuid"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["question_id"], ["questions.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
        sa.UniqueConstraint("guest_id", "question_id", name="uq_answers_guest_question"),
    )
    op.create_index("ix_answers_guest_id", "answers", ["guest_id"])
    op.create_index("ix_answers_question_id", "answers", ["question_id"])

    op.create_table(
        "checkpoints",
        sa.Column("uuid", sa.UUID(), nullable=False),
        *timestamps(),
        sa.Column("event_id", sa.UUID(), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("trigger_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("executed", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("required_question_ids", sa.JSON(), nullable=True),
        sa.Column("applicable_block_ids", sa.JSON(), nullable=True),
        sa.Column(
            "auto_resolve_to",
            postgresql.ENUM(name="rsvp_response_enum", create_type=False),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(["event_id"], ["events.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index("ix_checkpoints_event_id", "checkpoints", ["event_id"])
    op.create_index("ix_checkpoints_trigger_at", "checkpoints", ["trigger_at"])
    op.create_index("ix_checkpoints_executed", "checkpoints", ["executed"])

    op.create_table(
        "nudges",
        sa.Column("uuid", sa.UUID(), nullable=False),
        *timestamps(),
        sa.Column("guest_id", sa.UUID(), nullable=True),
        sa.Column("checkpoint_id", sa.UUID(), nullable=True),
        sa.Column("channel", sa.Enum("sms", "whatsapp", name="nudge_channel_enum"), nullable=False),
        sa.Column(
            "status",
            sa.Enum("pending", "sent", "failed", "delivered", name="nudge_status_enum"),
            nullable=False,
        ),
        sa.Column("idempotency_key", sa.String(255), nullable=False),
        sa.Column("external_id", sa.String(64), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["guest_id"], ["guests.uuid"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["checkpoint_id"], ["checkpoints.uuid"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index("ix_nudges_guest_id", "nudges", ["guest_id"])
    op.create_index("ix_nudges_checkpoint_id", "nudges", ["checkpoint_id"])
    op.create_index("ix_nudges_status", "nudges", ["status"])
    # Enforces at-most-once delivery per (event, checkpoint, guest, channel)
    op.create_index("ix_nudges_idempotency_key", "nudges", ["idempotency_key"], unique=True)
    op.create_index("ix_nudges_external_id", "nudges", ["external_id"])

    op.create_table(
        "subscriptions",
        sa.Column("uuid", sa.UUID(), nullable=False),
        *timestamps(),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("tier", sa.String(50), nullable=False),
        sa.Column("status", sa.String(50), nullable=True),
        sa.Column("stripe_customer_id", sa.String(255), nullable=True),
        sa.Column("stripe_subscription_id", sa.String(255), nullable=True),
        sa.Column("current_period_end", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index("ix_subscriptions_user_id", "subscriptions", ["user_id"], unique=True)

    op.create_table(
        "event_purchases",
        sa.Column("uuid", sa.UUID(), nullable=False),
        *timestamps(),
        sa.Column("event_id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=True),
        sa.Column("tier", sa.String(50), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("addons", sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(["event_id"], ["events.uuid"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.uuid"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index("ix_event_purchases_event_id", "event_purchases", ["event_id"])


def downgrade() -> None:
    op.drop_table("event_purchases")
    op.drop_table("subscriptions")
    op.drop_table("nudges")
    op.drop_table("checkpoints")
    op.drop_table("answers")
    op.drop_table("rsvps")
    op.drop_table("guests")
    op.drop_table("questions")
    op.drop_table("blocks")
    op.drop_table("events")
    op.drop_table("users")

    op.execute("DROP TYPE IF EXISTS nudge_status_enum")
    op.execute("DROP TYPE IF EXISTS nudge_channel_enum")
    op.execute("DROP TYPE IF EXISTS guest_status_enum")
    op.execute("DROP TYPE IF EXISTS rsvp_response_enum")
