"""Initial schema: accounts and guests, auth tokens, guest sessions, finance records.

Key points:
- ``user.is_guest`` marks identities created lazily for anonymous writes.
- ``anon_session`` stores only the SHA-256 hash of the guest bearer token.
- Finance rows are owned through ``user_id`` so a guest merge is a pure FK rewrite.
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20260110_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("timezone", sa.String(length=64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_guest", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)
    op.create_index("ix_user_is_guest", "user", ["is_guest"])

    op.create_table(
        "user_preference",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("key", sa.String(length=128), nullable=False),
        sa.Column("value", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "key", name="uq_user_preference_user_key"),
    )
    op.create_index("ix_user_preference_user_id", "user_preference", ["user_id"])

    op.create_table(
        "refresh_token",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("jti", sa.String(length=64), nullable=False, unique=True),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("revoked_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_refresh_token_user_id", "refresh_token", ["user_id"])

    op.create_table(
        "anon_session",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("token_hash", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("token_hash", name="uq_anon_session_token_hash"),
    )
    op.create_index("ix_anon_session_user", "anon_session", ["user_id"])
    op.create_index("ix_anon_session_expires_at", "anon_session", ["expires_at"])

    op.create_table(
        "finance_category",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=40), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "name", name="uq_finance_category_user_name"),
    )
    op.create_index("ix_finance_category_user_id", "finance_category", ["user_id"])
    op.create_index("ix_finance_category_user_sort", "finance_category", ["user_id", "sort_order"])

    op.create_table(
        "finance_payment_source",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=60), nullable=False),
        sa.Column("type", sa.String(length=8), nullable=False, server_default="BANK"),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "name", name="uq_finance_payment_source_user_name"),
    )
    op.create_index("ix_finance_payment_source_user_id", "finance_payment_source", ["user_id"])

    op.create_table(
        "finance_transaction",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("occurred_on", sa.Date(), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=8), nullable=False, server_default="EXPENSE"),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("flags", sa.JSON(), nullable=False),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("finance_category.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "payment_source_id",
            sa.Integer(),
            sa.ForeignKey("finance_payment_source.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
    )
    op.create_index("ix_finance_transaction_user_id", "finance_transaction", ["user_id"])
    op.create_index("ix_finance_transaction_user_date", "finance_transaction", ["user_id", "occurred_on"])
    op.create_index("ix_finance_transaction_user_category", "finance_transaction", ["user_id", "category_id"])
    op.create_index("ix_finance_transaction_payment_source_id", "finance_transaction", ["payment_source_id"])


def downgrade() -> None:
    op.drop_table("finance_transaction")
    op.drop_table("finance_payment_source")
    op.drop_table("finance_category")
    op.drop_table("anon_session")
    op.drop_table("refresh_token")
    op.drop_table("user_preference")
    op.drop_table("user")
