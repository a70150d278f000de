"""Hotel search and booking schema.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

JSON_TYPE = postgresql.JSONB().with_variant(sa.JSON(), "sqlite")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("last_name", sa.String(length=120)),
        sa.Column("mobile", sa.String(length=32), nullable=False),
        sa.Column("email", sa.String(length=320)),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_users_mobile", "users", ["mobile"], unique=True)

    op.create_table(
        "meta_search_vendors",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("vendor_name", sa.String(length=120), nullable=False),
        sa.Column("reference_id", sa.String(length=120), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_meta_search_vendors_reference_id",
        "meta_search_vendors",
        ["reference_id"],
        unique=True,
    )

    op.create_table(
        "hotels",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("supplier_hotel_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("original_name", sa.String(length=255)),
        sa.Column("star_rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("region", JSON_TYPE),
        sa.Column("rates", JSON_TYPE, nullable=False),
        sa.Column("payload", JSON_TYPE, nullable=False),
        sa.Column(
            "meta_search_vendor_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("meta_search_vendors.id", ondelete="SET NULL"),
        ),
        *_timestamps(),
    )

    op.create_table(
        "booking_policies",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("booking_policy_id", sa.String(length=128), nullable=False),
        sa.Column("transaction_identifier", sa.String(length=128), nullable=False),
        sa.Column("booking_policy", JSON_TYPE, nullable=False),
        sa.Column("search", JSON_TYPE, nullable=False),
        sa.Column(
            "hotel_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("hotels.id", ondelete="CASCADE"),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index(
        "ix_booking_policies_booking_policy_id", "booking_policies", ["booking_policy_id"]
    )
    op.create_index(
        "ix_booking_policies_transaction_identifier",
        "booking_policies",
        ["transaction_identifier"],
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
        ),
        sa.Column("transaction_identifier", sa.String(length=128), nullable=False),
        sa.Column("status", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("search", JSON_TYPE, nullable=False),
        sa.Column("booking_policy", JSON_TYPE, nullable=False),
        sa.Column("contact_detail", JSON_TYPE, nullable=False),
        sa.Column("coupon", JSON_TYPE),
        sa.Column("hotel", JSON_TYPE, nullable=False),
        sa.Column("hotel_package", JSON_TYPE, nullable=False),
        sa.Column("pricing", JSON_TYPE, nullable=False),
        sa.Column("prebook_response", JSON_TYPE),
        sa.Column("payment_response", JSON_TYPE),
        sa.Column("book_response", JSON_TYPE),
        sa.Column("cancel_response", JSON_TYPE),
        *_timestamps(),
    )
    op.create_index("ix_transactions_user_id", "transactions", ["user_id"])
    op.create_index(
        "ix_transactions_transaction_identifier",
        "transactions",
        ["transaction_identifier"],
    )

    op.create_table(
        "app_config",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("markup", JSON_TYPE),
        sa.Column("fees", JSON_TYPE),
        sa.Column("cancellation_charge", JSON_TYPE),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("app_config")
    op.drop_index("ix_transactions_transaction_identifier", table_name="transactions")
    op.drop_index("ix_transactions_user_id", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index(
        "ix_booking_policies_transaction_identifier", table_name="booking_policies"
    )
    op.drop_index("ix_booking_policies_booking_policy_id", table_name="booking_policies")
    op.drop_table("booking_policies")
    op.drop_table("hotels")
    op.drop_index("ix_meta_search_vendors_reference_id", table_name="meta_search_vendors")
    op.drop_table("meta_search_vendors")
    op.drop_index("ix_users_mobile", table_name="users")
    op.drop_table("users")
