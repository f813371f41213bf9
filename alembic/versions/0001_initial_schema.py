"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "lab_markers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("marker_name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("aliases", sa.Text(), nullable=False),
        sa.Column("unit", sa.String(length=50), nullable=True),
        sa.Column("conventional_low", sa.Float(), nullable=True),
        sa.Column("conventional_high", sa.Float(), nullable=True),
        sa.Column("functional_low", sa.Float(), nullable=True),
        sa.Column("functional_high", sa.Float(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_lab_markers_category", "lab_markers", ["category"], unique=False)
    op.create_index("ix_lab_markers_marker_name", "lab_markers", ["marker_name"], unique=True)

    op.create_table(
        "lab_trend_results",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("clinic_id", sa.String(length=36), nullable=False),
        sa.Column("patient_id", sa.String(length=36), nullable=False),
        sa.Column("marker_id", sa.Integer(), nullable=True),
        sa.Column("lab_marker", sa.String(length=255), nullable=False),
        sa.Column("result_date", sa.Date(), nullable=False),
        sa.Column("result_value", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(length=50), nullable=True),
        sa.Column("conventional_range_low", sa.Float(), nullable=True),
        sa.Column("conventional_range_high", sa.Float(), nullable=True),
        sa.Column("functional_range_low", sa.Float(), nullable=True),
        sa.Column("functional_range_high", sa.Float(), nullable=True),
        sa.Column("zone", sa.String(length=30), nullable=True),
        sa.Column("source", sa.String(length=100), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["marker_id"], ["lab_markers.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_lab_trend_results_clinic_id", "lab_trend_results", ["clinic_id"], unique=False)
    op.create_index("ix_lab_trend_results_patient_id", "lab_trend_results", ["patient_id"], unique=False)
    op.create_index("ix_lab_trend_results_marker_id", "lab_trend_results", ["marker_id"], unique=False)
    op.create_index("ix_lab_trend_results_lab_marker", "lab_trend_results", ["lab_marker"], unique=False)
    op.create_index("ix_lab_trend_results_result_date", "lab_trend_results", ["result_date"], unique=False)

    op.create_table(
        "gift_cards",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("clinic_id", sa.String(length=36), nullable=False),
        sa.Column("card_code", sa.String(length=19), nullable=False),
        sa.Column("card_type", sa.String(length=20), nullable=False),
        sa.Column("original_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("current_balance", sa.Numeric(10, 2), nullable=False),
        sa.Column("purchaser_name", sa.String(length=255), nullable=True),
        sa.Column("purchaser_email", sa.String(length=255), nullable=True),
        sa.Column("recipient_name", sa.String(length=255), nullable=True),
        sa.Column("recipient_email", sa.String(length=255), nullable=True),
        sa.Column("patient_id", sa.String(length=36), nullable=True),
        sa.Column("expiration_date", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("activation_date", sa.Date(), nullable=True),
        sa.Column("last_used_date", sa.Date(), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_gift_cards_card_code", "gift_cards", ["card_code"], unique=True)
    op.create_index("ix_gift_cards_clinic_id", "gift_cards", ["clinic_id"], unique=False)
    op.create_index("ix_gift_cards_patient_id", "gift_cards", ["patient_id"], unique=False)

    op.create_table(
        "memberships",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("clinic_id", sa.String(length=36), nullable=False),
        sa.Column("patient_id", sa.String(length=36), nullable=False),
        sa.Column("membership_name", sa.String(length=255), nullable=False),
        sa.Column("membership_tier", sa.String(length=50), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("credits_balance", sa.Numeric(10, 2), nullable=False),
        sa.Column("discount_percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("auto_renew", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_memberships_clinic_id", "memberships", ["clinic_id"], unique=False)
    op.create_index("ix_memberships_patient_id", "memberships", ["patient_id"], unique=False)
    op.create_index("ix_memberships_status", "memberships", ["status"], unique=False)

    op.create_table(
        "pos_transactions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("clinic_id", sa.String(length=36), nullable=False),
        sa.Column("patient_id", sa.String(length=36), nullable=True),
        sa.Column("receipt_number", sa.String(length=40), nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("allocations", sa.JSON(), nullable=False),
        sa.Column("payment_status", sa.String(length=20), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("processed_by", sa.String(length=36), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("receipt_number"),
    )
    op.create_index("ix_pos_transactions_clinic_id", "pos_transactions", ["clinic_id"], unique=False)
    op.create_index("ix_pos_transactions_patient_id", "pos_transactions", ["patient_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_pos_transactions_patient_id", table_name="pos_transactions")
    op.drop_index("ix_pos_transactions_clinic_id", table_name="pos_transactions")
    op.drop_table("pos_transactions")
    op.drop_index("ix_memberships_status", table_name="memberships")
    op.drop_index("ix_memberships_patient_id", table_name="memberships")
    op.drop_index("ix_memberships_clinic_id", table_name="memberships")
    op.drop_table("memberships")
    op.drop_index("ix_gift_cards_patient_id", table_name="gift_cards")
    op.drop_index("ix_gift_cards_clinic_id", table_name="gift_cards")
    op.drop_index("ix_gift_cards_card_code", table_name="gift_cards")
    op.drop_table("gift_cards")
    op.drop_index("ix_lab_trend_results_result_date", table_name="lab_trend_results")
    op.drop_index("ix_lab_trend_results_lab_marker", table_name="lab_trend_results")
    op.drop_index("ix_lab_trend_results_marker_id", table_name="lab_trend_results")
    op.drop_index("ix_lab_trend_results_patient_id", table_name="lab_trend_results")
    op.drop_index("ix_lab_trend_results_clinic_id", table_name="lab_trend_results")
    op.drop_table("lab_trend_results")
    op.drop_index("ix_lab_markers_marker_name", table_name="lab_markers")
    op.drop_index("ix_lab_markers_category", table_name="lab_markers")
    op.drop_table("lab_markers")
