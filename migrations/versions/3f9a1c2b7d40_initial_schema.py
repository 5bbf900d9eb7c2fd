"""initial schema

Revision ID: 3f9a1c2b7d40
Revises:
Create Date: 2026-09-14 10:12:05.412871
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "3f9a1c2b7d40"
down_revision = None
branch_labels = None
depends_on = None


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _jsonb():
    # Portable: JSON on SQLite, JSONB on Postgres
    return sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade():
    # --- transactions ---
    op.create_table(
        "transactions",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("reference", sa.String(length=64), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("customer_name", sa.String(length=160), nullable=True),
        sa.Column("customer_email", sa.String(length=255), nullable=True),
        sa.Column("provider", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("verified_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("amount >= 0", name="ck_tx_amount_nonneg"),
    )
    with op.batch_alter_table("transactions") as batch_op:
        batch_op.create_index(batch_op.f("ix_transactions_reference"), ["reference"], unique=False)
        batch_op.create_index(batch_op.f("ix_transactions_customer_email"), ["customer_email"], unique=False)
        batch_op.create_index(batch_op.f("ix_transactions_created_at"), ["created_at"], unique=False)
        batch_op.create_index("ix_tx_status", ["status"], unique=False)

    # --- payments ---
    op.create_table(
        "payments",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("date", sa.String(length=40), nullable=True),
        sa.Column("donor_id", sa.String(length=255), nullable=False),
        sa.Column("donor_name", sa.String(length=160), nullable=True),
        sa.Column("orphanage_id", sa.String(length=64), nullable=True),
        sa.Column("child_id", sa.String(length=64), nullable=True),
        sa.Column("child_name", sa.String(length=160), nullable=True),
        sa.Column("purpose", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("transaction_id", sa.String(length=64), nullable=True),
        sa.Column("payment_url", sa.String(length=500), nullable=True),
        sa.Column("gateway_response", _jsonb(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("amount >= 0", name="ck_payments_amount_nonneg"),
    )
    with op.batch_alter_table("payments") as batch_op:
        batch_op.create_index(batch_op.f("ix_payments_donor_id"), ["donor_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_payments_orphanage_id"), ["orphanage_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_payments_child_id"), ["child_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_payments_status"), ["status"], unique=False)
        batch_op.create_index(batch_op.f("ix_payments_transaction_id"), ["transaction_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_payments_created_at"), ["created_at"], unique=False)
        batch_op.create_index("ix_payments_donor_status", ["donor_id", "status"], unique=False)

    # --- wishes ---
    op.create_table(
        "wishes",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("child_id", sa.String(length=64), nullable=False),
        sa.Column("child_name", sa.String(length=160), nullable=True),
        sa.Column("orphanage_id", sa.String(length=64), nullable=True),
        sa.Column("item", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("donor_id", sa.String(length=255), nullable=True),
        sa.Column("donor_name", sa.String(length=160), nullable=True),
        sa.Column("completion_date", sa.String(length=40), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("quantity >= 0", name="ck_wishes_quantity_nonneg"),
    )
    with op.batch_alter_table("wishes") as batch_op:
        batch_op.create_index(batch_op.f("ix_wishes_child_id"), ["child_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_wishes_orphanage_id"), ["orphanage_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_wishes_donor_id"), ["donor_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_wishes_created_at"), ["created_at"], unique=False)
        batch_op.create_index("ix_wishes_child_status", ["child_id", "status"], unique=False)

    # --- sponsorships ---
    op.create_table(
        "sponsorships",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("donor_id", sa.String(length=255), nullable=False),
        sa.Column("donor_name", sa.String(length=160), nullable=True),
        sa.Column("orphanage_id", sa.String(length=64), nullable=False),
        sa.Column("orphanage_name", sa.String(length=160), nullable=True),
        sa.Column("child_id", sa.String(length=64), nullable=True),
        sa.Column("child_name", sa.String(length=160), nullable=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("frequency", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("start_date", sa.String(length=40), nullable=True),
        sa.Column("transaction_id", sa.String(length=64), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("amount >= 0", name="ck_sponsorships_amount_nonneg"),
    )
    with op.batch_alter_table("sponsorships") as batch_op:
        batch_op.create_index(batch_op.f("ix_sponsorships_donor_id"), ["donor_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_sponsorships_orphanage_id"), ["orphanage_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_sponsorships_child_id"), ["child_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_sponsorships_created_at"), ["created_at"], unique=False)

    # --- email_logs ---
    op.create_table(
        "email_logs",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("to", sa.String(length=255), nullable=False),
        sa.Column("subject", sa.String(length=255), nullable=False),
        sa.Column("template", sa.String(length=60), nullable=False),
        sa.Column("data", _jsonb(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("error", sa.String(length=500), nullable=True),
        sa.Column("sent_at", sa.DateTime(), nullable=False),
    )
    with op.batch_alter_table("email_logs") as batch_op:
        batch_op.create_index(batch_op.f("ix_email_logs_to"), ["to"], unique=False)
        batch_op.create_index("ix_email_logs_status_sent", ["status", "sent_at"], unique=False)

    # --- stripe_events ---
    op.create_table(
        "stripe_events",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("event_id", sa.String(length=120), nullable=False),
        sa.Column("type", sa.String(length=120), nullable=False),
        sa.Column("livemode", sa.Boolean(), nullable=False),
        sa.Column("object_id", sa.String(length=120), nullable=True),
        *_timestamps(),
    )
    with op.batch_alter_table("stripe_events") as batch_op:
        batch_op.create_index(batch_op.f("ix_stripe_events_event_id"), ["event_id"], unique=True)
        batch_op.create_index(batch_op.f("ix_stripe_events_type"), ["type"], unique=False)
        batch_op.create_index(batch_op.f("ix_stripe_events_object_id"), ["object_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_stripe_events_created_at"), ["created_at"], unique=False)
        batch_op.create_index("ix_stripe_events_type_created", ["type", "created_at"], unique=False)


def downgrade():
    for table in ("stripe_events", "email_logs", "sponsorships", "wishes", "payments", "transactions"):
        op.drop_table(table)
