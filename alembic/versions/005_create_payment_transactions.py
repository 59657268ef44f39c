"""005: create payment_transactions table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE payment_transactions (
            id                  BIGSERIAL       PRIMARY KEY,
            tenant_id           VARCHAR(64)     NOT NULL
                                REFERENCES tenant_ledgers (tenant_id) ON DELETE CASCADE,
            date                TIMESTAMPTZ     NOT NULL,
            amount_paid         NUMERIC         NOT NULL,
            fine_deducted       NUMERIC         NOT NULL,
            rent_month          VARCHAR(32)     NOT NULL,
            transaction_id      VARCHAR(64)     NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_payment_transaction_id    UNIQUE (transaction_id),
            CONSTRAINT ck_payment_fine_gte_0        CHECK (fine_deducted >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_payment_tx_tenant ON payment_transactions (tenant_id, id DESC);")
    op.execute("""
        CREATE TRIGGER trg_payment_transactions_append_only
            BEFORE UPDATE ON payment_transactions
            FOR EACH ROW EXECUTE FUNCTION fn_reject_history_update();
    """)
    op.execute(
        "COMMENT ON TABLE payment_transactions IS 'Rent payments, newest first by id (append-only)';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payment_transactions CASCADE;")
