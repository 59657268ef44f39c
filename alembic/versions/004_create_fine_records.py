"""004: create fine_records table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE fine_records (
            id                  BIGSERIAL       PRIMARY KEY,
            tenant_id           VARCHAR(64)     NOT NULL
                                REFERENCES tenant_ledgers (tenant_id) ON DELETE CASCADE,
            date                TIMESTAMPTZ     NOT NULL,
            amount_deducted     NUMERIC         NOT NULL,
            days_late           INTEGER         NOT NULL,
            rent_month          VARCHAR(32)     NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_fine_amount_gt_0      CHECK (amount_deducted > 0),
            CONSTRAINT ck_fine_days_late_gte_1  CHECK (days_late >= 1)
        );
    """)
    op.execute("CREATE INDEX idx_fine_records_tenant ON fine_records (tenant_id, id);")
    op.execute("""
        CREATE TRIGGER trg_fine_records_append_only
            BEFORE UPDATE ON fine_records
            FOR EACH ROW EXECUTE FUNCTION fn_reject_history_update();
    """)
    op.execute("COMMENT ON TABLE fine_records IS 'Late fines deducted from deposits (append-only)';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS fine_records CASCADE;")
