"""003: create tenant_ledgers table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # current_deposit has no >= 0 check: fines may drive a deposit negative
    # Deposits are NUMERIC: uncapped fines leave the BIGINT range after 57 days late
    op.execute("""
        CREATE TABLE tenant_ledgers (
            tenant_id           VARCHAR(64)     PRIMARY KEY,
            property_id         VARCHAR(64)     NOT NULL REFERENCES properties (id),
            initial_deposit     NUMERIC         NOT NULL,
            current_deposit     NUMERIC         NOT NULL,
            last_payment_date   TIMESTAMPTZ     NOT NULL,
            move_in_date        TIMESTAMPTZ     NOT NULL,
            version             BIGINT          NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_tenant_ledgers_property ON tenant_ledgers (property_id);")
    op.execute("""
        CREATE TRIGGER trg_tenant_ledgers_updated_at
            BEFORE UPDATE ON tenant_ledgers
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS tenant_ledgers CASCADE;")
