"""002: create properties table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

Owned by property management; the ledger only reads it.
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE properties (
            id                  VARCHAR(64)     PRIMARY KEY,
            owner_id            VARCHAR(64)     NOT NULL,
            name                VARCHAR(200)    NOT NULL,
            address             VARCHAR(500)    NOT NULL,
            rent_amount         BIGINT          NOT NULL,
            security_deposit    BIGINT          NOT NULL,
            due_date            DATE            NOT NULL,
            owner_payout_id     VARCHAR(128)    NOT NULL,
            property_code       VARCHAR(16)     NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_properties_code           UNIQUE (property_code),
            CONSTRAINT ck_properties_code_upper     CHECK (property_code = UPPER(property_code)),
            CONSTRAINT ck_properties_rent_gte_0     CHECK (rent_amount >= 0),
            CONSTRAINT ck_properties_deposit_gte_0  CHECK (security_deposit >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_properties_owner ON properties (owner_id);")
    op.execute("""
        CREATE TRIGGER trg_properties_updated_at
            BEFORE UPDATE ON properties
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS properties CASCADE;")
