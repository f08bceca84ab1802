"""005: create transactions table (append-only ledger)

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
        CREATE TABLE transactions (
            id              BIGSERIAL       PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL,
            wallet_id       UUID            NOT NULL REFERENCES wallets (id),
            wager_id        BIGINT          REFERENCES wagers (id),
            type            VARCHAR(20)     NOT NULL,
            currency        VARCHAR(10)     NOT NULL,
            amount          BIGINT          NOT NULL,
            vs_amount       BIGINT          NOT NULL DEFAULT 0,
            balance_after   BIGINT          NOT NULL,
            side            VARCHAR(10),
            status          VARCHAR(20)     NOT NULL DEFAULT 'completed',
            reference_id    VARCHAR(128),
            description     TEXT,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_transactions_type
                CHECK (type IN ('prediction', 'payout', 'purchase', 'biweekly_prize')),
            CONSTRAINT ck_transactions_currency CHECK (currency IN ('VS', 'USDC', 'SOL')),
            CONSTRAINT ck_transactions_status
                CHECK (status IN ('pending', 'completed', 'failed')),
            CONSTRAINT ck_transactions_side
                CHECK (side IS NULL OR side IN ('side1', 'side2')),
            CONSTRAINT ck_transactions_prediction_has_side
                CHECK (type <> 'prediction' OR (side IS NOT NULL AND wager_id IS NOT NULL)),
            CONSTRAINT ck_transactions_credit_has_ref
                CHECK (type NOT IN ('payout', 'biweekly_prize') OR reference_id IS NOT NULL)
        );
    """)
    # One payout per (user, wager) and one prize per (user, period)
    op.execute("""
        CREATE UNIQUE INDEX uq_transactions_credit_once
            ON transactions (type, user_id, reference_id)
            WHERE type IN ('payout', 'biweekly_prize');
    """)
    op.execute("CREATE INDEX idx_transactions_user_id ON transactions (user_id, id DESC);")
    op.execute("""
        CREATE INDEX idx_transactions_wager_side ON transactions (wager_id, side)
            WHERE type = 'prediction';
    """)
    op.execute("""
        CREATE INDEX idx_transactions_prediction_time ON transactions (created_at)
            WHERE type = 'prediction';
    """)
    op.execute("COMMENT ON TABLE transactions IS 'Append-only ledger — never UPDATE or DELETE';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
