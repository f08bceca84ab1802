"""007: create prize_run_items table

Revision ID: 007
Revises: 006
Create Date: 2026-10-20
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Written once with the run row; a resumed run pays exactly these amounts
    op.execute("""
        CREATE TABLE prize_run_items (
            period_start    TIMESTAMPTZ     NOT NULL REFERENCES prize_runs (period_start),
            user_id         VARCHAR(64)     NOT NULL,
            amount          BIGINT          NOT NULL,
            PRIMARY KEY (period_start, user_id),
            CONSTRAINT ck_prize_run_items_amount_gt_0 CHECK (amount > 0)
        );
    """)
    op.execute("COMMENT ON TABLE prize_run_items IS 'Per-user prize amounts frozen at claim time';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS prize_run_items CASCADE;")
