"""006: create prize_runs table

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE prize_runs (
            period_start    TIMESTAMPTZ     PRIMARY KEY,
            period_end      TIMESTAMPTZ     NOT NULL,
            pool            BIGINT          NOT NULL,
            total_points    BIGINT          NOT NULL,
            status          VARCHAR(20)     NOT NULL DEFAULT 'running',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            completed_at    TIMESTAMPTZ,
            CONSTRAINT ck_prize_runs_status CHECK (status IN ('running', 'completed')),
            CONSTRAINT ck_prize_runs_bounds CHECK (period_start < period_end),
            CONSTRAINT ck_prize_runs_pool_gte_0 CHECK (pool >= 0)
        );
    """)
    op.execute("COMMENT ON TABLE prize_runs IS 'One row per executed biweekly prize period';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS prize_runs CASCADE;")
