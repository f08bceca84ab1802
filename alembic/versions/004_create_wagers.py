"""004: create wagers table

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
        CREATE TABLE wagers (
            id                      BIGSERIAL       PRIMARY KEY,
            name                    VARCHAR(200)    NOT NULL,
            description             TEXT,
            category                VARCHAR(64)     NOT NULL,
            side1                   VARCHAR(100)    NOT NULL,
            side2                   VARCHAR(100)    NOT NULL,
            image_url               VARCHAR(500),
            is_public               BOOLEAN         NOT NULL DEFAULT TRUE,
            side1_amount            BIGINT          NOT NULL DEFAULT 0,
            side2_amount            BIGINT          NOT NULL DEFAULT 0,
            wager_status            VARCHAR(10)     NOT NULL DEFAULT 'active',
            winning_side            VARCHAR(10),
            wager_end_time          TIMESTAMPTZ     NOT NULL,
            created_by_id           VARCHAR(64)     NOT NULL,
            settled_at              TIMESTAMPTZ,
            payouts_completed_at    TIMESTAMPTZ,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_wagers_status     CHECK (wager_status IN ('active', 'ended')),
            CONSTRAINT ck_wagers_winning_side
                CHECK (winning_side IS NULL OR winning_side IN ('side1', 'side2')),
            CONSTRAINT ck_wagers_winner_iff_ended
                CHECK ((wager_status = 'active') = (winning_side IS NULL)),
            CONSTRAINT ck_wagers_side1_gte_0 CHECK (side1_amount >= 0),
            CONSTRAINT ck_wagers_side2_gte_0 CHECK (side2_amount >= 0)
        );
    """)
    op.execute("""
        CREATE INDEX idx_wagers_active_end_time ON wagers (wager_end_time)
            WHERE wager_status = 'active';
    """)
    op.execute("""
        CREATE INDEX idx_wagers_unpaid ON wagers (settled_at)
            WHERE wager_status = 'ended' AND payouts_completed_at IS NULL;
    """)
    op.execute("CREATE INDEX idx_wagers_category ON wagers (category, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_wagers_updated_at
            BEFORE UPDATE ON wagers
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE wagers IS 'Pari-mutuel wagers — side totals in micro VS';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS wagers CASCADE;")
