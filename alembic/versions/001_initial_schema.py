"""Initial schema: phone links, pending claims, transaction history.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from alembic import op


# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Phone → wallet links, keyed by SHA-256 of the digits-only number
    op.execute("""
        CREATE TABLE phone_wallets (
            phone_hash TEXT PRIMARY KEY,
            wallet_address TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)

    op.execute("""
        CREATE TABLE pending_claims (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            phone_hash TEXT NOT NULL,
            amount TEXT NOT NULL,
            token TEXT NOT NULL,
            sender_address TEXT NOT NULL,
            claim_token TEXT UNIQUE NOT NULL,
            expires_at TIMESTAMPTZ NOT NULL,
            claimed BOOLEAN NOT NULL DEFAULT false,
            claimed_by TEXT,
            claimed_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)

    op.execute("CREATE INDEX idx_pending_claims_phone_hash ON pending_claims(phone_hash);")

    op.execute("""
        CREATE TABLE transaction_history (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            wallet_address TEXT NOT NULL,
            type TEXT NOT NULL CHECK (type IN ('send', 'receive', 'swap', 'bridge', 'claim')),
            status TEXT NOT NULL DEFAULT 'pending' CHECK (status IN ('pending', 'confirmed', 'failed')),
            tx_hash TEXT,
            token_in TEXT,
            token_out TEXT,
            amount_in TEXT,
            amount_out TEXT,
            counterparty_address TEXT,
            counterparty_phone TEXT,
            chain TEXT NOT NULL DEFAULT 'base',
            description TEXT,
            language TEXT NOT NULL DEFAULT 'en',
            original_command TEXT,
            error_message TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            confirmed_at TIMESTAMPTZ
        );
    """)

    op.execute(
        "CREATE INDEX idx_transaction_history_wallet ON transaction_history(wallet_address, created_at DESC);"
    )
    op.execute("CREATE INDEX idx_transaction_history_tx_hash ON transaction_history(tx_hash);")


def downgrade():
    op.execute("DROP TABLE IF EXISTS transaction_history;")
    op.execute("DROP TABLE IF EXISTS pending_claims;")
    op.execute("DROP TABLE IF EXISTS phone_wallets;")
