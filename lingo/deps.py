"""
FastAPI dependencies.

Everything here reads the collaborators the app built in its lifespan from
app.state. Tests swap them out with app.dependency_overrides.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from lingo.services.claim_manager import ClaimManager
from lingo.services.executor import StatusReconciler
from lingo.services.history import TransactionHistory
from lingo.services.pipeline import CommandPipeline
from lingo.services.planner import TransactionPlanner
from lingo.services.recipient_resolver import RecipientResolver
from lingo.services.translator import Translator
from lingo.services.wallet_session import ChainReader, WalletSession


def get_pipeline(request: Request) -> CommandPipeline:
    return request.app.state.pipeline


def get_resolver(request: Request) -> RecipientResolver:
    return request.app.state.resolver


def get_claims(request: Request) -> ClaimManager:
    return request.app.state.claims


def get_planner(request: Request) -> TransactionPlanner:
    return request.app.state.planner


def get_history(request: Request) -> TransactionHistory:
    return request.app.state.history


def get_reconciler(request: Request) -> StatusReconciler:
    return request.app.state.reconciler


def get_chain_reader(request: Request) -> ChainReader:
    return request.app.state.chain_reader


def get_translator(request: Request) -> Translator:
    return request.app.state.translator


def get_signer(request: Request) -> WalletSession:
    """
    The server-held signing session.

    User wallets sign in the browser; this session only exists when
    SIGNER_PRIVATE_KEY is configured.

    Raises:
        HTTPException 503: no signer configured
    """
    signer = getattr(request.app.state, "signer", None)
    if signer is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Server-side signing is not configured",
        )
    return signer


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"
