"""
Pydantic models for Lingo.

All data shapes defined here. No imports from db, repos, or routes.
"""

from lingo.models.balance import BalanceRequest
from lingo.models.claim import ClaimPublic, GetClaimRequest, PendingClaim, RedeemClaimRequest
from lingo.models.intent import Intent, IntentKind, ParseCommandRequest, ParseCommandResponse, TranslateRequest
from lingo.models.plan import (
    ApprovalRequirement,
    ConfirmOutcome,
    PendingTransactionPlan,
    PrepareOutcome,
    PreparePlanRequest,
    QuoteRequest,
    SwapQuote,
    TransactionPlan,
    TxRequest,
    TxResult,
)
from lingo.models.recipient import (
    LinkPhoneRequest,
    NeedsClaim,
    PhoneWalletLink,
    ResolvedRecipient,
    ResolveRecipientRequest,
    SendToPhoneRequest,
)
from lingo.models.transaction import (
    NewTransaction,
    RecordTransactionRequest,
    TransactionRecord,
    TransactionStats,
    TransactionStatus,
    TransactionType,
)

__all__ = [
    # Balance
    "BalanceRequest",
    # Intent models
    "Intent",
    "IntentKind",
    "ParseCommandRequest",
    "ParseCommandResponse",
    "TranslateRequest",
    # Recipient models
    "ResolvedRecipient",
    "NeedsClaim",
    "PhoneWalletLink",
    "LinkPhoneRequest",
    "ResolveRecipientRequest",
    "SendToPhoneRequest",
    # Claim models
    "PendingClaim",
    "ClaimPublic",
    "GetClaimRequest",
    "RedeemClaimRequest",
    # Plan models
    "TxRequest",
    "SwapQuote",
    "ApprovalRequirement",
    "TransactionPlan",
    "PendingTransactionPlan",
    "TxResult",
    "QuoteRequest",
    "PreparePlanRequest",
    "PrepareOutcome",
    "ConfirmOutcome",
    # Transaction history models
    "TransactionRecord",
    "NewTransaction",
    "RecordTransactionRequest",
    "TransactionStats",
    "TransactionStatus",
    "TransactionType",
]
