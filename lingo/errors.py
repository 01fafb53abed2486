"""
Error taxonomy for the command pipeline.

Every error carries a human-readable message (shown to the user as-is) and a
short machine code. Routes map these to {"success": false, "error", "code"}.
"""

from __future__ import annotations


class LingoError(Exception):
    """Base class for expected, user-facing failures."""

    code = "error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ── planning ────────────────────────────────────────────────────────────────


class PlanError(LingoError):
    """A transaction could not be planned. Raised before any signing."""

    code = "plan_error"


class UnsupportedToken(PlanError):
    code = "unsupported_token"


class UnsupportedChain(PlanError):
    code = "unsupported_chain"


class InvalidAmount(PlanError):
    code = "invalid_amount"


class InvalidRecipient(PlanError):
    code = "invalid_recipient"


class QuoteUnavailable(PlanError):
    """The routing service returned an error or no transaction request."""

    code = "quote_unavailable"


# ── claims ──────────────────────────────────────────────────────────────────


class ClaimError(LingoError):
    code = "claim_error"


class ClaimNotFound(ClaimError):
    """Unknown, expired, or already claimed. Callers cannot tell which."""

    code = "claim_not_found"
    status_code = 404

    def __init__(self, message: str = "Claim not found or expired"):
        super().__init__(message)


class AlreadyClaimed(ClaimError):
    code = "already_claimed"
    status_code = 409

    def __init__(self, message: str = "This claim has already been redeemed"):
        super().__init__(message)


# ── history / plans ─────────────────────────────────────────────────────────


class InvalidStatusTransition(LingoError):
    """Only pending records may move, and only to confirmed or failed."""

    code = "invalid_status_transition"
    status_code = 409


class PlanNotFound(LingoError):
    code = "plan_not_found"
    status_code = 404

    def __init__(self, message: str = "No pending transaction to confirm. It may have been cancelled."):
        super().__init__(message)


class RecordNotFound(LingoError):
    code = "transaction_not_found"
    status_code = 404

    def __init__(self, message: str = "Transaction not found"):
        super().__init__(message)
