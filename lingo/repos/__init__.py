"""
Lingo repository layer.

All SQL lives here. Each repo method opens its own connection via get_conn().
"""

from lingo.repos.claim_repo import ClaimRepo
from lingo.repos.phone_link_repo import PhoneLinkRepo
from lingo.repos.transaction_repo import TransactionRepo

__all__ = [
    "ClaimRepo",
    "PhoneLinkRepo",
    "TransactionRepo",
]
