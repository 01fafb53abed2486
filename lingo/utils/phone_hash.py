"""Phone number normalization and hashing for lookup keys."""

import hashlib
import re

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(phone: str) -> str:
    """
    Reduce a phone number to its digits.

    "+1 (555) 123-4567", "15551234567" and "+1-555-123-4567" all collapse
    to "15551234567".
    """
    return _NON_DIGITS.sub("", phone)


def hash_phone(phone: str) -> str:
    """
    Compute the lookup key for a phone number.

    Raw numbers are never stored; phone links and claims are keyed on this.

    Args:
        phone: Phone number in any formatting

    Returns:
        Full SHA-256 hex digest of the digits-only number
    """
    return hashlib.sha256(normalize_phone(phone).encode("utf-8")).hexdigest()


def mask_phone(phone: str | None) -> str:
    """Last four digits only, for logs."""
    digits = normalize_phone(phone or "")
    return f"***{digits[-4:]}" if digits else "***"
