"""Tests for phone normalization and hashing."""

import hashlib

from lingo.utils.phone_hash import hash_phone, mask_phone, normalize_phone


def test_normalize_strips_formatting():
    assert normalize_phone("+1 (555) 123-4567") == "15551234567"


def test_formatting_variants_hash_the_same():
    variants = ["+1 (555) 123-4567", "15551234567", "+1-555-123-4567", "+1.555.123.4567"]
    assert len({hash_phone(v) for v in variants}) == 1


def test_hash_is_sha256_of_digits():
    assert hash_phone("+15551234567") == hashlib.sha256(b"15551234567").hexdigest()


def test_different_numbers_hash_differently():
    assert hash_phone("+15551234567") != hash_phone("+15551234568")


def test_mask_keeps_last_four():
    assert mask_phone("+1 555 123 4567") == "***4567"
    assert mask_phone(None) == "***"
