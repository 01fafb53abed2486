"""Tests for recipient resolution and phone linking."""

from __future__ import annotations

import pytest
from conftest import LINKED_WALLET, RECIPIENT
from web3 import Web3

from lingo.errors import InvalidRecipient
from lingo.models.recipient import NeedsClaim, ResolvedRecipient
from lingo.utils.phone_hash import hash_phone

pytestmark = pytest.mark.asyncio(loop_scope="session")


async def test_address_passes_through(resolver, link_store):
    result = await resolver.resolve(RECIPIENT)
    assert result == ResolvedRecipient(address=RECIPIENT)
    assert link_store.links == {}


async def test_unlinked_phone_needs_claim(resolver):
    result = await resolver.resolve("+1 555 123 4567")
    assert isinstance(result, NeedsClaim)
    assert result.phone == "+15551234567"
    assert result.phone_hash == hash_phone("15551234567")


async def test_linked_phone_resolves_to_wallet(resolver):
    await resolver.link_phone("+15551234567", LINKED_WALLET)

    result = await resolver.resolve("+1 (555) 123-4567")
    assert isinstance(result, ResolvedRecipient)
    assert result.address == Web3.to_checksum_address(LINKED_WALLET)
    assert result.via_phone is True
    assert result.phone == "+15551234567"


async def test_relinking_replaces_wallet(resolver, link_store):
    await resolver.link_phone("+15551234567", LINKED_WALLET)
    await resolver.link_phone("15551234567", RECIPIENT)

    assert len(link_store.links) == 1
    result = await resolver.resolve("+15551234567")
    assert result.address == Web3.to_checksum_address(RECIPIENT)


@pytest.mark.parametrize("raw", ["", "bob", "0x1234", "5551234567", None])
async def test_invalid_recipient(resolver, raw):
    with pytest.raises(InvalidRecipient):
        await resolver.resolve(raw)


async def test_link_phone_validates(resolver):
    with pytest.raises(InvalidRecipient):
        await resolver.link_phone("+15551234567", "0xnope")
    with pytest.raises(InvalidRecipient):
        await resolver.link_phone("123", LINKED_WALLET)
