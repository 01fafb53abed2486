"""Recipient resolution: address literal, linked phone, or phone awaiting a claim."""

from __future__ import annotations

import logging
from typing import Protocol

from web3 import Web3

from lingo.errors import InvalidRecipient
from lingo.models.recipient import NeedsClaim, PhoneWalletLink, ResolvedRecipient
from lingo.services.command_parser import is_address, is_phone
from lingo.utils.phone_hash import hash_phone, mask_phone, normalize_phone

logger = logging.getLogger(__name__)


class PhoneLinkStore(Protocol):
    async def upsert_link(self, phone_hash: str, wallet_address: str) -> PhoneWalletLink: ...

    async def get_link(self, phone_hash: str) -> PhoneWalletLink | None: ...


class RecipientResolver:
    """
    Maps a recipient reference to a destination.

    Read-only against the phone-link store; every call re-reads it, nothing
    is cached between requests.
    """

    def __init__(self, links: PhoneLinkStore) -> None:
        self._links = links

    async def resolve(self, recipient_raw: str | None) -> ResolvedRecipient | NeedsClaim:
        """
        Resolve a recipient literal.

        Address literals come back verbatim. Phones are hashed and looked up:
        a linked phone resolves to its wallet, an unlinked phone returns
        NeedsClaim (a normal branch, not an error).

        Raises:
            InvalidRecipient: if the value is neither an address nor a phone
        """
        value = (recipient_raw or "").strip()
        if is_address(value):
            return ResolvedRecipient(address=value)

        if not is_phone(value):
            raise InvalidRecipient(
                "Recipient must be a wallet address (0x...) or a phone number starting with + (e.g. +15551234567)"
            )

        phone = f"+{normalize_phone(value)}"
        phone_hash = hash_phone(phone)
        link = await self._links.get_link(phone_hash)
        if link is None:
            logger.info("Phone %s has no linked wallet; claim required", mask_phone(phone))
            return NeedsClaim(phone=phone, phone_hash=phone_hash)

        return ResolvedRecipient(address=link.wallet_address, via_phone=True, phone=phone)

    async def link_phone(self, phone: str, wallet_address: str) -> PhoneWalletLink:
        """
        Link a phone number to a wallet, replacing any previous link.

        Raises:
            InvalidRecipient: if either value is malformed
        """
        if not is_address(wallet_address):
            raise InvalidRecipient("Invalid wallet address")
        digits = normalize_phone(phone)
        if not is_phone(f"+{digits}"):
            raise InvalidRecipient("Invalid phone number")

        link = await self._links.upsert_link(hash_phone(digits), Web3.to_checksum_address(wallet_address))
        logger.info("Linked phone %s to wallet %s", mask_phone(digits), link.wallet_address)
        return link
