"""
Deterministic command parser.

Turns one free-text message (already translated to English where possible)
into an Intent. Rules are tried in order and the first one that returns an
Intent wins, so the order of RULES matters:

    greeting → swap → bridge → send → bare address → keywords → fallback

parse() never raises. Ambiguous or unmatched input becomes a chat intent with
a help reply.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from lingo.models.intent import Intent
from lingo.services import keywords
from lingo.services.chain_registry import CHAINS, SUPPORTED_TOKENS, get_chain, normalize_chain_name

logger = logging.getLogger(__name__)

Rule = Callable[[str, str], "Intent | None"]

_TOKEN_LIST = ", ".join(["ETH", "USDC", "USDT", "DAI", "WETH"])

_AMOUNT = r"(\d+(?:\.\d+)?|\.\d+)(?!\d|[,.]\d)"
_WORD = r"([a-z]+)"

ADDRESS_RE = re.compile(r"0x[a-fA-F0-9]{40}(?![a-fA-F0-9])")
_ADDRESS_ONLY_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_PHONE_RE = re.compile(r"\+\d[\d\s\-().]*\d")
_MIN_PHONE_DIGITS = 7

_SWAP_VERB_RE = re.compile(r"\b(?:swap|exchange|convert|trade)\b", re.IGNORECASE)
_SWAP_FULL_RE = re.compile(
    rf"\b(?:swap|exchange|convert|trade)\s+{_AMOUNT}\s*{_WORD}\s+(?:to|for|into)\s+{_WORD}\b",
    re.IGNORECASE,
)
_SWAP_TARGET_ONLY_RE = re.compile(
    rf"\b(?:swap|exchange|convert|trade)(?:\s+{_AMOUNT})?\s+(?:to|for|into)\s+{_WORD}\b",
    re.IGNORECASE,
)
_PAIR_RE = re.compile(rf"\b{_WORD}\s+(?:to|for|into)\s+{_WORD}\b", re.IGNORECASE)

_BRIDGE_VERB_RE = re.compile(r"\bbridge\b", re.IGNORECASE)
_BRIDGE_FULL_RE = re.compile(
    rf"\bbridge\s+{_AMOUNT}\s*{_WORD}(?:\s+from\s+{_WORD})?\s+to\s+{_WORD}\b",
    re.IGNORECASE,
)
_BRIDGE_NO_AMOUNT_RE = re.compile(
    rf"\bbridge\s+(?:my\s+)?{_WORD}(?:\s+from\s+{_WORD})?\s+to\s+{_WORD}\b",
    re.IGNORECASE,
)

_SEND_VERB_RE = re.compile(r"\b(?:send|transfer|pay)\b", re.IGNORECASE)
_AMOUNT_SYMBOL_RE = re.compile(rf"(?<![\w.,]){_AMOUNT}(?:\s*{_WORD}\b)?", re.IGNORECASE)
_BUY_RE = re.compile(rf"\bbuy\s+{_AMOUNT}?\s*{_WORD}?", re.IGNORECASE)
_SYMBOL_RE = re.compile(r"\b(" + "|".join(sorted(SUPPORTED_TOKENS)) + r")\b", re.IGNORECASE)
# "1,000" or "12,500.5". Amounts with any other grouping match no amount pattern.
_GROUPED_AMOUNT_RE = re.compile(r"(?<![\w.,])\d{1,3}(?:,\d{3})+(?:\.\d+)?(?!\d|[,.]\d)")

# Words that can follow an amount without naming a token
_NOT_A_SYMBOL = frozenset({"to", "for", "into", "from", "via", "on", "of", "worth"})


def _short(address: str) -> str:
    return f"{address[:6]}...{address[-4:]}"


def find_address(text: str) -> str | None:
    match = ADDRESS_RE.search(text)
    return match.group(0) if match else None


def find_phone(text: str) -> str | None:
    """First phone literal with enough digits, reported as '+' and digits only."""
    for match in _PHONE_RE.finditer(text):
        digits = re.sub(r"\D", "", match.group(0))
        if len(digits) >= _MIN_PHONE_DIGITS:
            return f"+{digits}"
    return None


def find_recipient(text: str) -> str | None:
    """Address wins over phone wherever each appears."""
    return find_address(text) or find_phone(text)


def is_address(value: str | None) -> bool:
    return bool(value) and _ADDRESS_ONLY_RE.match(value) is not None


def is_phone(value: str | None) -> bool:
    if not value or not value.startswith("+"):
        return False
    match = _PHONE_RE.fullmatch(value)
    return match is not None and len(re.sub(r"\D", "", value)) >= _MIN_PHONE_DIGITS


def _strip_recipients(text: str) -> str:
    return _PHONE_RE.sub(" ", ADDRESS_RE.sub(" ", text))


# ── rules ───────────────────────────────────────────────────────────────────


def _greeting_rule(text: str, language: str) -> Intent | None:
    if not any(keywords.starts_with_phrase(text, g) for g in keywords.all_greetings()):
        return None
    reply, lang = keywords.response("greeting", language)
    return Intent(kind="chat", confidence=0.9, response_text=reply, language=lang)


def _swap_rule(text: str, language: str) -> Intent | None:
    if not _SWAP_VERB_RE.search(text):
        return None

    full = _SWAP_FULL_RE.search(text)
    if full:
        amount, from_token, to_token = full.group(1), full.group(2).upper(), full.group(3).upper()
        if from_token in SUPPORTED_TOKENS and to_token in SUPPORTED_TOKENS:
            if from_token == to_token:
                return _chat(f"You already hold {from_token}. Pick two different tokens to swap.", 0.6)
            return Intent(
                kind="swap",
                amount=amount,
                token=from_token,
                from_token=from_token,
                to_token=to_token,
                confidence=0.95,
                response_text=f"Preparing to swap {amount} {from_token} to {to_token}...",
            )
        return _chat(_unsupported_pair_text(from_token, to_token), 0.6)

    pair = _PAIR_RE.search(text)
    if pair:
        from_token, to_token = pair.group(1).upper(), pair.group(2).upper()
        if from_token in SUPPORTED_TOKENS and to_token in SUPPORTED_TOKENS and from_token != to_token:
            return Intent(
                kind="swap",
                token=from_token,
                from_token=from_token,
                to_token=to_token,
                confidence=0.7,
                response_text=f"How much {from_token} would you like to swap to {to_token}?",
            )

    target = _SWAP_TARGET_ONLY_RE.search(text)
    if target and target.group(2).upper() in SUPPORTED_TOKENS:
        to_token = target.group(2).upper()
        from_token = "USDC" if to_token != "USDC" else "ETH"
        amount = target.group(1)
        return Intent(
            kind="swap",
            amount=amount,
            token=from_token,
            from_token=from_token,
            to_token=to_token,
            confidence=0.6,
            response_text=(
                f"Preparing to swap {amount} {from_token} to {to_token}..."
                if amount
                else f"How much {from_token} would you like to swap to {to_token}?"
            ),
        )

    return _chat(
        '🔄 To swap tokens, try:\n\n• "Swap 0.01 ETH to USDC"\n• "Exchange 100 USDC for ETH"\n\n'
        f"Supported tokens: {_TOKEN_LIST}",
        0.5,
    )


def _bridge_rule(text: str, language: str) -> Intent | None:
    if not _BRIDGE_VERB_RE.search(text):
        return None

    full = _BRIDGE_FULL_RE.search(text)
    amount: str | None = None
    if full:
        amount, symbol, from_raw, to_raw = full.group(1), full.group(2), full.group(3), full.group(4)
    else:
        partial = _BRIDGE_NO_AMOUNT_RE.search(text)
        if not partial:
            return _chat(_bridge_help(), 0.5)
        symbol, from_raw, to_raw = partial.group(1), partial.group(2), partial.group(3)

    symbol = symbol.upper()
    if symbol not in SUPPORTED_TOKENS:
        return _chat(f"I can't bridge {symbol}. Supported tokens: {_TOKEN_LIST}", 0.6)

    from_chain = normalize_chain_name(from_raw) if from_raw else None
    to_chain = normalize_chain_name(to_raw)
    if to_chain is None or (from_raw and from_chain is None):
        unknown = to_raw if to_chain is None else from_raw
        return _chat(f"I don't know the chain '{unknown}'. Supported chains: {', '.join(CHAINS)}", 0.6)
    if from_chain == to_chain:
        return _chat(f"Your {symbol} is already on {get_chain(to_chain).display_name}.", 0.6)

    destination = get_chain(to_chain).display_name
    return Intent(
        kind="bridge",
        amount=amount,
        token=symbol,
        from_token=symbol,
        to_token=symbol,
        from_chain=from_chain,
        to_chain=to_chain,
        confidence=0.9 if amount else 0.7,
        response_text=(
            f"Preparing to bridge {amount} {symbol} to {destination}..."
            if amount
            else f"How much {symbol} would you like to bridge to {destination}?"
        ),
    )


def _send_rule(text: str, language: str) -> Intent | None:
    if not _SEND_VERB_RE.search(text):
        return None

    recipient = find_recipient(text)
    amount: str | None = None
    symbol: str | None = None
    match = _AMOUNT_SYMBOL_RE.search(_strip_recipients(text))
    if match:
        amount = match.group(1)
        word = (match.group(2) or "").lower()
        if word and word not in _NOT_A_SYMBOL:
            symbol = word.upper()
    if symbol is None:
        bare = _SYMBOL_RE.search(_strip_recipients(text))
        symbol = bare.group(1).upper() if bare else None

    if symbol is not None and symbol not in SUPPORTED_TOKENS:
        return Intent(
            kind="send",
            amount=amount,
            recipient_raw=recipient,
            confidence=0.4,
            response_text=f"I can't send {symbol}. Supported tokens: {_TOKEN_LIST}",
        )

    token = symbol or "ETH"
    if recipient is None:
        return Intent(
            kind="send",
            amount=amount,
            token=token,
            confidence=0.5,
            response_text=(
                "📤 To send crypto, include a wallet address (0x...) or phone number (+1...).\n\n"
                'Example: "Send 10 USDC to +1234567890"'
            ),
        )

    if amount is None:
        return Intent(
            kind="send",
            token=token,
            recipient_raw=recipient,
            confidence=0.6,
            response_text=f"How much {token} would you like to send?",
        )

    return Intent(
        kind="send",
        amount=amount,
        token=token,
        recipient_raw=recipient,
        confidence=0.95,
        response_text=f"Preparing to send {amount} {token}...",
    )


def _address_echo_rule(text: str, language: str) -> Intent | None:
    candidate = text.strip()
    if not _ADDRESS_ONLY_RE.match(candidate):
        return None
    return Intent(
        kind="send",
        token="ETH",
        recipient_raw=candidate,
        confidence=0.6,
        response_text=f"Got it. How much ETH would you like to send to {_short(candidate)}?",
    )


def _keyword_rule(text: str, language: str) -> Intent | None:
    consulted = keywords.languages_to_consult(language)

    def hit(intent: keywords.KeywordIntent) -> bool:
        return any(keywords.contains_phrase(text, kw) for kw in keywords.keywords_for(intent, consulted))

    if hit("buy"):
        amount = None
        token = "ETH"
        match = _BUY_RE.search(text)
        if match:
            amount = match.group(1)
            if match.group(2) and match.group(2).upper() in SUPPORTED_TOKENS:
                token = match.group(2).upper()
        reply, lang = keywords.response("buy", language, token=token)
        return Intent(kind="buy", amount=amount, token=token, confidence=0.8, response_text=reply, language=lang)

    if hit("balance"):
        reply, lang = keywords.response("balance", language)
        return Intent(kind="balance", confidence=0.85, response_text=reply, language=lang)

    if hit("help"):
        reply, lang = keywords.response("help", language, tokens=_TOKEN_LIST)
        return Intent(kind="chat", confidence=0.8, response_text=reply, language=lang)

    if hit("thanks"):
        reply, lang = keywords.response("thanks", language)
        return Intent(kind="chat", confidence=0.7, response_text=reply, language=lang)

    return None


RULES: tuple[Rule, ...] = (
    _greeting_rule,
    _swap_rule,
    _bridge_rule,
    _send_rule,
    _address_echo_rule,
    _keyword_rule,
)


def _chat(text: str, confidence: float) -> Intent:
    return Intent(kind="chat", confidence=confidence, response_text=text)


def _unsupported_pair_text(from_token: str, to_token: str) -> str:
    bad = [t for t in (from_token, to_token) if t not in SUPPORTED_TOKENS]
    return f"I can't swap {' or '.join(bad)}. Supported tokens: {_TOKEN_LIST}"


def _bridge_help() -> str:
    return (
        '🌉 To move tokens between chains, try:\n\n• "Bridge 10 USDC to arbitrum"\n'
        f'• "Bridge 0.01 ETH from base to optimism"\n\nSupported chains: {", ".join(CHAINS)}'
    )


def parse(text: str, language_hint: str | None = None) -> Intent:
    """
    Parse one message into an Intent.

    Args:
        text: The user's message, ideally already in English
        language_hint: Display language; widens keyword matching and picks
            the language of canned replies

    Returns:
        Intent. Never raises.
    """
    language = keywords.normalize_language(language_hint)
    stripped = (text or "").strip()
    if not stripped:
        return Intent(kind="chat", confidence=0.0, response_text="Please type a command or question!")
    stripped = _GROUPED_AMOUNT_RE.sub(lambda m: m.group(0).replace(",", ""), stripped)

    try:
        for rule in RULES:
            intent = rule(stripped, language)
            if intent is not None:
                return intent
    except Exception:
        logger.exception("Command parser rule failed")
        return Intent(
            kind="chat",
            confidence=0.0,
            response_text="Sorry, I had trouble understanding that. Please try again!",
        )

    reply, lang = keywords.response("fallback", language)
    return Intent(kind="chat", confidence=0.3, response_text=reply, language=lang)
