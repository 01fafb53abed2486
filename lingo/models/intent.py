"""Intent model: the parsed meaning of one user command."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

IntentKind = Literal["send", "swap", "bridge", "balance", "buy", "chat", "unknown"]


class Intent(BaseModel):
    """
    Structured interpretation of a free-text command.

    Created fresh per message and never mutated. For kind="send",
    recipient_raw is either an address literal or a "+digits" phone literal,
    or None when the command still needs a recipient.
    """

    model_config = ConfigDict(frozen=True)

    kind: IntentKind
    amount: str | None = None
    token: str | None = None
    from_token: str | None = None
    to_token: str | None = None
    from_chain: str | None = None
    to_chain: str | None = None
    recipient_raw: str | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    response_text: str = ""
    language: str = "en"

    @property
    def is_complete(self) -> bool:
        """True when the intent carries everything needed to plan a transaction."""
        if self.kind == "send":
            return bool(self.amount and self.token and self.recipient_raw)
        if self.kind in ("swap", "bridge"):
            return bool(self.amount and self.from_token and self.to_token)
        return False


class ParseCommandRequest(BaseModel):
    """Request body for POST /api/parse-command."""

    model_config = {"extra": "forbid"}

    command: str = Field(default="", max_length=1000)
    language: str = "en"
    wallet_address: str | None = None


class ParseCommandResponse(BaseModel):
    """What the API returns after parsing a command."""

    success: bool = True
    intent: Intent
    response: str
    translated_command: str


class TranslateRequest(BaseModel):
    """Request body for POST /api/translate."""

    model_config = {"extra": "forbid"}

    text: str = Field(max_length=2000)
    target_language: str = Field(min_length=2, max_length=10)
