"""
frameattest.hub - Message Validator.

Frame button clicks arrive as hex-encoded, Ed25519-signed Farcaster
messages. A hub is the trust anchor: it checks the signature, that the
signer key belongs to the claimed fid, and that the message is fresh.

Usage:
    async with httpx.AsyncClient() as http:
        validator = MessageValidator(HubClient("https://hub.example:2281", http))
        result = await validator.validate(body["trustedData"]["messageBytes"])
        if result.valid:
            print(result.message.fid, result.message.cast_hash.hex())
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, replace
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from frameattest.errors import TransportError, ValidationFailure

logger = logging.getLogger(__name__)

VALIDATE_PATH = "/v1/validateMessage"
EMPTY_MESSAGE_REASON = "missing trusted message bytes"
FRAME_ACTION_TYPE = "MESSAGE_TYPE_FRAME_ACTION"


class MalformedMessageError(ValueError):
    """Message bytes could not be decoded into an envelope."""


# ─── Envelope ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class ActionMessage:
    """A frame action envelope.

    Holds only ``raw`` until the hub has validated it; the decoded fields
    are filled from the hub's answer by ``with_data``.
    """
    raw: bytes = b""
    fid: int = 0
    cast_fid: int = 0
    cast_hash: bytes = b""
    button_index: int = 0
    url: str = ""
    timestamp: int = 0
    hash: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.raw

    @classmethod
    def from_hex(cls, raw_hex: Optional[str]) -> "ActionMessage":
        """Decode hex message bytes. Empty or missing input is the empty envelope."""
        if not raw_hex:
            return cls()
        text = raw_hex.strip()
        if text[:2].lower() == "0x":
            text = text[2:]
        try:
            return cls(raw=bytes.fromhex(text))
        except ValueError as e:
            raise MalformedMessageError(f"message bytes are not valid hex: {e}") from e

    def with_data(self, message: Any) -> "ActionMessage":
        """Return a copy carrying the fields of a hub-decoded frame action.

        Anything other than a frame action with a cast hash is refused, so a
        validly signed cast or reaction can never reach the attestation step.
        """
        try:
            decoded = _HubMessage.model_validate(message)
        except ValidationError as e:
            raise MalformedMessageError(f"unexpected hub message ({_describe(e)})") from e

        data = decoded.data
        if data.type != FRAME_ACTION_TYPE:
            raise MalformedMessageError(f"not a frame action: {data.type}")
        if data.frame_action_body is None:
            raise MalformedMessageError("frame action has no body")

        body = data.frame_action_body
        cast_hash = _decode_hash(body.cast_id.hash)
        if not cast_hash:
            raise MalformedMessageError("frame action has no cast hash")
        return replace(
            self,
            fid=data.fid,
            cast_fid=body.cast_id.fid,
            cast_hash=cast_hash,
            button_index=body.button_index,
            url=body.url,
            timestamp=data.timestamp,
            hash=decoded.hash,
        )


# --- Hub response models ---

class _CastId(BaseModel):
    fid: int = 0
    hash: str = ""


class _FrameActionBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: str = ""
    button_index: int = Field(default=0, alias="buttonIndex")
    cast_id: _CastId = Field(alias="castId")


class _MessageData(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str = ""
    fid: int
    timestamp: int = 0
    frame_action_body: Optional[_FrameActionBody] = Field(default=None, alias="frameActionBody")


class _HubMessage(BaseModel):
    data: _MessageData
    hash: str = ""


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    where = ".".join(str(part) for part in first["loc"]) or "message"
    return f"{where}: {first['msg']}"


def _decode_hash(value: str) -> bytes:
    """Hub JSON renders byte fields as 0x-hex; older hubs used base64."""
    if not value:
        return b""
    if value.startswith("0x"):
        try:
            return bytes.fromhex(value[2:])
        except ValueError as e:
            raise MalformedMessageError(f"bad cast hash {value!r}") from e
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as e:
        raise MalformedMessageError(f"bad cast hash {value!r}") from e


# ─── Result ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one message. Build with ``ok`` or ``rejected``."""
    valid: bool
    message: Optional[ActionMessage] = None
    reason: str = ""

    @classmethod
    def ok(cls, message: ActionMessage) -> "ValidationResult":
        return cls(valid=True, message=message)

    @classmethod
    def rejected(cls, reason: str) -> "ValidationResult":
        return cls(valid=False, reason=reason or "invalid message")

    def raise_for_invalid(self) -> ActionMessage:
        if not self.valid:
            raise ValidationFailure(self.reason)
        return self.message


# ─── Hub client ────────────────────────────────────────────────────

class HubClient:
    """Minimal client for the hub HTTP API."""

    def __init__(self, base_url: str, http: httpx.AsyncClient):
        self.base_url = base_url.rstrip("/")
        self.http = http

    async def validate_message(self, raw: bytes) -> httpx.Response:
        try:
            return await self.http.post(
                self.base_url + VALIDATE_PATH,
                content=raw,
                headers={"Content-Type": "application/octet-stream"},
            )
        except httpx.TransportError as e:
            raise TransportError("hub.validate_message", e) from e


class MessageValidator:
    """Decode a frame action and have the hub vouch for it."""

    def __init__(self, hub: HubClient):
        self.hub = hub

    async def validate(self, raw_hex: Optional[str]) -> ValidationResult:
        try:
            envelope = ActionMessage.from_hex(raw_hex)
        except MalformedMessageError as e:
            return ValidationResult.rejected(f"malformed envelope: {e}")

        if envelope.is_empty:
            return ValidationResult.rejected(EMPTY_MESSAGE_REASON)

        response = await self.hub.validate_message(envelope.raw)

        if response.status_code >= 500:
            return ValidationResult.rejected(
                f"trust anchor unavailable (HTTP {response.status_code})"
            )

        try:
            payload = response.json()
        except ValueError:
            return ValidationResult.rejected(
                f"malformed envelope: hub returned non-JSON (HTTP {response.status_code})"
            )

        if response.status_code != 200:
            return ValidationResult.rejected(_hub_error_reason(payload, response.status_code))

        if not isinstance(payload, dict) or not payload.get("valid"):
            return ValidationResult.rejected("invalid message")

        try:
            message = envelope.with_data(payload.get("message") or {})
        except MalformedMessageError as e:
            return ValidationResult.rejected(f"malformed envelope: {e}")

        logger.debug("Hub validated message %s from fid %d", message.hash, message.fid)
        return ValidationResult.ok(message)


def _hub_error_reason(payload: Any, status: int) -> str:
    if isinstance(payload, dict):
        reason = payload.get("details") or payload.get("errCode") or payload.get("message")
        if reason:
            return str(reason)
    return f"hub rejected message (HTTP {status})"
