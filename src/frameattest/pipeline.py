"""
frameattest.pipeline - Interaction-to-attestation pipeline.

    validate (hub) -> resolve (Neynar) -> action (EAS attest | relay mint)

Stages run strictly in order; each needs the previous one's output.
A rejected message raises ``ValidationFailure``; every other failure
propagates as the stage's own error type. Nothing is retried.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from frameattest.attestation import AttestationSubmitter
from frameattest.hub import ActionMessage, MessageValidator
from frameattest.identity import IdentityProfile, IdentityResolver, attest_wallet
from frameattest.relay import SyndicateMinter


@dataclass(frozen=True)
class ActionOutcome:
    message: str
    reference: str


# ─── Strategies ────────────────────────────────────────────────────

class ActionStrategy(ABC):
    """What a validated click does. Exactly one strategy is active per process."""

    name: str = "unknown"

    @abstractmethod
    async def execute(self, message: ActionMessage, profile: IdentityProfile) -> ActionOutcome: ...


class AttestationStrategy(ActionStrategy):
    """Attest that the clicking user engaged with the cast (default)."""

    name = "attest"

    def __init__(self, submitter: AttestationSubmitter):
        self.submitter = submitter

    async def execute(self, message: ActionMessage, profile: IdentityProfile) -> ActionOutcome:
        receipt = await self.submitter.submit(attest_wallet(profile), message.cast_hash, message.fid)
        return ActionOutcome(message=f"New attestation UID: {receipt.uid}", reference=receipt.uid)


class MintStrategy(ActionStrategy):
    """Mint an NFT to the clicking user's wallet through the relay."""

    name = "mint"

    def __init__(self, minter: SyndicateMinter):
        self.minter = minter

    async def execute(self, message: ActionMessage, profile: IdentityProfile) -> ActionOutcome:
        transaction_id = await self.minter.mint(attest_wallet(profile))
        return ActionOutcome(
            message=f"Mint transaction submitted: {transaction_id}", reference=transaction_id,
        )


# ─── Pipeline ──────────────────────────────────────────────────────

class FramePipeline:

    def __init__(self, validator: MessageValidator, resolver: IdentityResolver,
                 action: ActionStrategy, logger: Optional[logging.Logger] = None):
        self.validator = validator
        self.resolver = resolver
        self.action = action
        self.logger = logger or logging.getLogger("frameattest.pipeline")

    async def run(self, raw_hex: Optional[str]) -> ActionOutcome:
        result = await self.validator.validate(raw_hex)
        if not result.valid:
            self.logger.info("Message rejected: %s", result.reason,
                             extra={"event": "message_rejected", "reason": result.reason})
        message = result.raise_for_invalid()
        self.logger.info("Message validated", extra={
            "event": "message_validated", "fid": message.fid,
            "cast_hash": "0x" + message.cast_hash.hex(),
        })

        profile = await self.resolver.resolve(message.fid)
        wallet = attest_wallet(profile)
        self.logger.info("Identity resolved", extra={
            "event": "identity_resolved", "fid": profile.fid, "wallet": wallet,
            "follower_count": profile.follower_count,
        })

        outcome = await self.action.execute(message, profile)
        self.logger.info(outcome.message, extra={
            "event": f"{self.action.name}_completed", "fid": message.fid,
            "reference": outcome.reference,
        })
        return outcome
