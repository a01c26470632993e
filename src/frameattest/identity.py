"""
frameattest.identity - Identity Resolver.

Looks a fid up in the Neynar index and picks the wallet an attestation is
issued to.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from frameattest.errors import ResolutionError

logger = logging.getLogger(__name__)

USER_PATH = "/v1/farcaster/user"


@dataclass(frozen=True)
class IdentityProfile:
    fid: int
    follower_count: int
    verified_addresses: tuple[str, ...]
    custody_address: str
    username: str = ""


def attest_wallet(profile: IdentityProfile) -> str:
    """Wallet that receives the attestation.

    The first verified address wins, the custody address is the fallback.
    ``profile`` must come from a successful ``IdentityResolver.resolve``.
    """
    if profile.verified_addresses:
        return profile.verified_addresses[0]
    return profile.custody_address


# --- Neynar response models ---

class _NeynarUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    fid: int
    username: str = ""
    custody_address: Optional[str] = Field(default=None, alias="custodyAddress")
    follower_count: int = Field(default=0, alias="followerCount")
    verifications: list[str] = []


class _NeynarResult(BaseModel):
    user: _NeynarUser


class _NeynarUserResponse(BaseModel):
    result: _NeynarResult


class IdentityResolver:
    """Resolve fids against the Neynar v1 user endpoint. No retries."""

    def __init__(self, api_key: str, http: httpx.AsyncClient,
                 base_url: str = "https://api.neynar.com"):
        self.api_key = api_key
        self.http = http
        self.base_url = base_url.rstrip("/")

    async def resolve(self, fid: int) -> IdentityProfile:
        try:
            resp = await self.http.get(
                self.base_url + USER_PATH,
                params={"fid": fid, "viewerFid": fid},
                headers={"api_key": self.api_key, "accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise ResolutionError(fid, e) from e

        if resp.status_code == 404:
            raise ResolutionError(fid, "user not found")
        if resp.status_code != 200:
            raise ResolutionError(fid, f"identity index returned HTTP {resp.status_code}")

        try:
            user = _NeynarUserResponse.model_validate(resp.json()).result.user
        except (ValueError, ValidationError) as e:
            raise ResolutionError(fid, f"malformed identity response: {e}") from e

        verified = tuple(a for a in user.verifications if a)
        if not verified and not user.custody_address:
            raise ResolutionError(fid, "no verified or custody address")

        profile = IdentityProfile(
            fid=user.fid,
            follower_count=user.follower_count,
            verified_addresses=verified,
            custody_address=user.custody_address or "",
            username=user.username,
        )
        logger.debug("Resolved fid %d (%s), %d followers",
                     fid, profile.username, profile.follower_count)
        return profile
