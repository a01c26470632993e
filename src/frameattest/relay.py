"""
frameattest.relay - Mint through the Syndicate transaction relay.

The alternate frame action: instead of an attestation, queue an NFT mint
to the user's resolved wallet. Syndicate signs and broadcasts from its own
managed wallets, so this only returns a relay transaction id; there is no
confirmation wait.
"""

from __future__ import annotations

import logging

import httpx

from frameattest.errors import RelayError

logger = logging.getLogger(__name__)

SEND_TRANSACTION_PATH = "/transact/sendTransaction"
MINT_SIGNATURE = "mint(address to)"


class SyndicateMinter:

    def __init__(self, api_key: str, project_id: str, contract_address: str,
                 http: httpx.AsyncClient, *, chain_id: int = 8453,
                 base_url: str = "https://api.syndicate.io"):
        self.api_key = api_key
        self.project_id = project_id
        self.contract_address = contract_address
        self.chain_id = chain_id
        self.http = http
        self.base_url = base_url.rstrip("/")

    async def mint(self, recipient: str) -> str:
        """Queue ``mint(recipient)`` and return the relay transaction id."""
        if not recipient:
            raise RelayError("mint requires a resolved recipient wallet")
        try:
            resp = await self.http.post(
                self.base_url + SEND_TRANSACTION_PATH,
                json={
                    "projectId": self.project_id,
                    "contractAddress": self.contract_address,
                    "chainId": self.chain_id,
                    "functionSignature": MINT_SIGNATURE,
                    "args": {"to": recipient},
                },
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.HTTPError as e:
            # Unknown whether the relay queued it.
            raise RelayError(f"Syndicate unreachable: {e}", submitted=True) from e

        if resp.status_code >= 300:
            raise RelayError(f"Syndicate returned HTTP {resp.status_code}: {resp.text[:200]}")
        try:
            transaction_id = resp.json()["transactionId"]
        except (ValueError, KeyError, TypeError) as e:
            raise RelayError("Syndicate response has no transactionId", submitted=True) from e

        logger.info("Mint queued", extra={
            "event": "mint_queued", "transaction_id": transaction_id, "recipient": recipient,
        })
        return transaction_id
