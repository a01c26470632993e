"""
frameattest.attestation - Attestation Submitter.

Issues an Ethereum Attestation Service (EAS) attestation on Base binding a
fid to a cast:

    schema  "bytes cast_hash, uint112 fid"
    uid     0x9008c7f6...b87c (registered on the Base EAS predeploy)

``submit`` signs and sends ``EAS.attest`` and waits, for at most
``confirmation_timeout`` seconds, for the receipt. The attestation UID is
read from the ``Attested`` event. Nothing here is idempotent: two calls
with the same cast produce two attestations.

Usage:
    w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
    submitter = AttestationSubmitter(w3, Account.from_key(private_key))
    receipt = await submitter.submit("0xAbc...", bytes.fromhex("deadbeef"), 123)
    print(receipt.uid)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import aiohttp
from eth_abi import encode as abi_encode
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception
from web3.logs import DISCARD

from frameattest.errors import (
    ConfirmationTimeoutError,
    ConfirmationUnknownError,
    InsufficientFundsError,
    ProviderError,
    SubmissionError,
    TransactionRevertedError,
)

logger = logging.getLogger(__name__)

# ─── Constants ─────────────────────────────────────────────────────

BASE_CHAIN_ID = 8453
EAS_CONTRACT_ADDRESS = "0x4200000000000000000000000000000000000021"
SCHEMA_UID = "0x9008c7f681e3035347c65d01a7bb3383a85e9d121f5a797e59077cfea964b87c"
SCHEMA = "bytes cast_hash, uint112 fid"
SCHEMA_TYPES = ["bytes", "uint112"]

NO_EXPIRATION = 0
ZERO_UID = b"\x00" * 32
UINT112_MAX = 2 ** 112 - 1

_ATTESTATION_REQUEST = {
    "name": "request",
    "type": "tuple",
    "internalType": "struct AttestationRequest",
    "components": [
        {"name": "schema", "type": "bytes32", "internalType": "bytes32"},
        {
            "name": "data",
            "type": "tuple",
            "internalType": "struct AttestationRequestData",
            "components": [
                {"name": "recipient", "type": "address", "internalType": "address"},
                {"name": "expirationTime", "type": "uint64", "internalType": "uint64"},
                {"name": "revocable", "type": "bool", "internalType": "bool"},
                {"name": "refUID", "type": "bytes32", "internalType": "bytes32"},
                {"name": "data", "type": "bytes", "internalType": "bytes"},
                {"name": "value", "type": "uint256", "internalType": "uint256"},
            ],
        },
    ],
}

EAS_ABI = [
    {
        "type": "function",
        "name": "attest",
        "stateMutability": "payable",
        "inputs": [_ATTESTATION_REQUEST],
        "outputs": [{"name": "", "type": "bytes32", "internalType": "bytes32"}],
    },
    {
        "type": "event",
        "name": "Attested",
        "anonymous": False,
        "inputs": [
            {"name": "recipient", "type": "address", "indexed": True, "internalType": "address"},
            {"name": "attester", "type": "address", "indexed": True, "internalType": "address"},
            {"name": "uid", "type": "bytes32", "indexed": False, "internalType": "bytes32"},
            {"name": "schemaUID", "type": "bytes32", "indexed": True, "internalType": "bytes32"},
        ],
    },
]

_NETWORK_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)


# ─── Payload ───────────────────────────────────────────────────────

def encode_attestation_data(content_hash: bytes, actor_id: int) -> bytes:
    """ABI-encode ``(bytes cast_hash, uint112 fid)``."""
    if not 0 <= actor_id <= UINT112_MAX:
        raise ValueError(f"actor id {actor_id} does not fit in uint112")
    return abi_encode(SCHEMA_TYPES, [bytes(content_hash), actor_id])


@dataclass(frozen=True)
class AttestationReceipt:
    uid: str
    tx_hash: str
    block_number: int = 0


# ─── Submitter ─────────────────────────────────────────────────────

class AttestationSubmitter:
    """Sign, send and confirm EAS attestations from one account."""

    def __init__(
        self,
        w3: AsyncWeb3,
        account: LocalAccount,
        *,
        contract_address: str = EAS_CONTRACT_ADDRESS,
        schema_uid: str = SCHEMA_UID,
        chain_id: int = BASE_CHAIN_ID,
        confirmation_timeout: float = 120.0,
        poll_latency: float = 1.0,
    ):
        self.w3 = w3
        self.account = account
        self.schema_uid = schema_uid
        self.chain_id = chain_id
        self.confirmation_timeout = confirmation_timeout
        self.poll_latency = poll_latency
        self.contract = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(contract_address), abi=EAS_ABI,
        )

    def build_request(self, recipient: str, content_hash: bytes, actor_id: int) -> tuple:
        data = encode_attestation_data(content_hash, actor_id)
        return (
            bytes.fromhex(self.schema_uid[2:]),
            (
                AsyncWeb3.to_checksum_address(recipient),
                NO_EXPIRATION,
                True,  # revocable
                ZERO_UID,
                data,
                0,
            ),
        )

    async def submit(self, recipient: str, content_hash: bytes, actor_id: int) -> AttestationReceipt:
        request = self.build_request(recipient, content_hash, actor_id)

        # 1. build + sign; nothing has left the process yet
        try:
            nonce = await self.w3.eth.get_transaction_count(self.account.address, "pending")
            tx = await self.contract.functions.attest(request).build_transaction({
                "from": self.account.address,
                "nonce": nonce,
                "chainId": self.chain_id,
                "value": 0,
            })
            signed = self.account.sign_transaction(tx)
        except ContractLogicError as e:
            raise TransactionRevertedError(f"attest reverted during estimation: {e}") from e
        except (Web3Exception, ValueError) as e:
            raise _rejected_error("prepare", e) from e
        except _NETWORK_ERRORS as e:
            raise ProviderError(f"RPC provider unreachable: {e}") from e

        local_hash = AsyncWeb3.to_hex(signed.hash)

        # 2. send
        try:
            sent = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except ContractLogicError as e:
            raise TransactionRevertedError(f"attest rejected by node: {e}") from e
        except (Web3Exception, ValueError) as e:
            raise _rejected_error("send", e) from e
        except _NETWORK_ERRORS as e:
            raise ConfirmationUnknownError(
                f"Lost connection while sending {local_hash}: {e}", tx_hash=local_hash,
            ) from e

        tx_hash = AsyncWeb3.to_hex(sent)
        logger.info("Attestation transaction sent", extra={
            "event": "attestation_sent", "tx_hash": tx_hash, "fid": actor_id,
        })

        # 3. wait for confirmation
        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(
                sent, timeout=self.confirmation_timeout, poll_latency=self.poll_latency,
            )
        except TimeExhausted as e:
            raise ConfirmationTimeoutError(tx_hash, self.confirmation_timeout) from e
        except (Web3Exception, *_NETWORK_ERRORS) as e:
            raise ConfirmationUnknownError(
                f"Could not confirm {tx_hash}: {e}", tx_hash=tx_hash,
            ) from e

        if receipt["status"] != 1:
            raise TransactionRevertedError(
                f"Transaction {tx_hash} reverted", submitted=True, tx_hash=tx_hash,
            )

        uid = self.extract_uid(receipt)
        if uid is None:
            raise SubmissionError(
                f"Transaction {tx_hash} emitted no Attested event",
                submitted=True, tx_hash=tx_hash,
            )
        return AttestationReceipt(
            uid=uid, tx_hash=tx_hash, block_number=int(receipt.get("blockNumber") or 0),
        )

    def extract_uid(self, receipt) -> str | None:
        for event in self.contract.events.Attested().process_receipt(receipt, errors=DISCARD):
            return AsyncWeb3.to_hex(event["args"]["uid"])
        return None


def _rejected_error(stage: str, exc: Exception) -> SubmissionError:
    if "insufficient funds" in str(exc).lower():
        return InsufficientFundsError(f"Attester account cannot pay for gas ({stage}): {exc}")
    return ProviderError(f"RPC provider rejected {stage}: {exc}")
