"""frameattest: Farcaster frame that turns cast engagement into EAS attestations."""

__version__ = "0.1.0"

from frameattest.errors import (
    FrameError, ConfigurationError, ValidationFailure, ResolutionError,
    TransportError, SubmissionError, ProviderError, InsufficientFundsError,
    TransactionRevertedError, ConfirmationUnknownError, ConfirmationTimeoutError,
    RelayError,
)
from frameattest.config import Settings
from frameattest.hub import ActionMessage, ValidationResult, HubClient, MessageValidator
from frameattest.identity import IdentityProfile, IdentityResolver, attest_wallet
from frameattest.attestation import (
    AttestationReceipt, AttestationSubmitter, encode_attestation_data,
    SCHEMA, SCHEMA_UID, EAS_CONTRACT_ADDRESS, BASE_CHAIN_ID,
)
from frameattest.relay import SyndicateMinter
from frameattest.counter import (
    CounterStore, MemoryCounterStore, PostgresCounterStore, VisitCounter,
)
from frameattest.pipeline import (
    ActionOutcome, ActionStrategy, AttestationStrategy, MintStrategy, FramePipeline,
)

__all__ = [
    "__version__",
    "FrameError",
    "ConfigurationError",
    "ValidationFailure",
    "ResolutionError",
    "TransportError",
    "SubmissionError",
    "ProviderError",
    "InsufficientFundsError",
    "TransactionRevertedError",
    "ConfirmationUnknownError",
    "ConfirmationTimeoutError",
    "RelayError",
    "Settings",
    "ActionMessage",
    "ValidationResult",
    "HubClient",
    "MessageValidator",
    "IdentityProfile",
    "IdentityResolver",
    "attest_wallet",
    "AttestationReceipt",
    "AttestationSubmitter",
    "encode_attestation_data",
    "SCHEMA",
    "SCHEMA_UID",
    "EAS_CONTRACT_ADDRESS",
    "BASE_CHAIN_ID",
    "SyndicateMinter",
    "CounterStore",
    "MemoryCounterStore",
    "PostgresCounterStore",
    "VisitCounter",
    "ActionOutcome",
    "ActionStrategy",
    "AttestationStrategy",
    "MintStrategy",
    "FramePipeline",
]
