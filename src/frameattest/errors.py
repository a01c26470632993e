"""frameattest.errors: error taxonomy for the frame pipeline.

    FrameError
    ├── ConfigurationError        missing/invalid settings, fatal at startup
    ├── ValidationFailure         hub rejected the signed message (HTTP 400)
    ├── ResolutionError           identity lookup failed (HTTP 500)
    ├── TransportError            network failure, tagged with the operation
    └── SubmissionError           on-chain action failed (HTTP 500)
        ├── ProviderError
        ├── InsufficientFundsError
        ├── TransactionRevertedError
        ├── ConfirmationUnknownError
        │   └── ConfirmationTimeoutError
        └── RelayError

Every SubmissionError records whether the transaction reached the network.
``submitted=False`` means a retry cannot create a duplicate attestation;
``submitted=True`` means the transaction may still land and must be
reconciled before anything is resent.
"""

from __future__ import annotations

from typing import Iterable, Optional


class FrameError(Exception):
    """Base class for every error raised by frameattest."""


class ConfigurationError(FrameError):
    """Required configuration is missing or invalid."""

    def __init__(self, message: str, missing: Iterable[str] = ()):
        self.missing = tuple(missing)
        super().__init__(message)

    @classmethod
    def for_missing(cls, names: Iterable[str]) -> "ConfigurationError":
        names = tuple(names)
        return cls(
            "Missing required environment variable(s): " + ", ".join(names),
            missing=names,
        )


class ValidationFailure(FrameError):
    """The trust anchor rejected an action message."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class TransportError(FrameError):
    """A network call failed before any answer was received."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{operation} failed{detail}")


class ResolutionError(FrameError):
    """Identity lookup for a fid failed or produced no usable wallet."""

    def __init__(self, fid: int, cause: object):
        self.fid = fid
        self.cause = cause
        super().__init__(f"Could not resolve fid {fid}: {cause}")


class SubmissionError(FrameError):
    """An on-chain action could not be completed."""

    def __init__(self, message: str, *, submitted: bool = False,
                 tx_hash: Optional[str] = None):
        self.submitted = submitted
        self.tx_hash = tx_hash
        super().__init__(message)

    @property
    def safe_to_retry(self) -> bool:
        return not self.submitted


class ProviderError(SubmissionError):
    """The RPC provider failed before the transaction was accepted."""


class InsufficientFundsError(SubmissionError):
    """The signing account cannot pay for gas."""


class TransactionRevertedError(SubmissionError):
    """The registry contract reverted the call."""


class ConfirmationUnknownError(SubmissionError):
    """The transaction was sent but its outcome is not known."""

    def __init__(self, message: str, *, tx_hash: Optional[str] = None):
        super().__init__(message, submitted=True, tx_hash=tx_hash)


class ConfirmationTimeoutError(ConfirmationUnknownError):
    """No receipt arrived within the configured maximum wait."""

    def __init__(self, tx_hash: str, timeout: float):
        self.timeout = timeout
        super().__init__(
            f"Transaction {tx_hash} not confirmed within {timeout:g}s",
            tx_hash=tx_hash,
        )


class RelayError(SubmissionError):
    """The transaction-relay service refused or failed a request."""
