"""
Exception hierarchy for the payment pipeline.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "ConfigError",
    "ConfirmationNotFoundError",
    "FundLookupError",
    "InsufficientGasError",
    "NoFundsError",
    "PaymentError",
    "RpcError",
    "SimulationFailedError",
    "SubmissionError",
    "TransactionStateError",
]


class ConfigError(Exception):
    """Raised when the supplied configuration is invalid."""


class PaymentError(Exception):
    """Base class for failures that terminate a payment attempt."""


class NoFundsError(PaymentError):
    """Raised when the sender owns no spendable coins."""

    def __init__(self, address: str) -> None:
        super().__init__(
            f"No SUI coins found for {address}. Please fund the address first."
        )
        self.address = address


class FundLookupError(PaymentError):
    """Raised when the node cannot list the sender's coins."""

    def __init__(self, address: str, message: str) -> None:
        super().__init__(f"Could not fetch coins for {address}: {message}")
        self.address = address
        self.message = message


class SimulationFailedError(PaymentError):
    """Raised when the dry run reports a non-success status."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Dry run failed: {message}")
        self.message = message


class SubmissionError(PaymentError):
    """Raised when broadcasting the signed transaction fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InsufficientGasError(SubmissionError):
    """The sender cannot cover gas plus the payment amount."""

    guidance = (
        "Please ensure the signer address has enough SUI for gas and the payment amount."
    )


class ConfirmationNotFoundError(PaymentError):
    """
    The transaction committed but no confirmation event was emitted.

    Never raised by the pipeline itself; see
    :meth:`sui_payments.core.results.PaymentOutcome.require_confirmation`.
    """

    def __init__(self, digest: Optional[str]) -> None:
        super().__init__(f"PaymentProcessed event not found in transaction {digest}")
        self.digest = digest


class TransactionStateError(ValueError):
    """Raised when a transaction is used out of its lifecycle order."""


class RpcError(RuntimeError):
    """Raised when the full node answers with an error or garbage."""

    def __init__(self, message: str, *, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
