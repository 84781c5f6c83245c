"""
The payment pipeline: locate funds, build, dry-run, submit, interpret.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol, Sequence, Tuple

import requests

from .config import PaymentConfig
from .errors import (
    FundLookupError,
    InsufficientGasError,
    NoFundsError,
    RpcError,
    SubmissionError,
    TransactionStateError,
)
from .gas import GasEstimate, Simulator, estimate_gas
from .keys import SignerIdentity
from .results import (
    CommittedUnconfirmed,
    Confirmed,
    ExecutionResult,
    Failed,
    PaymentOutcome,
    interpret_result,
)
from .rpc import SuiRpcClient
from .transaction import CoinRef, UnsignedTransaction, build_payment_transaction

__all__ = [
    "LedgerClient",
    "PaymentClient",
    "is_insufficient_gas",
    "locate_funds",
    "send_payment",
    "submit_transaction",
]

SpendableFundSet = Tuple[CoinRef, ...]

_INSUFFICIENT_GAS_MARKERS = (
    "insufficientgas",
    "insufficient gas",
    "gasbalancetoolow",
    "insufficientcoinbalance",
    "lower than the needed amount",
)


class LedgerClient(Simulator, Protocol):
    def get_coins(self, owner: str) -> Sequence[CoinRef]:
        ...

    def execute(
        self,
        tx_bytes: bytes,
        signatures: Sequence[str],
        *,
        show_effects: bool = True,
        show_events: bool = True,
    ) -> Mapping[str, Any]:
        ...


def is_insufficient_gas(message: str) -> bool:
    lower = message.lower()
    return any(marker in lower for marker in _INSUFFICIENT_GAS_MARKERS)


def locate_funds(ledger: LedgerClient, address: str) -> SpendableFundSet:
    logging.info("Fetching coins for address %s...", address)
    try:
        coins = tuple(ledger.get_coins(address))
    except RpcError as exc:
        raise FundLookupError(address, exc.message) from exc
    except requests.RequestException as exc:
        raise FundLookupError(address, f"transport error: {exc}") from exc
    logging.info("Found %s coin objects.", len(coins))
    if not coins:
        raise NoFundsError(address)
    return coins


def submit_transaction(
    tx: UnsignedTransaction,
    signer: SignerIdentity,
    ledger: LedgerClient,
) -> ExecutionResult:
    """
    Sign and execute ``tx``, asking for effects and events in the response.

    The transaction is marked consumed only once the node has answered.
    """
    if tx.gas_budget is None:
        raise TransactionStateError("Gas budget must be set before signing")

    tx_bytes = tx.build(ledger)
    signature = signer.sign_transaction(tx_bytes)
    logging.info("Signing and executing transaction...")
    try:
        response = ledger.execute(tx_bytes, [signature], show_effects=True, show_events=True)
    except RpcError as exc:
        if is_insufficient_gas(exc.message):
            raise InsufficientGasError(exc.message) from exc
        raise SubmissionError(exc.message) from exc
    except requests.RequestException as exc:
        raise SubmissionError(f"Transport error while executing transaction: {exc}") from exc

    tx.mark_consumed()
    result = ExecutionResult.from_response(dict(response))
    logging.info("Transaction digest: %s", result.digest)
    return result


class PaymentClient:
    """
    Runs one payment attempt for a :class:`PaymentConfig`.

    Every stage can be called on its own; :meth:`send` chains them. Nothing
    is retried: a caller that wants another attempt starts again from
    :meth:`locate_funds`.
    """

    def __init__(
        self,
        config: PaymentConfig,
        *,
        session: Optional[requests.Session] = None,
        ledger: Optional[LedgerClient] = None,
        signer: Optional[SignerIdentity] = None,
    ) -> None:
        self.config = config
        self.ledger = ledger or SuiRpcClient(
            config.rpc_url,
            session=session,
            timeout=config.timeout_seconds,
        )
        self.signer = signer or config.signer()
        logging.info("Signer address: %s", self.signer.address)

    @property
    def address(self) -> str:
        return self.signer.address

    def locate_funds(self) -> SpendableFundSet:
        return locate_funds(self.ledger, self.address)

    def build_transaction(self, funds: SpendableFundSet) -> UnsignedTransaction:
        tx = build_payment_transaction(
            self.address,
            self.config.payment_request(),
            self.config.target,
        )
        tx.set_gas_payment(funds)
        return tx

    def estimate(self, tx: UnsignedTransaction) -> GasEstimate:
        return estimate_gas(tx, self.ledger, buffer=self.config.gas_buffer)

    def submit(self, tx: UnsignedTransaction) -> ExecutionResult:
        return submit_transaction(tx, self.signer, self.ledger)

    def interpret(self, result: ExecutionResult) -> PaymentOutcome:
        outcome = interpret_result(result, self.config.confirmation_event_type)
        if isinstance(outcome, Confirmed):
            logging.info("Payment Processed Event: %s", outcome.payload)
        elif isinstance(outcome, CommittedUnconfirmed):
            logging.warning("PaymentProcessed event not found in transaction result.")
        elif isinstance(outcome, Failed):
            logging.error("Transaction %s failed on chain: %s", outcome.digest, outcome.reason)
        return outcome

    def simulate(self) -> Tuple[UnsignedTransaction, GasEstimate]:
        """Run the pipeline up to and including the dry run."""
        funds = self.locate_funds()
        tx = self.build_transaction(funds)
        estimate = self.estimate(tx)
        return tx, estimate

    def send(self) -> PaymentOutcome:
        logging.info("Attempting to make payment...")
        tx, _ = self.simulate()
        result = self.submit(tx)
        return self.interpret(result)


def send_payment(
    config: PaymentConfig,
    *,
    session: Optional[requests.Session] = None,
) -> PaymentOutcome:
    """
    High-level helper that runs a whole payment attempt for ``config``.
    """
    client = PaymentClient(config, session=session)
    return client.send()
