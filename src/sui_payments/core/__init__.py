"""
Core primitives that implement the Sui treasury payment lifecycle.
"""

from .client import (
    PaymentClient,
    is_insufficient_gas,
    locate_funds,
    send_payment,
    submit_transaction,
)
from .config import (
    NETWORK_URLS,
    PaymentConfig,
    PaymentParameters,
    load_payment_config,
)
from .environment import PaymentEnvironment, build_environment, load_env_file
from .errors import (
    ConfigError,
    ConfirmationNotFoundError,
    FundLookupError,
    InsufficientGasError,
    NoFundsError,
    PaymentError,
    RpcError,
    SimulationFailedError,
    SubmissionError,
    TransactionStateError,
)
from .events import (
    PaymentProcessedEvent,
    UnrecognizedEvent,
    confirmation_event_type,
    decode_event,
)
from .gas import DEFAULT_GAS_BUFFER, GasEstimate, estimate_gas
from .keys import KeyDecodeError, SignerIdentity
from .results import (
    CommittedUnconfirmed,
    Confirmed,
    ExecutionResult,
    Failed,
    PaymentOutcome,
    find_confirmation,
    interpret_result,
)
from .rpc import SuiRpcClient
from .transaction import (
    CoinRef,
    PaymentRequest,
    UnsignedTransaction,
    build_payment_transaction,
)

__all__ = [
    "CoinRef",
    "CommittedUnconfirmed",
    "ConfigError",
    "Confirmed",
    "ConfirmationNotFoundError",
    "FundLookupError",
    "DEFAULT_GAS_BUFFER",
    "ExecutionResult",
    "Failed",
    "GasEstimate",
    "InsufficientGasError",
    "KeyDecodeError",
    "NETWORK_URLS",
    "NoFundsError",
    "PaymentClient",
    "PaymentConfig",
    "PaymentEnvironment",
    "PaymentError",
    "PaymentOutcome",
    "PaymentParameters",
    "PaymentProcessedEvent",
    "PaymentRequest",
    "RpcError",
    "SignerIdentity",
    "SimulationFailedError",
    "SubmissionError",
    "SuiRpcClient",
    "TransactionStateError",
    "UnrecognizedEvent",
    "UnsignedTransaction",
    "build_environment",
    "build_payment_transaction",
    "confirmation_event_type",
    "decode_event",
    "estimate_gas",
    "find_confirmation",
    "interpret_result",
    "is_insufficient_gas",
    "load_env_file",
    "load_payment_config",
    "locate_funds",
    "send_payment",
    "submit_transaction",
]
