"""
Public facade for the Sui treasury payment package.

The most useful pieces are re-exported here so integrators can
``from sui_payments import ...`` without navigating the package.
"""

from .api import create_payment_client, send_payment
from .core import (
    CoinRef,
    CommittedUnconfirmed,
    ConfigError,
    Confirmed,
    ConfirmationNotFoundError,
    FundLookupError,
    ExecutionResult,
    Failed,
    GasEstimate,
    InsufficientGasError,
    NoFundsError,
    PaymentClient,
    PaymentConfig,
    PaymentEnvironment,
    PaymentError,
    PaymentOutcome,
    PaymentParameters,
    PaymentRequest,
    RpcError,
    SignerIdentity,
    SimulationFailedError,
    SubmissionError,
    SuiRpcClient,
    UnsignedTransaction,
    build_environment,
    build_payment_transaction,
    estimate_gas,
    interpret_result,
    load_env_file,
    load_payment_config,
)

__all__ = (
    "CoinRef",
    "CommittedUnconfirmed",
    "ConfigError",
    "Confirmed",
    "ConfirmationNotFoundError",
    "FundLookupError",
    "ExecutionResult",
    "Failed",
    "GasEstimate",
    "InsufficientGasError",
    "NoFundsError",
    "PaymentClient",
    "PaymentConfig",
    "PaymentEnvironment",
    "PaymentError",
    "PaymentOutcome",
    "PaymentParameters",
    "PaymentRequest",
    "RpcError",
    "SignerIdentity",
    "SimulationFailedError",
    "SubmissionError",
    "SuiRpcClient",
    "UnsignedTransaction",
    "build_environment",
    "build_payment_transaction",
    "create_payment_client",
    "estimate_gas",
    "interpret_result",
    "load_env_file",
    "load_payment_config",
    "send_payment",
)
