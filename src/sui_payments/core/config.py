"""
Configuration objects and helpers for Sui treasury payments.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .environment import build_environment
from .errors import ConfigError
from .events import confirmation_event_type
from .gas import DEFAULT_GAS_BUFFER
from .ids import normalize_sui_address
from .keys import SignerIdentity
from .transaction import PaymentRequest

__all__ = [
    "ConfigError",
    "NETWORK_URLS",
    "PaymentConfig",
    "PaymentParameters",
    "load_payment_config",
]

NETWORK_URLS = {
    "mainnet": "https://fullnode.mainnet.sui.io:443",
    "testnet": "https://fullnode.testnet.sui.io:443",
    "devnet": "https://fullnode.devnet.sui.io:443",
    "localnet": "http://127.0.0.1:9000",
}

_PARAMETER_TO_ENV_KEY = {
    "network": "SUI_PAYMENT_NETWORK",
    "rpc_url": "SUI_PAYMENT_RPC_URL",
    "package_id": "SUI_PAYMENT_PACKAGE_ID",
    "treasury_id": "SUI_PAYMENT_TREASURY_ID",
    "module_name": "SUI_PAYMENT_MODULE",
    "function_name": "SUI_PAYMENT_FUNCTION",
    "private_key": "SUI_PAYMENT_PRIVATE_KEY",
    "payment_id": "SUI_PAYMENT_ID",
    "metadata": "SUI_PAYMENT_METADATA",
    "amount_mist": "SUI_PAYMENT_AMOUNT_MIST",
    "gas_buffer": "SUI_PAYMENT_GAS_BUFFER",
    "timeout_seconds": "SUI_PAYMENT_TIMEOUT_SECONDS",
}


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class PaymentParameters:
    """
    Explicit parameter bundle for constructing :class:`PaymentConfig`.

    Callers can either instantiate this helper or pass the individual keyword
    arguments directly to :func:`load_payment_config`.
    """

    network: Optional[str] = None
    rpc_url: Optional[str] = None
    package_id: Optional[str] = None
    treasury_id: Optional[str] = None
    module_name: Optional[str] = None
    function_name: Optional[str] = None
    private_key: Optional[str] = None
    payment_id: Optional[str] = None
    metadata: Optional[str] = None
    amount_mist: Optional[int | str] = None
    gas_buffer: Optional[int | str] = None
    timeout_seconds: Optional[int | str] = None

    def as_overrides(self) -> Dict[str, str]:
        overrides: Dict[str, str] = {}
        for field_name, env_key in _PARAMETER_TO_ENV_KEY.items():
            value = getattr(self, field_name)
            if value is None:
                continue
            overrides[env_key] = _stringify(value)
        return overrides


def _collect_parameter_overrides(
    parameters: Optional[PaymentParameters],
    explicit: Mapping[str, Any],
) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    if parameters is not None:
        overrides.update(parameters.as_overrides())

    for key, value in explicit.items():
        if value is None:
            continue
        try:
            env_key = _PARAMETER_TO_ENV_KEY[key]
        except KeyError as exc:
            raise TypeError(f"Unknown payment parameter '{key}'") from exc
        overrides[env_key] = _stringify(value)
    return overrides


def _require(values: Mapping[str, str], key: str) -> str:
    value = values.get(key)
    if value is None or not value.strip():
        raise ConfigError(f"{key} must be provided")
    return value.strip()


def _normalize_object_id(raw: str, field_name: str) -> str:
    try:
        return normalize_sui_address(raw)
    except ValueError as exc:
        raise ConfigError(f"{field_name} is not a valid Sui object id") from exc


def _parse_int(values: Mapping[str, str], key: str, default: int) -> int:
    raw = values.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip().replace("_", ""))
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got '{raw}'") from exc


def _identifier(values: Mapping[str, str], key: str, default: str) -> str:
    value = values.get(key, default).strip()
    if not value.isidentifier():
        raise ConfigError(f"{key} must be a Move identifier, got '{value}'")
    return value


@dataclass(frozen=True)
class PaymentConfig:
    rpc_url: str
    package_id: str
    treasury_id: str
    private_key: str
    payment_id: str
    amount_mist: int
    metadata: str = ""
    module_name: str = "payment"
    function_name: str = "process_payment"
    gas_buffer: int = DEFAULT_GAS_BUFFER
    timeout_seconds: int = 30
    network: str = "testnet"

    @property
    def target(self) -> str:
        return f"{self.package_id}::{self.module_name}::{self.function_name}"

    @property
    def confirmation_event_type(self) -> str:
        return confirmation_event_type(self.package_id, self.module_name)

    def payment_request(self) -> PaymentRequest:
        return PaymentRequest(
            treasury_id=self.treasury_id,
            amount=self.amount_mist,
            payment_id=self.payment_id,
            metadata=self.metadata,
        )

    def signer(self) -> SignerIdentity:
        return SignerIdentity.from_secret(self.private_key)

    def __repr__(self) -> str:
        return (
            f"PaymentConfig(network={self.network!r}, rpc_url={self.rpc_url!r}, "
            f"target={self.target!r}, treasury_id={self.treasury_id!r}, "
            f"payment_id={self.payment_id!r}, amount_mist={self.amount_mist})"
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "PaymentConfig":
        network = values.get("SUI_PAYMENT_NETWORK", "testnet").strip().lower()
        if network not in NETWORK_URLS:
            raise ConfigError(
                f"SUI_PAYMENT_NETWORK must be one of {', '.join(NETWORK_URLS)}, got '{network}'"
            )
        rpc_url = (values.get("SUI_PAYMENT_RPC_URL") or NETWORK_URLS[network]).rstrip("/")

        package_id = _normalize_object_id(
            _require(values, "SUI_PAYMENT_PACKAGE_ID"), "SUI_PAYMENT_PACKAGE_ID"
        )
        treasury_id = _normalize_object_id(
            _require(values, "SUI_PAYMENT_TREASURY_ID"), "SUI_PAYMENT_TREASURY_ID"
        )
        module_name = _identifier(values, "SUI_PAYMENT_MODULE", "payment")
        function_name = _identifier(values, "SUI_PAYMENT_FUNCTION", "process_payment")

        private_key = _require(values, "SUI_PAYMENT_PRIVATE_KEY")
        SignerIdentity.from_secret(private_key)

        # Identifiers are passed to the contract byte for byte.
        payment_id = values.get("SUI_PAYMENT_ID")
        if not payment_id:
            raise ConfigError("SUI_PAYMENT_ID must be provided")
        metadata = values.get("SUI_PAYMENT_METADATA", "")

        amount_mist = _parse_int(values, "SUI_PAYMENT_AMOUNT_MIST", 20_000_000)
        if amount_mist <= 0:
            raise ConfigError("Payment amount must be greater than zero")
        gas_buffer = _parse_int(values, "SUI_PAYMENT_GAS_BUFFER", DEFAULT_GAS_BUFFER)
        if gas_buffer < 0:
            raise ConfigError("SUI_PAYMENT_GAS_BUFFER must be non-negative")
        timeout_seconds = _parse_int(values, "SUI_PAYMENT_TIMEOUT_SECONDS", 30)
        if timeout_seconds <= 0:
            raise ConfigError("SUI_PAYMENT_TIMEOUT_SECONDS must be positive")

        return cls(
            rpc_url=rpc_url,
            package_id=package_id,
            treasury_id=treasury_id,
            private_key=private_key,
            payment_id=payment_id,
            amount_mist=amount_mist,
            metadata=metadata,
            module_name=module_name,
            function_name=function_name,
            gas_buffer=gas_buffer,
            timeout_seconds=timeout_seconds,
            network=network,
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
        parameters: Optional[PaymentParameters] = None,
        **explicit: Any,
    ) -> "PaymentConfig":
        parameter_overrides = _collect_parameter_overrides(parameters, explicit)
        merged_overrides = dict(overrides or {})
        merged_overrides.update(parameter_overrides)

        environment = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        return cls.from_mapping(environment.variables)


def load_payment_config(
    *,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[PaymentParameters] = None,
    network: Optional[str] = None,
    rpc_url: Optional[str] = None,
    package_id: Optional[str] = None,
    treasury_id: Optional[str] = None,
    module_name: Optional[str] = None,
    function_name: Optional[str] = None,
    private_key: Optional[str] = None,
    payment_id: Optional[str] = None,
    metadata: Optional[str] = None,
    amount_mist: Optional[int | str] = None,
    gas_buffer: Optional[int | str] = None,
    timeout_seconds: Optional[int | str] = None,
) -> PaymentConfig:
    """
    Convenience wrapper that mirrors :meth:`PaymentConfig.from_env`.

    The configuration can be provided entirely through environment variables,
    a ``.env`` file, direct keyword arguments, or any combination of the three.
    """
    return PaymentConfig.from_env(
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        network=network,
        rpc_url=rpc_url,
        package_id=package_id,
        treasury_id=treasury_id,
        module_name=module_name,
        function_name=function_name,
        private_key=private_key,
        payment_id=payment_id,
        metadata=metadata,
        amount_mist=amount_mist,
        gas_buffer=gas_buffer,
        timeout_seconds=timeout_seconds,
    )
