"""
Public, high-level helpers for paying into a Sui treasury contract.
"""

from __future__ import annotations

from typing import Mapping, Optional

import requests

from .core.client import PaymentClient, send_payment as _send_payment
from .core.config import ConfigError, PaymentConfig, PaymentParameters, load_payment_config
from .core.results import PaymentOutcome

__all__ = [
    "ConfigError",
    "PaymentClient",
    "PaymentConfig",
    "PaymentParameters",
    "create_payment_client",
    "load_payment_config",
    "send_payment",
]


def _resolve_config(
    config: Optional[PaymentConfig],
    *,
    env_file: Optional[str],
    overrides: Optional[Mapping[str, str]],
    base: Optional[Mapping[str, str]],
    parameters: Optional[PaymentParameters],
) -> PaymentConfig:
    if config is None:
        return load_payment_config(
            env_file=env_file,
            overrides=overrides,
            base=base,
            parameters=parameters,
        )
    extras = (overrides, base, parameters)
    if any(item is not None and item != {} for item in extras):
        raise ValueError(
            "Provide either a pre-built PaymentConfig or individual parameters, not both."
        )
    return config


def create_payment_client(
    *,
    config: Optional[PaymentConfig] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[PaymentParameters] = None,
) -> PaymentClient:
    """
    Construct a :class:`PaymentClient`.

    Callers can either supply a ready-made :class:`PaymentConfig` or let the
    helper assemble one from environment data.
    """
    cfg = _resolve_config(
        config,
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
    )
    return PaymentClient(cfg, session=session)


def send_payment(
    *,
    config: Optional[PaymentConfig] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[PaymentParameters] = None,
) -> PaymentOutcome:
    """
    Run a full payment attempt: dry run, then sign and execute.
    """
    cfg = _resolve_config(
        config,
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
    )
    return _send_payment(cfg, session=session)
