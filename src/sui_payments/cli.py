"""
Command-line interface for submitting a single treasury payment.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, Sequence, Tuple

import requests

from .api import ConfigError, create_payment_client, load_payment_config
from .core.client import PaymentClient, is_insufficient_gas
from .core.errors import InsufficientGasError, PaymentError, RpcError
from .core.results import CommittedUnconfirmed, Confirmed, PaymentOutcome


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _env_override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _collect_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in pairs:
        overrides[key] = value
    return overrides


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sui-payments",
        description="Submit a single payment to a Sui treasury contract",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing SUI_PAYMENT_* settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_env_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulate the payment and report the gas budget without submitting it",
    )
    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)
    overrides = _collect_overrides(args.set or ())

    try:
        config = load_payment_config(env_file=args.env_file, overrides=overrides)
    except (KeyError, ConfigError, ValueError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    client = create_payment_client(config=config, session=requests.Session())

    try:
        if args.dry_run:
            return _run_dry_run(client)
        outcome = client.send()
    except PaymentError as exc:
        return _report_failure(exc)
    except (RpcError, requests.RequestException) as exc:
        logging.error("Error making payment: %s", exc)
        return 1

    return _handle_outcome(outcome)


def _run_dry_run(client: PaymentClient) -> int:
    tx, estimate = client.simulate()
    logging.info(
        "Dry run succeeded; gas budget would be %s MIST (%s used before buffer)",
        tx.gas_budget,
        estimate.total,
    )
    return 0


def _report_failure(exc: PaymentError) -> int:
    logging.error("Error making payment: %s", exc)
    if isinstance(exc, InsufficientGasError) or is_insufficient_gas(str(exc)):
        logging.error(InsufficientGasError.guidance)
    return 1


def _handle_outcome(outcome: PaymentOutcome) -> int:
    if isinstance(outcome, Confirmed):
        logging.info("Transaction successful! Digest: %s", outcome.digest)
        return 0
    if isinstance(outcome, CommittedUnconfirmed):
        logging.info("Transaction committed without confirmation. Digest: %s", outcome.digest)
        return 0
    return 1


def main() -> None:
    sys.exit(run_cli())
