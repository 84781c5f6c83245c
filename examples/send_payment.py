"""
Minimal script that uses the public API to pay into a Sui treasury, stage by stage.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, Tuple

import requests

from sui_payments import (
    CommittedUnconfirmed,
    ConfigError,
    Confirmed,
    InsufficientGasError,
    PaymentError,
    RpcError,
    create_payment_client,
    load_payment_config,
)


def _override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _build_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    return {key: value for key, value in pairs}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Pay into a Sui treasury using the SDK API")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing SUI_PAYMENT_* settings",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    parser.add_argument("--network", help="mainnet, testnet, devnet or localnet")
    parser.add_argument("--payment-id", help="Unique payment identifier")
    parser.add_argument("--metadata", help="Free-form data stored with the payment")
    parser.add_argument("--amount-mist", type=int, help="Payment amount in MIST")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        config = load_payment_config(
            env_file=args.env_file,
            overrides=_build_overrides(args.set or ()),
            network=args.network,
            payment_id=args.payment_id,
            metadata=args.metadata,
            amount_mist=args.amount_mist,
        )
    except (KeyError, ConfigError, ValueError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    client = create_payment_client(config=config)

    try:
        funds = client.locate_funds()
        tx = client.build_transaction(funds)
        estimate = client.estimate(tx)
        logging.info("Dry run used %s MIST before the buffer", estimate.total)
        result = client.submit(tx)
    except InsufficientGasError as exc:
        logging.error("Error making payment: %s", exc)
        logging.error(exc.guidance)
        return 1
    except PaymentError as exc:
        logging.error("Error making payment: %s", exc)
        return 1
    except (RpcError, requests.RequestException) as exc:
        logging.error("Error making payment: %s", exc)
        return 1

    outcome = client.interpret(result)
    if isinstance(outcome, (Confirmed, CommittedUnconfirmed)):
        logging.info("Transaction digest: %s", outcome.digest)
        return 0
    return 1


if __name__ == "__main__":
    sys.exit(main())
