"""
Shared fixtures: a deterministic signer, config and an in-memory ledger.
"""

import base64
from typing import Any, Dict, List, Optional

import base58
import pytest

from sui_payments.core.config import PaymentConfig
from sui_payments.core.errors import RpcError
from sui_payments.core.keys import SignerIdentity
from sui_payments.core.transaction import CoinRef

PACKAGE_ID = "0x88640e3410b1feaefa3e6a56e97699b8efbe4cd1f15297632e17c879b0a532ba"
TREASURY_ID = "0x9e7c71a9239cf7e7a1b966e18d0bb10636e41fee590f90946aa5fba62bd76aaa"
CONFIRMATION_TYPE = f"{PACKAGE_ID}::payment::PaymentProcessed"

ED25519_SECRET = base64.b64encode(bytes([0x00]) + bytes(range(32))).decode()


def make_digest(seed: int) -> str:
    return base58.b58encode(bytes([seed]) * 32).decode()


def make_coin(seed: int, balance: int) -> CoinRef:
    return CoinRef(
        object_id="0x" + f"{seed:02x}" * 32,
        version=seed,
        digest=make_digest(seed),
        balance=balance,
    )


def success_dry_run(computation: int, storage: int, rebate: int) -> Dict[str, Any]:
    return {
        "effects": {
            "status": {"status": "success"},
            "gasUsed": {
                "computationCost": str(computation),
                "storageCost": str(storage),
                "storageRebate": str(rebate),
                "nonRefundableStorageFee": "0",
            },
        }
    }


def budget_from(tx_bytes: bytes) -> int:
    # u64 before the trailing TransactionExpiration::None byte.
    return int.from_bytes(tx_bytes[-9:-1], "little")


def split_amount(tx_bytes: bytes) -> int:
    # First input of a payment transaction: V1, PT, input count, Pure, length 8, u64.
    return int.from_bytes(tx_bytes[5:13], "little")


class FakeLedger:
    """Records every call; answers like a full node would."""

    def __init__(
        self,
        coins: Optional[List[CoinRef]] = None,
        dry_run_result: Optional[Dict[str, Any]] = None,
        execute_result: Optional[Dict[str, Any]] = None,
        execute_error: Optional[Exception] = None,
        dry_run_error: Optional[Exception] = None,
        get_coins_error: Optional[Exception] = None,
    ) -> None:
        self.coins = coins if coins is not None else [make_coin(7, 5_000_000_000)]
        self.dry_run_result = dry_run_result or success_dry_run(1_000_000, 500_000, 100_000)
        self.execute_result = execute_result or {
            "digest": "9xDigest",
            "effects": {"status": {"status": "success"}},
            "events": [],
        }
        self.execute_error = execute_error
        self.dry_run_error = dry_run_error
        self.get_coins_error = get_coins_error
        self.calls: List[str] = []
        self.dry_run_bytes: List[bytes] = []
        self.executed: List[Dict[str, Any]] = []

    def get_coins(self, owner: str) -> List[CoinRef]:
        self.calls.append("get_coins")
        if self.get_coins_error is not None:
            raise self.get_coins_error
        return list(self.coins)

    def get_reference_gas_price(self) -> int:
        self.calls.append("get_reference_gas_price")
        return 750

    def get_object(self, object_id: str) -> Dict[str, Any]:
        self.calls.append("get_object")
        if object_id != TREASURY_ID:
            raise RpcError(f"Object {object_id} not found")
        return {
            "objectId": object_id,
            "version": "42",
            "digest": make_digest(1),
            "owner": {"Shared": {"initial_shared_version": 3}},
        }

    def dry_run(self, tx_bytes: bytes) -> Dict[str, Any]:
        self.calls.append("dry_run")
        self.dry_run_bytes.append(tx_bytes)
        if self.dry_run_error is not None:
            raise self.dry_run_error
        # The budget is taken from the gas coin before SplitCoins runs.
        balance = sum(coin.balance for coin in self.coins)
        if split_amount(tx_bytes) > balance - budget_from(tx_bytes):
            return {
                "effects": {
                    "status": {"status": "failure", "error": "InsufficientCoinBalance"},
                }
            }
        return self.dry_run_result

    def execute(self, tx_bytes, signatures, *, show_effects=True, show_events=True):
        self.calls.append("execute")
        self.executed.append(
            {
                "tx_bytes": tx_bytes,
                "signatures": list(signatures),
                "show_effects": show_effects,
                "show_events": show_events,
            }
        )
        if self.execute_error is not None:
            raise self.execute_error
        return self.execute_result


@pytest.fixture
def signer() -> SignerIdentity:
    return SignerIdentity.from_secret(ED25519_SECRET)


@pytest.fixture
def config() -> PaymentConfig:
    return PaymentConfig.from_mapping(
        {
            "SUI_PAYMENT_PACKAGE_ID": PACKAGE_ID,
            "SUI_PAYMENT_TREASURY_ID": TREASURY_ID,
            "SUI_PAYMENT_PRIVATE_KEY": ED25519_SECRET,
            "SUI_PAYMENT_ID": "hatcher_1712384_100000000000_1712350_1747102690543",
            "SUI_PAYMENT_METADATA": "Data from TS client",
        }
    )


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()
