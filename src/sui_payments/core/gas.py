"""
Gas budgeting from a dry run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol

import requests

from .errors import RpcError, SimulationFailedError
from .transaction import ObjectResolver, UnsignedTransaction

__all__ = [
    "DEFAULT_GAS_BUFFER",
    "GasEstimate",
    "MAX_SIMULATION_BUDGET",
    "estimate_gas",
]

DEFAULT_GAS_BUFFER = 1_000_000

# Protocol-level max_tx_gas (50 SUI).
MAX_SIMULATION_BUDGET = 50_000_000_000


class Simulator(ObjectResolver, Protocol):
    def dry_run(self, tx_bytes: bytes) -> Mapping[str, Any]:
        ...


@dataclass(frozen=True)
class GasEstimate:
    computation_cost: int
    storage_cost: int
    storage_rebate: int

    @property
    def total(self) -> int:
        return self.computation_cost + self.storage_cost + self.storage_rebate

    def budget(self, buffer: int = DEFAULT_GAS_BUFFER) -> int:
        """
        Budget covering worst-case consumption before the rebate is applied.

        The rebate is added, not subtracted: the network refunds it only
        after execution has been charged.
        """
        if buffer < 0:
            raise ValueError("Gas buffer must be non-negative")
        return self.total + buffer

    @classmethod
    def from_gas_used(cls, gas_used: Mapping[str, Any]) -> "GasEstimate":
        values = {}
        for field_name, key in (
            ("computation_cost", "computationCost"),
            ("storage_cost", "storageCost"),
            ("storage_rebate", "storageRebate"),
        ):
            try:
                value = int(gas_used[key])
            except (KeyError, TypeError, ValueError) as exc:
                raise SimulationFailedError(
                    f"Dry run reported an unusable {key}: {gas_used.get(key)!r}"
                ) from exc
            if value < 0:
                raise SimulationFailedError(f"Dry run reported a negative {key}: {value}")
            values[field_name] = value
        return cls(**values)


def _simulation_budget(tx: UnsignedTransaction) -> int:
    """
    Budget for the dry run.

    The node reserves the budget out of the gas coin before any command
    runs, so whatever is split from the gas coin must stay outside it.
    """
    if not tx.gas_payment:
        return MAX_SIMULATION_BUDGET
    spendable = tx.gas_payment_balance - tx.gas_coin_withdrawals
    if spendable <= 0:
        raise SimulationFailedError(
            f"InsufficientCoinBalance: gas coins hold {tx.gas_payment_balance} MIST, "
            f"{tx.gas_coin_withdrawals} MIST must be split off before gas is paid"
        )
    return min(MAX_SIMULATION_BUDGET, spendable)


def estimate_gas(
    tx: UnsignedTransaction,
    simulator: Simulator,
    *,
    buffer: int = DEFAULT_GAS_BUFFER,
) -> GasEstimate:
    """
    Dry-run ``tx`` and attach the resulting gas budget to it.

    Raises :class:`SimulationFailedError` when the dry run does not succeed;
    the transaction is left without a budget in that case.
    """
    budget = _simulation_budget(tx)
    logging.info("Performing dry run...")
    try:
        tx_bytes = tx.build(simulator, gas_budget=budget)
        result = simulator.dry_run(tx_bytes)
    except RpcError as exc:
        logging.error("Dry run rejected: %s", exc.message)
        raise SimulationFailedError(exc.message) from exc
    except requests.RequestException as exc:
        raise SimulationFailedError(f"Transport error during dry run: {exc}") from exc

    effects = result.get("effects") or {}
    status = effects.get("status") or {}
    if status.get("status") != "success":
        error = status.get("error") or "unknown error"
        logging.error("Dry run failed: %s", error)
        raise SimulationFailedError(error)

    estimate = GasEstimate.from_gas_used(effects.get("gasUsed") or {})
    budget = estimate.budget(buffer)
    logging.info(
        "Dry run gas used: computation=%s, storage=%s, rebate=%s",
        estimate.computation_cost,
        estimate.storage_cost,
        estimate.storage_rebate,
    )
    logging.info("Setting gas budget to %s MIST", budget)
    tx.set_gas_budget(budget)
    return estimate
