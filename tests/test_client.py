import base64
from unittest.mock import Mock

import pytest
import requests
from nacl.signing import VerifyKey

from conftest import CONFIRMATION_TYPE, FakeLedger, budget_from, make_coin
from sui_payments.core import client as client_module
from sui_payments.core.client import PaymentClient, is_insufficient_gas, submit_transaction
from sui_payments.core.errors import (
    FundLookupError,
    InsufficientGasError,
    NoFundsError,
    RpcError,
    SimulationFailedError,
    SubmissionError,
    TransactionStateError,
)
from sui_payments.core.keys import transaction_digest
from sui_payments.core.results import CommittedUnconfirmed, Confirmed, Failed


def _client(config, signer, ledger):
    return PaymentClient(config, ledger=ledger, signer=signer)


class TestPipeline:
    def test_confirmed_payment(self, config, signer):
        ledger = FakeLedger(
            execute_result={
                "digest": "Dgst",
                "effects": {"status": {"status": "success"}},
                "events": [
                    {"type": "0x2::coin::Other", "parsedJson": {}},
                    {"type": CONFIRMATION_TYPE, "parsedJson": {"payment_id": config.payment_id}},
                ],
            }
        )

        outcome = _client(config, signer, ledger).send()

        assert isinstance(outcome, Confirmed)
        assert outcome.digest == "Dgst"
        assert outcome.payload == {"payment_id": config.payment_id}
        assert ledger.calls.index("dry_run") < ledger.calls.index("execute")

    def test_execution_requests_effects_and_events(self, config, signer, ledger):
        _client(config, signer, ledger).send()
        (executed,) = ledger.executed
        assert executed["show_effects"] is True
        assert executed["show_events"] is True

    def test_submitted_bytes_carry_budget_and_valid_signature(self, config, signer, ledger):
        _client(config, signer, ledger).send()
        (executed,) = ledger.executed
        tx_bytes = executed["tx_bytes"]
        assert int.from_bytes(tx_bytes[-9:-1], "little") == 2_600_000

        (signature,) = executed["signatures"]
        raw = base64.b64decode(signature)
        assert raw[0] == 0x00
        VerifyKey(raw[65:]).verify(transaction_digest(tx_bytes), raw[1:65])

    def test_committed_without_event(self, config, signer, ledger):
        outcome = _client(config, signer, ledger).send()
        assert isinstance(outcome, CommittedUnconfirmed)

    def test_failed_on_chain(self, config, signer):
        ledger = FakeLedger(
            execute_result={
                "digest": "Dgst",
                "effects": {"status": {"status": "failure", "error": "MoveAbort"}},
                "events": [],
            }
        )
        outcome = _client(config, signer, ledger).send()
        assert isinstance(outcome, Failed)
        assert outcome.reason == "MoveAbort"

    def test_no_funds_short_circuits_builder(self, config, signer, monkeypatch):
        builder = Mock(side_effect=AssertionError("builder must not run"))
        monkeypatch.setattr(client_module, "build_payment_transaction", builder)
        ledger = FakeLedger(coins=[])

        with pytest.raises(NoFundsError):
            _client(config, signer, ledger).send()

        builder.assert_not_called()
        assert ledger.calls == ["get_coins"]

    def test_failed_simulation_never_submits(self, config, signer):
        ledger = FakeLedger(
            dry_run_result={
                "effects": {"status": {"status": "failure", "error": "InsufficientGas"}}
            }
        )

        with pytest.raises(SimulationFailedError, match="InsufficientGas"):
            _client(config, signer, ledger).send()

        assert "execute" not in ledger.calls

    def test_five_sui_wallet_pays_twenty_million_mist(self, config, signer):
        ledger = FakeLedger(coins=[make_coin(7, 5_000_000_000)])
        assert config.amount_mist == 20_000_000

        outcome = _client(config, signer, ledger).send()

        assert isinstance(outcome, CommittedUnconfirmed)
        assert ledger.calls.count("execute") == 1
        assert budget_from(ledger.dry_run_bytes[0]) == 4_980_000_000
        assert budget_from(ledger.executed[0]["tx_bytes"]) == 2_600_000

    def test_dry_run_rejection_never_submits(self, config, signer):
        ledger = FakeLedger(dry_run_error=RpcError("InsufficientGas", code=-32002))

        with pytest.raises(SimulationFailedError, match="InsufficientGas"):
            _client(config, signer, ledger).send()

        assert "execute" not in ledger.calls

    @pytest.mark.parametrize(
        "error",
        [RpcError("Invalid params", code=-32602), requests.Timeout("read timed out")],
    )
    def test_coin_lookup_failure_is_a_payment_error(self, config, signer, error):
        ledger = FakeLedger(get_coins_error=error)

        with pytest.raises(FundLookupError) as excinfo:
            _client(config, signer, ledger).send()

        assert excinfo.value.address == signer.address
        assert excinfo.value.__cause__ is error
        assert ledger.calls == ["get_coins"]

    def test_funds_become_gas_payment(self, config, signer, ledger):
        client = _client(config, signer, ledger)
        tx = client.build_transaction(client.locate_funds())
        assert tx.gas_payment == tuple(ledger.coins)
        assert tx.sender == signer.address

    def test_simulate_stops_before_submission(self, config, signer, ledger):
        tx, estimate = _client(config, signer, ledger).simulate()
        assert tx.gas_budget == estimate.budget(config.gas_buffer)
        assert "execute" not in ledger.calls


class TestSubmit:
    def _budgeted(self, config, signer, ledger):
        client = _client(config, signer, ledger)
        tx = client.build_transaction(client.locate_funds())
        client.estimate(tx)
        return tx

    def test_requires_gas_budget(self, config, signer, ledger):
        client = _client(config, signer, ledger)
        tx = client.build_transaction(client.locate_funds())
        with pytest.raises(TransactionStateError, match="budget"):
            submit_transaction(tx, signer, ledger)
        assert "execute" not in ledger.calls

    def test_marks_transaction_consumed(self, config, signer, ledger):
        tx = self._budgeted(config, signer, ledger)
        submit_transaction(tx, signer, ledger)
        assert tx.consumed
        with pytest.raises(TransactionStateError):
            submit_transaction(tx, signer, ledger)

    def test_insufficient_gas_is_recognized(self, config, signer):
        ledger = FakeLedger(
            execute_error=RpcError(
                "Balance of gas object 0x07 is lower than the needed amount: 2600000", code=-32002
            )
        )
        tx = self._budgeted(config, signer, ledger)

        with pytest.raises(InsufficientGasError) as excinfo:
            submit_transaction(tx, signer, ledger)

        assert isinstance(excinfo.value, SubmissionError)
        assert excinfo.value.message.startswith("Balance of gas object")
        assert "enough SUI" in excinfo.value.guidance
        assert not tx.consumed

    def test_other_rpc_errors_become_submission_error(self, config, signer):
        ledger = FakeLedger(execute_error=RpcError("Invalid user signature"))
        tx = self._budgeted(config, signer, ledger)
        with pytest.raises(SubmissionError, match="Invalid user signature") as excinfo:
            submit_transaction(tx, signer, ledger)
        assert not isinstance(excinfo.value, InsufficientGasError)

    def test_transport_errors_become_submission_error(self, config, signer):
        ledger = FakeLedger(execute_error=requests.ConnectionError("connection reset"))
        tx = self._budgeted(config, signer, ledger)
        with pytest.raises(SubmissionError, match="connection reset"):
            submit_transaction(tx, signer, ledger)


@pytest.mark.parametrize(
    "message, expected",
    [
        ("InsufficientGas", True),
        ("Error checking transaction input objects: GasBalanceTooLow", True),
        ("InsufficientCoinBalance in command 0", True),
        ("Insufficient gas for this call", True),
        ("MoveAbort in 1st command", False),
        ("", False),
    ],
)
def test_is_insufficient_gas(message, expected):
    assert is_insufficient_gas(message) is expected
