import base58
import pytest

from conftest import PACKAGE_ID, TREASURY_ID, FakeLedger, make_coin
from sui_payments.core.bcs import encode_string, encode_u64
from sui_payments.core.errors import TransactionStateError
from sui_payments.core.ids import address_to_bytes
from sui_payments.core.transaction import (
    GAS_COIN,
    Input,
    MoveCall,
    NestedResult,
    ObjectInput,
    PaymentRequest,
    PureInput,
    SplitCoins,
    UnsignedTransaction,
    build_payment_transaction,
)

SENDER = "0x" + "ab" * 32
TARGET = f"{PACKAGE_ID}::payment::process_payment"


def _request(**kwargs):
    values = {
        "treasury_id": TREASURY_ID,
        "amount": 20_000_000,
        "payment_id": "hatcher_1712384_100000000000_1712350_1747102690543",
        "metadata": "Data from TS client",
    }
    values.update(kwargs)
    return PaymentRequest(**values)


class TestBuildPaymentTransaction:
    def test_sets_sender(self):
        tx = build_payment_transaction(SENDER, _request(), TARGET)
        assert tx.sender == SENDER

    def test_splits_exact_amount_from_gas_coin(self):
        tx = build_payment_transaction(SENDER, _request(), TARGET)
        split = tx.commands[0]
        assert isinstance(split, SplitCoins)
        assert split.coin == GAS_COIN
        (amount_arg,) = split.amounts
        assert tx.inputs[amount_arg.index] == PureInput(encode_u64(20_000_000))

    def test_single_move_call_with_ordered_arguments(self):
        tx = build_payment_transaction(SENDER, _request(), TARGET)
        assert len(tx.move_calls) == 1
        call = tx.commands[1]
        assert isinstance(call, MoveCall)
        assert call.target == TARGET

        treasury, payment_id, metadata, coin = call.arguments
        assert tx.inputs[treasury.index] == ObjectInput(TREASURY_ID)
        assert tx.inputs[payment_id.index] == PureInput(encode_string(_request().payment_id))
        assert tx.inputs[metadata.index] == PureInput(encode_string(_request().metadata))
        assert coin == NestedResult(0, 0)

    @pytest.mark.parametrize(
        "payment_id, metadata",
        [
            ("  padded id  ", ""),
            ("id/with:odd=chars", "multi\nline"),
            ("支払い-001", "données ✓"),
        ],
    )
    def test_identifiers_pass_through_byte_identical(self, payment_id, metadata):
        tx = build_payment_transaction(
            SENDER, _request(payment_id=payment_id, metadata=metadata), TARGET
        )
        _, pid_arg, meta_arg, _ = tx.commands[1].arguments
        pid_bytes = tx.inputs[pid_arg.index].value
        meta_bytes = tx.inputs[meta_arg.index].value
        assert pid_bytes.endswith(payment_id.encode("utf-8"))
        assert meta_bytes.endswith(metadata.encode("utf-8"))
        assert pid_bytes == encode_string(payment_id)
        assert meta_bytes == encode_string(metadata)

    def test_no_balance_validation(self):
        tx = build_payment_transaction(SENDER, _request(amount=10**15), TARGET)
        assert tx.inputs[0] == PureInput(encode_u64(10**15))

    def test_gas_budget_starts_unset(self):
        tx = build_payment_transaction(SENDER, _request(), TARGET)
        assert tx.gas_budget is None


class TestUnsignedTransaction:
    def test_build_requires_sender(self):
        tx = UnsignedTransaction()
        tx.set_gas_price(750)
        with pytest.raises(TransactionStateError, match="sender"):
            tx.build(gas_budget=1_000)

    def test_build_requires_budget(self):
        tx = build_payment_transaction(SENDER, _request(), TARGET)
        with pytest.raises(TransactionStateError, match="budget"):
            tx.build(FakeLedger())

    def test_rejects_second_move_call(self):
        tx = build_payment_transaction(SENDER, _request(), TARGET)
        with pytest.raises(TransactionStateError):
            tx.move_call(TARGET, [])

    def test_rejects_malformed_target(self):
        tx = UnsignedTransaction()
        with pytest.raises(ValueError, match="package::module::function"):
            tx.move_call("0x2::coin", [])

    def test_object_inputs_are_deduplicated(self):
        tx = UnsignedTransaction()
        assert tx.object(TREASURY_ID) == tx.object(TREASURY_ID.upper().replace("0X", "0x"))
        assert len(tx.inputs) == 1

    def test_gas_payment_prefers_largest_coins(self):
        tx = UnsignedTransaction()
        small, large = make_coin(1, 10), make_coin(2, 1_000)
        tx.set_gas_payment([small, large])
        assert tx.gas_payment == (large, small)
        assert tx.gas_payment_balance == 1_010

    def test_consumed_transaction_cannot_be_rebuilt(self):
        tx = build_payment_transaction(SENDER, _request(), TARGET)
        tx.set_gas_budget(2_600_000)
        tx.build(FakeLedger())
        tx.mark_consumed()
        with pytest.raises(TransactionStateError, match="already been submitted"):
            tx.build(FakeLedger())

    def test_unresolved_object_without_resolver(self):
        tx = build_payment_transaction(SENDER, _request(), TARGET)
        tx.set_gas_price(750)
        with pytest.raises(TransactionStateError, match="unresolved"):
            tx.build(gas_budget=1_000)

    def test_serialized_layout(self):
        coin = make_coin(7, 5_000_000_000)
        request = _request()
        tx = build_payment_transaction(SENDER, request, TARGET)
        tx.set_gas_payment([coin])
        tx.set_gas_budget(2_600_000)

        def pure(value):
            return b"\x00" + bytes([len(value)]) + value

        expected = b"".join(
            [
                b"\x00",  # TransactionData::V1
                b"\x00",  # ProgrammableTransaction
                b"\x04",
                pure(encode_u64(request.amount)),
                b"\x01\x01" + address_to_bytes(TREASURY_ID) + encode_u64(3) + b"\x01",
                pure(encode_string(request.payment_id)),
                pure(encode_string(request.metadata)),
                b"\x02",
                b"\x02\x00\x01\x01\x00\x00",  # SplitCoins(GasCoin, [Input(0)])
                b"\x00" + address_to_bytes(PACKAGE_ID),
                encode_string("payment"),
                encode_string("process_payment"),
                b"\x00",
                b"\x04\x01\x01\x00\x01\x02\x00\x01\x03\x00\x03\x00\x00\x00\x00",
                address_to_bytes(SENDER),
                b"\x01",
                address_to_bytes(coin.object_id)
                + encode_u64(coin.version)
                + b"\x20"
                + base58.b58decode(coin.digest),
                address_to_bytes(SENDER),
                encode_u64(750),
                encode_u64(2_600_000),
                b"\x00",
            ]
        )
        assert tx.build(FakeLedger()) == expected

    def test_gas_budget_override_does_not_stick(self):
        tx = build_payment_transaction(SENDER, _request(), TARGET)
        tx.build(FakeLedger(), gas_budget=5_000)
        assert tx.gas_budget is None
        assert tx.gas_price == 750

    def test_set_gas_budget_rejects_non_positive(self):
        with pytest.raises(ValueError):
            UnsignedTransaction().set_gas_budget(0)


def test_input_indices_follow_insertion_order():
    tx = UnsignedTransaction()
    assert tx.pure_u64(1) == Input(0)
    assert tx.pure_string("x") == Input(1)
