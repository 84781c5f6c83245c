"""
Programmable transaction model and the payment transaction builder.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, Union

from .bcs import BcsWriter, encode_string, encode_u64
from .errors import TransactionStateError
from .ids import normalize_sui_address

__all__ = [
    "GAS_COIN",
    "CoinRef",
    "GasCoin",
    "Input",
    "MAX_GAS_PAYMENT_OBJECTS",
    "MoveCall",
    "NestedResult",
    "ObjectInput",
    "ObjectRef",
    "ObjectResolver",
    "PaymentRequest",
    "PureInput",
    "Result",
    "SharedObjectRef",
    "SplitCoins",
    "UnsignedTransaction",
    "build_payment_transaction",
]

MAX_GAS_PAYMENT_OBJECTS = 256


@dataclass(frozen=True)
class ObjectRef:
    object_id: str
    version: int
    digest: str


@dataclass(frozen=True)
class SharedObjectRef:
    object_id: str
    initial_shared_version: int
    mutable: bool = True


@dataclass(frozen=True)
class CoinRef:
    """A spendable coin as reported by ``suix_getCoins``."""

    object_id: str
    version: int
    digest: str
    balance: int

    @property
    def ref(self) -> ObjectRef:
        return ObjectRef(self.object_id, self.version, self.digest)

    @classmethod
    def from_rpc(cls, payload: Mapping[str, Any]) -> "CoinRef":
        return cls(
            object_id=normalize_sui_address(payload["coinObjectId"]),
            version=int(payload["version"]),
            digest=payload["digest"],
            balance=int(payload["balance"]),
        )


@dataclass(frozen=True)
class PaymentRequest:
    """
    The immutable payment intent.

    ``amount`` is in MIST. ``payment_id`` should be globally unique so the
    receiving contract can process it idempotently.
    """

    treasury_id: str
    amount: int
    payment_id: str
    metadata: str


# Arguments


@dataclass(frozen=True)
class GasCoin:
    pass


@dataclass(frozen=True)
class Input:
    index: int


@dataclass(frozen=True)
class Result:
    index: int


@dataclass(frozen=True)
class NestedResult:
    index: int
    result_index: int


Argument = Union[GasCoin, Input, Result, NestedResult]

GAS_COIN = GasCoin()


# Inputs


@dataclass(frozen=True)
class PureInput:
    value: bytes


@dataclass(frozen=True)
class ObjectInput:
    object_id: str
    mutable: bool = True


CallInput = Union[PureInput, ObjectInput]


# Commands


@dataclass(frozen=True)
class SplitCoins:
    coin: Argument
    amounts: Tuple[Argument, ...]


@dataclass(frozen=True)
class MoveCall:
    package: str
    module: str
    function: str
    arguments: Tuple[Argument, ...]

    @property
    def target(self) -> str:
        return f"{self.package}::{self.module}::{self.function}"


Command = Union[SplitCoins, MoveCall]


class ObjectResolver(Protocol):
    def get_object(self, object_id: str) -> Mapping[str, Any]:
        ...

    def get_reference_gas_price(self) -> int:
        ...


class UnsignedTransaction:
    """
    Mutable builder state for one programmable transaction.

    The gas budget starts unset and must be attached before the transaction
    is signed. Once submitted the transaction is consumed and cannot be built
    again.
    """

    def __init__(self) -> None:
        self.sender: Optional[str] = None
        self.inputs: List[CallInput] = []
        self.commands: List[Command] = []
        self.gas_payment: Tuple[CoinRef, ...] = ()
        self.gas_price: Optional[int] = None
        self.gas_budget: Optional[int] = None
        self.gas_coin_withdrawals = 0
        self.consumed = False
        self._resolved: Dict[str, Union[ObjectRef, SharedObjectRef]] = {}

    def set_sender(self, address: str) -> None:
        self.sender = normalize_sui_address(address)

    def set_gas_payment(self, coins: Sequence[CoinRef]) -> None:
        ranked = sorted(coins, key=lambda coin: coin.balance, reverse=True)
        self.gas_payment = tuple(ranked[:MAX_GAS_PAYMENT_OBJECTS])

    def set_gas_price(self, price: int) -> None:
        self.gas_price = int(price)

    def set_gas_budget(self, budget: int) -> None:
        if budget <= 0:
            raise ValueError("Gas budget must be positive")
        self.gas_budget = int(budget)

    @property
    def gas_payment_balance(self) -> int:
        return sum(coin.balance for coin in self.gas_payment)

    @property
    def move_calls(self) -> Tuple[MoveCall, ...]:
        return tuple(command for command in self.commands if isinstance(command, MoveCall))

    def pure(self, value: bytes) -> Input:
        self.inputs.append(PureInput(value))
        return Input(len(self.inputs) - 1)

    def pure_string(self, value: str) -> Input:
        return self.pure(encode_string(value))

    def pure_u64(self, value: int) -> Input:
        return self.pure(encode_u64(value))

    def object(self, object_id: str, *, mutable: bool = True) -> Input:
        object_id = normalize_sui_address(object_id)
        for index, existing in enumerate(self.inputs):
            if isinstance(existing, ObjectInput) and existing.object_id == object_id:
                return Input(index)
        self.inputs.append(ObjectInput(object_id, mutable))
        return Input(len(self.inputs) - 1)

    def split_coins(self, coin: Argument, amounts: Sequence[int]) -> Tuple[NestedResult, ...]:
        amount_args = tuple(self.pure_u64(amount) for amount in amounts)
        if isinstance(coin, GasCoin):
            self.gas_coin_withdrawals += sum(amounts)
        self.commands.append(SplitCoins(coin, amount_args))
        index = len(self.commands) - 1
        return tuple(NestedResult(index, position) for position in range(len(amount_args)))

    def move_call(self, target: str, arguments: Sequence[Argument]) -> Result:
        if self.move_calls:
            raise TransactionStateError("A payment transaction carries exactly one move call")
        try:
            package, module, function = target.split("::")
        except ValueError as exc:
            raise ValueError(
                f"Move call target must look like package::module::function, got '{target}'"
            ) from exc
        self.commands.append(
            MoveCall(normalize_sui_address(package), module, function, tuple(arguments))
        )
        return Result(len(self.commands) - 1)

    def mark_consumed(self) -> None:
        self.consumed = True

    def build(
        self,
        resolver: Optional[ObjectResolver] = None,
        *,
        gas_budget: Optional[int] = None,
    ) -> bytes:
        """
        Serialize to BCS ``TransactionData`` bytes.

        Object inputs and the gas price are looked up through ``resolver``
        when not yet known. ``gas_budget`` overrides the attached budget
        without storing it, which is how the dry run is serialized.
        """
        if self.consumed:
            raise TransactionStateError("Transaction has already been submitted")
        if self.sender is None:
            raise TransactionStateError("Transaction sender must be set before building")
        budget = gas_budget if gas_budget is not None else self.gas_budget
        if budget is None:
            raise TransactionStateError("Gas budget must be set before building")

        if self.gas_price is None:
            if resolver is None:
                raise TransactionStateError("Gas price is unknown and no resolver was given")
            self.gas_price = resolver.get_reference_gas_price()
        self._resolve_objects(resolver)

        writer = BcsWriter()
        writer.uleb128(0)  # TransactionData::V1
        writer.uleb128(0)  # TransactionKind::ProgrammableTransaction
        writer.vector(self.inputs, self._write_input)
        writer.vector(self.commands, _write_command)
        writer.address(self.sender)
        writer.vector(self.gas_payment, lambda w, coin: _write_object_ref(w, coin.ref))
        writer.address(self.sender)
        writer.u64(self.gas_price)
        writer.u64(budget)
        writer.uleb128(0)  # TransactionExpiration::None
        return writer.to_bytes()

    def _resolve_objects(self, resolver: Optional[ObjectResolver]) -> None:
        for item in self.inputs:
            if not isinstance(item, ObjectInput) or item.object_id in self._resolved:
                continue
            if resolver is None:
                raise TransactionStateError(
                    f"Object {item.object_id} is unresolved and no resolver was given"
                )
            data = resolver.get_object(item.object_id)
            self._resolved[item.object_id] = _object_ref_from_rpc(data, item.mutable)
            logging.debug("Resolved object %s", item.object_id)

    def _write_input(self, writer: BcsWriter, item: CallInput) -> None:
        if isinstance(item, PureInput):
            writer.uleb128(0)  # CallArg::Pure
            writer.byte_vector(item.value)
            return

        writer.uleb128(1)  # CallArg::Object
        ref = self._resolved[item.object_id]
        if isinstance(ref, SharedObjectRef):
            writer.uleb128(1)  # ObjectArg::SharedObject
            writer.address(ref.object_id)
            writer.u64(ref.initial_shared_version)
            writer.boolean(ref.mutable)
        else:
            writer.uleb128(0)  # ObjectArg::ImmOrOwnedObject
            _write_object_ref(writer, ref)


def _object_ref_from_rpc(
    data: Mapping[str, Any], mutable: bool
) -> Union[ObjectRef, SharedObjectRef]:
    object_id = normalize_sui_address(data["objectId"])
    owner = data.get("owner")
    if isinstance(owner, Mapping) and "Shared" in owner:
        version = int(owner["Shared"]["initial_shared_version"])
        return SharedObjectRef(object_id, version, mutable)
    return ObjectRef(object_id, int(data["version"]), data["digest"])


def _write_object_ref(writer: BcsWriter, ref: ObjectRef) -> None:
    writer.address(ref.object_id)
    writer.u64(ref.version)
    writer.digest(ref.digest)


def _write_argument(writer: BcsWriter, argument: Argument) -> None:
    if isinstance(argument, GasCoin):
        writer.uleb128(0)
    elif isinstance(argument, Input):
        writer.uleb128(1).u16(argument.index)
    elif isinstance(argument, Result):
        writer.uleb128(2).u16(argument.index)
    elif isinstance(argument, NestedResult):
        writer.uleb128(3).u16(argument.index).u16(argument.result_index)
    else:
        raise TypeError(f"Unsupported argument {argument!r}")


def _write_command(writer: BcsWriter, command: Command) -> None:
    if isinstance(command, MoveCall):
        writer.uleb128(0)  # Command::MoveCall
        writer.address(command.package)
        writer.string(command.module)
        writer.string(command.function)
        writer.uleb128(0)  # no type arguments
        writer.vector(command.arguments, _write_argument)
    elif isinstance(command, SplitCoins):
        writer.uleb128(2)  # Command::SplitCoins
        _write_argument(writer, command.coin)
        writer.vector(command.amounts, _write_argument)
    else:
        raise TypeError(f"Unsupported command {command!r}")


def build_payment_transaction(
    sender: str,
    request: PaymentRequest,
    target: str,
) -> UnsignedTransaction:
    """
    Assemble the unsigned payment transaction.

    The payment coin is split from the gas coin and handed to ``target``
    along with the treasury, the payment id and the metadata. Balances are
    not checked here; the dry run reports an amount the gas coin cannot
    cover.
    """
    tx = UnsignedTransaction()
    tx.set_sender(sender)
    (payment_coin,) = tx.split_coins(GAS_COIN, [request.amount])
    tx.move_call(
        target,
        [
            tx.object(request.treasury_id),
            tx.pure_string(request.payment_id),
            tx.pure_string(request.metadata),
            payment_coin,
        ],
    )
    return tx
