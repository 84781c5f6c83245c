"""
Typed decoding of events emitted by an executed transaction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

__all__ = [
    "PAYMENT_PROCESSED",
    "PaymentProcessedEvent",
    "TransactionEvent",
    "UnrecognizedEvent",
    "confirmation_event_type",
    "decode_event",
    "decode_events",
]

PAYMENT_PROCESSED = "PaymentProcessed"


def confirmation_event_type(package_id: str, module_name: str) -> str:
    return f"{package_id}::{module_name}::{PAYMENT_PROCESSED}"


@dataclass(frozen=True)
class PaymentProcessedEvent:
    type: str
    payload: Any
    raw: Mapping[str, Any] = field(repr=False, compare=False)


@dataclass(frozen=True)
class UnrecognizedEvent:
    type: Optional[str]
    raw: Mapping[str, Any] = field(repr=False, compare=False)


TransactionEvent = Union[PaymentProcessedEvent, UnrecognizedEvent]


def decode_event(raw: Mapping[str, Any], confirmation_type: str) -> TransactionEvent:
    """
    Decode one raw event. Only an exact type-tag match is treated as a
    confirmation; the payload (``parsedJson``) is passed through untouched.
    """
    event_type = raw.get("type")
    if event_type == confirmation_type:
        return PaymentProcessedEvent(type=event_type, payload=raw.get("parsedJson"), raw=raw)
    return UnrecognizedEvent(type=event_type, raw=raw)


def decode_events(
    events: Iterable[Mapping[str, Any]], confirmation_type: str
) -> Tuple[TransactionEvent, ...]:
    return tuple(decode_event(event, confirmation_type) for event in events)
