"""
Execution results and the payment outcome derived from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import ConfirmationNotFoundError
from .events import PaymentProcessedEvent, decode_events

__all__ = [
    "CommittedUnconfirmed",
    "Confirmed",
    "ExecutionResult",
    "Failed",
    "PaymentOutcome",
    "find_confirmation",
    "interpret_result",
]


@dataclass(frozen=True)
class ExecutionResult:
    digest: Optional[str]
    success: bool
    error: Optional[str]
    events: Tuple[Mapping[str, Any], ...]
    raw: Dict[str, Any] = field(repr=False, compare=False)

    @classmethod
    def from_response(cls, payload: Dict[str, Any]) -> "ExecutionResult":
        effects = payload.get("effects") or {}
        status = effects.get("status") or {}
        return cls(
            digest=payload.get("digest"),
            success=status.get("status") == "success",
            error=status.get("error"),
            events=tuple(payload.get("events") or ()),
            raw=payload,
        )


@dataclass(frozen=True)
class PaymentOutcome:
    digest: Optional[str]

    @property
    def committed(self) -> bool:
        return False

    def require_confirmation(self) -> PaymentProcessedEvent:
        raise ConfirmationNotFoundError(self.digest)


@dataclass(frozen=True)
class Confirmed(PaymentOutcome):
    event: PaymentProcessedEvent

    @property
    def committed(self) -> bool:
        return True

    @property
    def payload(self) -> Any:
        return self.event.payload

    def require_confirmation(self) -> PaymentProcessedEvent:
        return self.event


@dataclass(frozen=True)
class CommittedUnconfirmed(PaymentOutcome):
    """Executed successfully, but no PaymentProcessed event was found."""

    @property
    def committed(self) -> bool:
        return True


@dataclass(frozen=True)
class Failed(PaymentOutcome):
    """Executed, but the effects report an on-chain failure."""

    reason: str


def find_confirmation(
    result: ExecutionResult, confirmation_type: str
) -> Optional[PaymentProcessedEvent]:
    for event in decode_events(result.events, confirmation_type):
        if isinstance(event, PaymentProcessedEvent):
            return event
    return None


def interpret_result(result: ExecutionResult, confirmation_type: str) -> PaymentOutcome:
    if not result.success:
        return Failed(digest=result.digest, reason=result.error or "unknown error")
    event = find_confirmation(result, confirmation_type)
    if event is None:
        return CommittedUnconfirmed(digest=result.digest)
    return Confirmed(digest=result.digest, event=event)
