"""
Synthesis Outcomes and Request Lifecycle.

SynthesisOutcome is a closed union; exactly one case describes how a
single synthesis attempt ended:

    Succeeded        audio bytes + mime type
    Canceled         provider-reported failure (reason code + detail)
    TimedOut         the budget elapsed before the provider answered
    TransportFailed  the connection to the provider failed
    Unauthorized     the provider rejected the credentials

Detail fields exist for logging. Only the error classifier decides what a
caller may see.

Request Lifecycle:
    RECEIVED -> VALIDATING -> REJECTED | SYNTHESIZING
    SYNTHESIZING -> SUCCEEDED | CANCELED | TIMED_OUT | TRANSPORT_FAILED | UNAUTHORIZED
    every terminal state -> RESPONDED

RequestLifecycle enforces forward-only movement through these states.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Union


@dataclass(frozen=True)
class Succeeded:
    audio: bytes = field(repr=False)
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.audio)


@dataclass(frozen=True)
class Canceled:
    reason_code: str
    detail: str
    error_code: str = ""


@dataclass(frozen=True)
class TimedOut:
    budget_s: float


@dataclass(frozen=True)
class TransportFailed:
    detail: str


@dataclass(frozen=True)
class Unauthorized:
    reason_code: str = ""
    detail: str = ""


SynthesisOutcome = Union[Succeeded, Canceled, TimedOut, TransportFailed, Unauthorized]


class RequestState(str, Enum):
    RECEIVED = "received"
    VALIDATING = "validating"
    REJECTED = "rejected"
    SYNTHESIZING = "synthesizing"
    SUCCEEDED = "succeeded"
    CANCELED = "canceled"
    TIMED_OUT = "timed_out"
    TRANSPORT_FAILED = "transport_failed"
    UNAUTHORIZED = "unauthorized"
    RESPONDED = "responded"


_TERMINAL = frozenset({
    RequestState.REJECTED,
    RequestState.SUCCEEDED,
    RequestState.CANCELED,
    RequestState.TIMED_OUT,
    RequestState.TRANSPORT_FAILED,
    RequestState.UNAUTHORIZED,
})

_TRANSITIONS = {
    RequestState.RECEIVED: frozenset({RequestState.VALIDATING}),
    RequestState.VALIDATING: frozenset({RequestState.REJECTED, RequestState.SYNTHESIZING}),
    RequestState.SYNTHESIZING: frozenset(_TERMINAL - {RequestState.REJECTED}),
    **{state: frozenset({RequestState.RESPONDED}) for state in _TERMINAL},
    RequestState.RESPONDED: frozenset(),
}

_OUTCOME_STATES = {
    Succeeded: RequestState.SUCCEEDED,
    Canceled: RequestState.CANCELED,
    TimedOut: RequestState.TIMED_OUT,
    TransportFailed: RequestState.TRANSPORT_FAILED,
    Unauthorized: RequestState.UNAUTHORIZED,
}


def state_for_outcome(outcome: SynthesisOutcome) -> RequestState:
    """Terminal state that corresponds to an outcome case."""
    return _OUTCOME_STATES[type(outcome)]


class RequestLifecycle:
    """
    Per-request state tracker.

    Raises RuntimeError on an illegal transition, which would mean a bug in
    the pipeline (a state revisited or skipped).

    Usage:
        lc = RequestLifecycle()
        lc.advance(RequestState.VALIDATING)
        lc.advance(RequestState.SYNTHESIZING)
        lc.advance(state_for_outcome(outcome))
        lc.advance(RequestState.RESPONDED)
    """

    def __init__(self) -> None:
        self._state = RequestState.RECEIVED
        self._history: List[RequestState] = [RequestState.RECEIVED]

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def history(self) -> List[RequestState]:
        return list(self._history)

    def advance(self, new_state: RequestState) -> None:
        if new_state not in _TRANSITIONS[self._state]:
            raise RuntimeError(
                f"illegal request state transition: {self._state.value} -> {new_state.value}"
            )
        self._state = new_state
        self._history.append(new_state)
