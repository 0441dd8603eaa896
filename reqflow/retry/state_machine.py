"""Retry lifecycle state machine implementation."""

from enum import Enum, auto
from typing import ClassVar

import structlog

from reqflow.retry.constants import COMPONENT_RETRY


logger = structlog.get_logger()


class RetryPhase(Enum):
    """Retry lifecycle states.

    State transitions:
        ATTEMPTING -> SUCCEEDED: Attempt completed without transport failure
        ATTEMPTING -> RETRYING: Attempt failed, retry budget left
        ATTEMPTING -> FAILED: Excluded status, budget exhausted or timeout
        RETRYING -> ATTEMPTING: Backoff delay elapsed
        RETRYING -> FAILED: Timeout during backoff
    """

    ATTEMPTING = auto()
    RETRYING = auto()
    SUCCEEDED = auto()
    FAILED = auto()


class RetryStateError(Exception):
    """Raised when an invalid retry state transition is attempted."""

    def __init__(self, from_state: RetryPhase, to_state: RetryPhase) -> None:
        """Initialize the error.

        Args:
            from_state: The current state.
            to_state: The attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid retry state transition: {from_state.name} -> {to_state.name}"
        )


class RetryStateMachine:
    """State machine for one logical request's retry lifecycle.

    Enforces valid state transitions and logs invariant violations.
    """

    VALID_TRANSITIONS: ClassVar[dict[RetryPhase, set[RetryPhase]]] = {
        RetryPhase.ATTEMPTING: {
            RetryPhase.SUCCEEDED,
            RetryPhase.RETRYING,
            RetryPhase.FAILED,
        },
        RetryPhase.RETRYING: {
            RetryPhase.ATTEMPTING,
            RetryPhase.FAILED,
        },
        RetryPhase.SUCCEEDED: set(),  # Terminal state
        RetryPhase.FAILED: set(),  # Terminal state
    }

    def __init__(self, route: str) -> None:
        """Initialize the state machine in ATTEMPTING state.

        Args:
            route: Route of the request, for logging.
        """
        self._state = RetryPhase.ATTEMPTING
        self._log = logger.bind(component=COMPONENT_RETRY, route=route)

    @property
    def state(self) -> RetryPhase:
        """Get the current state."""
        return self._state

    def can_transition(self, to_state: RetryPhase) -> bool:
        """Check if a transition to the given state is valid."""
        return to_state in self.VALID_TRANSITIONS.get(self._state, set())

    def transition(self, to_state: RetryPhase) -> None:
        """Transition to a new state.

        Args:
            to_state: The target state.

        Raises:
            RetryStateError: If the transition is invalid.
        """
        if not self.can_transition(to_state):
            self._log.error(
                "invariant_violation",
                error_type="illegal_state_transition",
                from_state=self._state.name,
                to_state=to_state.name,
            )
            raise RetryStateError(self._state, to_state)

        old_state = self._state
        self._state = to_state
        self._log.debug(
            "retry_state_transition",
            from_state=old_state.name,
            to_state=to_state.name,
        )

    def to_attempting(self) -> None:
        self.transition(RetryPhase.ATTEMPTING)

    def to_retrying(self) -> None:
        self.transition(RetryPhase.RETRYING)

    def to_succeeded(self) -> None:
        self.transition(RetryPhase.SUCCEEDED)

    def to_failed(self) -> None:
        self.transition(RetryPhase.FAILED)

    def is_terminal(self) -> bool:
        """Check if the current state is terminal."""
        return self._state in (RetryPhase.SUCCEEDED, RetryPhase.FAILED)
