"""Accessibility permission state machine for the window helper."""

from __future__ import annotations

from enum import Enum, auto
import logging

logger = logging.getLogger(__name__)


class PermissionState(Enum):
    UNKNOWN = auto()
    PENDING = auto()
    GRANTED = auto()
    DENIED = auto()


class PermissionEvent(Enum):
    REQUEST = auto()
    OBSERVED_GRANTED = auto()
    OBSERVED_DENIED = auto()


_TRANSITIONS = {
    PermissionState.UNKNOWN: {
        PermissionEvent.REQUEST: PermissionState.PENDING,
        PermissionEvent.OBSERVED_GRANTED: PermissionState.GRANTED,
        PermissionEvent.OBSERVED_DENIED: PermissionState.DENIED,
    },
    PermissionState.PENDING: {
        PermissionEvent.REQUEST: PermissionState.PENDING,
        PermissionEvent.OBSERVED_GRANTED: PermissionState.GRANTED,
        PermissionEvent.OBSERVED_DENIED: PermissionState.DENIED,
    },
    PermissionState.GRANTED: {
        PermissionEvent.OBSERVED_GRANTED: PermissionState.GRANTED,
        PermissionEvent.OBSERVED_DENIED: PermissionState.DENIED,
    },
    PermissionState.DENIED: {
        PermissionEvent.REQUEST: PermissionState.PENDING,
        PermissionEvent.OBSERVED_GRANTED: PermissionState.GRANTED,
        PermissionEvent.OBSERVED_DENIED: PermissionState.DENIED,
    },
}


class PermissionStateMachine:
    """Tracks the last known permission state.

    The state is only a record of the latest observation; callers must
    re-query the OS before every sensitive call since grants and
    revocations happen out-of-band.
    """

    def __init__(self):
        self.state = PermissionState.UNKNOWN

    def transition(self, event: PermissionEvent) -> PermissionState:
        next_state = _TRANSITIONS.get(self.state, {}).get(event, self.state)
        if event not in _TRANSITIONS.get(self.state, {}):
            logger.debug(
                "Ignored permission event: %s --%s--> %s", self.state, event, next_state
            )
        self.state = next_state
        return self.state

    def observe(self, trusted: bool) -> PermissionState:
        event = PermissionEvent.OBSERVED_GRANTED if trusted else PermissionEvent.OBSERVED_DENIED
        return self.transition(event)
