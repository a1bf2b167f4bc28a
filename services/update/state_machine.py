"""Forward-only lifecycle state holder for update sessions."""

from __future__ import annotations

import logging
from typing import Mapping

from services.update.models import InvalidStateError, UpdateState

_LOGGER = logging.getLogger(__name__)

__all__ = ["TRANSITIONS", "UpdateLifecycle"]


TRANSITIONS: Mapping[UpdateState, frozenset[UpdateState]] = {
    UpdateState.NOT_CHECKED: frozenset({UpdateState.OUTDATED, UpdateState.UPDATED}),
    UpdateState.OUTDATED: frozenset({UpdateState.DOWNLOADING}),
    UpdateState.DOWNLOADING: frozenset(
        {
            UpdateState.DOWNLOAD_FAILED,
            UpdateState.EXTRACT_FAILED,
            UpdateState.INSTALL_PENDING,
            UpdateState.INSTALL_FAILED,
        }
    ),
    UpdateState.UPDATED: frozenset(),
    UpdateState.DOWNLOAD_FAILED: frozenset(),
    UpdateState.EXTRACT_FAILED: frozenset(),
    UpdateState.INSTALL_PENDING: frozenset(),
    UpdateState.INSTALL_FAILED: frozenset(),
}


class UpdateLifecycle:
    """Track the current :class:`UpdateState` and reject backwards moves."""

    def __init__(self, initial: UpdateState = UpdateState.NOT_CHECKED) -> None:
        self._state = initial

    @property
    def state(self) -> UpdateState:
        return self._state

    def can_advance(self, target: UpdateState) -> bool:
        return target in TRANSITIONS[self._state]

    def require(self, *expected: UpdateState, action: str) -> None:
        """Raise :class:`InvalidStateError` unless the state is one of ``expected``."""

        if self._state in expected:
            return
        allowed = ", ".join(state.value for state in expected)
        raise InvalidStateError(
            f"Cannot {action} while update state is '{self._state.value}' (expected {allowed})"
        )

    def advance(self, target: UpdateState) -> None:
        if not self.can_advance(target):
            raise InvalidStateError(
                f"Illegal update state transition: {self._state.value} -> {target.value}"
            )
        _LOGGER.debug("Update state %s -> %s", self._state.value, target.value)
        self._state = target
