"""
Organisation Dashboard Kernel — Store

Single-writer owner of the current AppState. Delegates every change to
transitions.apply_action; readers get the snapshot by reference and may
subscribe to be told when it is replaced.
"""

from __future__ import annotations

import logging
from typing import Callable, List

from .actions import BaseAction
from .domain_types import AppState
from .invariants import validate_invariants
from .transitions import apply_action

logger = logging.getLogger(__name__)

Listener = Callable[[AppState, BaseAction], None]


class Store:
    """
    Stateful holder wrapping the pure transition layer.

      - dispatch() is the only way to change the snapshot
      - the snapshot is replaced wholesale, never edited in place
      - version increases only when a dispatch produced a new snapshot
    """

    def __init__(self, state: AppState, validate: bool = False) -> None:
        self._state = state
        self._version = 0
        self._validate = validate
        self._listeners: List[Listener] = []

    # -- State access -------------------------------------------------------

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def version(self) -> int:
        return self._version

    # -- Public API ---------------------------------------------------------

    def dispatch(self, action: BaseAction) -> AppState:
        """
        Apply a single action:
          1. Delegate to transitions.apply_action
          2. If the snapshot changed, store it and bump the version
          3. Optionally check structural invariants (logged, never raised)
          4. Notify subscribers
        """
        new_state = apply_action(self._state, action)
        if new_state is self._state:
            logger.debug("Action %s left the snapshot unchanged", action.action_type)
            return self._state

        self._state = new_state
        self._version += 1
        logger.debug("Applied %s (version %d)", action.action_type, self._version)

        if self._validate:
            for violation in validate_invariants(new_state):
                logger.warning("Invariant violated after %s: %s", action.action_type, violation)

        for listener in list(self._listeners):
            listener(new_state, action)
        return new_state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def replace_state(self, state: AppState) -> None:
        """Install a freshly loaded snapshot (used by a reload)."""
        self._state = state
        self._version += 1
        logger.info("Store reloaded (version %d)", self._version)
