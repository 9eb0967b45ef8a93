"""Join barrier for a known set of asynchronous loads."""

from __future__ import annotations

import logging
from collections.abc import Callable

__all__ = ["JoinBarrier"]

log = logging.getLogger(__name__)


class JoinBarrier:
    """Run a completion callback once every registered token has fired.

    Tokens must all be registered before :meth:`on_complete` is called; if
    none are outstanding at that point the callback runs immediately.
    """

    def __init__(self) -> None:
        self._waiting = 0
        self._on_complete: Callable[[], None] | None = None

    @property
    def waiting(self) -> int:
        return self._waiting

    def register(self) -> Callable[[], None]:
        self._waiting += 1
        fired = False

        def _token() -> None:
            nonlocal fired
            if fired:
                raise RuntimeError("join barrier token fired more than once")
            fired = True
            self._waiting -= 1
            log.debug("Barrier token fired (%d outstanding)", self._waiting)
            self._trigger_if_done()

        return _token

    def on_complete(self, callback: Callable[[], None]) -> None:
        self._on_complete = callback
        self._trigger_if_done()

    def _trigger_if_done(self) -> None:
        if self._waiting != 0 or self._on_complete is None:
            return
        callback, self._on_complete = self._on_complete, None
        callback()
