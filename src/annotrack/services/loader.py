# AnnoTrack
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Schedulers that run file decodes off the caller's path.

Results are always handed back on the thread that owns the scheduler, so
the project store only ever mutates its model from one thread.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from typing import Any, Protocol, TypeVar

from PyQt5.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal, pyqtSlot

__all__ = ["DecodeScheduler", "ImmediateLoader", "ThreadPoolLoader"]

log = logging.getLogger(__name__)

T = TypeVar("T")


class DecodeScheduler(Protocol):
    def submit(
        self,
        job: Callable[[], T],
        on_success: Callable[[T], None],
        on_error: Callable[[Exception], None],
    ) -> None: ...


class ImmediateLoader:
    """Run each decode synchronously inside :meth:`submit`."""

    def submit(
        self,
        job: Callable[[], T],
        on_success: Callable[[T], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        try:
            result = job()
        except Exception as exc:
            on_error(exc)
            return
        on_success(result)


class _DecodeSignals(QObject):
    finished = pyqtSignal(object, object)
    error = pyqtSignal(object, object)


class _DecodeJob(QRunnable):
    """Background job that runs one decode and reports back through signals."""

    def __init__(self, job: Callable[[], Any], token: int) -> None:
        super().__init__()
        self.setAutoDelete(True)
        self.signals = _DecodeSignals()
        self._job = job
        self._token = token

    def run(self) -> None:  # type: ignore[override]
        try:
            result = self._job()
        except Exception as exc:
            self.signals.error.emit(self._token, exc)
            return
        self.signals.finished.emit(self._token, result)


class ThreadPoolLoader(QObject):
    """Run decodes on a :class:`QThreadPool`; callbacks fire via queued signals."""

    def __init__(self, pool: QThreadPool | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._pool = pool or QThreadPool.globalInstance()
        self._tokens = itertools.count(1)
        self._pending: dict[int, tuple[_DecodeJob, Callable, Callable]] = {}

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(
        self,
        job: Callable[[], T],
        on_success: Callable[[T], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        token = next(self._tokens)
        runnable = _DecodeJob(job, token)
        runnable.signals.finished.connect(self._on_finished)
        runnable.signals.error.connect(self._on_error)
        self._pending[token] = (runnable, on_success, on_error)
        log.debug("Queued decode job %d", token)
        self._pool.start(runnable)

    @pyqtSlot(object, object)
    def _on_finished(self, token: int, result: object) -> None:
        _job, on_success, _on_error = self._pending.pop(token)
        on_success(result)

    @pyqtSlot(object, object)
    def _on_error(self, token: int, exc: object) -> None:
        _job, _on_success, on_error = self._pending.pop(token)
        on_error(exc)
