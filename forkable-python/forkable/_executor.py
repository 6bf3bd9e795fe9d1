"""Shared plumbing for collaborators that may run their I/O on an executor."""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Callable, Optional

from .future import Future
from .result import Result

logger = logging.getLogger(__name__)


def io_future(work: Callable[[], Result], executor: Optional[Executor] = None) -> Future:
    """Wrap ``work`` (which reports its outcome as a Result) in a Future.

    Without an executor ``work`` runs inside fork. With one, it is submitted
    on fork and the continuations are called from the worker thread; the
    fork's cancel handle cancels the submission if it has not started yet.

    Exceptions raised by the caller's own continuations propagate out of
    ``fork`` only when no executor is used. On an executor they are raised
    inside a done-callback, where ``concurrent.futures`` logs them as
    "exception calling callback" and drops them.
    """

    def computation(*, reject, resolve):
        if executor is None:
            work().match(resolve, reject)
            return None

        submitted = executor.submit(work)

        def on_done(task):
            if task.cancelled():
                logger.debug("Collaborator task cancelled before it ran")
                return
            exc = task.exception()
            if exc is not None:
                reject(exc)
                return
            task.result().match(resolve, reject)

        submitted.add_done_callback(on_done)
        return submitted.cancel

    return Future(computation)
