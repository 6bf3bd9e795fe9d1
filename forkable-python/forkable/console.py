"""Console collaborator: fork callbacks that only report outcomes."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Tuple

from .future import CancelHandle, Future

logger = logging.getLogger(__name__)


def log_outcome(
    label: str,
    log: Optional[logging.Logger] = None,
) -> Tuple[Callable[[Any], None], Callable[[Any], None]]:
    """Return ``(on_rejected, on_resolved)`` callbacks that log and nothing else.

    Rejections are logged at ERROR, resolutions at INFO.
    """
    target = log or logger

    def on_rejected(error: Any) -> None:
        target.error("%s rejected: %r", label, error, extra={"label": label, "outcome": "rejected"})

    def on_resolved(value: Any) -> None:
        target.info("%s resolved: %r", label, value, extra={"label": label, "outcome": "resolved"})

    return on_rejected, on_resolved


def fork_and_log(future: Future, label: str, log: Optional[logging.Logger] = None) -> CancelHandle:
    on_rejected, on_resolved = log_outcome(label, log)
    return future.fork(on_rejected=on_rejected, on_resolved=on_resolved)
