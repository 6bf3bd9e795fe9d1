"""Lazy, forkable deferred computations (Futures) with functor/monad composition."""

from . import console, fs, http
from .config import Settings, default_executor
from .exceptions import (
    CollaboratorError,
    FileAccessError,
    ForkableError,
    HTTPError,
    HTTPStatusError,
    NotAFutureError,
    RequestFailedError,
    SettlementTimeout,
    UnwrapError,
)
from .future import CancelHandle, Future, identity, lift, lift2, lift3, sequence, traverse
from .observability import setup_logging
from .result import Err, Ok, Result

__all__ = [
    "Future",
    "CancelHandle",
    "lift",
    "lift2",
    "lift3",
    "traverse",
    "sequence",
    "identity",
    "Result",
    "Ok",
    "Err",
    "Settings",
    "default_executor",
    "setup_logging",
    "ForkableError",
    "UnwrapError",
    "NotAFutureError",
    "SettlementTimeout",
    "CollaboratorError",
    "FileAccessError",
    "HTTPError",
    "HTTPStatusError",
    "RequestFailedError",
    "console",
    "fs",
    "http",
]

__version__ = "0.1.0"
