"""
Future<E, A> - a lazy, forkable deferred computation

A Future wraps a function that receives two named continuations, ``reject``
and ``resolve``, and eventually calls one of them. Nothing runs until
``fork`` is called; ``map``/``chain`` and the parallel combinators only build
new Futures that wire continuations together when forked.

Usage:
    from forkable import Future

    answer = Future(lambda reject, resolve: resolve(42)).map(lambda x: x * 2)

    answer.fork(
        on_rejected=lambda err: print("failed:", err),
        on_resolved=lambda value: print("got", value),   # got 84
    )

Continuations are always passed by keyword, so a computation must name its
parameters ``reject`` and/or ``resolve``. Only the names it declares are
passed (both when it takes ``**kwargs``), so ``lambda reject: reject(err)``
is a valid computation. Any other shape is refused when the Future is
constructed.

Policies:
    - Each fork settles at most once. The first continuation call wins; later
      calls of either continuation are ignored and logged as warnings.
    - An exception raised by a function given to ``map``, ``chain``,
      ``map_rejected``, ``bimap``, ``chain_rejected``, ``fold`` or ``lift``
      becomes a rejection carrying that exception.
    - An exception raised by the wrapped computation before it settles also
      becomes a rejection. Exceptions raised after settlement (for example by
      a caller's own ``on_resolved``) propagate out of ``fork``.
    - ``lift``/``traverse`` fork sources left to right. The first rejection
      observed wins, sources not yet forked are skipped, and outcomes arriving
      after settlement are discarded without cancelling their sources.
"""

from __future__ import annotations

import inspect
import logging
import threading
from typing import Any, Callable, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar

from .exceptions import NotAFutureError, SettlementTimeout
from .result import Result

logger = logging.getLogger(__name__)

E = TypeVar('E')
A = TypeVar('A')
B = TypeVar('B')
F = TypeVar('F')
T = TypeVar('T')

Continuation = Callable[[Any], None]
Computation = Callable[..., Any]

_PENDING = object()

CONTINUATIONS = ("reject", "resolve")
_KEYWORD_KINDS = (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)


def identity(value: T) -> T:
    return value


def _continuation_names(computation: Computation) -> Tuple[str, ...]:
    """Which of ``reject=``/``resolve=`` the computation accepts.

    Raises TypeError when it accepts neither, or needs other arguments.
    """
    try:
        signature = inspect.signature(computation)
    except (TypeError, ValueError):
        return CONTINUATIONS  # builtins without introspectable signatures
    params = signature.parameters.values()
    if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params):
        names = CONTINUATIONS
    else:
        names = tuple(
            name for name in CONTINUATIONS
            if name in signature.parameters
            and signature.parameters[name].kind in _KEYWORD_KINDS
        )
    if not names:
        raise TypeError(
            "Future computation must accept a 'reject' or 'resolve' keyword argument"
        )
    try:
        signature.bind(**dict.fromkeys(names))
    except TypeError as exc:
        raise TypeError(f"Future computation takes unsupported arguments ({exc})") from None
    return names


# ─── Settlement ───


class _Settlement:
    """The guarded continuation pair handed to one fork."""

    __slots__ = ("_lock", "_on_rejected", "_on_resolved", "settled", "cancelled")

    def __init__(self, on_rejected: Continuation, on_resolved: Continuation):
        self._lock = threading.Lock()
        self._on_rejected = on_rejected
        self._on_resolved = on_resolved
        self.settled = False
        self.cancelled = False

    def _claim(self, outcome: str, payload: Any) -> bool:
        with self._lock:
            if not self.settled:
                self.settled = True
                return True
            cancelled = self.cancelled
        if cancelled:
            logger.debug(
                "Discarding %s after cancellation: %r", outcome, payload,
                extra={"settlement": "discarded", "outcome": outcome},
            )
        else:
            logger.warning(
                "Ignoring %s of an already settled computation: %r", outcome, payload,
                extra={"settlement": "ignored", "outcome": outcome},
            )
        return False

    def reject(self, error: Any) -> None:
        if self._claim("rejection", error):
            self._on_rejected(error)

    def resolve(self, value: Any) -> None:
        if self._claim("resolution", value):
            self._on_resolved(value)

    def discard(self) -> None:
        with self._lock:
            if not self.settled:
                self.settled = True
                self.cancelled = True


class CancelHandle:
    """Returned by ``fork``; calling it abandons the fork.

    The fork's continuations will not be called afterwards, and the wrapped
    computation's own cancel function (whatever it returned from ``run``) is
    invoked. Side effects already in flight are not undone.
    """

    __slots__ = ("_settlement", "_cancel")

    def __init__(self, settlement: _Settlement, cancel: Any = None):
        self._settlement = settlement
        self._cancel = cancel if callable(cancel) else None

    def __call__(self) -> None:
        self._settlement.discard()
        if self._cancel is not None:
            self._cancel()


class _Switch:
    """Cancel function following a chain from its source to its inner Future."""

    __slots__ = ("_lock", "_stage", "_current", "_cancelled")

    def __init__(self):
        self._lock = threading.Lock()
        self._stage = -1
        self._current: Optional[Callable[[], Any]] = None
        self._cancelled = False

    def enter(self, stage: int, handle: Callable[[], Any]) -> None:
        with self._lock:
            if stage < self._stage:
                return  # the inner Future started before the source fork returned
            self._stage = stage
            self._current = handle
            cancelled = self._cancelled
        if cancelled:
            handle()

    def __call__(self) -> None:
        with self._lock:
            self._cancelled = True
            current = self._current
        if current is not None:
            current()


class _CancelAll:
    __slots__ = ("_handles",)

    def __init__(self, handles: List[Callable[[], Any]]):
        self._handles = handles

    def __call__(self) -> None:
        for handle in list(self._handles):
            handle()


# ─── Future ───


class Future(Generic[E, A]):
    """A deferred computation that either rejects with E or resolves with A."""

    __slots__ = ("_computation", "_continuations")

    def __init__(self, computation: Computation):
        if not callable(computation):
            raise TypeError(f"Future expects a callable, got {type(computation).__name__}")
        self._continuations = _continuation_names(computation)
        self._computation = computation

    def __repr__(self) -> str:
        name = getattr(self._computation, "__qualname__", None) or repr(self._computation)
        return f"Future({name})"

    # ─── Constructors ───

    @classmethod
    def of(cls, value: A) -> 'Future[Any, A]':
        """Future that resolves with ``value`` when forked."""
        def computation(*, reject, resolve):
            resolve(value)
        return cls(computation)

    @classmethod
    def rejected(cls, error: E) -> 'Future[E, Any]':
        """Future that rejects with ``error`` when forked."""
        def computation(*, reject, resolve):
            reject(error)
        return cls(computation)

    @classmethod
    def attempt(cls, fn: Callable[..., A], *args: Any, **kwargs: Any) -> 'Future[Exception, A]':
        """Call ``fn`` on fork; its return value resolves, a raised exception rejects."""
        def computation(*, reject, resolve):
            try:
                value = fn(*args, **kwargs)
            except Exception as exc:
                reject(exc)
                return
            resolve(value)
        return cls(computation)

    @classmethod
    def after(cls, seconds: float, value: A) -> 'Future[Any, A]':
        """Resolve with ``value`` once ``seconds`` have passed on a timer thread.

        Continuations run on the timer thread, so an exception raised by the
        caller's ``on_resolved`` goes to ``threading.excepthook`` rather than
        out of ``fork``.
        """
        def computation(*, reject, resolve):
            timer = threading.Timer(seconds, resolve, args=(value,))
            timer.daemon = True
            timer.start()
            return timer.cancel
        return cls(computation)

    @classmethod
    def rejected_after(cls, seconds: float, error: E) -> 'Future[E, Any]':
        def computation(*, reject, resolve):
            timer = threading.Timer(seconds, reject, args=(error,))
            timer.daemon = True
            timer.start()
            return timer.cancel
        return cls(computation)

    @classmethod
    def from_result(cls, result: Result[A, E]) -> 'Future[E, A]':
        """Natural transformation: Err(e) -> rejected(e), Ok(a) -> of(a)."""
        if not isinstance(result, Result):
            raise TypeError(f"from_result expects a Result, got {type(result).__name__}")
        return result.match(cls.of, cls.rejected)

    # ─── Execution ───

    def fork(self, *, on_rejected: Continuation, on_resolved: Continuation) -> CancelHandle:
        """Run the computation, reporting its outcome to exactly one callback."""
        settlement = _Settlement(on_rejected, on_resolved)
        try:
            continuations = {"reject": settlement.reject, "resolve": settlement.resolve}
            cancel = self._computation(**{name: continuations[name] for name in self._continuations})
        except Exception as exc:
            if settlement.settled:
                raise
            logger.debug("%r raised before settling: %r", self, exc)
            settlement.reject(exc)
            return CancelHandle(settlement)
        return CancelHandle(settlement, cancel)

    def await_result(self, timeout: Optional[float] = None) -> Result[A, E]:
        """Fork and block the calling thread until settled.

        Returns Ok(value) or Err(error). Raises SettlementTimeout (after
        cancelling the fork) if ``timeout`` seconds pass first.
        """
        done = threading.Event()
        outcome: List[Result] = []

        def on_rejected(error):
            outcome.append(Result.err(error))
            done.set()

        def on_resolved(value):
            outcome.append(Result.ok(value))
            done.set()

        cancel = self.fork(on_rejected=on_rejected, on_resolved=on_resolved)
        if not done.wait(timeout):
            cancel()
            raise SettlementTimeout(f"{self!r} did not settle within {timeout} seconds")
        return outcome[0]

    # ─── Functor / Monad ───

    def map(self, fn: Callable[[A], B]) -> 'Future[E, B]':
        source = self

        def computation(*, reject, resolve):
            def on_resolved(value):
                try:
                    mapped = fn(value)
                except Exception as exc:
                    reject(exc)
                    return
                resolve(mapped)
            return source.fork(on_rejected=reject, on_resolved=on_resolved)

        return Future(computation)

    def chain(self, fn: Callable[[A], 'Future[E, B]']) -> 'Future[E, B]':
        """Sequence ``fn``'s Future after this one, flattening one level."""
        source = self

        def computation(*, reject, resolve):
            switch = _Switch()

            def on_resolved(value):
                try:
                    inner = fn(value)
                except Exception as exc:
                    reject(exc)
                    return
                if not isinstance(inner, Future):
                    reject(NotAFutureError(inner))
                    return
                switch.enter(1, inner.fork(on_rejected=reject, on_resolved=resolve))

            switch.enter(0, source.fork(on_rejected=reject, on_resolved=on_resolved))
            return switch

        return Future(computation)

    and_then = chain

    def map_rejected(self, fn: Callable[[E], F]) -> 'Future[F, A]':
        source = self

        def computation(*, reject, resolve):
            def on_rejected(error):
                try:
                    mapped = fn(error)
                except Exception as exc:
                    reject(exc)
                    return
                reject(mapped)
            return source.fork(on_rejected=on_rejected, on_resolved=resolve)

        return Future(computation)

    def bimap(self, on_rejected: Callable[[E], F], on_resolved: Callable[[A], B]) -> 'Future[F, B]':
        return self.map_rejected(on_rejected).map(on_resolved)

    def chain_rejected(self, fn: Callable[[E], 'Future[F, A]']) -> 'Future[F, A]':
        """Recover from a rejection by forking the Future ``fn`` returns."""
        source = self

        def computation(*, reject, resolve):
            switch = _Switch()

            def on_rejected(error):
                try:
                    inner = fn(error)
                except Exception as exc:
                    reject(exc)
                    return
                if not isinstance(inner, Future):
                    reject(NotAFutureError(inner))
                    return
                switch.enter(1, inner.fork(on_rejected=reject, on_resolved=resolve))

            switch.enter(0, source.fork(on_rejected=on_rejected, on_resolved=resolve))
            return switch

        return Future(computation)

    def fold(self, on_rejected: Callable[[E], B], on_resolved: Callable[[A], B]) -> 'Future[Any, B]':
        """Absorb both outcomes into a resolution."""
        source = self

        def computation(*, reject, resolve):
            def settle_with(fn):
                def handler(payload):
                    try:
                        folded = fn(payload)
                    except Exception as exc:
                        reject(exc)
                        return
                    resolve(folded)
                return handler
            return source.fork(on_rejected=settle_with(on_rejected), on_resolved=settle_with(on_resolved))

        return Future(computation)

    def swap(self) -> 'Future[A, E]':
        source = self

        def computation(*, reject, resolve):
            return source.fork(on_rejected=resolve, on_resolved=reject)

        return Future(computation)

    # ─── Parallel ───

    def ap(self, other: 'Future[E, Any]') -> 'Future[E, Any]':
        """Apply the function this Future resolves with to ``other``'s value."""
        return lift(lambda fn, value: fn(value), [self, other])

    def both(self, other: 'Future[E, B]') -> 'Future[E, tuple]':
        return lift(lambda a, b: (a, b), [self, other])


# ─── Parallel composition ───


class _Gather:
    """Per-fork state of a lift: collected values and the settled flag."""

    __slots__ = ("lock", "values", "remaining", "done")

    def __init__(self, count: int):
        self.lock = threading.Lock()
        self.values: List[Any] = [_PENDING] * count
        self.remaining = count
        self.done = False


def lift(fn: Callable[..., B], futures: Iterable[Future]) -> Future[Any, B]:
    """Combine independent Futures with an N-ary function.

    Resolves with ``fn(v1, ..., vN)`` once every source resolved, in source
    order, or rejects with the first rejection observed.
    """
    sources = list(futures)
    for source in sources:
        if not isinstance(source, Future):
            raise TypeError(f"lift expects Futures, got {type(source).__name__}")

    def computation(*, reject, resolve):
        if not sources:
            resolve(fn())
            return None

        gather = _Gather(len(sources))
        handles: List[Callable[[], Any]] = []

        def on_rejected(error):
            with gather.lock:
                if gather.done:
                    return
                gather.done = True
            reject(error)

        def resolver(index):
            def on_resolved(value):
                with gather.lock:
                    if gather.done:
                        return
                    gather.values[index] = value
                    gather.remaining -= 1
                    if gather.remaining:
                        return
                    gather.done = True
                    values = list(gather.values)
                try:
                    combined = fn(*values)
                except Exception as exc:
                    reject(exc)
                    return
                resolve(combined)
            return on_resolved

        for index, source in enumerate(sources):
            with gather.lock:
                if gather.done:
                    break
            handles.append(source.fork(on_rejected=on_rejected, on_resolved=resolver(index)))
        return _CancelAll(handles)

    return Future(computation)


def lift2(fn: Callable[[Any, Any], B], first: Future, second: Future) -> Future[Any, B]:
    return lift(fn, [first, second])


def lift3(fn: Callable[[Any, Any, Any], B], first: Future, second: Future, third: Future) -> Future[Any, B]:
    return lift(fn, [first, second, third])


def traverse(
    of: Callable[[Any], Future],
    fn: Callable[[T], Future[E, A]],
    items: Iterable[T],
) -> Future[E, List[A]]:
    """Map ``items`` through ``fn`` and collect the results in input order.

    ``of`` builds the Future for an empty input. ``fn`` is only called when
    the returned Future is forked.
    """
    elements = list(items)

    def computation(*, reject, resolve):
        if not elements:
            return of([]).fork(on_rejected=reject, on_resolved=resolve)
        futures = []
        for element in elements:
            try:
                future = fn(element)
            except Exception as exc:
                reject(exc)
                return None
            if not isinstance(future, Future):
                reject(NotAFutureError(future))
                return None
            futures.append(future)
        return lift(lambda *values: list(values), futures).fork(
            on_rejected=reject, on_resolved=resolve,
        )

    return Future(computation)


def sequence(futures: Sequence[Future[E, A]]) -> Future[E, List[A]]:
    """Run ``futures`` in parallel, resolving with their values in order."""
    return traverse(Future.of, identity, futures)


__all__ = [
    'CancelHandle',
    'Future',
    'identity',
    'lift',
    'lift2',
    'lift3',
    'sequence',
    'traverse',
]
