"""
Result<T, E> - a two-variant success-or-failure value

Result is the synchronous sibling of Future: it already holds its outcome.
Future.from_result() is the natural transformation between the two.

Usage:
    result = Ok(42)
    result.map(lambda x: x * 2).unwrap()  # 84

    error = Err("failed")
    error.unwrap_or(0)  # 0
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from .exceptions import UnwrapError

T = TypeVar('T')
E = TypeVar('E')
U = TypeVar('U')


@dataclass(frozen=True)
class Result(Generic[T, E]):
    """Either Ok(value) or Err(error)."""
    _value: Any
    _is_ok: bool

    @classmethod
    def ok(cls, value: T) -> 'Result[T, E]':
        """Create Ok variant"""
        return cls(_value=value, _is_ok=True)

    @classmethod
    def err(cls, error: E) -> 'Result[T, E]':
        """Create Err variant"""
        return cls(_value=error, _is_ok=False)

    def is_ok(self) -> bool:
        return self._is_ok

    def is_err(self) -> bool:
        return not self._is_ok

    def unwrap(self) -> T:
        """Unwrap value or raise UnwrapError"""
        if self._is_ok:
            return self._value
        raise UnwrapError(f"Called unwrap() on Err: {self._value!r}")

    def unwrap_or(self, default: T) -> T:
        return self._value if self._is_ok else default

    def ok_value(self) -> Optional[T]:
        """Get Ok value if present"""
        return self._value if self._is_ok else None

    def err_value(self) -> Optional[E]:
        """Get Err value if present"""
        return None if self._is_ok else self._value

    def map(self, f: Callable[[T], U]) -> 'Result[U, E]':
        if self._is_ok:
            return Result.ok(f(self._value))
        return self  # type: ignore[return-value]

    def map_err(self, f: Callable[[E], U]) -> 'Result[T, U]':
        if self._is_ok:
            return self  # type: ignore[return-value]
        return Result.err(f(self._value))

    def flat_map(self, f: Callable[[T], 'Result[U, E]']) -> 'Result[U, E]':
        """FlatMap for chaining Results"""
        if self._is_ok:
            return f(self._value)
        return self  # type: ignore[return-value]

    def and_then(self, f: Callable[[T], 'Result[U, E]']) -> 'Result[U, E]':
        """Alias for flat_map - railway-oriented programming"""
        return self.flat_map(f)

    def match(self, on_ok: Callable[[T], U], on_err: Callable[[E], U]) -> U:
        """Pattern matching"""
        return on_ok(self._value) if self._is_ok else on_err(self._value)

    def __repr__(self) -> str:
        if self._is_ok:
            return f"Ok({self._value!r})"
        return f"Err({self._value!r})"


def Ok(value: T) -> Result[T, Any]:
    return Result.ok(value)


def Err(error: E) -> Result[Any, E]:
    return Result.err(error)


__all__ = [
    'Result',
    'Ok',
    'Err',
]
