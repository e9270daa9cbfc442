from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class Lazy(Generic[T]):
    """A computation evaluated on first `force()` and cached afterwards."""

    __slots__ = ("_thunk", "_value", "_evaluated")

    def __init__(self, thunk: Callable[[], T]) -> None:
        self._thunk: Callable[[], T] | None = thunk
        self._value: T | None = None
        self._evaluated = False

    @property
    def evaluated(self) -> bool:
        return self._evaluated

    def force(self) -> T:
        if not self._evaluated:
            assert self._thunk is not None
            self._value = self._thunk()
            self._evaluated = True
            # Drop the closure so the captured World can be collected.
            self._thunk = None
        return self._value  # type: ignore[return-value]


def delay(thunk: Callable[[], T]) -> Lazy[T]:
    return Lazy(thunk)


def force(promise: Lazy[T]) -> T:
    return promise.force()
