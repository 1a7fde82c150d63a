"""
Async result lifecycle type.

An ``AsyncResult`` describes where an asynchronous operation currently is:

- ``Uninitialized``: nothing has been requested yet
- ``Loading``: a request is in flight (optionally keeping the last known value)
- ``Success``: the operation finished with a value
- ``Fail``: the operation raised (optionally keeping the last known value)

Results are immutable; state holders replace them on every transition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class AsyncResult(Generic[T]):
    """Base of the four result variants. Not instantiated directly."""

    complete: bool = False
    should_load: bool = False

    def current_value(self) -> Optional[T]:
        return None

    def __call__(self) -> Optional[T]:
        return self.current_value()


@dataclass(frozen=True)
class Uninitialized(AsyncResult[T]):
    should_load = True


@dataclass(frozen=True)
class Loading(AsyncResult[T]):
    retained: Optional[T] = None

    def current_value(self) -> Optional[T]:
        return self.retained


@dataclass(frozen=True)
class Success(AsyncResult[T]):
    value: T
    complete = True

    def current_value(self) -> Optional[T]:
        return self.value


@dataclass(frozen=True)
class Fail(AsyncResult[T]):
    error: BaseException
    retained: Optional[T] = None
    complete = True
    should_load = True

    def current_value(self) -> Optional[T]:
        return self.retained


UNINITIALIZED: Uninitialized = Uninitialized()
