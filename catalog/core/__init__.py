"""
Core state primitives.

- AsyncResult: lifecycle of an asynchronous result
- StateContainer: single-owner state cell + effect queue + task scope
"""

from .async_result import UNINITIALIZED, AsyncResult, Fail, Loading, Success, Uninitialized
from .state_container import StateContainer, UsageError

__all__ = [
    "UNINITIALIZED",
    "AsyncResult",
    "Fail",
    "Loading",
    "Success",
    "Uninitialized",
    "StateContainer",
    "UsageError",
]
