"""
MVI state container.

A ``StateContainer`` owns one immutable state value, a queue of one-shot
effects, and the tasks it starts on behalf of a screen. Features hold a
container and configure it with an action handler:

    container = StateContainer(ProductsState(), on_action=self._on_action)
    container.run_async(use_case, lambda s, r: replace(s, products_response=r))

Rules:
- ``set_state`` is the only write path; updates are read-modify-write under a lock
- ``run_async*`` never raise operation errors to the caller, they land in state
- usage errors (missing callbacks, closed container) raise immediately
- ``close()`` cancels every task the container started
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Generic,
    Iterable,
    List,
    Optional,
    Set,
    TypeVar,
    Union,
)

from catalog.core.async_result import AsyncResult, Fail, Loading, Success

logger = logging.getLogger(__name__)

S = TypeVar("S")
A = TypeVar("A")
E = TypeVar("E")
T = TypeVar("T")
R = TypeVar("R")

RetainSelector = Callable[[S], AsyncResult[Any]]

_UNSET = object()


class UsageError(ValueError):
    """Raised synchronously when a caller breaks a container precondition."""


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def _invoke(handler: Callable[[Any], Any], value: Any) -> None:
    await _maybe_await(handler(value))


class StateContainer(Generic[S, A, E]):
    """Single-owner state cell with effect queue and task scope."""

    def __init__(
        self,
        initial_state: S,
        on_action: Optional[Callable[[A], Any]] = None,
        name: Optional[str] = None,
    ) -> None:
        self.name = name or type(initial_state).__name__
        self._state: S = initial_state
        self._on_action = on_action
        self._lock = threading.RLock()
        self._effects: "asyncio.Queue[E]" = asyncio.Queue()
        self._listeners: List[asyncio.Event] = []
        self._tasks: Set[asyncio.Task] = set()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._closed = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    def get_state(self) -> S:
        return self._state

    def set_state(self, update: Callable[[S], S]) -> S:
        """Replace the state with ``update(current)`` and notify observers."""
        with self._lock:
            new_state = update(self._state)
            self._state = new_state
        self._notify()
        return new_state

    def _notify(self) -> None:
        listeners = list(self._listeners)
        if not listeners:
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        for event in listeners:
            if self._loop is None or running is self._loop:
                event.set()
            else:
                self._loop.call_soon_threadsafe(event.set)

    # ------------------------------------------------------------------
    # Actions & effects
    # ------------------------------------------------------------------

    def submit_action(self, action: A) -> Any:
        if self._on_action is None:
            raise UsageError(f"{self.name}: no action handler configured")
        return self._on_action(action)

    def send_effect(self, effect: E) -> None:
        """Queue a one-shot effect; never blocks and never drops."""
        if self._loop is not None:
            try:
                running = asyncio.get_running_loop()
            except RuntimeError:
                running = None
            if running is not self._loop:
                self._loop.call_soon_threadsafe(self._effects.put_nowait, effect)
                return
        self._effects.put_nowait(effect)

    @property
    def pending_effects(self) -> int:
        return self._effects.qsize()

    async def next_effect(self) -> E:
        return await self._effects.get()

    def drain_effects(self) -> List[E]:
        """Take every effect queued right now without waiting."""
        drained: List[E] = []
        while True:
            try:
                drained.append(self._effects.get_nowait())
            except asyncio.QueueEmpty:
                return drained

    async def effects(self) -> AsyncIterator[E]:
        while True:
            yield await self._effects.get()

    def observe_effects(self, handler: Callable[[E], Any]) -> asyncio.Task:
        self._ensure_open()

        async def _consume() -> None:
            async for effect in self.effects():
                await _maybe_await(handler(effect))

        return self._launch(_consume())

    # ------------------------------------------------------------------
    # Async work
    # ------------------------------------------------------------------

    def run_async(
        self,
        operation: Callable[[], Awaitable[T]],
        reducer: Callable[[S, AsyncResult[Any]], S],
        *,
        retain: Optional[RetainSelector] = None,
        transform: Optional[Callable[[T], R]] = None,
    ) -> asyncio.Task:
        """
        Run ``operation`` in a task and fold its lifecycle into state.

        Publishes Loading before the task starts, then Success (after
        ``transform`` when given) or Fail. Errors never propagate.
        """
        self._ensure_open()
        self.set_state(lambda s: reducer(s, Loading(self._retained(s, retain))))

        async def _run() -> None:
            try:
                result = await _maybe_await(operation())
                value = transform(result) if transform is not None else result
                self.set_state(lambda s: reducer(s, Success(value)))
            except asyncio.CancelledError:
                raise
            except Exception as error:
                logger.warning("%s: async operation failed: %s", self.name, error)
                self.set_state(lambda s: reducer(s, Fail(error, self._retained(s, retain))))

        return self._launch(_run())

    def run_async_callbacks(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        on_success: Optional[Callable[[T], Any]] = None,
        on_failure: Optional[Callable[[Exception], Any]] = None,
    ) -> asyncio.Task:
        if on_success is None and on_failure is None:
            raise UsageError("on_success and on_failure cannot both be None")
        self._ensure_open()

        async def _run() -> None:
            try:
                result = await _maybe_await(operation())
                if on_success is not None:
                    await _maybe_await(on_success(result))
            except asyncio.CancelledError:
                raise
            except Exception as error:
                if on_failure is None:
                    logger.warning("%s: unhandled async failure: %s", self.name, error)
                    return
                await _maybe_await(on_failure(error))

        return self._launch(_run())

    def run_async_stream(
        self,
        source: Union[AsyncIterator[T], Iterable[T]],
        reducer: Callable[[S, AsyncResult[Any]], S],
        *,
        retain: Optional[RetainSelector] = None,
    ) -> asyncio.Task:
        """Publish Loading, then a fresh Success for every element of ``source``."""
        self._ensure_open()
        self.set_state(lambda s: reducer(s, Loading(self._retained(s, retain))))

        async def _collect() -> None:
            try:
                if hasattr(source, "__aiter__"):
                    async for item in source:
                        self.set_state(lambda s, item=item: reducer(s, Success(item)))
                else:
                    for item in source:
                        self.set_state(lambda s, item=item: reducer(s, Success(item)))
            except asyncio.CancelledError:
                raise
            except Exception as error:
                logger.warning("%s: stream failed: %s", self.name, error)
                self.set_state(lambda s: reducer(s, Fail(error, self._retained(s, retain))))

        return self._launch(_collect())

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def observe_state(self, on_each: Callable[..., Any], *selectors: Callable[[S], Any]) -> asyncio.Task:
        """
        Call ``on_each`` with the current state (or selected values) and again
        on every distinct change. A newer value cancels an in-flight handler.

        With two or more selectors the handler receives one positional
        argument per selector.
        """
        self._ensure_open()
        if not selectors:
            return self._launch(self._collect_latest(lambda s: s, lambda s: on_each(s)))
        if len(selectors) == 1:
            selector = selectors[0]
            return self._launch(self._collect_latest(selector, lambda v: on_each(v)))
        return self._launch(
            self._collect_latest(
                lambda s: tuple(select(s) for select in selectors),
                lambda values: on_each(*values),
            )
        )

    def observe_async_result(
        self,
        selector: Callable[[S], AsyncResult[T]],
        *,
        on_success: Optional[Callable[[T], Any]] = None,
        on_fail: Optional[Callable[[BaseException], Any]] = None,
    ) -> asyncio.Task:
        if on_success is None and on_fail is None:
            raise UsageError("on_success and on_fail cannot both be None")
        self._ensure_open()

        def _dispatch(result: AsyncResult[T]) -> Any:
            if on_success is not None and isinstance(result, Success):
                return on_success(result.value)
            if on_fail is not None and isinstance(result, Fail):
                return on_fail(result.error)
            return None

        return self._launch(self._collect_latest(selector, _dispatch))

    async def _collect_latest(self, selector: Callable[[S], Any], handler: Callable[[Any], Any]) -> None:
        changed = asyncio.Event()
        self._listeners.append(changed)
        last: Any = _UNSET
        in_flight: Optional[asyncio.Task] = None
        try:
            while True:
                changed.clear()
                value = selector(self._state)
                if last is _UNSET or value != last:
                    last = value
                    if in_flight is not None and not in_flight.done():
                        in_flight.cancel()
                    in_flight = self._launch(_invoke(handler, value))
                    in_flight.add_done_callback(self._log_handler_error)
                await changed.wait()
        finally:
            self._listeners.remove(changed)
            if in_flight is not None and not in_flight.done():
                in_flight.cancel()

    def _log_handler_error(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("%s: state observer raised: %s", self.name, error, exc_info=error)

    # ------------------------------------------------------------------
    # Scope
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Cancel every task started by this container."""
        self._closed = True
        for task in list(self._tasks):
            task.cancel()

    async def aclose(self) -> None:
        self.close()
        tasks = list(self._tasks)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def __aenter__(self) -> "StateContainer[S, A, E]":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _ensure_open(self) -> None:
        if self._closed:
            raise UsageError(f"{self.name}: container is closed")
        # Tasks are bound to the caller's loop; fail before touching state.
        asyncio.get_running_loop()

    def _launch(self, coro: Awaitable[None]) -> asyncio.Task:
        loop = asyncio.get_running_loop()
        if self._loop is None:
            self._loop = loop
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @staticmethod
    def _retained(state: S, retain: Optional[RetainSelector]) -> Any:
        if retain is None:
            return None
        return retain(state).current_value()
