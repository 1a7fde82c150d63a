import asyncio
import threading
from dataclasses import dataclass, replace

import pytest

from catalog.core.async_result import UNINITIALIZED, AsyncResult, Fail, Loading, Success
from catalog.core.state_container import StateContainer, UsageError


@dataclass(frozen=True)
class CounterState:
    count: int = 0
    label: str = ""
    result: AsyncResult = UNINITIALIZED


async def settle(rounds: int = 10):
    """Let the loop run queued collector/handler steps."""
    for _ in range(rounds):
        await asyncio.sleep(0)


def recording_reducer(seen):
    def reducer(state, result):
        seen.append(result)
        return replace(state, result=result)

    return reducer


# ---------------------------------------------------------------------------
# set_state / submit_action
# ---------------------------------------------------------------------------

def test_set_state_replaces_snapshot():
    container = StateContainer(CounterState())
    before = container.get_state()

    container.set_state(lambda s: replace(s, count=s.count + 1))

    assert container.get_state().count == 1
    assert before.count == 0


def test_set_state_is_atomic_across_threads():
    container = StateContainer(CounterState())

    def bump():
        for _ in range(500):
            container.set_state(lambda s: replace(s, count=s.count + 1))

    threads = [threading.Thread(target=bump) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert container.get_state().count == 4000


def test_submit_action_delegates_to_handler():
    received = []
    container = StateContainer(CounterState(), on_action=received.append)

    container.submit_action("go")

    assert received == ["go"]


def test_submit_action_without_handler_is_usage_error():
    container = StateContainer(CounterState())
    with pytest.raises(UsageError):
        container.submit_action("go")


# ---------------------------------------------------------------------------
# run_async
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_run_async_publishes_loading_then_success():
    seen = []
    container = StateContainer(CounterState())

    async def operation():
        return 42

    task = container.run_async(operation, recording_reducer(seen))
    assert container.get_state().result == Loading()

    await task

    assert seen == [Loading(), Success(42)]
    assert container.get_state().result == Success(42)


@pytest.mark.asyncio
async def test_run_async_captures_failure_into_state():
    seen = []
    container = StateContainer(CounterState())
    error = ValueError("nope")

    async def operation():
        raise error

    task = container.run_async(operation, recording_reducer(seen))
    await task

    assert task.exception() is None
    assert seen == [Loading(), Fail(error)]


@pytest.mark.asyncio
async def test_run_async_retains_previous_value_during_loading_and_fail():
    seen = []
    container = StateContainer(CounterState(result=Success(7)))
    error = RuntimeError("down")

    async def operation():
        raise error

    await container.run_async(operation, recording_reducer(seen), retain=lambda s: s.result)

    assert seen == [Loading(retained=7), Fail(error, retained=7)]
    assert container.get_state().result.current_value() == 7


@pytest.mark.asyncio
async def test_run_async_transform_maps_success_value():
    container = StateContainer(CounterState())

    async def operation():
        return "abcd"

    await container.run_async(operation, lambda s, r: replace(s, result=r), transform=len)

    assert container.get_state().result == Success(4)


@pytest.mark.asyncio
async def test_run_async_transform_error_becomes_fail():
    container = StateContainer(CounterState())

    async def operation():
        return "abcd"

    def bad_transform(value):
        raise KeyError(value)

    await container.run_async(operation, lambda s, r: replace(s, result=r), transform=bad_transform)

    result = container.get_state().result
    assert isinstance(result, Fail)
    assert isinstance(result.error, KeyError)


@pytest.mark.asyncio
async def test_run_async_reducer_error_on_success_becomes_fail():
    container = StateContainer(CounterState())

    async def operation():
        return 1

    def reducer(state, result):
        if isinstance(result, Success):
            raise KeyError("reducer")
        return replace(state, result=result)

    task = container.run_async(operation, reducer)
    await task

    assert task.exception() is None
    result = container.get_state().result
    assert isinstance(result, Fail)
    assert isinstance(result.error, KeyError)


@pytest.mark.asyncio
async def test_run_async_calls_keep_their_own_order_when_interleaved():
    seen_a, seen_b = [], []
    container = StateContainer(CounterState())
    gate_a, gate_b = asyncio.Event(), asyncio.Event()

    async def op_a():
        await gate_a.wait()
        return "a"

    async def op_b():
        await gate_b.wait()
        return "b"

    task_a = container.run_async(op_a, recording_reducer(seen_a))
    task_b = container.run_async(op_b, recording_reducer(seen_b))
    gate_b.set()
    await task_b
    gate_a.set()
    await task_a

    assert seen_a == [Loading(), Success("a")]
    assert seen_b == [Loading(), Success("b")]
    # Last writer wins across independent calls.
    assert container.get_state().result == Success("a")


@pytest.mark.asyncio
async def test_close_before_completion_prevents_further_publication():
    seen = []
    container = StateContainer(CounterState())
    started, release = asyncio.Event(), asyncio.Event()

    async def operation():
        started.set()
        await release.wait()
        return 1

    task = container.run_async(operation, recording_reducer(seen))
    await started.wait()
    container.close()
    release.set()
    await asyncio.wait([task])
    await settle()

    assert task.cancelled()
    assert seen == [Loading()]
    assert container.get_state().result == Loading()


@pytest.mark.asyncio
async def test_closed_container_rejects_new_work():
    container = StateContainer(CounterState())
    await container.aclose()

    async def operation():
        return 1

    with pytest.raises(UsageError):
        container.run_async(operation, lambda s, r: s)
    with pytest.raises(UsageError):
        container.observe_state(lambda s: None)
    assert container.get_state().result == UNINITIALIZED


@pytest.mark.asyncio
async def test_async_context_manager_cancels_tasks_on_exit():
    release = asyncio.Event()

    async def operation():
        await release.wait()

    async with StateContainer(CounterState()) as container:
        task = container.run_async(operation, lambda s, r: replace(s, result=r))

    assert task.cancelled()


# ---------------------------------------------------------------------------
# run_async_callbacks
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_callbacks_variant_requires_a_callback():
    container = StateContainer(CounterState())

    async def operation():
        return 1

    with pytest.raises(UsageError):
        container.run_async_callbacks(operation)
    with pytest.raises(ValueError):
        container.run_async_callbacks(operation, on_success=None, on_failure=None)


@pytest.mark.asyncio
async def test_callbacks_variant_routes_result_and_error():
    successes, failures = [], []
    container = StateContainer(CounterState())
    error = ConnectionError("offline")

    async def ok():
        return "value"

    async def broken():
        raise error

    await container.run_async_callbacks(ok, on_success=successes.append, on_failure=failures.append)
    await container.run_async_callbacks(broken, on_success=successes.append, on_failure=failures.append)
    await container.run_async_callbacks(broken, on_success=successes.append)

    assert successes == ["value"]
    assert failures == [error]
    assert container.get_state() == CounterState()


# ---------------------------------------------------------------------------
# run_async_stream
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_stream_publishes_success_per_element():
    seen = []
    container = StateContainer(CounterState())

    async def numbers():
        for n in (1, 2, 3):
            yield n

    await container.run_async_stream(numbers(), recording_reducer(seen))

    assert seen == [Loading(), Success(1), Success(2), Success(3)]


@pytest.mark.asyncio
async def test_stream_failure_keeps_last_value():
    seen = []
    container = StateContainer(CounterState())
    error = RuntimeError("stream broke")

    async def numbers():
        yield 1
        raise error

    await container.run_async_stream(numbers(), recording_reducer(seen), retain=lambda s: s.result)

    assert seen == [Loading(), Success(1), Fail(error, retained=1)]


@pytest.mark.asyncio
async def test_stream_accepts_plain_iterables():
    container = StateContainer(CounterState())

    await container.run_async_stream(["x", "y"], lambda s, r: replace(s, result=r))

    assert container.get_state().result == Success("y")


@pytest.mark.asyncio
async def test_stream_stops_when_container_closes():
    seen = []
    container = StateContainer(CounterState())
    release = asyncio.Event()

    async def numbers():
        yield 1
        await release.wait()
        yield 2

    task = container.run_async_stream(numbers(), recording_reducer(seen))
    await settle()
    container.close()
    release.set()
    await asyncio.wait([task])
    await settle()

    assert task.cancelled()
    assert seen == [Loading(), Success(1)]


# ---------------------------------------------------------------------------
# observe_state / observe_async_result
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_observe_selector_emits_current_then_only_changes():
    emitted = []
    container = StateContainer(CounterState())
    container.observe_state(emitted.append, lambda s: s.count)
    await settle()

    assert emitted == [0]

    container.set_state(lambda s: replace(s, label="renamed"))
    await settle()
    container.set_state(lambda s: replace(s, count=1))
    await settle()
    container.set_state(lambda s: replace(s, count=1, label="again"))
    await settle()

    assert emitted == [0, 1]
    await container.aclose()


@pytest.mark.asyncio
async def test_observe_whole_state():
    emitted = []
    container = StateContainer(CounterState())
    container.observe_state(emitted.append)
    await settle()

    container.set_state(lambda s: replace(s, label="a"))
    await settle()
    container.set_state(lambda s: s)
    await settle()

    assert emitted == [CounterState(), CounterState(label="a")]
    await container.aclose()


@pytest.mark.asyncio
async def test_observe_combined_selectors():
    emitted = []
    container = StateContainer(CounterState())
    container.observe_state(lambda count, label: emitted.append((count, label)), lambda s: s.count, lambda s: s.label)
    await settle()

    container.set_state(lambda s: replace(s, label="x"))
    await settle()
    container.set_state(lambda s: replace(s, result=Success(1)))
    await settle()
    container.set_state(lambda s: replace(s, count=2))
    await settle()

    assert emitted == [(0, ""), (0, "x"), (2, "x")]
    await container.aclose()


@pytest.mark.asyncio
async def test_observe_switch_latest_cancels_stale_handler():
    started, finished = [], []
    gate = asyncio.Event()
    container = StateContainer(CounterState())

    async def handler(count):
        started.append(count)
        await gate.wait()
        finished.append(count)

    container.observe_state(handler, lambda s: s.count)
    await settle()
    container.set_state(lambda s: replace(s, count=1))
    await settle()
    container.set_state(lambda s: replace(s, count=2))
    await settle()
    gate.set()
    await settle()

    assert started == [0, 1, 2]
    assert finished == [2]
    await container.aclose()


@pytest.mark.asyncio
async def test_close_cancels_running_observer_handler():
    finished = []
    gate = asyncio.Event()
    container = StateContainer(CounterState())

    async def handler(count):
        await gate.wait()
        finished.append(count)

    container.observe_state(handler, lambda s: s.count)
    await settle()
    gate.set()
    container.close()
    await settle()

    assert finished == []


@pytest.mark.asyncio
async def test_set_state_from_another_thread_wakes_observer():
    emitted = []
    container = StateContainer(CounterState())
    container.observe_state(emitted.append, lambda s: s.count)
    await settle()

    await asyncio.to_thread(container.set_state, lambda s: replace(s, count=5))
    await settle()

    assert emitted == [0, 5]
    await container.aclose()


@pytest.mark.asyncio
async def test_observe_async_result_fires_on_success_and_fail():
    successes, failures = [], []
    error = RuntimeError("bad")
    container = StateContainer(CounterState())
    container.observe_async_result(lambda s: s.result, on_success=successes.append, on_fail=failures.append)
    await settle()

    for result in (Loading(), Success(1), Success(1), Loading(retained=1), Fail(error, retained=1)):
        container.set_state(lambda s, result=result: replace(s, result=result))
        await settle()

    assert successes == [1]
    assert failures == [error]
    await container.aclose()


@pytest.mark.asyncio
async def test_observe_async_result_requires_a_callback():
    container = StateContainer(CounterState())
    with pytest.raises(UsageError):
        container.observe_async_result(lambda s: s.result)


# ---------------------------------------------------------------------------
# effects
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_effects_queue_until_consumed_in_order():
    container = StateContainer(CounterState())
    container.send_effect("first")
    container.send_effect("second")

    assert container.pending_effects == 2
    assert await container.next_effect() == "first"
    assert await container.next_effect() == "second"

    # Consumed effects are not replayed to a later consumer.
    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(container.next_effect(), timeout=0.05)


@pytest.mark.asyncio
async def test_observe_effects_delivers_each_effect_once():
    received = []
    container = StateContainer(CounterState())
    container.send_effect("queued-before-subscribe")
    container.observe_effects(received.append)
    container.send_effect("after")
    await settle()

    assert received == ["queued-before-subscribe", "after"]
    assert container.drain_effects() == []
    await container.aclose()
