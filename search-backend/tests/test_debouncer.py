import asyncio

import pytest

from app.search import Debouncer


@pytest.mark.asyncio
async def test_only_the_last_value_fires():
    seen = []

    async def fn(value):
        seen.append(value)
        return len(value)

    debounced = Debouncer(fn, delay=0.01)
    f1 = debounced("6")
    f2 = debounced("65")
    f3 = debounced("658")
    assert debounced.pending
    assert await f3 == 3
    assert seen == ["658"]
    assert f1.cancelled() and f2.cancelled()
    assert not debounced.pending


@pytest.mark.asyncio
async def test_cancel_drops_pending_call():
    seen = []

    async def fn(value):
        seen.append(value)

    debounced = Debouncer(fn, delay=0.01)
    fut = debounced("x")
    debounced.cancel()
    await asyncio.sleep(0.03)
    assert seen == []
    assert fut.cancelled()


@pytest.mark.asyncio
async def test_started_call_runs_to_completion():
    release = asyncio.Event()
    done = []

    async def fn(value):
        await release.wait()
        done.append(value)
        return value

    debounced = Debouncer(fn, delay=0.0)
    first = debounced("a")
    await asyncio.sleep(0.01)  # timer fired, fn("a") is running
    second = debounced("b")
    release.set()
    assert await first == "a"
    assert await second == "b"
    assert done == ["a", "b"]


@pytest.mark.asyncio
async def test_exceptions_reach_the_caller():
    async def fn(value):
        raise ValueError(value)

    debounced = Debouncer(fn, delay=0.0)
    with pytest.raises(ValueError):
        await debounced("bad")
