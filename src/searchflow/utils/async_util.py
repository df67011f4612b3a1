import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Awaitable, TypeVar

T = TypeVar("T")


def run_sync(coro: Awaitable[T]) -> T:
    """Drive ``coro`` to completion and return its result.

    Blocking entry points (``WebSearchTool.call``, ``run_one``) may be reached
    from inside a running event loop, e.g. a notebook or an async host. The
    loop in this thread cannot be re-entered, so the coroutine then gets a
    fresh loop on a single worker thread and this call blocks until it is done.
    Exceptions raised by the coroutine propagate unchanged.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="searchflow-sync") as executor:
        return executor.submit(asyncio.run, coro).result()
