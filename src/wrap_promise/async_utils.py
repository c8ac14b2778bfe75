import asyncio
import atexit
import concurrent.futures
import inspect
import logging
import os
import threading
import traceback
import typing
from typing import Optional

from .callback import Callback, ErrorFirstCallback
from .exceptions import NotAwaitableError

logger = logging.getLogger(__name__)

T = typing.TypeVar("T")


class LoopThread:
    """An event loop running in a daemon thread.

    Used to resolve awaitables for callback-style calls made from code that has no
    running event loop of its own. The loop is started lazily and stopped at exit."""

    def __init__(self):
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._loop_creation_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._thread_exception: Optional[BaseException] = None
        self._thread_traceback: Optional[str] = None
        self._owner_pid: Optional[int] = None
        self._stopping: Optional[asyncio.Event] = None
        atexit.register(self.close)

    def _start_loop(self) -> asyncio.AbstractEventLoop:
        with self._loop_creation_lock:
            if self._loop and self._loop.is_running():
                # another thread won the race and started the loop already
                return self._loop

            is_ready = threading.Event()

            def thread_inner():
                async def loop_inner():
                    self._loop = asyncio.get_running_loop()
                    self._stopping = asyncio.Event()
                    is_ready.set()
                    await self._stopping.wait()  # wait until told to stop

                try:
                    asyncio.run(loop_inner())
                except BaseException as exc:
                    self._thread_exception = exc
                    self._thread_traceback = traceback.format_exc()
                    raise

            self._owner_pid = os.getpid()
            thread = threading.Thread(target=thread_inner, name="wrap-promise-loop", daemon=True)
            thread.start()
            is_ready.wait()
            self._thread = thread
            logger.debug("Started background event loop thread %s", thread.name)
            return self._loop

    def close(self) -> None:
        # getattr protects against gc races when we get here during interpreter shutdown
        if getattr(self, "_thread", None) is not None:
            if self._loop is not None and not self._loop.is_closed():
                # This also wakes up an idle loop
                self._loop.call_soon_threadsafe(self._stopping.set)
            self._thread.join()
            self._thread = None
            self._loop = None
            self._owner_pid = None

    def get_loop(self, start: bool = False) -> Optional[asyncio.AbstractEventLoop]:
        if self._thread and not self._thread.is_alive():
            if self._owner_pid == os.getpid():
                logger.error(
                    f"""Event loop thread unexpectedly died.
Cause: {type(self._thread_exception)}
Traceback:{self._thread_traceback}"""
                )
                raise RuntimeError("Event loop thread unexpectedly died")

            # we are in a forked child, the thread didn't survive the fork
            self._thread = None
            self._loop = None

        if self._loop is None and start:
            return self._start_loop()
        return self._loop

    @property
    def thread(self) -> Optional[threading.Thread]:
        return self._thread


_loop_thread = LoopThread()

# The event loop only keeps weak references to tasks
_pending_tasks: set = set()


def get_loop_thread() -> LoopThread:
    return _loop_thread


def is_awaitable(value) -> bool:
    return inspect.isawaitable(value) or isinstance(value, concurrent.futures.Future)


async def resolve(awaitable: typing.Awaitable[T]) -> T:
    # run_coroutine_threadsafe and create_task only accept coroutines
    if isinstance(awaitable, concurrent.futures.Future):
        return await asyncio.wrap_future(awaitable)
    return await awaitable


def _get_running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def attach_callback(func, result, callback: ErrorFirstCallback) -> None:
    """Report the outcome of `result` (returned by `func`) to `callback` once it settles.

    Runs on the caller's event loop if there is one, otherwise on the background loop thread.
    Never invokes the callback before returning."""
    if not is_awaitable(result):
        raise NotAwaitableError(func, result)

    on_done = Callback(callback)
    loop = _get_running_loop()
    if loop is not None:
        task = loop.create_task(resolve(result))
        _pending_tasks.add(task)
        task.add_done_callback(_pending_tasks.discard)
        task.add_done_callback(on_done)
        return

    loop = _loop_thread.get_loop(start=True)

    def schedule():
        task = loop.create_task(resolve(result))
        _pending_tasks.add(task)
        task.add_done_callback(_pending_tasks.discard)
        task.add_done_callback(on_done)

    loop.call_soon_threadsafe(schedule)
