import asyncio
import pytest
import threading
import time


@pytest.fixture(autouse=True)
def use_asyncio_debug(monkeypatch):
    monkeypatch.setenv("PYTHONASYNCIODEBUG", "1")


class CallbackRecorder:
    """Error-first callback that remembers how, and on which thread, it was called."""

    def __init__(self):
        self.calls = []
        self.threads = []
        self._called = threading.Event()

    def __call__(self, err, res):
        self.calls.append((err, res))
        self.threads.append(threading.current_thread())
        self._called.set()

    def wait(self, timeout=5.0):
        assert self._called.wait(timeout), "callback was never called"
        return self.calls[0]

    async def wait_async(self, timeout=5.0):
        deadline = time.monotonic() + timeout
        while not self._called.is_set():
            assert time.monotonic() < deadline, "callback was never called"
            await asyncio.sleep(0.01)
        return self.calls[0]


@pytest.fixture()
def recorder():
    return CallbackRecorder()
