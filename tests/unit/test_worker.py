"""
Unit tests for the background worker and dispatchers.
"""

import asyncio
import threading

import pytest

from tvgate.network.worker import BackgroundWorker, direct_dispatcher, loop_dispatcher


@pytest.mark.unit
class TestBackgroundWorker:
    """Tests for BackgroundWorker."""

    def test_runs_off_calling_thread(self):
        worker = BackgroundWorker(name="test-worker")
        try:
            name = worker.submit(lambda: threading.current_thread().name).result(timeout=5)
        finally:
            worker.shutdown(wait=True)

        assert name.startswith("test-worker")

    def test_single_thread_serializes_jobs(self):
        worker = BackgroundWorker()
        order = []
        try:
            futures = [worker.submit(order.append, n) for n in range(5)]
            for future in futures:
                future.result(timeout=5)
        finally:
            worker.shutdown(wait=True)

        assert order == [0, 1, 2, 3, 4]

    def test_submit_after_shutdown(self):
        worker = BackgroundWorker()
        worker.shutdown()

        assert worker.closed is True
        with pytest.raises(RuntimeError):
            worker.submit(lambda: None)
        worker.shutdown()


@pytest.mark.unit
class TestDispatchers:
    """Tests for callback dispatchers."""

    def test_direct_dispatcher(self):
        received = []
        direct_dispatcher(received.append, 1)

        assert received == [1]

    @pytest.mark.asyncio
    async def test_loop_dispatcher_runs_on_loop_thread(self):
        loop = asyncio.get_running_loop()
        dispatch = loop_dispatcher(loop)
        loop_thread = threading.current_thread()
        result: asyncio.Future = loop.create_future()

        def callback(value):
            result.set_result((value, threading.current_thread() is loop_thread))

        thread = threading.Thread(target=dispatch, args=(callback, "ok"))
        thread.start()
        thread.join()

        assert await asyncio.wait_for(result, timeout=5) == ("ok", True)
