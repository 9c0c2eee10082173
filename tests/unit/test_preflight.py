"""
Unit tests for the preflight network guard.
"""

import threading
from unittest.mock import patch

import pytest

from tests.fakes import ScriptedProbe, no_sleep
from tvgate.errors import PreflightFailure, TVGateError
from tvgate.network.preflight import GuardState, NetworkPreflightGuard, ping_once
from tvgate.network.worker import BackgroundWorker

RESULT_TIMEOUT = 5.0


@pytest.fixture
def worker():
    worker = BackgroundWorker(name="test-guard")
    yield worker
    worker.shutdown(wait=True)


def make_guard(worker, probe, max_tries=10, sleep=no_sleep):
    return NetworkPreflightGuard(
        worker,
        host="192.168.99.1",
        max_tries=max_tries,
        probe=probe,
        sleep=sleep,
    )


class Outcome:
    """Collects guard callbacks across threads."""

    def __init__(self):
        self.passed = 0
        self.failures: list[PreflightFailure] = []
        self.done = threading.Event()

    def on_pass(self):
        self.passed += 1
        self.done.set()

    def on_fail(self, error):
        self.failures.append(error)
        self.done.set()


@pytest.mark.unit
class TestNetworkPreflightGuard:
    """Tests for NetworkPreflightGuard."""

    def test_starts_pending(self, worker):
        guard = make_guard(worker, ScriptedProbe(1))

        assert guard.state is GuardState.PENDING
        assert guard.passed is False

    def test_passes_on_first_reply(self, worker):
        probe = ScriptedProbe(succeed_on=1)
        guard = make_guard(worker, probe)
        outcome = Outcome()

        state = guard.run(outcome.on_pass, outcome.on_fail).result(timeout=RESULT_TIMEOUT)

        assert outcome.done.wait(RESULT_TIMEOUT)
        assert state is GuardState.PASSED
        assert guard.passed is True
        assert probe.calls == 1
        assert outcome.passed == 1
        assert outcome.failures == []

    def test_passes_on_last_try(self, worker):
        probe = ScriptedProbe(succeed_on=10)
        guard = make_guard(worker, probe)
        outcome = Outcome()

        guard.run(outcome.on_pass, outcome.on_fail).result(timeout=RESULT_TIMEOUT)

        assert outcome.done.wait(RESULT_TIMEOUT)
        assert probe.calls == 10
        assert outcome.passed == 1
        assert guard.state is GuardState.PASSED

    def test_fails_after_exactly_max_tries(self, worker):
        probe = ScriptedProbe(succeed_on=None)
        sleeps = []
        guard = make_guard(worker, probe, sleep=sleeps.append)
        outcome = Outcome()

        guard.run(outcome.on_pass, outcome.on_fail).result(timeout=RESULT_TIMEOUT)

        assert outcome.done.wait(RESULT_TIMEOUT)
        assert probe.calls == 10
        assert len(sleeps) == 9
        assert guard.state is GuardState.FAILED
        assert outcome.passed == 0
        assert len(outcome.failures) == 1
        failure = outcome.failures[0]
        assert failure.host == "192.168.99.1"
        assert failure.attempts == 10
        assert isinstance(failure, TVGateError)

    def test_probe_exception_counts_as_failed_try(self, worker):
        calls = []

        def probe(host, timeout):
            calls.append(host)
            if len(calls) < 3:
                raise OSError("network is down")
            return True

        guard = make_guard(worker, probe)
        guard.run(lambda: None, lambda e: None).result(timeout=RESULT_TIMEOUT)

        assert guard.state is GuardState.PASSED
        assert len(calls) == 3
        assert [a.message for a in guard.attempts] == ["network is down", "network is down"]

    def test_second_run_replays_outcome_without_probing(self, worker):
        probe = ScriptedProbe(succeed_on=2)
        guard = make_guard(worker, probe)
        first, second = Outcome(), Outcome()

        guard.run(first.on_pass, first.on_fail).result(timeout=RESULT_TIMEOUT)
        guard.run(second.on_pass, second.on_fail).result(timeout=RESULT_TIMEOUT)

        assert first.done.wait(RESULT_TIMEOUT)
        assert second.done.wait(RESULT_TIMEOUT)
        assert probe.calls == 2
        assert first.passed == 1
        assert second.passed == 1

    def test_rejects_zero_tries(self, worker):
        with pytest.raises(ValueError):
            make_guard(worker, ScriptedProbe(1), max_tries=0)

    def test_user_message(self):
        assert PreflightFailure.USER_MESSAGE == (
            "Not authorized: use this player inside the correct network."
        )


@pytest.mark.unit
class TestPingOnce:
    """Tests for the system ping probe."""

    def test_success_exit_code(self):
        with patch("tvgate.network.preflight.subprocess.run") as run:
            run.return_value.returncode = 0

            assert ping_once("192.168.99.1", 2.0) is True

        cmd = run.call_args[0][0]
        assert cmd == ["ping", "-c", "1", "-W", "2", "192.168.99.1"]

    def test_failure_exit_code(self):
        with patch("tvgate.network.preflight.subprocess.run") as run:
            run.return_value.returncode = 1

            assert ping_once("192.168.99.1", 2.0) is False

    def test_missing_ping_binary(self):
        with patch("tvgate.network.preflight.subprocess.run", side_effect=FileNotFoundError):
            assert ping_once("192.168.99.1", 2.0, ping_path="/nonexistent/ping") is False
