from __future__ import annotations

import threading

import pytest

from topicdeck.slide_generation.errors import OperationTimeoutError
from topicdeck.slide_generation.resilience import retry_with_backoff, with_timeout


class Flaky:
    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError(f"failure {self.calls}")
        return "ok"


def test_retry_waits_double_each_time(sleeper):
    fn = Flaky(failures=2)
    assert retry_with_backoff(fn, retries=3, initial_delay=1.0, sleep=sleeper) == "ok"
    assert fn.calls == 3
    assert sleeper.calls == [1.0, 2.0]


def test_retry_exhaustion_raises_last_error(sleeper):
    fn = Flaky(failures=10)
    with pytest.raises(RuntimeError, match="failure 4"):
        retry_with_backoff(fn, retries=3, initial_delay=1.0, sleep=sleeper)
    assert fn.calls == 4
    assert sleeper.calls == [1.0, 2.0, 4.0]


def test_retry_without_budget_calls_once(sleeper):
    fn = Flaky(failures=1)
    with pytest.raises(RuntimeError):
        retry_with_backoff(fn, retries=0, sleep=sleeper)
    assert fn.calls == 1
    assert sleeper.calls == []


def test_retry_only_on_listed_errors(sleeper):
    def boom():
        raise KeyError("nope")

    with pytest.raises(KeyError):
        retry_with_backoff(boom, retries=3, sleep=sleeper, retry_on=(RuntimeError,))
    assert sleeper.calls == []


def test_retry_rejects_negative_budget():
    with pytest.raises(ValueError):
        retry_with_backoff(lambda: None, retries=-1)


def test_with_timeout_returns_result():
    assert with_timeout(lambda: 42, 1.0) == 42


def test_with_timeout_propagates_operation_error():
    def boom():
        raise ValueError("bad input")

    with pytest.raises(ValueError, match="bad input"):
        with_timeout(boom, 1.0)


def test_with_timeout_abandons_slow_call_and_hands_back_late_result():
    release = threading.Event()
    late = []
    delivered = threading.Event()

    def slow():
        release.wait(5)
        return "element_1"

    def on_late(value):
        late.append(value)
        delivered.set()

    with pytest.raises(OperationTimeoutError) as exc:
        with_timeout(slow, 0.05, on_late_result=on_late)
    assert isinstance(exc.value, TimeoutError)

    release.set()
    assert delivered.wait(5)
    assert late == ["element_1"]
