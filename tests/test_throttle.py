"""Tests for the throttled call queue."""

from unittest.mock import MagicMock

import pytest

from extraction.throttle import CallQueue, ExponentialBackoff, FixedDelay


class TestCallQueue:
    """Tests for CallQueue."""

    def test_no_delay_before_first_call(self):
        """The first call runs immediately."""
        sleep = MagicMock()
        queue = CallQueue(FixedDelay(0.5), sleep=sleep)

        assert queue.submit(lambda: "ok") == "ok"
        sleep.assert_not_called()

    def test_delay_between_calls(self):
        """Every later call waits the fixed delay."""
        sleep = MagicMock()
        queue = CallQueue(FixedDelay(0.5), sleep=sleep)

        for _ in range(3):
            queue.submit(lambda: None)

        assert sleep.call_count == 2
        sleep.assert_called_with(0.5)
        assert queue.calls_made == 3

    def test_zero_delay_never_sleeps(self):
        """A zero delay never calls sleep."""
        sleep = MagicMock()
        queue = CallQueue(FixedDelay(0), sleep=sleep)
        queue.submit(lambda: None)
        queue.submit(lambda: None)
        sleep.assert_not_called()

    def test_exception_propagates_and_counts_as_call(self):
        """Failures propagate and still count as calls."""
        queue = CallQueue(FixedDelay(0), sleep=MagicMock())

        def fail():
            raise ValueError("bad response")

        with pytest.raises(ValueError):
            queue.submit(fail)
        assert queue.calls_made == 1

    def test_backoff_grows_after_failures(self):
        """Backoff doubles after each failure and resets after a success."""
        sleep = MagicMock()
        queue = CallQueue(ExponentialBackoff(base=1.0, factor=2.0, max_seconds=30), sleep=sleep)

        def fail():
            raise RuntimeError("429")

        for _ in range(3):
            with pytest.raises(RuntimeError):
                queue.submit(fail)
        queue.submit(lambda: None)
        queue.submit(lambda: None)

        assert [c.args[0] for c in sleep.call_args_list] == [2.0, 4.0, 8.0, 1.0]


class TestDelayPolicies:
    """Tests for delay policies."""

    def test_fixed_delay_default(self):
        """The default fixed delay is 0.2 seconds."""
        assert FixedDelay().delay(10, last_failed=True) == 0.2

    def test_backoff_capped(self):
        """Backoff never exceeds max_seconds."""
        policy = ExponentialBackoff(base=1.0, factor=10.0, max_seconds=5.0)
        assert policy.delay(3, last_failed=True) == 5.0

    def test_backoff_base_after_success(self):
        """Backoff uses the base delay after a success."""
        assert ExponentialBackoff(base=0.3).delay(7, last_failed=False) == 0.3
