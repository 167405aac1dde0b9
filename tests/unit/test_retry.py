"""
Unit tests for src/utils/retry.py
"""

from unittest.mock import Mock, patch

import pytest

from src.utils.retry import compute_delay, retry_with_backoff


class TestComputeDelay:
    """Test backoff delay computation"""

    def test_exponential_growth_without_jitter(self):
        delays = [compute_delay(a, 1.0, 30.0, jitter=False) for a in range(4)]
        assert delays == [1.0, 2.0, 4.0, 8.0]

    def test_capped_at_max_delay(self):
        assert compute_delay(10, 1.0, 10.0, jitter=False) == 10.0

    @patch("src.utils.retry.random.uniform", side_effect=lambda low, high: low)
    def test_jitter_lower_bound(self, mock_uniform):
        """Jitter never pushes a delay below 0.1s"""
        assert compute_delay(0, 1.0, 30.0) == 0.75
        assert compute_delay(0, 0.1, 30.0) == 0.1


class TestRetryWithBackoff:
    """Test the retry decorator"""

    def test_success_first_try(self):
        func = Mock(return_value="ok", __name__="func")
        sleep = Mock()

        assert retry_with_backoff(sleep=sleep)(func)() == "ok"
        sleep.assert_not_called()

    def test_retries_then_succeeds(self):
        """Transient failures are retried with a sleep between attempts"""
        func = Mock(side_effect=[ConnectionError("1"), ConnectionError("2"), "ok"], __name__="func")
        sleep = Mock()

        result = retry_with_backoff(max_retries=3, jitter=False, sleep=sleep)(func)("a", b=1)

        assert result == "ok"
        assert func.call_count == 3
        func.assert_called_with("a", b=1)
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]

    def test_exhausted_raises_last_error(self):
        func = Mock(side_effect=TimeoutError("slow"), __name__="func")

        with pytest.raises(TimeoutError, match="slow"):
            retry_with_backoff(max_retries=2, sleep=Mock())(func)()

        assert func.call_count == 3

    def test_non_retryable_raises_immediately(self):
        """Exceptions outside retryable_exceptions are not retried"""
        func = Mock(side_effect=ValueError("bad input"), __name__="func")
        decorated = retry_with_backoff(
            max_retries=5, retryable_exceptions=(ConnectionError,), sleep=Mock()
        )(func)

        with pytest.raises(ValueError):
            decorated()

        assert func.call_count == 1

    def test_on_retry_callback(self):
        func = Mock(side_effect=[ConnectionError("x"), "ok"], __name__="func")
        on_retry = Mock()

        retry_with_backoff(jitter=False, on_retry=on_retry, sleep=Mock())(func)()

        attempt, error, delay = on_retry.call_args.args
        assert attempt == 1
        assert isinstance(error, ConnectionError)
        assert delay == 1.0

    def test_zero_retries(self):
        func = Mock(side_effect=ConnectionError("x"), __name__="func")

        with pytest.raises(ConnectionError):
            retry_with_backoff(max_retries=0, sleep=Mock())(func)()

        assert func.call_count == 1
