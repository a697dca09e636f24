"""Unit tests for retry utilities."""

from typing import Any
from unittest.mock import Mock

import pytest
from tenacity import wait_none

from llm_replace.exceptions import (
    ProviderError,
    ProviderRateLimitError,
    ProviderTimeoutError,
)
from llm_replace.utils.retry import llm_retry


def fast_retry(func: Mock) -> Any:
    """Wrap with llm_retry but skip the backoff sleeps."""
    return llm_retry(func).retry_with(wait=wait_none())


class TestLLMRetry:
    """Tests for the llm_retry decorator."""

    def test_llm_retry_success_no_retry(self) -> None:
        """Test that successful calls don't retry."""
        mock_func = Mock(return_value="success")

        assert fast_retry(mock_func)() == "success"
        assert mock_func.call_count == 1

    @pytest.mark.parametrize(
        "error",
        [
            ProviderRateLimitError("Rate limited"),
            ProviderTimeoutError("Timeout"),
            ConnectionError("Connection failed"),
        ],
    )
    def test_transient_errors_are_retried(self, error: Exception) -> None:
        mock_func = Mock(side_effect=[error, "success"])

        assert fast_retry(mock_func)() == "success"
        assert mock_func.call_count == 2

    def test_llm_retry_max_attempts_exceeded(self) -> None:
        """Test that the last error is re-raised after three attempts."""
        mock_func = Mock(side_effect=ProviderRateLimitError("Rate limited"))

        with pytest.raises(ProviderRateLimitError):
            fast_retry(mock_func)()
        assert mock_func.call_count == 3

    @pytest.mark.parametrize("error", [ProviderError("down"), ValueError("Bad value")])
    def test_non_retriable_error_not_retried(self, error: Exception) -> None:
        mock_func = Mock(side_effect=error)

        with pytest.raises(type(error)):
            fast_retry(mock_func)()
        assert mock_func.call_count == 1

    def test_llm_retry_preserves_args(self) -> None:
        mock_func = Mock(return_value="ok")

        fast_retry(mock_func)(1, "two", c=3.0)
        mock_func.assert_called_once_with(1, "two", c=3.0)
