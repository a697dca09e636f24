"""Tests for exception hierarchy."""

import pytest

from llm_replace.exceptions import (
    CommandError,
    ConfigError,
    ConfigValidationError,
    IndexingError,
    InvalidPatternError,
    InvalidQueryError,
    InvalidRuleError,
    LLMReplaceError,
    OverlappingSpansError,
    PatternTooComplexError,
    ProviderAuthError,
    ProviderError,
    ProviderNotAvailableError,
    ProviderRateLimitError,
    ReplaceError,
    SearchError,
    SemanticBackendUnavailable,
    StaleFileError,
    SubstitutionError,
)


class TestLLMReplaceError:
    """Tests for base LLMReplaceError."""

    def test_default_message(self) -> None:
        """Test default error message."""
        error = LLMReplaceError()
        assert str(error) == "An error occurred"
        assert error.user_message == "An error occurred"
        assert error.exit_code == 1

    def test_custom_message(self) -> None:
        error = LLMReplaceError("Custom error")
        assert str(error) == "Custom error"

    def test_custom_user_message(self) -> None:
        error = LLMReplaceError("Internal", user_message="User-friendly message")
        assert error.user_message == "User-friendly message"
        assert str(error) == "Internal"


class TestProviderErrors:
    """Tests for provider-related errors."""

    def test_provider_error(self) -> None:
        error = ProviderError()
        assert error.exit_code == 2
        assert "provider" in error.user_message.lower()

    def test_provider_not_available(self) -> None:
        assert "not available" in ProviderNotAvailableError().user_message.lower()

    def test_provider_rate_limit(self) -> None:
        error = ProviderRateLimitError()
        assert error.exit_code == 3
        assert "rate limit" in error.user_message.lower()

    def test_provider_auth_error(self) -> None:
        error = ProviderAuthError()
        assert error.exit_code == 4
        assert "authentication" in error.user_message.lower()


class TestConfigErrors:
    """Tests for config-related errors."""

    def test_config_error(self) -> None:
        assert ConfigError().exit_code == 20

    def test_config_validation_error(self) -> None:
        error = ConfigValidationError()
        assert error.exit_code == 22
        assert isinstance(error, ConfigError)


class TestSearchErrors:
    """Tests for search-related errors."""

    @pytest.mark.parametrize(
        ("error_class", "exit_code"),
        [
            (SearchError, 30),
            (InvalidQueryError, 31),
            (InvalidPatternError, 33),
            (PatternTooComplexError, 34),
            (SemanticBackendUnavailable, 35),
            (IndexingError, 36),
        ],
    )
    def test_exit_codes(self, error_class: type[SearchError], exit_code: int) -> None:
        error = error_class()
        assert error.exit_code == exit_code
        assert isinstance(error, SearchError)

    def test_backtracking_message(self) -> None:
        assert "backtracking" in PatternTooComplexError().user_message


class TestReplaceErrors:
    """Tests for replace-related errors."""

    @pytest.mark.parametrize(
        "error_class",
        [InvalidRuleError, SubstitutionError, StaleFileError, OverlappingSpansError],
    )
    def test_replace_subclasses(self, error_class: type[ReplaceError]) -> None:
        error = error_class()
        assert isinstance(error, ReplaceError)
        assert 60 < error.exit_code < 70

    def test_all_catchable_by_base(self) -> None:
        """Test every domain error is an LLMReplaceError."""
        for error_class in (ProviderError, ConfigError, SearchError, ReplaceError, CommandError):
            with pytest.raises(LLMReplaceError):
                raise error_class()
