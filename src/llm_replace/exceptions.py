"""Exception hierarchy for llm-replace."""


class LLMReplaceError(Exception):
    """Base exception for all llm-replace errors."""

    exit_code: int = 1
    user_message: str = "An error occurred"

    def __init__(
        self,
        message: str | None = None,
        *,
        user_message: str | None = None,
    ) -> None:
        super().__init__(message or self.user_message)
        if user_message:
            self.user_message = user_message


# Provider Errors
class ProviderError(LLMReplaceError):
    """LLM provider-related errors."""

    exit_code = 2
    user_message = "LLM provider error"


class ProviderNotAvailableError(ProviderError):
    """Provider is not reachable or not configured."""

    exit_code = 2
    user_message = "LLM provider is not available"


class ProviderRateLimitError(ProviderError):
    """Rate limit exceeded."""

    exit_code = 3
    user_message = "Rate limit exceeded. Try again later."


class ProviderAuthError(ProviderError):
    """Authentication failed."""

    exit_code = 4
    user_message = "Authentication failed. Check your API key."


class ProviderTimeoutError(ProviderError):
    """Request timed out."""

    exit_code = 5
    user_message = "Request timed out. Try again."


# Config Errors
class ConfigError(LLMReplaceError):
    """Configuration errors."""

    exit_code = 20
    user_message = "Configuration error"


class ConfigNotFoundError(ConfigError):
    """Configuration file not found."""

    exit_code = 21
    user_message = "Configuration file not found"


class ConfigValidationError(ConfigError):
    """Configuration validation failed."""

    exit_code = 22
    user_message = "Invalid configuration"


# Search Errors
class SearchError(LLMReplaceError):
    """Search-related errors."""

    exit_code = 30
    user_message = "Search error"


class InvalidQueryError(SearchError):
    """Query text or options are unusable (e.g. empty query)."""

    exit_code = 31
    user_message = "Invalid search query"


class InvalidScopeError(SearchError):
    """Search scope does not describe any searchable location."""

    exit_code = 32
    user_message = "Invalid search scope"


class InvalidPatternError(SearchError):
    """Regular expression failed to compile."""

    exit_code = 33
    user_message = "Invalid regular expression"


class PatternTooComplexError(SearchError):
    """Regular expression exceeds the backtracking step budget."""

    exit_code = 34
    user_message = "Regular expression is too complex (catastrophic backtracking risk)"


class SemanticBackendUnavailable(SearchError):
    """Similarity backend is missing or failing.

    Recoverable: matchers turn this into an empty result set with an
    ``unavailable`` backend status instead of failing the query.
    """

    exit_code = 35
    user_message = "Semantic search backend is unavailable"


class IndexingError(SearchError):
    """Error while building the semantic index."""

    exit_code = 36
    user_message = "Error indexing files"


# Replace Errors
class ReplaceError(LLMReplaceError):
    """Replace-related errors."""

    exit_code = 60
    user_message = "Replace error"


class InvalidRuleError(ReplaceError):
    """Replace rule cannot be planned or executed as given."""

    exit_code = 61
    user_message = "Invalid replace rule"


class SubstitutionError(ReplaceError):
    """Replacement template references a capture that does not exist."""

    exit_code = 62
    user_message = "Replacement refers to a missing capture group"


class StaleFileError(ReplaceError):
    """File content changed between preview and execution."""

    exit_code = 63
    user_message = "File changed since the preview was computed"


class OverlappingSpansError(ReplaceError):
    """Overlapping or unordered spans reached the executor.

    This is an internal fault in ranking or planning, not a data problem.
    """

    exit_code = 64
    user_message = "Internal error: overlapping edits in one file"


# Command Errors
class CommandError(LLMReplaceError):
    """Command execution errors."""

    exit_code = 40
    user_message = "Command error"


class PathNotFoundError(CommandError):
    """File or directory not found."""

    exit_code = 41
    user_message = "File or directory not found"


class InvalidArgumentError(CommandError):
    """Invalid argument provided."""

    exit_code = 42
    user_message = "Invalid argument"
