# ─────────────────────────────────────────────────────────────────────────────
# Assistant Client Errors
# ─────────────────────────────────────────────────────────────────────────────
# AttemptFailedError describes one failed attempt and never reaches the UI.
# The Suggestion* errors are terminal; their message is shown verbatim.
# ─────────────────────────────────────────────────────────────────────────────

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from eventara.client.retry import RetryAttempt

TIMEOUT_MESSAGE = "The request took too long to complete. Please try again."
UNAVAILABLE_MESSAGE = (
    "Failed to get AI suggestions after multiple attempts. "
    "Please check your connection and try again."
)


class AssistantError(Exception):
    """Base for every error raised on the assistant client side."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AttemptFailedError(AssistantError):
    """One attempt failed. ``status_code`` is None for network failures."""

    def __init__(self, status_code: int | None, message: str) -> None:
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_client_error(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500


class _TerminalError(AssistantError):
    def __init__(self, message: str, attempts: list[RetryAttempt] | None = None) -> None:
        self.attempts = attempts or []
        super().__init__(message)


class SuggestionTimeoutError(_TerminalError):
    def __init__(self, attempts: list[RetryAttempt] | None = None) -> None:
        super().__init__(TIMEOUT_MESSAGE, attempts)


class SuggestionRejectedError(_TerminalError):
    """The server answered 4xx. Carries the server's own message."""

    def __init__(
        self,
        message: str,
        status_code: int,
        attempts: list[RetryAttempt] | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, attempts)


class SuggestionsUnavailableError(_TerminalError):
    def __init__(
        self,
        last_error: AttemptFailedError | None = None,
        attempts: list[RetryAttempt] | None = None,
    ) -> None:
        self.last_error = last_error
        super().__init__(UNAVAILABLE_MESSAGE, attempts)


class InvalidImageError(AssistantError):
    pass


class SessionBusyError(AssistantError):
    pass
